"""
Sub-records attached to an attention item: notes, documents, photos, links.

Each lives at ``{collection}/{itemId}/{id}`` in the shared tree.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from planner.core.remote.paths import SubCollection

DEFAULT_LINK_LABEL = "Related"


class DocumentKind(str, Enum):
    """What a document URL points at, with the icon shown for it."""

    GITHUB = "github"
    DOC = "doc"
    PDF = "pdf"
    SHEET = "sheet"
    DRIVE = "drive"
    NOTION = "notion"
    FILE = "file"

    @property
    def icon(self) -> str:
        return _ICONS[self]


_ICONS = {
    DocumentKind.GITHUB: "🐙",
    DocumentKind.DOC: "📝",
    DocumentKind.PDF: "📕",
    DocumentKind.SHEET: "📊",
    DocumentKind.DRIVE: "💾",
    DocumentKind.NOTION: "📓",
    DocumentKind.FILE: "📄",
}


def document_kind(url: str | None) -> DocumentKind:
    """
    Classify a document URL.

    Example:
        >>> document_kind("https://docs.google.com/document/d/1x")
        <DocumentKind.DOC: 'doc'>
    """
    if not url:
        return DocumentKind.FILE
    lower = url.lower()
    if "github.com" in lower:
        return DocumentKind.GITHUB
    if "docs.google" in lower or lower.endswith((".doc", ".docx")):
        return DocumentKind.DOC
    if lower.endswith(".pdf"):
        return DocumentKind.PDF
    if lower.endswith((".xls", ".xlsx")) or "sheets.google" in lower:
        return DocumentKind.SHEET
    if "drive.google" in lower:
        return DocumentKind.DRIVE
    if "notion." in lower:
        return DocumentKind.NOTION
    return DocumentKind.FILE


class SubRecord(BaseModel):
    id: str = Field(..., min_length=1)
    created_at: Optional[str] = Field(default=None, alias="createdAt")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @classmethod
    def newest_first(cls, snapshot: Any) -> list:
        """Records of a sub-collection snapshot sorted by ``createdAt``, newest first."""
        if not isinstance(snapshot, Mapping):
            return []
        records = []
        for key, value in snapshot.items():
            if not isinstance(value, Mapping):
                continue
            try:
                records.append(cls.model_validate({**value, "id": str(key)}))
            except ValidationError:
                continue
        records.sort(key=lambda r: r.created_at or "", reverse=True)
        return records


class Note(SubRecord):
    text: str = Field(default="")
    author: str = Field(default="")


class Document(SubRecord):
    url: str = Field(default="")
    title: str = Field(default="")

    @property
    def display_title(self) -> str:
        return self.title or self.url

    @property
    def kind(self) -> DocumentKind:
        return document_kind(self.url)


class Photo(SubRecord):
    url: str = Field(default="")
    caption: str = Field(default="")


class Link(SubRecord):
    """
    One side of a symmetric link.

    The opposite side is an independent record under the target's id.
    """

    target_id: str = Field(..., alias="targetId")
    target_title: str = Field(default="", alias="targetTitle")
    label: str = Field(default=DEFAULT_LINK_LABEL)

    @property
    def display_title(self) -> str:
        return self.target_title or self.target_id


RECORD_TYPES: dict[SubCollection, type[SubRecord]] = {
    SubCollection.NOTES: Note,
    SubCollection.DOCUMENTS: Document,
    SubCollection.PHOTOS: Photo,
    SubCollection.LINKS: Link,
}
