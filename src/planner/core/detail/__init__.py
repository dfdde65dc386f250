"""
Item detail sync: notes, documents, photos and links of one attention item.
"""

from planner.core.detail.models import (
    DEFAULT_LINK_LABEL,
    Document,
    DocumentKind,
    Link,
    Note,
    Photo,
    document_kind,
)
from planner.core.detail.sync import ItemDetailSync

__all__ = [
    "DEFAULT_LINK_LABEL",
    "Document",
    "DocumentKind",
    "ItemDetailSync",
    "Link",
    "Note",
    "Photo",
    "document_kind",
]
