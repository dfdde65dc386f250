"""
Remote store path layout.

Paths are slash-separated hierarchical keys. Any backend substituted for the
real-time database must preserve this addressing so existing data stays
readable:

    attention/{id}
    notes/{itemId}/{id}
    documents/{itemId}/{id}
    photos/{itemId}/{id}
    links/{itemId}/{id}
    business/{bizKey}/tasks/{id}
"""

from enum import Enum

ATTENTION_PATH = "attention"
NOTES_PATH = "notes"
DOCUMENTS_PATH = "documents"
PHOTOS_PATH = "photos"
LINKS_PATH = "links"
BUSINESS_PATH = "business"
TASKS_PATH = "tasks"

# characters the realtime database refuses in keys
_FORBIDDEN = set(".#$[]")


class InvalidPathError(ValueError):
    """A remote path or key is empty or contains forbidden characters."""


class SubCollection(str, Enum):
    """Per-item sub-collections attached to an attention item."""

    NOTES = NOTES_PATH
    DOCUMENTS = DOCUMENTS_PATH
    PHOTOS = PHOTOS_PATH
    LINKS = LINKS_PATH


def split_path(path: str) -> list[str]:
    """
    Split a path into its segments, ignoring leading/trailing/double slashes.

    Raises:
        InvalidPathError: If a segment contains a forbidden character
    """
    segments = [s for s in path.split("/") if s]
    for segment in segments:
        if _FORBIDDEN.intersection(segment):
            raise InvalidPathError(f"Invalid character in path segment {segment!r} of {path!r}")
    return segments


def normalize_path(path: str) -> str:
    """Canonical form of a path: segments joined by single slashes."""
    return "/".join(split_path(path))


def join_path(*parts: str) -> str:
    """
    Join path parts, each of which may itself contain slashes.

    Example:
        >>> join_path("notes", "-Nabc", "/-Nxyz")
        'notes/-Nabc/-Nxyz'
    """
    segments: list[str] = []
    for part in parts:
        if part == "":
            raise InvalidPathError("Empty path component")
        segments.extend(split_path(part))
    return "/".join(segments)


def is_related(a: str, b: str) -> bool:
    """True if one path equals, contains or is contained in the other."""
    sa, sb = split_path(a), split_path(b)
    n = min(len(sa), len(sb))
    return sa[:n] == sb[:n]


def attention_path(item_id: str | None = None) -> str:
    if item_id is None:
        return ATTENTION_PATH
    return join_path(ATTENTION_PATH, item_id)


def sub_collection_path(kind: SubCollection | str, item_id: str) -> str:
    """Path of one item's notes/documents/photos/links."""
    return join_path(SubCollection(kind).value, item_id)


def business_tasks_path(biz_key: str) -> str:
    return join_path(BUSINESS_PATH, biz_key, TASKS_PATH)
