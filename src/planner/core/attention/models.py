"""
Attention item and business task models.

Records in the shared tree are written by every device and may predate the
current field set, so these models are lenient: unknown fields are kept,
missing ones default, and status/priority are stored as plain strings. The
enums name the values this planner writes.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class AttentionStatus(str, Enum):
    """Lifecycle of an attention item: active, then done or dismissed."""

    ACTIVE = "active"
    DONE = "done"
    DISMISSED = "dismissed"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TaskStatus(str, Enum):
    """Columns of a per-business task board."""

    BACKLOG = "backlog"
    IN_PROGRESS = "in-progress"
    DONE = "done"


# business tag (as stored on items) -> business key used for filtering
BIZ_MAP = {"🏠": "sheds", "🌾": "farm", "☕": "forge", "🌱": "grow", "⚡": "all"}
ALL_BUSINESSES = "all"

PRIORITY_RANK = {Priority.HIGH.value: 0, Priority.MEDIUM.value: 1, Priority.LOW.value: 2}


class _RemoteRecord(BaseModel):
    id: str = Field(..., min_length=1)
    title: str = Field(default="")
    priority: str = Field(default=Priority.MEDIUM.value)
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    completed_at: Optional[str] = Field(default=None, alias="completedAt")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator("title", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def priority_rank(self) -> int:
        """Sort key for priority; unknown values rank with medium."""
        return PRIORITY_RANK.get(self.priority, PRIORITY_RANK[Priority.MEDIUM.value])

    @classmethod
    def from_record(cls, key: str, record: Any):
        """
        Build a model from a stored record, using the tree key as id.

        Returns None for values that are not records.
        """
        if not isinstance(record, Mapping):
            return None
        data = dict(record)
        data["id"] = key
        try:
            return cls.model_validate(data)
        except ValidationError:
            return None

    @classmethod
    def list_from_snapshot(cls, snapshot: Any) -> list:
        """All valid records of a collection snapshot, in key order."""
        if not isinstance(snapshot, Mapping):
            return []
        records = []
        for key in sorted(snapshot):
            model = cls.from_record(str(key), snapshot[key])
            if model is not None:
                records.append(model)
        return records

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AttentionItem(_RemoteRecord):
    """
    A shared "needs attention" item at ``attention/{id}``.

    Example:
        >>> item = AttentionItem.from_record("-Nx1", {"title": "Fix gate", "biz": "🌾"})
        >>> item.status, item.priority
        ('active', 'medium')
    """

    detail: str = Field(default="")
    biz: str = Field(default="⚡", description="Business affinity tag (an emoji from BIZ_MAP)")
    status: str = Field(default=AttentionStatus.ACTIVE.value)

    @field_validator("detail", mode="before")
    @classmethod
    def detail_none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def biz_key(self) -> str | None:
        """Business key for the item's tag, or None for an unknown tag."""
        if self.biz in BIZ_MAP:
            return BIZ_MAP[self.biz]
        return self.biz if self.biz in BIZ_MAP.values() else None

    @property
    def is_active(self) -> bool:
        return self.status == AttentionStatus.ACTIVE.value


class BusinessTask(_RemoteRecord):
    """A tracker-style task at ``business/{bizKey}/tasks/{id}``."""

    status: str = Field(default=TaskStatus.BACKLOG.value)
    description: str = Field(default="")
