"""
Card models for the aggregated board.

Tracker cards come from read-only snapshots published by independent
project trackers. A :class:`BoardCard` is a tracker card (or an incubator
idea mapped onto the same shape) tagged with the source it came from.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from planner.core.config.models import TrackerSource


class CardStatus(str, Enum):
    """Board columns shared by every tracker."""

    BACKLOG = "backlog"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    IDEAS = "ideas"


class TrackerCard(BaseModel):
    """
    One card of a tracker snapshot.

    Only ``id``, ``title`` and ``status`` are required; trackers add their
    own fields freely and those are kept.
    """

    id: str = Field(..., min_length=1)
    title: str
    status: str
    priority: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    completed_at: Optional[str] = Field(default=None, alias="completedAt")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class BoardCard(TrackerCard):
    """A card on the merged board, tagged with its source."""

    source: str
    source_emoji: str = "📋"
    source_name: str = ""


class TrackerSnapshot(BaseModel):
    """Result of loading one tracker; ``error`` is set when it degraded to no cards."""

    source: TrackerSource
    cards: list[TrackerCard] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
