"""
Idea data models for the incubator.

An Idea is an embryonic concept owned by this device's local store. It
progresses concept -> developing -> ready and is never synced to the
shared remote tree. Field names serialize in camelCase so that the
collection stays interchangeable with the bootstrap snapshot
(data/incubator.json) and with exported files.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class IdeaStage(str, Enum):
    """Incubation stage of an idea."""

    CONCEPT = "concept"
    DEVELOPING = "developing"
    READY = "ready"


class IdeaPriority(str, Enum):
    """Priority signal for an idea."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Idea(BaseModel):
    """
    A single incubator idea.

    Example:
        >>> idea = Idea(id="3", title="Mobile sauna rental", stage="developing")
        >>> idea.stage
        <IdeaStage.DEVELOPING: 'developing'>
        >>> idea.model_dump(by_alias=True, mode="json")["createdAt"] is None
        True
    """

    id: str = Field(..., description="Decimal string id, unique within the collection")
    title: str = Field(..., min_length=1, description="Short idea title")
    description: str = Field(default="")
    stage: IdeaStage = Field(default=IdeaStage.CONCEPT)
    priority: IdeaPriority = Field(default=IdeaPriority.MEDIUM)
    notes: str = Field(default="")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    # unknown fields from older snapshots survive a load/save cycle
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("description", "notes", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def numeric_id(self) -> int:
        """Integer value of the id; ids that do not parse count as 0."""
        return decimal_id(self.id)


class IdeaCollection(BaseModel):
    """
    The one incubator collection a user owns.

    ``ideas`` is kept in creation order. ``last_id`` is the highest id ever
    issued, so ids stay unique even after the newest idea is deleted.
    """

    version: int = Field(default=1)
    ideas: list[Idea] = Field(default_factory=list)
    last_updated: datetime | None = Field(default=None, alias="lastUpdated")
    last_id: int = Field(default=0, ge=0, alias="lastId")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def find(self, idea_id: str) -> Idea | None:
        for idea in self.ideas:
            if idea.id == idea_id:
                return idea
        return None

    def to_json(self) -> str:
        """Serialize the collection as pretty-printed JSON."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def decimal_id(value: str) -> int:
    """``value`` as an integer if it is plain ASCII digits, else 0."""
    if value.isascii() and value.isdigit():
        return int(value)
    return 0


# field (by alias) -> value used when a cached idea carries something invalid
_REPAIRS: dict[str, Any] = {
    "stage": IdeaStage.CONCEPT.value,
    "priority": IdeaPriority.MEDIUM.value,
    "description": "",
    "notes": "",
    "createdAt": None,
    "updatedAt": None,
}


def repair_idea(record: Any) -> Idea | None:
    """
    Validate one cached idea, resetting repairable fields to their defaults.

    Returns None when the record is not an object or its id or title is
    unusable.
    """
    if not isinstance(record, dict):
        return None
    try:
        return Idea.model_validate(record)
    except ValidationError as e:
        fields = {str(error["loc"][0]) for error in e.errors() if error["loc"]}

    if not fields or not fields <= _REPAIRS.keys():
        return None
    repaired = {**record, **{field: _REPAIRS[field] for field in fields}}
    try:
        return Idea.model_validate(repaired)
    except ValidationError:
        return None
