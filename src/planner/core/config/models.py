"""
Configuration data models for the planner.

These models define the structure of .planner.json and
~/.config/planner/config.json files, with validation via Pydantic.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from planner.core.http import Backoff


class RemoteConfig(BaseModel):
    """
    Connection settings for the shared real-time store.

    When no database URL is configured the planner runs against an
    in-process store, which is useful offline and in tests.
    """

    database_url: Optional[str] = Field(
        default=None,
        description="Realtime database root URL (e.g. https://x.firebasedatabase.app)",
    )
    auth_token: Optional[str] = Field(
        default=None,
        description="Database secret or ID token passed as the 'auth' query parameter",
    )
    timeout: float = Field(
        default=10.0,
        gt=0,
        description="Request timeout in seconds for REST calls",
    )

    @field_validator("database_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip().rstrip("/")
        return v or None


class IdeasConfig(BaseModel):
    """Where the incubator collection lives and how it is first seeded."""

    data_dir: Optional[Path] = Field(
        default=None,
        description="Directory holding the local cache (defaults to $XDG_DATA_HOME/planner)",
    )
    slot_name: str = Field(
        default="solution-planner-incubator",
        min_length=1,
        description="Name of the persistence slot holding the serialized collection",
    )
    bootstrap_url: Optional[str] = Field(
        default=None,
        description="URL or file path of the bootstrap snapshot (data/incubator.json)",
    )


class HttpConfig(BaseModel):
    """Timeouts and retry policy for read-only fetches."""

    timeout: float = Field(default=10.0, gt=0)
    max_retries: int = Field(default=2, ge=0)
    base_delay: float = Field(default=0.5, gt=0)

    @property
    def backoff(self) -> Backoff:
        return Backoff(retries=self.max_retries, first_delay=self.base_delay)


class TrackerSource(BaseModel):
    """
    One read-only project tracker whose snapshot is merged into the board.

    Example:
        >>> TrackerSource(id="sheds", name="Shed Project", emoji="🏠",
        ...               data_url="https://example.com/data/cards.json")
    """

    id: str = Field(..., min_length=1, description="Stable source key")
    name: str = Field(default="", description="Display name")
    emoji: str = Field(default="📋", description="Badge shown next to cards")
    data_url: Optional[str] = Field(
        default=None,
        description="Snapshot URL; sources without one contribute no cards",
    )

    model_config = ConfigDict(populate_by_name=True)

    @property
    def display_name(self) -> str:
        return self.name or self.id


class PlannerConfig(BaseModel):
    """
    Complete planner configuration.

    Merged from defaults, user config, project config and environment
    variables (in that order of increasing precedence).
    """

    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    ideas: IdeasConfig = Field(default_factory=IdeasConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    trackers: list[TrackerSource] = Field(default_factory=list)
    author: str = Field(default="me", description="Author stamped on new notes")

    model_config = ConfigDict(extra="ignore")
