"""
Local-first storage for incubator ideas.

Load order:
1. The local cache slot. If it parses as a JSON collection it is the source
   of truth and nothing else is consulted; ideas inside it with bad fields
   are repaired or skipped one by one.
2. The bootstrap snapshot (a URL or a file path). Adopted once and persisted
   to the cache, never written back to its origin.
3. An empty ``{version: 1, ideas: []}`` collection, also persisted.

Once the cache is populated it always wins over the bootstrap snapshot: the
snapshot is a seed, not a sync source.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from planner.core.config.loader import get_data_dir
from planner.core.config.models import HttpConfig, PlannerConfig
from planner.core.http import read_json_source
from planner.core.ideas.models import (
    Idea,
    IdeaCollection,
    IdeaPriority,
    IdeaStage,
    decimal_id,
    repair_idea,
)
from planner.core.ideas.storage import FileSlotStorage, SlotStorage
from planner.core.timestamps import utc_now

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "solution-planner-incubator"


class BootstrapError(Exception):
    """The bootstrap snapshot could not be fetched or did not parse."""


class IdeaStore:
    """
    Offline-available incubator collection with a one-time bootstrap.

    Every mutating operation changes the in-memory collection and then
    calls :meth:`save`. The store is single-writer: callers serialize their
    own mutations.

    Example:
        >>> store = IdeaStore(FileSlotStorage(tmp_dir), bootstrap_source="data/incubator.json")
        >>> store.load()
        >>> idea = store.add("Shed kits for allotments", priority="high")
        >>> idea.id
        '1'
        >>> store.update_stage(idea.id, "developing")
    """

    def __init__(
        self,
        storage: SlotStorage,
        slot_name: str = DEFAULT_SLOT,
        bootstrap_source: str | None = None,
        *,
        http_client: httpx.Client | None = None,
        http_config: HttpConfig | None = None,
    ) -> None:
        """
        Args:
            storage: Durable slot storage for the cache
            slot_name: Name of the slot holding the collection
            bootstrap_source: URL or file path of the seed snapshot
            http_client: Optional client for fetching a URL snapshot
            http_config: Timeout/retry policy for the snapshot fetch
        """
        self.storage = storage
        self.slot_name = slot_name
        self.bootstrap_source = bootstrap_source
        self.http_client = http_client
        self.http_config = http_config or HttpConfig()
        self._collection: IdeaCollection | None = None
        # outcome of the most recent save, for callers of mutating operations
        self.last_save_ok = True

    @classmethod
    def from_config(cls, config: PlannerConfig) -> IdeaStore:
        """Create a store using the configured data directory and bootstrap source."""
        return cls(
            FileSlotStorage(get_data_dir(config)),
            slot_name=config.ideas.slot_name,
            bootstrap_source=config.ideas.bootstrap_url,
            http_config=config.http,
        )

    # ------------------------------------------------------------------
    # Loading and persistence
    # ------------------------------------------------------------------

    @property
    def collection(self) -> IdeaCollection:
        """The loaded collection (loads on first access)."""
        if self._collection is None:
            return self.load()
        return self._collection

    @property
    def ideas(self) -> list[Idea]:
        """Ideas in creation order."""
        return list(self.collection.ideas)

    def load(self) -> IdeaCollection:
        """
        Load the collection: cache first, then bootstrap, then empty.

        Returns:
            The collection now held in memory
        """
        cached = self._read_cache()
        if cached is not None:
            self._collection = cached
            return cached

        try:
            self._collection = self._fetch_bootstrap()
            logger.info("Seeded incubator from bootstrap snapshot %s", self.bootstrap_source)
        except BootstrapError as e:
            logger.warning("Bootstrap snapshot unavailable, starting empty: %s", e)
            self._collection = IdeaCollection(version=1, ideas=[])

        self.save()
        return self._collection

    def save(self) -> bool:
        """
        Stamp ``lastUpdated`` and write the collection to the cache slot.

        Returns:
            True if the write succeeded, False if it failed (the in-memory
            collection is kept either way)
        """
        collection = self.collection
        collection.last_updated = utc_now()
        try:
            self.storage.write(self.slot_name, collection.to_json())
        except OSError as e:
            logger.warning("Failed to persist incubator to slot %s: %s", self.slot_name, e)
            self.last_save_ok = False
            return False
        self.last_save_ok = True
        return True

    def _read_cache(self) -> IdeaCollection | None:
        try:
            raw = self.storage.read(self.slot_name)
        except OSError as e:
            logger.warning("Could not read incubator cache %s: %s", self.slot_name, e)
            return None
        except UnicodeDecodeError as e:
            logger.warning("Incubator cache %s is corrupt, falling back: %s", self.slot_name, e)
            return None

        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning("Incubator cache %s is corrupt, falling back: %s", self.slot_name, e)
            return None
        if not isinstance(data, dict) or not isinstance(data.get("ideas", []), list):
            logger.warning(
                "Incubator cache %s is corrupt, falling back: not a collection", self.slot_name
            )
            return None
        return self._adopt_cache(data)

    def _adopt_cache(self, data: dict[str, Any]) -> IdeaCollection:
        """
        Build the collection from a cache that parsed.

        Ideas with bad field values are repaired; ideas that cannot be are
        skipped, but their ids still count towards the high-water mark.
        """
        try:
            collection = IdeaCollection.model_validate({**data, "ideas": []})
        except ValidationError as e:
            logger.warning("Incubator cache %s has invalid header fields: %s", self.slot_name, e)
            collection = IdeaCollection()

        for record in data.get("ideas", []):
            idea = repair_idea(record)
            if idea is None:
                logger.warning("Skipping unreadable idea in %s: %r", self.slot_name, record)
                if isinstance(record, dict):
                    skipped_id = decimal_id(str(record.get("id", "")))
                    collection.last_id = max(collection.last_id, skipped_id)
                continue
            collection.ideas.append(idea)
        return collection

    def _fetch_bootstrap(self) -> IdeaCollection:
        source = self.bootstrap_source
        if not source:
            raise BootstrapError("no bootstrap source configured")

        try:
            data = self._read_source(source)
            if not isinstance(data, dict):
                raise BootstrapError(f"snapshot at {source} is not an object")
            return IdeaCollection.model_validate(data)
        except (httpx.HTTPError, OSError, ValueError) as e:
            # pydantic.ValidationError and JSONDecodeError are ValueErrors
            raise BootstrapError(f"{source}: {e}") from e

    def _read_source(self, source: str) -> Any:
        return read_json_source(
            source,
            client=self.http_client,
            timeout=self.http_config.timeout,
            backoff=self.http_config.backoff,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def next_id(self) -> str:
        """
        Next idea id: one past the highest id ever issued.

        Ids that do not parse as integers count as 0.
        """
        collection = self.collection
        highest = max((idea.numeric_id for idea in collection.ideas), default=0)
        return str(max(highest, collection.last_id) + 1)

    def get(self, idea_id: str) -> Idea | None:
        return self.collection.find(idea_id)

    def group_by_stage(self) -> dict[IdeaStage, list[Idea]]:
        """Ideas grouped concept/developing/ready, each in creation order."""
        groups: dict[IdeaStage, list[Idea]] = {stage: [] for stage in IdeaStage}
        for idea in self.collection.ideas:
            groups[idea.stage].append(idea)
        return groups

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(
        self,
        title: str,
        *,
        description: str = "",
        stage: IdeaStage | str = IdeaStage.CONCEPT,
        priority: IdeaPriority | str = IdeaPriority.MEDIUM,
        notes: str = "",
    ) -> Idea:
        """
        Create an idea at the end of the collection.

        Raises:
            ValueError: If the title is empty or stage/priority are invalid
        """
        title = title.strip()
        if not title:
            raise ValueError("Idea title is required")

        collection = self.collection
        now = utc_now()
        idea = Idea(
            id=self.next_id(),
            title=title,
            description=description.strip(),
            stage=IdeaStage(stage),
            priority=IdeaPriority(priority),
            notes=notes.strip(),
            created_at=now,
            updated_at=now,
        )
        collection.ideas.append(idea)
        collection.last_id = max(collection.last_id, idea.numeric_id)
        self.save()
        logger.debug("Added idea %s: %s", idea.id, idea.title)
        return idea

    def update_stage(self, idea_id: str, stage: IdeaStage | str) -> Idea | None:
        """Move an idea to another stage. Unknown ids are a no-op."""
        new_stage = IdeaStage(stage)
        idea = self.get(idea_id)
        if idea is None:
            return None
        idea.stage = new_stage
        idea.updated_at = utc_now()
        self.save()
        return idea

    def update_notes(self, idea_id: str, notes: str) -> Idea | None:
        """Replace an idea's notes. Unknown ids are a no-op."""
        idea = self.get(idea_id)
        if idea is None:
            return None
        idea.notes = notes.strip()
        idea.updated_at = utc_now()
        self.save()
        return idea

    def graduate(self, idea_id: str) -> Idea | None:
        """Mark an idea ready to become its own tracked project."""
        return self.update_stage(idea_id, IdeaStage.READY)

    def delete(self, idea_id: str) -> bool:
        """
        Remove an idea by id.

        Returns:
            True if an idea was removed; False (and nothing saved) otherwise
        """
        collection = self.collection
        remaining = [idea for idea in collection.ideas if idea.id != idea_id]
        if len(remaining) == len(collection.ideas):
            return False
        collection.ideas = remaining
        self.save()
        logger.debug("Deleted idea %s", idea_id)
        return True

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self) -> str:
        """Serialize the whole collection as a downloadable JSON snapshot."""
        return self.collection.to_json()

    def export_to(self, directory: Path, today: date | None = None) -> Path:
        """
        Write ``incubator-YYYY-MM-DD.json`` into a directory.

        Returns:
            Path of the written file
        """
        day = today or utc_now().date()
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"incubator-{day.isoformat()}.json"
        path.write_text(self.export(), encoding="utf-8")
        return path
