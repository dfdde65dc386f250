"""
Durable local slots for the incubator cache.

A slot is a named blob of text. Absence of the slot signals a first run.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

_SLOT_NAME_RE = re.compile(r"^[A-Za-z0-9._-]+$")


class SlotStorage(ABC):
    """
    Abstract named-slot storage.

    Implementations must raise ``OSError`` when a write cannot be made
    durable; readers return ``None`` for a slot that was never written.
    """

    @abstractmethod
    def read(self, name: str) -> str | None:
        """Return the slot content, or None if the slot is absent."""

    @abstractmethod
    def write(self, name: str, content: str) -> None:
        """Replace the slot content."""

    @abstractmethod
    def delete(self, name: str) -> bool:
        """Remove the slot. Returns True if it existed."""


class FileSlotStorage(SlotStorage):
    """
    Slot storage backed by one JSON file per slot.

    Example:
        >>> storage = FileSlotStorage(Path("~/.local/share/planner").expanduser())
        >>> storage.write("solution-planner-incubator", '{"version": 1, "ideas": []}')
        >>> storage.read("solution-planner-incubator")
        '{"version": 1, "ideas": []}'
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, name: str) -> Path:
        if not _SLOT_NAME_RE.match(name):
            raise ValueError(f"Invalid slot name: {name!r}")
        return self.directory / f"{name}.json"

    def read(self, name: str) -> str | None:
        path = self.path_for(name)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, name: str, content: str) -> None:
        path = self.path_for(name)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Write atomically via temp file
        temp_path = path.with_suffix(".tmp")
        try:
            temp_path.write_text(content, encoding="utf-8")
            temp_path.replace(path)
        except OSError:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def delete(self, name: str) -> bool:
        path = self.path_for(name)
        if not path.exists():
            return False
        path.unlink()
        return True
