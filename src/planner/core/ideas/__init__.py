"""
Incubator ideas module.

Local-first store for ideas that do not yet belong to any tracker. The
collection lives in one named slot on this device and is seeded once from
a bootstrap snapshot.
"""

from planner.core.ideas.models import Idea, IdeaCollection, IdeaPriority, IdeaStage
from planner.core.ideas.storage import FileSlotStorage, SlotStorage
from planner.core.ideas.store import DEFAULT_SLOT, BootstrapError, IdeaStore

__all__ = [
    "BootstrapError",
    "DEFAULT_SLOT",
    "FileSlotStorage",
    "Idea",
    "IdeaCollection",
    "IdeaPriority",
    "IdeaStage",
    "IdeaStore",
    "SlotStorage",
]
