"""
Shared attention items and per-business task boards.
"""

from planner.core.attention.models import (
    ALL_BUSINESSES,
    BIZ_MAP,
    AttentionItem,
    AttentionStatus,
    BusinessTask,
    Priority,
    TaskStatus,
)
from planner.core.attention.service import AttentionService
from planner.core.attention.views import active_count, active_items, matches_business, recently_done

__all__ = [
    "ALL_BUSINESSES",
    "BIZ_MAP",
    "AttentionItem",
    "AttentionService",
    "AttentionStatus",
    "BusinessTask",
    "Priority",
    "TaskStatus",
    "active_count",
    "active_items",
    "matches_business",
    "recently_done",
]
