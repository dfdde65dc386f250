"""
Aggregated board: tracker snapshots merged with incubator ideas.
"""

from planner.core.board.loader import load_tracker, load_trackers, parse_cards
from planner.core.board.merge import (
    INCUBATOR_SOURCE,
    TodayView,
    TrackerSummary,
    idea_to_card,
    merge_cards,
    status_line,
    today_view,
    tracker_summary,
    urgent_count,
)
from planner.core.board.models import BoardCard, CardStatus, TrackerCard, TrackerSnapshot

__all__ = [
    "BoardCard",
    "CardStatus",
    "INCUBATOR_SOURCE",
    "TodayView",
    "TrackerCard",
    "TrackerSnapshot",
    "TrackerSummary",
    "idea_to_card",
    "load_tracker",
    "load_trackers",
    "merge_cards",
    "parse_cards",
    "status_line",
    "today_view",
    "tracker_summary",
    "urgent_count",
]
