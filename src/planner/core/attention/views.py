"""
Derived lists over attention items.
"""

from collections.abc import Iterable

from planner.core.attention.models import (
    ALL_BUSINESSES,
    AttentionItem,
    AttentionStatus,
)

DONE_LIST_LIMIT = 10


def matches_business(item: AttentionItem, biz_filter: str = ALL_BUSINESSES) -> bool:
    """True if the item belongs to the selected business (``all`` matches everything)."""
    if biz_filter == ALL_BUSINESSES:
        return True
    return item.biz_key == biz_filter


def active_items(
    items: Iterable[AttentionItem], biz_filter: str = ALL_BUSINESSES
) -> list[AttentionItem]:
    """
    Active items for a business, most urgent first.

    Items of equal priority keep their input order.
    """
    selected = [
        item
        for item in items
        if item.status == AttentionStatus.ACTIVE.value and matches_business(item, biz_filter)
    ]
    return sorted(selected, key=lambda item: item.priority_rank)


def recently_done(
    items: Iterable[AttentionItem],
    biz_filter: str = ALL_BUSINESSES,
    limit: int = DONE_LIST_LIMIT,
) -> list[AttentionItem]:
    """Done items for a business, most recently completed first."""
    selected = [
        item
        for item in items
        if item.status == AttentionStatus.DONE.value and matches_business(item, biz_filter)
    ]
    selected.sort(key=lambda item: item.completed_at or "", reverse=True)
    return selected[:limit]


def active_count(items: Iterable[AttentionItem], biz_filter: str = ALL_BUSINESSES) -> int:
    return len(active_items(items, biz_filter))
