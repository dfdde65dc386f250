"""
Merge tracker snapshots and incubator ideas into one board.

Stage mapping for ideas:
- concept    -> backlog
- developing -> in-progress
- ready      -> backlog
"""

from collections.abc import Iterable

from pydantic import BaseModel, Field

from planner.core.board.models import BoardCard, CardStatus, TrackerSnapshot
from planner.core.config.models import TrackerSource
from planner.core.ideas.models import Idea, IdeaStage
from planner.core.timestamps import to_iso

INCUBATOR_SOURCE = TrackerSource(id="incubator", name="Incubator", emoji="🧪")

HIGH_BACKLOG_LIMIT = 10
RECENT_DONE_LIMIT = 5

_STAGE_STATUS = {
    IdeaStage.CONCEPT: CardStatus.BACKLOG,
    IdeaStage.DEVELOPING: CardStatus.IN_PROGRESS,
    IdeaStage.READY: CardStatus.BACKLOG,
}


def idea_to_card(idea: Idea) -> BoardCard:
    return BoardCard(
        id=f"inc-{idea.id}",
        title=idea.title,
        description=idea.description or None,
        status=_STAGE_STATUS[idea.stage].value,
        priority=idea.priority.value,
        category="incubator",
        created_at=to_iso(idea.created_at) if idea.created_at else None,
        source=INCUBATOR_SOURCE.id,
        source_emoji=INCUBATOR_SOURCE.emoji,
        source_name=INCUBATOR_SOURCE.display_name,
    )


def merge_cards(
    snapshots: Iterable[TrackerSnapshot], ideas: Iterable[Idea] = ()
) -> list[BoardCard]:
    """
    All tracker cards tagged with their source, followed by the ideas.

    Card order within a tracker is preserved.
    """
    merged: list[BoardCard] = []
    for snapshot in snapshots:
        source = snapshot.source
        for card in snapshot.cards:
            data = card.model_dump()
            data.update(
                source=source.id,
                source_emoji=source.emoji,
                source_name=source.display_name,
            )
            merged.append(BoardCard.model_validate(data))
    merged.extend(idea_to_card(idea) for idea in ideas)
    return merged


def _is_high_backlog(card: BoardCard) -> bool:
    return card.priority == "high" and card.status == CardStatus.BACKLOG.value


def urgent_count(cards: Iterable[BoardCard]) -> int:
    """Cards in progress plus high-priority backlog cards."""
    return sum(
        1 for c in cards if c.status == CardStatus.IN_PROGRESS.value or _is_high_backlog(c)
    )


class TodayView(BaseModel):
    """What matters right now, across every tracker."""

    in_progress: list[BoardCard] = Field(default_factory=list)
    high_backlog: list[BoardCard] = Field(default_factory=list)
    high_backlog_total: int = 0
    recent_done: list[BoardCard] = Field(default_factory=list)
    total: int = 0
    done: int = 0
    incubating: int = 0

    @property
    def completion_percent(self) -> int:
        return round(self.done / self.total * 100) if self.total else 0

    @property
    def more_high_backlog(self) -> int:
        return max(0, self.high_backlog_total - len(self.high_backlog))


def today_view(cards: list[BoardCard], incubating: int = 0) -> TodayView:
    high_backlog = [c for c in cards if _is_high_backlog(c)]
    recent_done = sorted(
        (c for c in cards if c.status == CardStatus.DONE.value and c.completed_at),
        key=lambda c: c.completed_at or "",
        reverse=True,
    )
    return TodayView(
        in_progress=[c for c in cards if c.status == CardStatus.IN_PROGRESS.value],
        high_backlog=high_backlog[:HIGH_BACKLOG_LIMIT],
        high_backlog_total=len(high_backlog),
        recent_done=recent_done[:RECENT_DONE_LIMIT],
        total=len(cards),
        done=sum(1 for c in cards if c.status == CardStatus.DONE.value),
        incubating=incubating,
    )


class TrackerSummary(BaseModel):
    source: TrackerSource
    backlog: int = 0
    in_progress: int = 0
    done: int = 0
    ideas: int = 0
    error: str | None = None

    @property
    def total(self) -> int:
        return self.backlog + self.in_progress + self.done + self.ideas


def tracker_summary(snapshots: Iterable[TrackerSnapshot]) -> list[TrackerSummary]:
    """Per-tracker card counts by column."""
    summaries = []
    for snapshot in snapshots:
        counts = {status: 0 for status in CardStatus}
        for card in snapshot.cards:
            try:
                counts[CardStatus(card.status)] += 1
            except ValueError:
                continue
        summaries.append(
            TrackerSummary(
                source=snapshot.source,
                backlog=counts[CardStatus.BACKLOG],
                in_progress=counts[CardStatus.IN_PROGRESS],
                done=counts[CardStatus.DONE],
                ideas=counts[CardStatus.IDEAS],
                error=snapshot.error,
            )
        )
    return summaries


def status_line(cards: list[BoardCard], dashboard_count: int, incubating: int = 0) -> str:
    """
    Footer summary.

    Example:
        >>> status_line(cards, 3, incubating=4)
        '42 items across 3 dashboards · 4 incubating'
    """
    line = f"{len(cards)} items across {dashboard_count} dashboards"
    if incubating > 0:
        line += f" · {incubating} incubating"
    return line
