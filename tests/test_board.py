"""
Tests for tracker loading, board merging and the derived board views.
"""

import json

import httpx
import pytest

from planner.core.board import (
    BoardCard,
    TrackerSnapshot,
    load_tracker,
    load_trackers,
    merge_cards,
    parse_cards,
    status_line,
    today_view,
    tracker_summary,
    urgent_count,
)
from planner.core.board.merge import HIGH_BACKLOG_LIMIT, idea_to_card
from planner.core.config.models import HttpConfig, TrackerSource
from planner.core.ideas import Idea

SHEDS = TrackerSource(id="sheds", name="Shed Project", emoji="🏠")
FARM = TrackerSource(id="farm", emoji="🌾")


def _card(card_id, status, priority=None, completed_at=None, source=SHEDS) -> BoardCard:
    return BoardCard(
        id=card_id,
        title=f"Card {card_id}",
        status=status,
        priority=priority,
        completedAt=completed_at,
        source=source.id,
    )


# ==============================================================================
# Loading
# ==============================================================================


class TestParseCards:
    def test_object_payload(self):
        cards = parse_cards({"cards": [{"id": 1, "title": "Roof", "status": "backlog"}]})
        assert cards[0].id == "1"

    def test_bare_list_payload(self):
        assert len(parse_cards([{"id": "a", "title": "t", "status": "done"}])) == 1

    def test_missing_cards_is_empty(self):
        assert parse_cards({"updated": "today"}) == []

    def test_malformed_cards_are_skipped(self, caplog):
        cards = parse_cards(
            {"cards": [{"id": "a", "title": "ok", "status": "done"}, {"title": "no id"}]},
            "sheds",
        )
        assert [c.id for c in cards] == ["a"]
        assert "Skipping malformed card #1 from sheds" in caplog.text

    def test_extra_fields_are_kept(self):
        card = parse_cards([{"id": "a", "title": "t", "status": "done", "owner": "sam"}])[0]
        assert card.model_dump()["owner"] == "sam"

    @pytest.mark.parametrize("payload", ["cards", 3, {"cards": "nope"}])
    def test_unusable_payload_raises(self, payload):
        with pytest.raises(ValueError):
            parse_cards(payload)


class TestLoadTracker:
    def test_source_without_url_is_empty(self):
        snapshot = load_tracker(SHEDS)
        assert snapshot.ok
        assert snapshot.cards == []

    def test_file_source(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text(json.dumps({"cards": [{"id": "1", "title": "t", "status": "backlog"}]}))
        snapshot = load_tracker(TrackerSource(id="sheds", data_url=str(path)))
        assert snapshot.ok
        assert [c.title for c in snapshot.cards] == ["t"]

    def test_failed_tracker_degrades_without_affecting_others(self, tmp_path):
        good = tmp_path / "good.json"
        good.write_text(json.dumps([{"id": "1", "title": "t", "status": "done"}]))
        bad = tmp_path / "bad.json"
        bad.write_text("<html>")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        snapshots = load_trackers(
            [
                TrackerSource(id="bad-file", data_url=str(bad)),
                TrackerSource(id="down", data_url="https://farm.example/data/cards.json"),
                TrackerSource(id="missing", data_url=str(tmp_path / "nope.json")),
                TrackerSource(id="good", data_url=str(good)),
            ],
            client=httpx.Client(transport=httpx.MockTransport(handler)),
            http_config=HttpConfig(max_retries=0),
        )

        assert [s.source.id for s in snapshots] == ["bad-file", "down", "missing", "good"]
        assert [s.ok for s in snapshots] == [False, False, False, True]
        assert all(s.cards == [] for s in snapshots[:3])
        assert len(snapshots[3].cards) == 1

    def test_http_source(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"cards": [{"id": 7, "title": "t", "status": "ideas"}]})

        snapshot = load_tracker(
            TrackerSource(id="forge", data_url="https://forge.example/data/cards.json"),
            client=httpx.Client(transport=httpx.MockTransport(handler)),
        )
        assert snapshot.cards[0].id == "7"


# ==============================================================================
# Merging
# ==============================================================================


class TestMerge:
    def test_cards_are_tagged_with_source(self):
        snapshots = [
            TrackerSnapshot(
                source=SHEDS,
                cards=parse_cards([{"id": "1", "title": "Roof", "status": "backlog"}]),
            ),
            TrackerSnapshot(
                source=FARM,
                cards=parse_cards([{"id": "1", "title": "Fence", "status": "done"}]),
            ),
        ]
        cards = merge_cards(snapshots)
        assert [(c.source, c.source_emoji, c.source_name) for c in cards] == [
            ("sheds", "🏠", "Shed Project"),
            ("farm", "🌾", "farm"),
        ]

    def test_ideas_follow_tracker_cards(self):
        ideas = [
            Idea(id="1", title="Sauna", stage="concept"),
            Idea(id="2", title="Kits", stage="developing", priority="high"),
            Idea(id="3", title="Honey", stage="ready"),
        ]
        snapshot = TrackerSnapshot(
            source=SHEDS, cards=parse_cards([{"id": "9", "title": "t", "status": "done"}])
        )
        cards = merge_cards([snapshot], ideas)

        assert [c.id for c in cards] == ["9", "inc-1", "inc-2", "inc-3"]
        assert [c.status for c in cards[1:]] == ["backlog", "in-progress", "backlog"]
        assert all(c.source == "incubator" and c.category == "incubator" for c in cards[1:])
        assert cards[2].priority == "high"

    def test_idea_card_shape(self):
        card = idea_to_card(Idea(id="5", title="Sauna", description=""))
        assert card.source_emoji == "🧪"
        assert card.source_name == "Incubator"
        assert card.description is None


# ==============================================================================
# Views
# ==============================================================================


class TestViews:
    def test_urgent_count(self):
        cards = [
            _card("1", "in-progress"),
            _card("2", "backlog", "high"),
            _card("3", "backlog", "low"),
            _card("4", "done", "high"),
        ]
        assert urgent_count(cards) == 2

    def test_today_view(self):
        cards = [
            _card("1", "in-progress"),
            _card("2", "backlog", "high"),
            _card("3", "done", completed_at="2026-10-01T00:00:00.000Z"),
            _card("4", "done", completed_at="2026-10-05T00:00:00.000Z"),
            _card("5", "done"),
        ]
        view = today_view(cards, incubating=2)
        assert [c.id for c in view.in_progress] == ["1"]
        assert [c.id for c in view.high_backlog] == ["2"]
        assert [c.id for c in view.recent_done] == ["4", "3"]
        assert view.total == 5
        assert view.done == 3
        assert view.completion_percent == 60
        assert view.incubating == 2

    def test_high_backlog_is_capped(self):
        cards = [_card(str(n), "backlog", "high") for n in range(HIGH_BACKLOG_LIMIT + 3)]
        view = today_view(cards)
        assert len(view.high_backlog) == HIGH_BACKLOG_LIMIT
        assert view.more_high_backlog == 3

    def test_empty_board(self):
        view = today_view([])
        assert view.completion_percent == 0
        assert view.recent_done == []

    def test_tracker_summary(self):
        snapshot = TrackerSnapshot(
            source=SHEDS,
            cards=parse_cards(
                [
                    {"id": "1", "title": "t", "status": "backlog"},
                    {"id": "2", "title": "t", "status": "in-progress"},
                    {"id": "3", "title": "t", "status": "ideas"},
                    {"id": "4", "title": "t", "status": "archived"},
                ]
            ),
        )
        failed = TrackerSnapshot(source=FARM, error="503")
        summary = tracker_summary([snapshot, failed])

        assert (summary[0].backlog, summary[0].in_progress, summary[0].ideas) == (1, 1, 1)
        assert summary[0].total == 3
        assert summary[1].total == 0
        assert summary[1].error == "503"

    def test_status_line(self):
        cards = [_card("1", "done"), _card("2", "backlog")]
        assert status_line(cards, 3) == "2 items across 3 dashboards"
        assert status_line(cards, 3, incubating=4) == "2 items across 3 dashboards · 4 incubating"
