"""
Tests for the local-first incubator idea store.

Covers load ordering (cache, bootstrap, empty), id assignment, mutations,
best-effort persistence and export.
"""

import json
from datetime import date
from pathlib import Path

import httpx
import pytest

from planner.core.config.models import HttpConfig, PlannerConfig
from planner.core.ideas import (
    FileSlotStorage,
    Idea,
    IdeaCollection,
    IdeaPriority,
    IdeaStage,
    IdeaStore,
    SlotStorage,
)


class FailingStorage(SlotStorage):
    """Slot storage whose writes always fail."""

    def __init__(self) -> None:
        self.writes = 0

    def read(self, name):
        return None

    def write(self, name, content):
        self.writes += 1
        raise OSError("disk full")

    def delete(self, name):
        return False


def _cached(data_dir: Path) -> dict:
    return json.loads((data_dir / "solution-planner-incubator.json").read_text())


# ==============================================================================
# Loading
# ==============================================================================


class TestLoad:
    """Cache first, then bootstrap, then empty."""

    def test_first_run_without_bootstrap_starts_empty(self, data_dir):
        store = IdeaStore(FileSlotStorage(data_dir))
        collection = store.load()

        assert collection.version == 1
        assert collection.ideas == []
        cached = _cached(data_dir)
        assert cached["version"] == 1
        assert cached["ideas"] == []
        assert "lastUpdated" in cached

    def test_first_run_adopts_bootstrap(self, data_dir, bootstrap_file):
        store = IdeaStore(FileSlotStorage(data_dir), bootstrap_source=str(bootstrap_file))
        store.load()

        assert [i.id for i in store.ideas] == ["1", "4"]
        assert store.get("4").stage == IdeaStage.DEVELOPING
        assert [i["id"] for i in _cached(data_dir)["ideas"]] == ["1", "4"]

    def test_cache_wins_over_bootstrap(self, data_dir, bootstrap_file):
        first = IdeaStore(FileSlotStorage(data_dir), bootstrap_source=str(bootstrap_file))
        first.load()
        first.delete("1")

        second = IdeaStore(FileSlotStorage(data_dir), bootstrap_source=str(bootstrap_file))
        second.load()
        assert [i.id for i in second.ideas] == ["4"]

    def test_corrupt_cache_falls_back_to_bootstrap(self, data_dir, bootstrap_file, caplog):
        data_dir.mkdir(parents=True)
        (data_dir / "solution-planner-incubator.json").write_text("{broken")

        store = IdeaStore(FileSlotStorage(data_dir), bootstrap_source=str(bootstrap_file))
        store.load()

        assert len(store.ideas) == 2
        assert "corrupt" in caplog.text

    def test_undecodable_cache_falls_back_to_bootstrap(self, data_dir, bootstrap_file, caplog):
        data_dir.mkdir(parents=True)
        (data_dir / "solution-planner-incubator.json").write_bytes(
            b'{"version": 1, "ideas": [\xff\xfe]}'
        )

        store = IdeaStore(FileSlotStorage(data_dir), bootstrap_source=str(bootstrap_file))
        store.load()

        assert [i.id for i in store.ideas] == ["1", "4"]
        assert "corrupt" in caplog.text

    def test_non_collection_cache_falls_back(self, data_dir, bootstrap_file):
        data_dir.mkdir(parents=True)
        (data_dir / "solution-planner-incubator.json").write_text(json.dumps({"ideas": "x"}))

        store = IdeaStore(FileSlotStorage(data_dir), bootstrap_source=str(bootstrap_file))
        store.load()
        assert len(store.ideas) == 2

    def test_parsed_cache_with_bad_fields_is_repaired(self, data_dir, bootstrap_file):
        data_dir.mkdir(parents=True)
        cache = data_dir / "solution-planner-incubator.json"
        cache.write_text(
            json.dumps(
                {
                    "version": 1,
                    "ideas": [
                        {"id": "1", "title": "Sauna trailer", "stage": "developing"},
                        {"id": "2", "title": "Shed kits", "priority": None, "stage": "someday"},
                    ],
                }
            )
        )

        store = IdeaStore(FileSlotStorage(data_dir), bootstrap_source=str(bootstrap_file))
        store.load()

        assert [i.title for i in store.ideas] == ["Sauna trailer", "Shed kits"]
        assert store.get("2").priority == IdeaPriority.MEDIUM
        assert store.get("2").stage == IdeaStage.CONCEPT
        assert len(_cached(data_dir)["ideas"]) == 2

    def test_unusable_idea_is_skipped_not_the_collection(self, data_dir, caplog):
        data_dir.mkdir(parents=True)
        (data_dir / "solution-planner-incubator.json").write_text(
            json.dumps(
                {
                    "version": 1,
                    "ideas": [{"id": "1", "title": "Keep me"}, {"id": "7", "title": ""}, "junk"],
                }
            )
        )

        store = IdeaStore(FileSlotStorage(data_dir))
        store.load()

        assert [i.title for i in store.ideas] == ["Keep me"]
        assert "Skipping unreadable idea" in caplog.text
        assert store.add("Next").id == "8"

    def test_malformed_bootstrap_is_treated_as_missing(self, data_dir, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"version": 1, "ideas": [{"title": "no id"}]}))

        store = IdeaStore(FileSlotStorage(data_dir), bootstrap_source=str(bad))
        store.load()
        assert store.ideas == []

    def test_missing_bootstrap_file_starts_empty(self, data_dir, tmp_path):
        store = IdeaStore(FileSlotStorage(data_dir), bootstrap_source=str(tmp_path / "nope.json"))
        assert store.load().ideas == []

    def test_bootstrap_over_http(self, data_dir):
        snapshot = {"version": 1, "ideas": [{"id": 7, "title": "Honey stand"}]}

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/data/incubator.json"
            return httpx.Response(200, json=snapshot)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        store = IdeaStore(
            FileSlotStorage(data_dir),
            bootstrap_source="https://planner.example/data/incubator.json",
            http_client=client,
        )
        store.load()
        assert store.get("7").title == "Honey stand"

    def test_bootstrap_http_failure_starts_empty(self, data_dir):
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(404)))
        store = IdeaStore(
            FileSlotStorage(data_dir),
            bootstrap_source="https://planner.example/data/incubator.json",
            http_client=client,
            http_config=HttpConfig(max_retries=0),
        )
        assert store.load().ideas == []

    def test_from_config(self, tmp_path, bootstrap_file):
        config = PlannerConfig(
            ideas={"data_dir": str(tmp_path / "d"), "bootstrap_url": str(bootstrap_file)}
        )
        store = IdeaStore.from_config(config)
        store.load()
        assert len(store.ideas) == 2
        assert (tmp_path / "d" / "solution-planner-incubator.json").exists()


# ==============================================================================
# Ids
# ==============================================================================


class TestIds:
    def test_ids_start_at_one(self, idea_store):
        assert idea_store.add("First").id == "1"
        assert idea_store.add("Second").id == "2"

    def test_ids_are_never_reused_after_delete(self, idea_store):
        """add -> 1; delete 1; add -> 2, not 1."""
        first = idea_store.add("First")
        idea_store.delete(first.id)
        assert idea_store.add("Second").id == "2"

    def test_ids_strictly_increase_across_deletes(self, idea_store):
        issued = []
        for n in range(5):
            idea = idea_store.add(f"Idea {n}")
            issued.append(int(idea.id))
            if n % 2 == 0:
                idea_store.delete(idea.id)
        assert issued == sorted(issued)
        assert len(set(issued)) == len(issued)

    def test_high_water_mark_survives_reload(self, data_dir):
        store = IdeaStore(FileSlotStorage(data_dir))
        store.load()
        store.add("One")
        store.add("Two")
        store.delete("2")

        reloaded = IdeaStore(FileSlotStorage(data_dir))
        reloaded.load()
        assert reloaded.add("Three").id == "3"

    def test_non_numeric_ids_count_as_zero(self, data_dir):
        store = IdeaStore(FileSlotStorage(data_dir))
        store._collection = IdeaCollection(
            ideas=[Idea(id="legacy", title="Old"), Idea(id="3", title="Three")]
        )
        assert store.next_id() == "4"

    @pytest.mark.parametrize("raw", ["1_0", " 7", "٣", "-2", "12abc", ""])
    def test_only_plain_decimal_ids_count(self, raw):
        assert Idea(id=raw, title="Odd").numeric_id == 0

    def test_continues_after_bootstrap_ids(self, data_dir, bootstrap_file):
        store = IdeaStore(FileSlotStorage(data_dir), bootstrap_source=str(bootstrap_file))
        store.load()
        assert store.add("Next").id == "5"


# ==============================================================================
# Mutations
# ==============================================================================


class TestMutations:
    def test_add_sets_fields_and_timestamps(self, idea_store):
        idea = idea_store.add(
            "  Sauna trailer ",
            description="Hire by weekend",
            priority="high",
            stage="developing",
        )
        assert idea.title == "Sauna trailer"
        assert idea.priority.value == "high"
        assert idea.stage == IdeaStage.DEVELOPING
        assert idea.created_at is not None
        assert idea.created_at == idea.updated_at

    def test_add_rejects_empty_title(self, idea_store):
        with pytest.raises(ValueError):
            idea_store.add("   ")

    def test_add_rejects_unknown_stage(self, idea_store):
        with pytest.raises(ValueError):
            idea_store.add("Idea", stage="shipped")

    def test_insertion_order_is_creation_order(self, idea_store):
        for title in ("a", "b", "c"):
            idea_store.add(title)
        assert [i.title for i in idea_store.ideas] == ["a", "b", "c"]

    def test_update_stage_and_notes(self, idea_store, data_dir):
        idea = idea_store.add("Idea")
        idea_store.update_stage(idea.id, "developing")
        idea_store.update_notes(idea.id, "spoke to the council")

        saved = _cached(data_dir)["ideas"][0]
        assert saved["stage"] == "developing"
        assert saved["notes"] == "spoke to the council"

    def test_update_unknown_id_is_noop(self, idea_store):
        assert idea_store.update_stage("99", "ready") is None
        assert idea_store.update_notes("99", "x") is None

    def test_graduate_sets_ready(self, idea_store):
        idea = idea_store.add("Idea")
        assert idea_store.graduate(idea.id).stage == IdeaStage.READY

    def test_delete_twice_equals_delete_once(self, idea_store, data_dir):
        idea_store.add("Keep")
        gone = idea_store.add("Gone")

        assert idea_store.delete(gone.id) is True
        after_first = _cached(data_dir)
        assert idea_store.delete(gone.id) is False
        after_second = _cached(data_dir)

        assert after_first == after_second
        assert [i.title for i in idea_store.ideas] == ["Keep"]

    def test_every_mutation_stamps_last_updated(self, idea_store):
        idea_store.collection.last_updated = None
        idea_store.add("Idea")
        assert idea_store.collection.last_updated is not None

    def test_group_by_stage(self, idea_store):
        idea_store.add("a")
        idea_store.add("b", stage="developing")
        idea_store.add("c", stage="ready")
        groups = idea_store.group_by_stage()
        assert [i.title for i in groups[IdeaStage.CONCEPT]] == ["a"]
        assert [i.title for i in groups[IdeaStage.DEVELOPING]] == ["b"]
        assert [i.title for i in groups[IdeaStage.READY]] == ["c"]


class TestSaveFailure:
    """Persistence failures are reported through save(), never raised."""

    def test_save_returns_false(self):
        storage = FailingStorage()
        store = IdeaStore(storage)
        store.load()
        assert store.save() is False
        assert store.last_save_ok is False

    def test_mutation_survives_in_memory(self):
        store = IdeaStore(FailingStorage())
        store.load()
        idea = store.add("Kept in memory")
        assert store.get(idea.id) is not None
        assert store.last_save_ok is False


# ==============================================================================
# Export
# ==============================================================================


class TestExport:
    def test_export_has_no_side_effects(self, idea_store):
        idea_store.add("Idea")
        before = idea_store.collection.last_updated
        idea_store.export()
        assert idea_store.collection.last_updated == before

    def test_export_to_names_file_by_date(self, idea_store, tmp_path):
        idea_store.add("Idea")
        path = idea_store.export_to(tmp_path / "out", today=date(2026, 10, 17))
        assert path.name == "incubator-2026-10-17.json"
        assert json.loads(path.read_text())["ideas"][0]["title"] == "Idea"

    def test_export_then_bootstrap_round_trip(self, idea_store, tmp_path):
        """Exported ideas re-imported through the bootstrap path are equal."""
        idea_store.add("One", description="first", priority="high")
        idea_store.add("Two", stage="developing", notes="n")
        idea_store.delete("1")
        idea_store.add("Three")
        exported = idea_store.export_to(tmp_path / "out")

        fresh = IdeaStore(FileSlotStorage(tmp_path / "fresh"), bootstrap_source=str(exported))
        fresh.load()

        assert [i.model_dump() for i in fresh.ideas] == [i.model_dump() for i in idea_store.ideas]
        assert fresh.add("Four").id == "4"
