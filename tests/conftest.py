"""
Pytest configuration and shared fixtures.

Provides isolated config/data directories, in-memory remote stores, idea
stores and sample snapshots used across the test suite.
"""

import json
from pathlib import Path
from typing import Any

import pytest

from planner.core.config import clear_cache
from planner.core.ideas import FileSlotStorage, IdeaStore
from planner.core.remote import MemoryBackend, PushIdGenerator, SyncClient, reset_sync_client

# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """
    Keep every test away from the real home directory and environment.

    Config and data homes point into tmp_path, PLANNER_* variables are
    cleared, and the config cache and process-wide sync client are reset.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))
    for name in (
        "PLANNER_DATABASE_URL",
        "PLANNER_AUTH_TOKEN",
        "PLANNER_BOOTSTRAP_URL",
        "PLANNER_DATA_DIR",
        "PLANNER_AUTHOR",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_cache()
    reset_sync_client()
    yield
    clear_cache()
    reset_sync_client()


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A temporary working directory for project-level config."""
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project


# ==============================================================================
# Remote Store Fixtures
# ==============================================================================


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def client(backend: MemoryBackend) -> SyncClient:
    """A connected sync client over an in-memory tree."""
    sync = SyncClient(backend, id_generator=PushIdGenerator())
    sync.connect()
    return sync


@pytest.fixture
def attention_tree() -> dict[str, Any]:
    """A small shared tree with three attention items."""
    return {
        "attention": {
            "a1": {
                "title": "Order timber",
                "detail": "Two pallets of larch",
                "biz": "🏠",
                "priority": "high",
                "status": "active",
                "createdAt": "2026-10-01T09:00:00.000Z",
            },
            "a2": {
                "title": "Vet visit",
                "biz": "🌾",
                "priority": "low",
                "status": "active",
                "createdAt": "2026-10-02T09:00:00.000Z",
            },
            "a3": {
                "title": "Book venue",
                "biz": "☕",
                "priority": "medium",
                "status": "done",
                "createdAt": "2026-09-20T09:00:00.000Z",
                "completedAt": "2026-10-03T12:00:00.000Z",
            },
        }
    }


# ==============================================================================
# Idea Store Fixtures
# ==============================================================================


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def idea_store(data_dir: Path) -> IdeaStore:
    """A loaded, empty idea store with no bootstrap source."""
    store = IdeaStore(FileSlotStorage(data_dir))
    store.load()
    return store


@pytest.fixture
def bootstrap_file(tmp_path: Path) -> Path:
    """A bootstrap snapshot with two ideas."""
    path = tmp_path / "incubator.json"
    path.write_text(
        json.dumps(
            {
                "version": 1,
                "ideas": [
                    {
                        "id": "1",
                        "title": "Mobile sauna",
                        "description": "Trailer-mounted",
                        "stage": "concept",
                        "priority": "high",
                        "notes": "",
                        "createdAt": "2026-01-05T10:00:00.000Z",
                        "updatedAt": "2026-01-05T10:00:00.000Z",
                    },
                    {
                        "id": "4",
                        "title": "Shed kits",
                        "stage": "developing",
                        "priority": "medium",
                    },
                ],
            }
        ),
        encoding="utf-8",
    )
    return path
