"""Tests for the service layer shared by the HTTP API and the CLI."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from frecent.config import FrecentConfig
from frecent.models import FileEntry
from frecent.service import (
    svcAgingPreview,
    svcClear,
    svcClose,
    svcDelete,
    svcEntries,
    svcGetSettings,
    svcRemove,
    svcRename,
    svcSearch,
    svcStats,
    svcSyncOpen,
    svcUpdateSettings,
    svcVisit,
)
from frecent.state import AppState
from frecent.tracker import VisitTracker

NOW = 1_700_000_000_000


@pytest.fixture
def state(config: FrecentConfig, tracker: VisitTracker) -> AppState:
    return AppState(tracker=tracker, config=config)


# ── Visit events ─────────────────────────────────────────────


class TestSvcVisit:
    def test_counted(self, state):
        assert svcVisit(state, "a.md") == {
            "path": "a.md",
            "counted": True,
            "score": 1.0,
            "tracked": True,
        }

    def test_tabSwitch(self, state):
        svcVisit(state, "a.md")
        result = svcVisit(state, "a.md")
        assert result["counted"] is False
        assert result["score"] == 1.0

    def test_prunedByAging(self, state):
        state.tracker.settings.max_age = 1
        svcVisit(state, "a.md")
        result = svcVisit(state, "b.md")
        assert result["counted"] is True
        assert result["tracked"] is False
        assert result["score"] is None


class TestSvcRenameDeleteRemove:
    def test_rename(self, state):
        svcVisit(state, "a.md")
        assert svcRename(state, "a.md", "b.md")["renamed"] is True
        assert svcRename(state, "zzz.md", "b.md")["renamed"] is False
        assert list(state.tracker.files) == ["b.md"]

    def test_delete(self, state):
        svcVisit(state, "a.md")
        assert svcDelete(state, "a.md") == {"deleted": True, "path": "a.md"}
        assert svcDelete(state, "a.md") == {"deleted": False, "path": "a.md"}

    def test_remove(self, state):
        svcVisit(state, "a.md")
        assert svcRemove(state, "a.md")["removed"] is True
        assert svcRemove(state, "a.md")["removed"] is False

    def test_clear(self, state):
        svcVisit(state, "a.md")
        svcVisit(state, "b.md")
        assert svcClear(state) == {"cleared": 2}
        assert state.tracker.files == {}


class TestSvcOpenSet:
    def test_syncThenClose(self, state):
        assert svcSyncOpen(state, ["b.md", "a.md"]) == {"open": ["a.md", "b.md"]}
        svcClose(state, "a.md")
        assert svcVisit(state, "a.md")["counted"] is True
        assert svcVisit(state, "b.md")["counted"] is False


# ── Queries ──────────────────────────────────────────────────


class TestSvcEntries:
    @pytest.fixture(autouse=True)
    def _seed(self, state):
        state.tracker.files = {
            f"n{i}.md": FileEntry(score=i + 1, last_access=NOW) for i in range(60)
        }

    def test_cappedByMaxItems(self, state):
        result = svcEntries(state)
        assert result["count"] == 50
        assert result["entries"][0] == {
            "path": "n59.md",
            "score": 60,
            "last_access": NOW,
            "frecency": 240,
        }

    def test_limit(self, state):
        assert svcEntries(state, limit=3)["count"] == 3

    def test_unbounded(self, state):
        assert svcEntries(state, unbounded=True)["count"] == 60
        assert svcEntries(state, limit=55, unbounded=True)["count"] == 55

    def test_search(self, state):
        result = svcSearch(state, "n5")
        assert [e["path"] for e in result["entries"]] == [
            "n59.md", "n58.md", "n57.md", "n56.md", "n55.md",
            "n54.md", "n53.md", "n52.md", "n51.md", "n50.md", "n5.md",
        ]
        assert result["count"] == 11


class TestSvcStats:
    def test_stats(self, state):
        state.tracker.files = {
            "a.md": FileEntry(score=4500, last_access=NOW),
            "b.md": FileEntry(score=900, last_access=NOW),
        }
        state.tracker.syncOpenPaths(["a.md"])
        result = svcStats(state)
        assert result["tracked"] == 2
        assert result["total_score"] == 5400
        assert result["age_pool_used_pct"] == 60.0
        assert result["open"] == 1
        assert result["data_size_bytes"] == 0

    def test_agingDisabled(self, state):
        state.tracker.settings.max_age = 0
        assert svcStats(state)["age_pool_used_pct"] == 0.0


# ── Settings ─────────────────────────────────────────────────


class TestSvcSettings:
    def test_getDefaults(self, state):
        settings = svcGetSettings(state)
        assert settings["max_items"] == 50
        assert settings["max_age"] == 9000
        assert settings["record_on_every_visit"] is False

    def test_updateReportsPruned(self, state):
        state.tracker.files = {
            "a.md": FileEntry(score=90, last_access=NOW),
            "b.md": FileEntry(score=1, last_access=NOW),
        }
        assert svcAgingPreview(state, 50) == {"max_age": 50, "total_score": 91, "would_prune": 1}
        result = svcUpdateSettings(state, {"max_age": 50})
        assert result["pruned"] == 1
        assert result["settings"]["max_age"] == 50

    def test_updateInvalid(self, state):
        with pytest.raises(ValidationError):
            svcUpdateSettings(state, {"max_items": -1})
