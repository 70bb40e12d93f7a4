"""Service layer — tracker operations shared by the HTTP API and the CLI."""

from __future__ import annotations

import os
from typing import Any

from frecent.models import RankedEntry
from frecent.state import AppState


def _entryDict(r: RankedEntry) -> dict:
    return {
        "path": r.path,
        "score": r.score,
        "last_access": r.last_access,
        "frecency": r.frecency,
    }


# ── Visit events ─────────────────────────────────────────────


def svcVisit(state: AppState, path: str, now: int | None = None) -> dict:
    """Record an activation of a note."""
    counted = state.tracker.recordVisit(path, now=now)
    entry = state.tracker.files.get(path)
    return {
        "path": path,
        "counted": counted,
        "score": entry.score if entry else None,
        "tracked": entry is not None,
    }


def svcRename(state: AppState, old_path: str, new_path: str) -> dict:
    tracked = old_path in state.tracker.files
    state.tracker.handleRename(old_path, new_path)
    return {"renamed": tracked, "old_path": old_path, "new_path": new_path}


def svcDelete(state: AppState, path: str) -> dict:
    """The note itself was deleted."""
    tracked = path in state.tracker.files
    state.tracker.handleDelete(path)
    return {"deleted": tracked, "path": path}


def svcRemove(state: AppState, path: str) -> dict:
    """Remove a note from the list; the note stays on disk."""
    tracked = path in state.tracker.files
    state.tracker.removeEntry(path)
    return {"removed": tracked, "path": path}


def svcClear(state: AppState) -> dict:
    count = len(state.tracker.files)
    state.tracker.clearAll()
    return {"cleared": count}


# ── Open-set ─────────────────────────────────────────────────


def svcSyncOpen(state: AppState, paths: list[str]) -> dict:
    """Replace the open-set with the host's list of open notes."""
    state.tracker.syncOpenPaths(paths)
    return {"open": sorted(state.tracker.open_in_leaf)}


def svcClose(state: AppState, path: str) -> dict:
    state.tracker.markClosed(path)
    return {"closed": path}


# ── Queries ──────────────────────────────────────────────────


def svcEntries(state: AppState, limit: int | None = None, unbounded: bool = False) -> dict:
    """Ranked entries. unbounded=True skips the max_items cap; limit still applies."""
    if unbounded:
        entries = state.tracker.allEntries()
        if limit is not None:
            entries = entries[: max(limit, 0)]
    else:
        entries = state.tracker.rankedEntries(limit=limit)
    return {"entries": [_entryDict(r) for r in entries], "count": len(entries)}


def svcSearch(state: AppState, query: str, limit: int | None = None) -> dict:
    results = state.tracker.search(query, limit=limit)
    return {"query": query, "entries": [_entryDict(r) for r in results], "count": len(results)}


def svcStats(state: AppState) -> dict:
    tracker = state.tracker
    total = tracker.totalScore()
    max_age = tracker.settings.max_age
    data_path = os.path.expanduser(state.config.data_path)
    data_size = os.path.getsize(data_path) if os.path.exists(data_path) else 0
    return {
        "tracked": len(tracker.files),
        "total_score": round(total, 2),
        "max_age": max_age,
        "age_pool_used_pct": round(min(100.0, total / max_age * 100), 1) if max_age > 0 else 0.0,
        "open": len(tracker.open_in_leaf),
        "data_path": state.config.data_path,
        "data_size_bytes": data_size,
    }


# ── Settings ─────────────────────────────────────────────────


def svcGetSettings(state: AppState) -> dict:
    return state.tracker.settings.model_dump()


def svcUpdateSettings(state: AppState, changes: dict[str, Any]) -> dict:
    """Apply settings changes. Raises pydantic.ValidationError on bad values."""
    before = len(state.tracker.files)
    settings = state.tracker.updateSettings(**changes)
    return {
        "settings": settings.model_dump(),
        "pruned": before - len(state.tracker.files),
    }


def svcAgingPreview(state: AppState, max_age: float) -> dict:
    """What lowering max_age would do, without applying it."""
    return {
        "max_age": max_age,
        "total_score": round(state.tracker.totalScore(), 2),
        "would_prune": state.tracker.agingPreview(max_age),
    }
