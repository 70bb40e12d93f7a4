"""Read-only ranked views over the tracked entries."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import PurePosixPath

from frecent.frecency import frecency
from frecent.models import FileEntry, RankedEntry, TrackerSettings

logger = logging.getLogger("frecent")


def compileExclude(pattern: str) -> re.Pattern[str] | None:
    """Compile the exclude regex. Blank or invalid patterns disable filtering."""
    if not pattern.strip():
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.debug("Ignoring invalid exclude pattern %r: %s", pattern, e)
        return None


def _sortKey(r: RankedEntry) -> tuple[float, int, str]:
    # frecency desc, then last_access desc, then path asc
    return (-r.frecency, -r.last_access, r.path)


def sortedEntries(
    files: Mapping[str, FileEntry],
    exclude_paths: str,
    now: int,
) -> list[RankedEntry]:
    """All non-excluded entries, best first. No truncation."""
    exclude = compileExclude(exclude_paths)
    ranked = [
        RankedEntry(
            path=path,
            score=entry.score,
            last_access=entry.last_access,
            frecency=frecency(entry, now),
        )
        for path, entry in files.items()
        if exclude is None or not exclude.search(path)
    ]
    ranked.sort(key=_sortKey)
    return ranked


def rankedEntries(
    files: Mapping[str, FileEntry],
    settings: TrackerSettings,
    now: int,
    limit: int | None = None,
) -> list[RankedEntry]:
    """Bounded ranking for the panel: capped at limit, or settings.max_items."""
    cap = settings.max_items if limit is None else limit
    return sortedEntries(files, settings.exclude_paths, now)[: max(cap, 0)]


def _displayName(path: str) -> str:
    name = PurePosixPath(path).name
    if name.lower().endswith(".md"):
        name = name[:-3]
    return name


def searchEntries(
    files: Mapping[str, FileEntry],
    settings: TrackerSettings,
    query: str,
    now: int,
    limit: int | None = None,
) -> list[RankedEntry]:
    """Case-insensitive substring match on the note name, in rank order."""
    q = query.strip().lower()
    results = sortedEntries(files, settings.exclude_paths, now)
    if q:
        results = [r for r in results if q in _displayName(r.path).lower()]
    return results if limit is None else results[: max(limit, 0)]
