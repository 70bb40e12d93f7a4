"""Visit tracking state: records, open-set bookkeeping, rename/delete handling."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any, Protocol

from pydantic import ValidationError

from frecent.frecency import agingPreview, applyAging, nowMs, totalScore
from frecent.models import FileEntry, PersistedData, RankedEntry, TrackerSettings
from frecent.ranking import rankedEntries, searchEntries, sortedEntries
from frecent.store import Debouncer, JsonStore

logger = logging.getLogger("frecent")

DEFAULT_DEBOUNCE_SECONDS = 0.5


class TrackerListener(Protocol):
    def refresh(self) -> None: ...

    def renamed(self, old_path: str, new_path: str) -> None: ...


def parsePersisted(raw: Any) -> PersistedData:
    """Build state from a loaded blob. Anything malformed degrades to defaults."""
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning("Ignoring persisted data of type %s", type(raw).__name__)
        return PersistedData()

    settings = TrackerSettings()
    raw_settings = raw.get("settings")
    if isinstance(raw_settings, dict):
        try:
            settings = TrackerSettings.model_validate(raw_settings)
        except ValidationError as e:
            logger.warning("Invalid stored settings, using defaults: %s", e)

    files: dict[str, FileEntry] = {}
    raw_files = raw.get("files")
    if isinstance(raw_files, dict):
        for path, value in raw_files.items():
            try:
                files[str(path)] = FileEntry.model_validate(value)
            except ValidationError:
                logger.warning("Dropping malformed entry for %s", path)
    elif raw_files is not None:
        logger.warning("Ignoring stored files of type %s", type(raw_files).__name__)

    return PersistedData(files=files, settings=settings)


class VisitTracker:
    """Owns the record set and decides which activations count as visits.

    ``open_in_leaf`` mirrors which paths the host currently has open. It is
    never persisted; hosts can replace it via syncOpenPaths() at any time.
    """

    def __init__(
        self,
        store: JsonStore | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        clock: Callable[[], int] = nowMs,
        listener: TrackerListener | None = None,
    ):
        self.store = store
        self.clock = clock
        self.listener = listener
        self.files: dict[str, FileEntry] = {}
        self.settings = TrackerSettings()
        self.open_in_leaf: set[str] = set()
        self._lock = threading.RLock()
        # One writer at a time: the timer thread and flush()/handleDelete() share the tmp file
        self._save_lock = threading.Lock()
        self._debouncer = Debouncer(self.persist, debounce_seconds)

    # ── Data I/O ─────────────────────────────────────────────

    def load(self) -> None:
        raw = self.store.load() if self.store else None
        data = parsePersisted(raw)
        with self._lock:
            self.files = data.files
            self.settings = data.settings
        logger.info("Loaded %d tracked entries", len(self.files))

    def snapshot(self) -> PersistedData:
        with self._lock:
            return PersistedData(
                files={p: e.model_copy() for p, e in self.files.items()},
                settings=self.settings.model_copy(),
            )

    def persist(self) -> None:
        """Write current state now."""
        if self.store is None:
            return
        with self._save_lock:
            payload = self.snapshot().model_dump(by_alias=True)
            self.store.save(payload)
        logger.debug("Saved %d entries to %s", len(payload["files"]), self.store.path)

    def flush(self) -> None:
        """Run a pending debounced save, if any."""
        self._debouncer.flush()

    def _schedulePersist(self) -> None:
        self._debouncer.schedule()

    def _persistNow(self) -> None:
        # Supersedes any pending debounced save
        self._debouncer.cancel()
        self.persist()

    def _refresh(self) -> None:
        if self.listener is not None:
            self.listener.refresh()

    # ── Visit tracking ───────────────────────────────────────

    def recordVisit(self, path: str, now: int | None = None) -> bool:
        """Apply an activation of ``path``. Returns True if it counted as a visit."""
        ts = self.clock() if now is None else now
        with self._lock:
            was_open = path in self.open_in_leaf
            # Mark open regardless, so a later tab switch is recognised
            self.open_in_leaf.add(path)

            if not self.settings.record_on_every_visit and was_open:
                logger.debug("Tab switch to %s, not counted", path)
                return False

            entry = self.files.get(path)
            if entry is not None:
                entry.score += 1
                entry.last_access = max(entry.last_access, ts)
            else:
                self.files[path] = FileEntry(score=1, last_access=ts)
            applyAging(self.files, self.settings.max_age)

        self._schedulePersist()
        self._refresh()
        return True

    def handleRename(self, old_path: str, new_path: str, now: int | None = None) -> None:
        """Move or merge old_path's record. ``now`` is unused; rename keeps last_access."""
        with self._lock:
            entry = self.files.get(old_path)
            if entry is None:
                return
            target = self.files.get(new_path)
            if target is not None and new_path != old_path:
                self.files[new_path] = FileEntry(
                    score=target.score + entry.score,
                    last_access=max(target.last_access, entry.last_access),
                )
            else:
                self.files[new_path] = entry.model_copy()
            if new_path != old_path:
                del self.files[old_path]

            if old_path in self.open_in_leaf:
                self.open_in_leaf.discard(old_path)
                self.open_in_leaf.add(new_path)

        self._schedulePersist()
        # Relabel before redraw so no observer renders a stale path
        if self.listener is not None:
            self.listener.renamed(old_path, new_path)
        self._refresh()

    def handleDelete(self, path: str) -> None:
        with self._lock:
            if path not in self.files:
                return
            del self.files[path]
            self.open_in_leaf.discard(path)
        self._persistNow()
        self._refresh()

    def removeEntry(self, path: str) -> None:
        """Drop ``path`` from the list without implying the note was deleted."""
        with self._lock:
            if self.files.pop(path, None) is None:
                return
        self._schedulePersist()
        self._refresh()

    def clearAll(self) -> None:
        with self._lock:
            self.files = {}
        self._schedulePersist()
        self._refresh()

    # ── Open-set bookkeeping ─────────────────────────────────

    def syncOpenPaths(self, paths: Iterable[str]) -> None:
        """Replace the open-set with the host's current snapshot."""
        with self._lock:
            self.open_in_leaf = set(paths)

    def markClosed(self, path: str) -> None:
        with self._lock:
            self.open_in_leaf.discard(path)

    # ── Settings ─────────────────────────────────────────────

    def updateSettings(self, **changes: Any) -> TrackerSettings:
        """Validate and apply settings changes. A new max_age ages immediately.

        Raises pydantic.ValidationError on invalid values; nothing is applied then.
        """
        with self._lock:
            merged = {**self.settings.model_dump(), **changes}
            settings = TrackerSettings.model_validate(merged)
            self.settings = settings
            if "max_age" in changes:
                applyAging(self.files, settings.max_age)
        self._schedulePersist()
        self._refresh()
        return settings

    def agingPreview(self, max_age: float) -> int:
        with self._lock:
            return agingPreview(self.files, max_age)

    # ── Queries ──────────────────────────────────────────────

    def totalScore(self) -> float:
        with self._lock:
            return totalScore(self.files)

    def rankedEntries(self, limit: int | None = None, now: int | None = None) -> list[RankedEntry]:
        ts = self.clock() if now is None else now
        with self._lock:
            return rankedEntries(self.files, self.settings, ts, limit=limit)

    def allEntries(self, now: int | None = None) -> list[RankedEntry]:
        ts = self.clock() if now is None else now
        with self._lock:
            return sortedEntries(self.files, self.settings.exclude_paths, ts)

    def search(
        self, query: str, limit: int | None = None, now: int | None = None
    ) -> list[RankedEntry]:
        ts = self.clock() if now is None else now
        with self._lock:
            return searchEntries(self.files, self.settings, query, ts, limit=limit)
