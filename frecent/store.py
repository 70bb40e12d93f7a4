"""JSON blob persistence and trailing-edge save debouncing."""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

logger = logging.getLogger("frecent")


class JsonStore:
    """Load/save one JSON document. Writes go through a temp file + rename."""

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def load(self) -> Any | None:
        """Return the decoded document, or None if missing or unreadable."""
        if not self.path.exists():
            return None
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s, starting empty: %s", self.path, e)
            return None

    def save(self, data: Any) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        tmp.replace(self.path)


class Debouncer:
    """Run fn once, `delay` seconds after the last schedule() call.

    A single pending timer is kept; each schedule() replaces it, so a burst of
    calls collapses into one trailing call that sees the latest state.
    """

    def __init__(self, fn: Callable[[], None], delay: float):
        self._fn = fn
        self._delay = delay
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def schedule(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def flush(self) -> None:
        """Run a pending call now, on the calling thread."""
        with self._lock:
            if self._timer is None:
                return
            self._timer.cancel()
            self._timer = None
        self._fn()

    def _fire(self) -> None:
        with self._lock:
            if self._timer is None or self._timer is not threading.current_thread():
                # Superseded by a newer schedule() or already flushed
                return
            self._timer = None
        try:
            self._fn()
        except Exception:
            logger.exception("Debounced save failed")
