"""Application state container — singleton shared by the HTTP API and CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from frecent.config import FrecentConfig, loadConfig
from frecent.store import JsonStore
from frecent.tracker import TrackerListener, VisitTracker

logger = logging.getLogger("frecent")

DEFAULT_PORT = 7717

# ── Singleton ────────────────────────────────────────────────

_state: AppState | None = None


@dataclass(frozen=True)
class AppState:
    tracker: VisitTracker
    config: FrecentConfig
    port: int = field(default=DEFAULT_PORT)


def getState() -> AppState:
    """Return current state or raise if not initialised."""
    assert _state is not None, "AppState not initialized — call initState() first"
    return _state


def isInitialized() -> bool:
    return _state is not None


def initState(
    config: FrecentConfig | None = None,
    port: int | None = None,
) -> AppState:
    """Create + store singleton."""
    global _state
    _state = createAppState(config=config, port=port)
    return _state


def closeState() -> None:
    """Write out any pending save and clear global."""
    global _state
    if _state is not None:
        _state.tracker.flush()
    _state = None
    logger.info("frecent shut down.")


def setState(s: AppState | None) -> None:
    """Inject state directly (for tests)."""
    global _state
    _state = s


def createAppState(
    config: FrecentConfig | None = None,
    port: int | None = None,
    listener: TrackerListener | None = None,
) -> AppState:
    """Create AppState — loads config, opens the data file, loads records."""
    cfg = config or loadConfig()
    tracker = VisitTracker(
        store=JsonStore(cfg.data_path),
        debounce_seconds=cfg.debounce_seconds,
        listener=listener,
    )
    tracker.load()
    p = port or cfg.port
    logger.info("frecent starting — data: %s, port: %d", cfg.data_path, p)
    return AppState(tracker=tracker, config=cfg, port=p)
