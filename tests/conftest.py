"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from frecent.config import FrecentConfig
from frecent.store import JsonStore
from frecent.tracker import VisitTracker

NOW = 1_700_000_000_000


class FakeClock:
    """Settable millisecond clock."""

    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class RecordingListener:
    """Listener that records notifications in call order."""

    def __init__(self):
        self.calls: list[tuple] = []

    def refresh(self) -> None:
        self.calls.append(("refresh",))

    def renamed(self, old_path: str, new_path: str) -> None:
        self.calls.append(("renamed", old_path, new_path))


@pytest.fixture
def data_path(tmp_path: Path) -> Path:
    return tmp_path / "data.json"


@pytest.fixture
def config(data_path: Path) -> FrecentConfig:
    return FrecentConfig(data_path=str(data_path), debounce_seconds=0.01)


@pytest.fixture
def store(data_path: Path) -> JsonStore:
    return JsonStore(data_path)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def tracker(store: JsonStore, clock: FakeClock, listener: RecordingListener) -> VisitTracker:
    t = VisitTracker(store=store, debounce_seconds=60, clock=clock, listener=listener)
    yield t
    # Never let a pending timer outlive the test
    t._debouncer.cancel()
