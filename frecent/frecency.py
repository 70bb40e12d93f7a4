"""Frecency scoring and aging, modelled on zoxide's ranking.

Frecency weights the stored base score by how recently the entry was visited:

    Last access           | Multiplier
    ----------------------|-----------
    Within the last hour  |  x 4
    Within the last day   |  x 2
    Within the last week  |  / 2
    Otherwise             |  / 4

Aging keeps the sum of all base scores under a ceiling (``max_age``). Once the
total goes over it, every score is scaled by ``max_age / total`` so relative
ranking survives, and entries that drop below 1 are pruned.
"""

from __future__ import annotations

import math
import time
from collections.abc import Mapping, MutableMapping

from frecent.models import FileEntry

HOUR = 60 * 60 * 1000
DAY = 24 * HOUR
WEEK = 7 * DAY

PRUNE_THRESHOLD = 1.0


def nowMs() -> int:
    """Current wall-clock time in ms since the epoch."""
    return int(time.time() * 1000)


def frecency(entry: FileEntry, now: int) -> float:
    """Recency-weighted score. Never mutates the entry."""
    # Clock skew can put last_access in the future; count it as just visited.
    elapsed = max(0, now - entry.last_access)

    if elapsed < HOUR:
        return entry.score * 4
    if elapsed < DAY:
        return entry.score * 2
    if elapsed < WEEK:
        return entry.score / 2
    return entry.score / 4


def totalScore(files: Mapping[str, FileEntry]) -> float:
    return sum(e.score for e in files.values())


def _agingScale(files: Mapping[str, FileEntry], max_age: float) -> float | None:
    """Factor aging multiplies every score by, or None when aging is a no-op.

    Starts at ``max_age / total`` and steps down one ulp at a time until the
    surviving scaled scores sum to at most ``max_age`` in float arithmetic.
    """
    if not math.isfinite(max_age) or max_age <= 0:
        return None
    total = totalScore(files)
    if total <= max_age:
        return None

    scale = max_age / total
    while sum(s for e in files.values() if (s := e.score * scale) >= PRUNE_THRESHOLD) > max_age:
        scale = math.nextafter(scale, 0)
    return scale


def applyAging(files: MutableMapping[str, FileEntry], max_age: float) -> None:
    """Scale all scores down proportionally when their sum exceeds max_age.

    Mutates ``files`` in place. Entries whose scaled score falls below
    PRUNE_THRESHOLD are deleted. A ceiling <= 0, or one that is not finite,
    disables aging.
    """
    scale = _agingScale(files, max_age)
    if scale is None:
        return
    for path in list(files):
        entry = files[path]
        entry.score *= scale
        if entry.score < PRUNE_THRESHOLD:
            del files[path]


def agingPreview(files: Mapping[str, FileEntry], max_age: float) -> int:
    """Number of entries that aging down to max_age would prune."""
    scale = _agingScale(files, max_age)
    if scale is None:
        return 0
    return sum(1 for e in files.values() if e.score * scale < PRUNE_THRESHOLD)
