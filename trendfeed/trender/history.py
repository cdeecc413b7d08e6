"""Per-title traffic history over a rolling window.

Each trending title keeps a time-ordered list of traffic samples. Samples
older than the window are pruned whenever the title shows up in a fetch
cycle, and titles missing from many consecutive cycles are evicted so the
key space does not grow without bound.
"""

import copy
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List

from trendfeed.core.logging import get_logger
from trendfeed.core.time import hours_between

logger = get_logger(__name__)

DEFAULT_WINDOW_HOURS = 24
DEFAULT_EVICT_AFTER_CYCLES = 96


@dataclass(frozen=True)
class HistorySample:
    """Traffic observed for a title at a point in time."""
    timestamp: datetime
    traffic: float


class HistoryStore:
    """Traffic samples keyed by trend title."""

    def __init__(
        self,
        window_hours: float = DEFAULT_WINDOW_HOURS,
        evict_after_cycles: int = DEFAULT_EVICT_AFTER_CYCLES,
    ):
        self.window = timedelta(hours=window_hours)
        self.evict_after_cycles = evict_after_cycles
        self._samples: Dict[str, List[HistorySample]] = {}
        self._absent_cycles: Dict[str, int] = defaultdict(int)

    def __contains__(self, title: str) -> bool:
        return title in self._samples

    def __len__(self) -> int:
        return len(self._samples)

    def samples(self, title: str) -> List[HistorySample]:
        """Copy of the samples recorded for a title, oldest first."""
        return list(self._samples.get(title, []))

    def record(self, title: str, traffic: float, now: datetime) -> None:
        """Append a sample for title and prune its expired samples."""
        history = self._samples.setdefault(title, [])
        history.append(HistorySample(timestamp=now, traffic=traffic))
        self.prune(title, now)

    def prune(self, title: str, now: datetime) -> None:
        """Keep only samples strictly newer than now minus the window."""
        cutoff = now - self.window
        history = self._samples.get(title)
        if history is None:
            return
        self._samples[title] = [s for s in history if s.timestamp > cutoff]

    def velocity(self, title: str) -> float:
        """
        Traffic change per hour between the two most recent samples.

        Returns 0 with fewer than two samples or when both samples share
        a timestamp.
        """
        history = self._samples.get(title, [])
        if len(history) < 2:
            return 0.0

        previous, latest = history[-2], history[-1]
        elapsed = hours_between(previous.timestamp, latest.timestamp)
        if elapsed == 0:
            return 0.0

        return (latest.traffic - previous.traffic) / elapsed

    def end_cycle(self, seen_titles: Iterable[str]) -> List[str]:
        """
        Track absence of titles after a fetch cycle and evict stale ones.

        Returns the evicted titles. Eviction is disabled when
        ``evict_after_cycles`` is 0.
        """
        seen = set(seen_titles)
        evicted = []

        for title in list(self._samples):
            if title in seen:
                self._absent_cycles.pop(title, None)
                continue

            self._absent_cycles[title] += 1
            if self.evict_after_cycles and self._absent_cycles[title] >= self.evict_after_cycles:
                del self._samples[title]
                del self._absent_cycles[title]
                evicted.append(title)

        if evicted:
            logger.info(f"Evicted {len(evicted)} titles absent for {self.evict_after_cycles} cycles")

        return evicted

    def copy(self) -> "HistoryStore":
        """Independent copy used as a working set during a fetch cycle."""
        return copy.deepcopy(self)

    def replace_with(self, other: "HistoryStore") -> None:
        """Adopt the state of a committed working copy."""
        self._samples = other._samples
        self._absent_cycles = other._absent_cycles
