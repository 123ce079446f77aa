"""
In-process counters and latency timings.

A Metrics instance belongs to whoever creates it (the API app or a
CLI run) and is handed to the fetcher, analyzer and routes that record
into it. ``GET /api/metrics`` serves its snapshot.
"""

import threading
import time
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

# Counter names
PAGES_ANALYZED = "pages_analyzed"
PAGES_FETCHED = "pages_fetched"
FETCH_FAILURES = "fetch_failures"
CAPTURES_STORED = "captures_stored"
TASKS_CREATED = "tasks_created"
TASKS_UPDATED = "tasks_updated"
TASKS_DELETED = "tasks_deleted"

# Timing names
ANALYSIS_LATENCY_MS = "analysis_latency_ms"
FETCH_LATENCY_MS = "fetch_latency_ms"


@dataclass
class TimingStats:
    """Running aggregate of durations in milliseconds."""

    count: int = 0
    total_ms: float = 0.0
    min_ms: float | None = None
    max_ms: float = 0.0

    @property
    def avg_ms(self) -> float:
        if not self.count:
            return 0.0
        return self.total_ms / self.count

    def add(self, duration_ms: float) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.max_ms = max(self.max_ms, duration_ms)
        self.min_ms = duration_ms if self.min_ms is None else min(self.min_ms, duration_ms)

    def to_dict(self) -> dict[str, float]:
        return {
            "count": self.count,
            "avg_ms": round(self.avg_ms, 2),
            "min_ms": round(self.min_ms or 0.0, 2),
            "max_ms": round(self.max_ms, 2),
            "total_ms": round(self.total_ms, 2),
        }


class Metrics:
    """
    Thread-safe counters and timings.

    Example:
        >>> metrics = Metrics()
        >>> with metrics.timer(ANALYSIS_LATENCY_MS):
        ...     insight = analyzer.analyze(html)
        >>> metrics.increment(PAGES_ANALYZED)
        >>> metrics.snapshot()["counters"]
        {'pages_analyzed': 1}
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: Counter[str] = Counter()
        self._timings: dict[str, TimingStats] = {}

    def increment(self, name: str, value: int = 1) -> int:
        """Add to a counter and return its new value."""
        with self._lock:
            self._counters[name] += value
            return self._counters[name]

    def get_counter(self, name: str) -> int:
        with self._lock:
            return self._counters[name]

    def observe(self, name: str, duration_ms: float) -> None:
        with self._lock:
            self._timings.setdefault(name, TimingStats()).add(duration_ms)

    def get_timing(self, name: str) -> TimingStats | None:
        """Return a copy of a timing aggregate, or None if never observed."""
        with self._lock:
            stats = self._timings.get(name)
            if stats is None:
                return None
            return TimingStats(stats.count, stats.total_ms, stats.min_ms, stats.max_ms)

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        """Observe the wall time of the enclosed block, including when it raises."""
        started = time.perf_counter()
        try:
            yield
        finally:
            self.observe(name, (time.perf_counter() - started) * 1000)

    def snapshot(self) -> dict:
        """Plain-dict view of every counter and timing."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "timings": {name: stats.to_dict() for name, stats in self._timings.items()},
            }
