"""Queue statistics counters."""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable


class RateCounter:
    """Counts events that happened within a sliding time window."""

    def __init__(self, interval: float = 1.0, clock: Callable[[], float] = time.monotonic) -> None:
        self._interval = interval
        self._clock = clock
        self._events: deque[tuple[float, int]] = deque()
        self._total = 0
        self._lock = threading.Lock()

    def _expire(self, now: float) -> None:
        while self._events and now - self._events[0][0] >= self._interval:
            _, n = self._events.popleft()
            self._total -= n

    def incr(self, n: int) -> None:
        """Record ``n`` events now."""
        with self._lock:
            now = self._clock()
            self._expire(now)
            self._events.append((now, n))
            self._total += n

    def rate(self) -> int:
        """Return the number of events within the window."""
        with self._lock:
            self._expire(self._clock())
            return self._total


@dataclass
class Stats:
    """A snapshot of queue statistics."""

    total_pushes: int = 0
    total_pops: int = 0
    total_successes: int = 0
    total_failures: int = 0
    total_permanent_failures: int = 0
    total_completes: int = 0
    total_elapsed: int = 0
    pushes_per_second: int = 0
    pops_per_second: int = 0


class StatsCounter:
    """Thread-safe accumulator of queue statistics."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = threading.Lock()
        self._totals = Stats()
        self._pushes = RateCounter(1.0, clock)
        self._pops = RateCounter(1.0, clock)

    def push(self, n: int) -> None:
        with self._lock:
            self._totals.total_pushes += n
        self._pushes.incr(n)

    def pop(self, n: int) -> None:
        with self._lock:
            self._totals.total_pops += n
        self._pops.incr(n)

    def succeed(self, n: int) -> None:
        with self._lock:
            self._totals.total_successes += n

    def fail(self, n: int) -> None:
        with self._lock:
            self._totals.total_failures += n

    def permanently_fail(self, n: int) -> None:
        with self._lock:
            self._totals.total_permanent_failures += n

    def complete(self, n: int) -> None:
        with self._lock:
            self._totals.total_completes += n

    def elapsed(self, ms: int) -> None:
        with self._lock:
            self._totals.total_elapsed += ms

    def export(self) -> Stats:
        """Return a snapshot of the current statistics."""
        with self._lock:
            t = self._totals
            return Stats(
                total_pushes=t.total_pushes,
                total_pops=t.total_pops,
                total_successes=t.total_successes,
                total_failures=t.total_failures,
                total_permanent_failures=t.total_permanent_failures,
                total_completes=t.total_completes,
                total_elapsed=t.total_elapsed,
                pushes_per_second=self._pushes.rate(),
                pops_per_second=self._pops.rate(),
            )