"""A job queue driver that keeps jobs in process memory."""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from typing import Any

from fireworq.job import IncomingJob

_id_lock = threading.Lock()
_ids = itertools.count(1)


def _next_id() -> int:
    with _id_lock:
        return next(_ids)


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class InMemoryJob:
    """A job stored by the in-memory driver."""

    def __init__(self, incoming: IncomingJob, job_id: int, created_at: int) -> None:
        self._incoming = incoming
        self._id = job_id
        self._created_at = created_at
        self._next_try = created_at + incoming.next_delay()
        self._retry_count = incoming.retry_count()
        self._fail_count = 0

    def id(self) -> int:
        return self._id

    def created_at(self) -> int:
        return self._created_at

    def status(self) -> str:
        return "claimed"

    def next_try(self) -> int:
        return self._next_try

    def retry_count(self) -> int:
        return self._retry_count

    def fail_count(self) -> int:
        return self._fail_count

    def category(self) -> str:
        return self._incoming.category()

    def url(self) -> str:
        return self._incoming.url()

    def payload(self) -> str:
        return self._incoming.payload()

    def timeout(self) -> int:
        return self._incoming.timeout()

    def retry_delay(self) -> int:
        return self._incoming.retry_delay()

    def to_loggable(self) -> InMemoryJob:
        return self

    def _reschedule(self, next_try: int, retry_count: int, fail_count: int) -> None:
        self._next_try = next_try
        self._retry_count = retry_count
        self._fail_count = fail_count


class InMemoryJobQueue:
    """Keeps jobs in a priority queue ordered by their next try time."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._heap: list[tuple[int, int, InMemoryJob]] = []
        self._seq = itertools.count()
        self._started = False

    def _push(self, job: InMemoryJob) -> None:
        heapq.heappush(self._heap, (job.next_try(), next(self._seq), job))

    def start(self) -> None:
        """Mark the queue as started; it needs no other setup."""
        with self._lock:
            self._started = True

    def stop(self) -> None:
        """Mark the queue as stopped; it stops at once."""
        with self._lock:
            self._started = False

    def push(self, job: IncomingJob) -> InMemoryJob:
        """Store a new job."""
        with self._lock:
            stored = InMemoryJob(job, _next_id(), _now_ms())
            self._push(stored)
            return stored

    def pop(self, limit: int) -> list[InMemoryJob]:
        """Remove and return at most ``limit`` jobs whose time has come."""
        now = _now_ms()
        popped: list[InMemoryJob] = []
        with self._lock:
            while len(popped) < limit and self._heap and self._heap[0][0] <= now:
                popped.append(heapq.heappop(self._heap)[2])
        return popped

    def delete(self, job: Any) -> None:
        """Drop a job from the queue if it is still held there.

        Jobs normally leave the queue when they are popped, so this is
        usually a no-op in effect.
        """
        with self._lock:
            remaining = [entry for entry in self._heap if entry[2] is not job]
            if len(remaining) != len(self._heap):
                heapq.heapify(remaining)
                self._heap = remaining

    def update(self, job: Any, next_info: Any) -> None:
        """Put a failed job back with its retry schedule."""
        if not isinstance(job, InMemoryJob):
            raise TypeError(f"Invalid job structure: {job!r}")
        with self._lock:
            job._reschedule(
                _now_ms() + next_info.next_delay(),
                next_info.retry_count(),
                next_info.fail_count(),
            )
            self._push(job)

    def is_active(self) -> bool:
        return True