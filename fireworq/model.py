"""Queue and routing definitions."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Queue:
    """A queue definition."""

    name: str
    polling_interval: int = 0
    max_workers: int = 0


@dataclass(frozen=True)
class Routing:
    """A mapping from a job category to a queue."""

    queue_name: str
    job_category: str