"""Job interfaces, retry bookkeeping and inspection records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Protocol

from fireworq.queuelog import LoggableJob
from fireworq.result import Result


class IncomingJob(Protocol):
    """A job as submitted to a queue."""

    def category(self) -> str: ...

    def url(self) -> str: ...

    def payload(self) -> str: ...

    def next_delay(self) -> int:
        """Delay before the first try, in milliseconds."""
        ...

    def timeout(self) -> int:
        """Request timeout, in seconds."""
        ...

    def retry_delay(self) -> int:
        """Delay between tries, in seconds."""
        ...

    def retry_count(self) -> int: ...


class Job(Protocol):
    """A job held by a queue."""

    def url(self) -> str: ...

    def payload(self) -> str: ...

    def timeout(self) -> int: ...

    def retry_count(self) -> int: ...

    def retry_delay(self) -> int: ...

    def fail_count(self) -> int: ...

    def to_loggable(self) -> LoggableJob: ...


@dataclass
class _LoggableCompletedJob:
    inner: Any
    final_status: str
    total_failures: int

    def __getattr__(self, name: str) -> Any:
        if name == "inner" or name.startswith("__"):
            raise AttributeError(name)
        return getattr(self.inner, name)

    def status(self) -> str:
        return self.final_status

    def fail_count(self) -> int:
        return self.total_failures


@dataclass
class CompletedJob:
    """A job that has just been worked on; ``failed`` is 1 if it failed."""

    job: Any
    failed: int = 0

    def __getattr__(self, name: str) -> Any:
        if name == "job" or name.startswith("__"):
            raise AttributeError(name)
        return getattr(self.job, name)

    def fail_count(self) -> int:
        """Return the failures so far, including this attempt."""
        return self.job.fail_count() + self.failed

    def status(self) -> str:
        """Return ``completed`` or ``failed``."""
        return "completed" if self.failed == 0 else "failed"

    def to_loggable(self) -> LoggableJob:
        """Return the job's loggable view with the outcome applied."""
        return _LoggableCompletedJob(self.job.to_loggable(), self.status(), self.fail_count())

    def can_retry(self) -> bool:
        """Return whether any retries remain."""
        return self.job.retry_count() > 0


@dataclass
class NextJob:
    """Scheduling information for the next try of a failed job."""

    job: Any

    def next_delay(self) -> int:
        """Return the delay before the next try, in milliseconds."""
        return self.job.retry_delay() * 1000

    def retry_count(self) -> int:
        """Return the retries left after this one."""
        return self.job.retry_count() - 1

    def fail_count(self) -> int:
        return self.job.fail_count()


@dataclass(frozen=True)
class Node:
    """An active queue node."""

    id: str
    host: str


class SortOrder(IntEnum):
    """Order of inspected job listings."""

    ASC = 0
    DESC = 1


@dataclass
class InspectedJob:
    """A job as seen by an inspector."""

    id: int
    category: str
    url: str
    payload: Any
    status: str
    created_at: datetime
    next_try: datetime
    timeout: int = 0
    fail_count: int = 0
    max_retries: int = 0
    retry_delay: int = 0


@dataclass
class InspectedJobs:
    """A page of inspected jobs."""

    jobs: list[InspectedJob] = field(default_factory=list)
    next_cursor: str = ""


@dataclass
class FailedJob:
    """A job that failed permanently."""

    id: int
    job_id: int
    category: str
    url: str
    payload: Any
    result: Result | None
    fail_count: int
    failed_at: datetime
    created_at: datetime


@dataclass
class FailedJobs:
    """A page of failed jobs."""

    failed_jobs: list[FailedJob] = field(default_factory=list)
    next_cursor: str = ""


class Inspector(Protocol):
    """Looks into the jobs of a queue."""

    def delete(self, job_id: int) -> None: ...

    def find(self, job_id: int) -> InspectedJob: ...

    def find_all_grabbed(self, limit: int, cursor: str, order: SortOrder) -> InspectedJobs: ...

    def find_all_waiting(self, limit: int, cursor: str, order: SortOrder) -> InspectedJobs: ...

    def find_all_deferred(self, limit: int, cursor: str, order: SortOrder) -> InspectedJobs: ...


class FailureLog(Protocol):
    """Records and lists permanently failed jobs of a queue."""

    def add(self, failed: Job, result: Result) -> None: ...

    def delete(self, failure_id: int) -> None: ...

    def find(self, failure_id: int) -> FailedJob: ...

    def find_all(self, limit: int, cursor: str) -> FailedJobs: ...

    def find_all_recent_failures(self, limit: int, cursor: str) -> FailedJobs: ...