"""Job queues: statistics, logging and retry handling around a storage driver."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from fireworq import queuelog
from fireworq.job import CompletedJob, FailureLog, IncomingJob, Inspector, Job, NextJob, Node
from fireworq.model import Queue
from fireworq.result import Result
from fireworq.stats import Stats, StatsCounter

_log = logging.getLogger(__name__)


class InactiveError(Exception):
    """Raised when jobs are popped from a queue that is not active."""

    def __init__(self, message: str = "queue is not active") -> None:
        super().__init__(message)


class ConnectionClosedError(Exception):
    """Raised when jobs are popped but the connection to the store is lost."""

    def __init__(self, message: str = "connection has been closed") -> None:
        super().__init__(message)


class Impl(Protocol):
    """A storage driver of a job queue."""

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def push(self, job: IncomingJob) -> Job: ...

    def pop(self, limit: int) -> list[Job]: ...

    def delete(self, job: Job) -> None: ...

    def update(self, job: Job, next_info: NextJob) -> None: ...

    def is_active(self) -> bool: ...


class JobQueue:
    """A named job queue backed by a storage driver."""

    def __init__(self, definition: Queue, impl: Impl) -> None:
        self.name = definition.name
        self.max_workers = definition.max_workers
        self._impl = impl
        self._stats = StatsCounter()

    def stop(self) -> None:
        """Stop the underlying driver, returning once it has stopped."""
        self._impl.stop()

    def push(self, job: IncomingJob) -> int:
        """Store a new job and return its ID."""
        stored = self._impl.push(job)
        self._stats.push(1)
        loggable = stored.to_loggable()
        queuelog.info(self.name, "push", loggable, "New job accepted")
        return loggable.id()

    def pop(self, limit: int) -> list[Job]:
        """Take at most ``limit`` jobs that are ready to run."""
        results = self._impl.pop(limit)
        self._stats.pop(len(results))
        for job in results:
            queuelog.debug(self.name, "pop", job.to_loggable(), "A job grabbed")
        return results

    def complete(self, job: Job, result: Result) -> None:
        """Record the result of a job, deleting or rescheduling it."""
        completed = CompletedJob(job, 0 if result.is_success() else 1)
        loggable = completed.to_loggable()

        if result.is_success():
            queuelog.info(self.name, "complete", loggable, result.message)
            self._stats.succeed(1)
            self._stats.complete(1)
            self._stats.elapsed(queuelog.elapsed(loggable))
            self._impl.delete(job)
        elif result.is_permanent_failure() or not completed.can_retry():
            queuelog.info(self.name, "complete", loggable, result.message)
            self._stats.fail(1)
            self._stats.permanently_fail(1)
            self._stats.complete(1)
            self._stats.elapsed(queuelog.elapsed(loggable))
            failure_log = self.failure_log()
            if failure_log is not None:
                try:
                    failure_log.add(job, result)
                except Exception as exc:  # a broken failure log must not lose the job state
                    _log.warning("%s", exc)
            self._impl.delete(job)
        else:
            queuelog.info(self.name, "retry", loggable, result.message)
            self._stats.fail(1)
            self._impl.update(job, NextJob(completed))

    def is_active(self) -> bool:
        """Return whether this node may pop jobs."""
        return self._impl.is_active()

    def node(self) -> Node | None:
        """Return the active node, if the driver knows it."""
        return self._call_optional("node")

    def stats(self) -> Stats:
        """Return a snapshot of the queue statistics."""
        return self._stats.export()

    def inspector(self) -> Inspector | None:
        """Return the driver's inspector, if it has one."""
        return self._call_optional("inspector")

    def failure_log(self) -> FailureLog | None:
        """Return the driver's failure log, if it has one."""
        return self._call_optional("failure_log")

    def _call_optional(self, method: str) -> Any:
        func = getattr(self._impl, method, None)
        return func() if callable(func) else None


def start(definition: Queue, impl: Impl) -> JobQueue:
    """Create a job queue over ``impl`` and start the driver."""
    queue = JobQueue(definition, impl)
    impl.start()
    return queue