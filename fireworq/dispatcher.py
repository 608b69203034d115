"""Dispatchers pop jobs from a queue and hand them to workers."""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Protocol

from fireworq.jobqueue import ConnectionClosedError, InactiveError
from fireworq.kicker import Kicker, KickerConfig, PollingKicker
from fireworq.model import Queue
from fireworq.result import Result
from fireworq.worker import HTTPWorker, Worker, WorkerConfig, http_init

_log = logging.getLogger(__name__)

DEFAULT_MIN_BUFFER_SIZE = 1000


def init() -> None:
    """Configure dispatchers from the ``dispatch_*`` settings."""
    http_init()


class DispatchableQueue(Protocol):
    """A queue that a dispatcher can watch."""

    name: str

    def pop(self, limit: int) -> list[Any]: ...

    def complete(self, job: Any, result: Result) -> None: ...


@dataclass(frozen=True)
class DispatcherStats:
    """Statistics of a dispatcher."""

    outstanding_jobs: int = 0
    total_workers: int = 0
    idle_workers: int = 0


class Dispatcher:
    """Pops jobs from a queue when kicked and runs them on workers."""

    def __init__(
        self,
        queue: DispatchableQueue,
        kicker: Kicker,
        worker: Worker,
        buffer_size: int,
        max_workers: int,
    ) -> None:
        self._queue = queue
        self._kicker = kicker
        self._worker = worker
        self._buffer_size = buffer_size
        self._max_workers = max_workers
        self._buffer: deque[Any] = deque()
        self._cond = threading.Condition()
        self._slots = threading.Semaphore(max_workers)
        self._running = 0
        self._stopping = False
        self._pop_lock = threading.Lock()
        self._stop_lock = threading.Lock()
        self._stopped = False
        self._loop_thread = threading.Thread(
            target=self._loop, name=f"dispatcher-{queue.name}", daemon=True
        )

    def _start(self) -> None:
        self._loop_thread.start()
        try:
            self._kicker.start(self)
        except BaseException:
            with self._cond:
                self._stopping = True
                self._cond.notify_all()
            self._loop_thread.join()
            raise

    def kick(self) -> None:
        """Fill the job buffer from the queue."""
        with self._pop_lock:
            with self._cond:
                if self._stopping:
                    return
                requested = self._buffer_size - len(self._buffer)
            if requested <= 0:
                return
            try:
                jobs = list(self._queue.pop(requested))
            except (InactiveError, ConnectionClosedError):
                return
            except Exception as exc:  # a failing store must not kill the dispatcher
                _log.error("Failed to pop jobs: %s (queue=%s)", exc, self._queue.name)
                return
            if len(jobs) > requested:
                _log.error(
                    "The number of popped jobs %d is larger than that of requested jobs %d (queue=%s)",
                    len(jobs),
                    requested,
                    self._queue.name,
                )
                jobs = jobs[:requested]
            with self._cond:
                self._buffer.extend(jobs)
                self._cond.notify_all()

    def ping(self) -> None:
        """Pass a ping on to the kicker."""
        self._kicker.ping()

    def stats(self) -> DispatcherStats:
        """Return the current statistics."""
        with self._cond:
            return DispatcherStats(
                outstanding_jobs=len(self._buffer),
                total_workers=self._max_workers,
                idle_workers=self._max_workers - self._running,
            )

    def polling_interval(self) -> int:
        return self._kicker.polling_interval()

    def max_workers(self) -> int:
        return self._max_workers

    def stop(self) -> None:
        """Stop kicking, wait for running jobs, and return once stopped."""
        with self._stop_lock:
            if self._stopped:
                return
            self._stopped = True
            self._kicker.stop()
            with self._cond:
                self._stopping = True
                self._cond.notify_all()
            self._loop_thread.join()

    def _loop(self) -> None:
        while True:
            with self._cond:
                while not self._buffer and not self._stopping:
                    self._cond.wait()
                if self._stopping:
                    break
                job = self._buffer.popleft()
            self._slots.acquire()
            with self._cond:
                self._running += 1
            threading.Thread(target=self._run, args=(job,), daemon=True).start()

        with self._cond:
            while self._running:
                self._cond.wait()

    def _run(self, job: Any) -> None:
        try:
            result = self._worker.work(job)
            self._queue.complete(job, result)
        finally:
            self._slots.release()
            with self._cond:
                self._running -= 1
                self._cond.notify_all()


@dataclass
class Config:
    """Settings for creating a dispatcher; ``None`` means the default."""

    min_buffer_size: int = 0
    kicker: KickerConfig | None = None
    worker: WorkerConfig | None = None

    def start(self, queue: DispatchableQueue, definition: Queue) -> Dispatcher:
        """Create and start a dispatcher watching ``queue``."""
        buffer_size = self.min_buffer_size or DEFAULT_MIN_BUFFER_SIZE
        buffer_size = max(buffer_size, definition.max_workers)

        kicker_config = self.kicker
        if kicker_config is None:
            kicker_config = PollingKicker(interval=definition.polling_interval)

        worker_config = self.worker
        if worker_config is None:
            worker_config = HTTPWorker(logger=logging.getLogger(f"{__name__}.worker"))

        dispatcher = Dispatcher(
            queue,
            kicker_config.new_kicker(),
            worker_config.new_worker(),
            buffer_size,
            definition.max_workers,
        )
        dispatcher._start()
        return dispatcher


def start(queue: DispatchableQueue, definition: Queue) -> Dispatcher:
    """Create and start a dispatcher with the default settings."""
    return Config().start(queue, definition)