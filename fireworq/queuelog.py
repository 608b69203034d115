"""Structured, one-JSON-object-per-line log of job queue actions."""

from __future__ import annotations

import json
import sys
import threading
import time
from typing import Protocol

from fireworq import config
from fireworq.loglevel import Level, parse_level
from fireworq.logwriter import Writer, open_file


class LoggableJob(Protocol):
    """Fields of a job that are written to the queue log."""

    def category(self) -> str: ...

    def url(self) -> str: ...

    def payload(self) -> str: ...

    def id(self) -> int: ...

    def status(self) -> str: ...

    def next_try(self) -> int: ...

    def retry_count(self) -> int: ...

    def retry_delay(self) -> int: ...

    def fail_count(self) -> int: ...

    def timeout(self) -> int: ...

    def created_at(self) -> int: ...


class _State:
    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.writer: Writer = Writer(sys.stdout)
        self.tag = ""
        self.level: Level | None = None  # None: discard everything


_state = _State()


def init() -> None:
    """Configure the queue log from the ``queue_log_*`` settings."""
    tag = config.get("queue_log_tag")
    output = config.get("queue_log")
    new_writer = open_file(output) if output else None
    level = parse_level(config.get("queue_log_level"), Level.INFO)
    with _state.lock:
        if new_writer is not None:
            _state.writer = new_writer
        _state.tag = tag
        _state.level = level


def writer() -> Writer:
    """Return the writer that queue log entries go to."""
    return _state.writer


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def elapsed(job: LoggableJob) -> int:
    """Return milliseconds passed since the job was created."""
    return _now_ms() - int(job.created_at())


def _put(level: Level, queue: str, action: str, job: LoggableJob, msg: str) -> None:
    with _state.lock:
        threshold = _state.level
        tag = _state.tag
        out = _state.writer
    if threshold is None or level < threshold:
        return

    created = int(job.created_at())
    spent = elapsed(job)
    entry = {
        "level": level.label,
        "time": created + spent,
        "tag": tag,
        "action": action,
        "queue": queue,
        "category": job.category(),
        "id": job.id(),
        "status": job.status(),
        "created_at": created,
        "elapsed": spent,
        "url": job.url(),
        "payload": job.payload(),
        "next_try": job.next_try(),
        "retry_count": job.retry_count(),
        "retry_delay": job.retry_delay(),
        "fail_count": job.fail_count(),
        "timeout": job.timeout(),
    }
    if msg:
        entry["message"] = msg
    line = json.dumps(entry, ensure_ascii=False, separators=(",", ":")) + "\n"
    out.write(line.encode("utf-8"))


def info(queue: str, action: str, job: LoggableJob, msg: str) -> None:
    """Write an info-level entry about a job action."""
    _put(Level.INFO, queue, action, job, msg)


def debug(queue: str, action: str, job: LoggableJob, msg: str) -> None:
    """Write a debug-level entry about a job action."""
    _put(Level.DEBUG, queue, action, job, msg)