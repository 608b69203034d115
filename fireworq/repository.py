"""Repositories of queue definitions and routings."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Protocol

from fireworq import config
from fireworq.model import Queue, Routing
from fireworq.queue_factory import UnknownDriverError

_log = logging.getLogger(__name__)


class QueueNotFoundError(LookupError):
    """Raised when a queue that does not exist is referred to."""

    def __init__(self, queue_name: str) -> None:
        super().__init__(f"No such queue: {queue_name}")
        self.queue_name = queue_name


class QueueRepository(Protocol):
    """Stores queue definitions."""

    def add(self, queue: Queue) -> None: ...

    def find_all(self) -> list[Queue]: ...

    def find_by_name(self, name: str) -> Queue: ...

    def delete_by_name(self, name: str) -> None: ...

    def revision(self) -> int: ...


class RoutingRepository(Protocol):
    """Stores routings from job categories to queues."""

    def add(self, job_category: str, queue_name: str) -> None: ...

    def find_all(self) -> list[Routing]: ...

    def find_queue_name_by_job_category(self, category: str) -> str: ...

    def delete_by_job_category(self, category: str) -> None: ...

    def revision(self) -> int: ...

    def reload(self) -> None: ...


@dataclass
class Repositories:
    """A queue repository and a routing repository."""

    queue: QueueRepository
    routing: RoutingRepository


@dataclass
class _Store:
    lock: threading.Lock = field(default_factory=threading.Lock)
    items: dict = field(default_factory=dict)


_queue_store = _Store()
_routing_store = _Store()


class InMemoryQueueRepository:
    """Queue definitions held in memory, shared by default across instances."""

    def __init__(self, store: _Store | None = None) -> None:
        self._store = store if store is not None else _queue_store

    def add(self, queue: Queue) -> None:
        with self._store.lock:
            self._store.items[queue.name] = queue

    def find_all(self) -> list[Queue]:
        with self._store.lock:
            return sorted(self._store.items.values(), key=lambda q: q.name)

    def find_by_name(self, name: str) -> Queue:
        with self._store.lock:
            try:
                return self._store.items[name]
            except KeyError:
                raise QueueNotFoundError(name) from None

    def delete_by_name(self, name: str) -> None:
        with self._store.lock:
            self._store.items.pop(name, None)

    def revision(self) -> int:
        return 0


class InMemoryRoutingRepository:
    """Routings held in memory, shared by default across instances."""

    def __init__(self, store: _Store | None = None) -> None:
        self._store = store if store is not None else _routing_store

    def add(self, job_category: str, queue_name: str) -> None:
        with self._store.lock:
            self._store.items[job_category] = queue_name

    def find_all(self) -> list[Routing]:
        with self._store.lock:
            routings = [
                Routing(queue_name=queue, job_category=category)
                for category, queue in self._store.items.items()
            ]
        return sorted(routings, key=lambda r: (r.queue_name, r.job_category))

    def find_queue_name_by_job_category(self, category: str) -> str:
        with self._store.lock:
            return self._store.items.get(category, "")

    def delete_by_job_category(self, category: str) -> None:
        with self._store.lock:
            self._store.items.pop(category, None)

    def revision(self) -> int:
        return 0

    def reload(self) -> None:
        """Rebuild the routing table from the shared store."""
        with self._store.lock:
            self._store.items = dict(self._store.items)


def new_repositories() -> Repositories:
    """Create repositories according to the ``driver`` setting."""
    driver = config.get("driver")
    if driver == "in-memory":
        _log.info("Select in-memory as a driver for repositories")
        return Repositories(queue=InMemoryQueueRepository(), routing=InMemoryRoutingRepository())
    raise UnknownDriverError(f"Unknown driver: {driver}")