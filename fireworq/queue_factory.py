"""Selects a job queue driver from the configuration."""

from __future__ import annotations

import logging
from typing import Callable

from fireworq import config, jobqueue
from fireworq.inmemory import InMemoryJobQueue
from fireworq.jobqueue import Impl, JobQueue
from fireworq.model import Queue

_log = logging.getLogger(__name__)


class UnknownDriverError(ValueError):
    """Raised when the configured driver is not available."""


_DRIVERS: dict[str, Callable[[Queue], Impl]] = {
    "in-memory": lambda definition: InMemoryJobQueue(),
}


def new_impl(definition: Queue) -> Impl:
    """Create a driver for ``definition`` according to the ``driver`` setting."""
    driver = config.get("driver")
    factory = _DRIVERS.get(driver)
    if factory is None:
        raise UnknownDriverError(f"Unknown driver: {driver}")
    _log.info("Select %s as a driver for a job queue (queue=%s)", driver, definition.name)
    return factory(definition)


def start(definition: Queue) -> JobQueue:
    """Create and start a job queue using the configured driver."""
    return jobqueue.start(definition, new_impl(definition))