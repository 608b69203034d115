"""Kickers decide when a dispatcher looks for new jobs."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Protocol

_log = logging.getLogger(__name__)


class Kickable(Protocol):
    """Something that can be kicked."""

    def kick(self) -> None: ...


class Kicker(Protocol):
    """Controls how often a kickable object is kicked."""

    def start(self, kickable: Kickable) -> None: ...

    def stop(self) -> None: ...

    def ping(self) -> None: ...

    def polling_interval(self) -> int: ...


class KickerConfig(Protocol):
    """Builds kickers."""

    def new_kicker(self) -> Kicker: ...


@dataclass(frozen=True)
class PollingKicker:
    """Builds kickers that kick repeatedly every ``interval`` milliseconds."""

    interval: int = 0

    def new_kicker(self) -> Kicker:
        """Create a new, not yet started, polling kicker."""
        _log.debug("Polling interval: %d", self.interval)
        return _PollingKicker(self.interval)


class _PollingKicker:
    def __init__(self, interval: int) -> None:
        self._interval = interval
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._pings = 0

    def start(self, kickable: Kickable) -> None:
        if self._interval <= 0:
            raise ValueError(f"polling interval must be positive: {self._interval}")
        with self._lock:
            if self._thread is not None:
                raise RuntimeError("the kicker has already been started")
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._loop, args=(kickable,), name="polling-kicker", daemon=True
            )
            self._thread.start()

    def stop(self) -> None:
        """Stop kicking and return once the loop has ended."""
        self._stop.set()
        with self._lock:
            thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def ping(self) -> None:
        """Note a ping; polling still happens on its own schedule."""
        with self._lock:
            self._pings += 1
        _log.debug("Ping ignored by polling kicker (%d so far)", self._pings)

    def polling_interval(self) -> int:
        return self._interval

    def _loop(self, kickable: Kickable) -> None:
        period = self._interval / 1000
        while not self._stop.wait(period):
            kickable.kick()