"""Log levels and their textual and numeric names."""

from __future__ import annotations

from enum import IntEnum


class Level(IntEnum):
    """Severity of a log entry; higher values are more severe."""

    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    FATAL = 4

    @property
    def label(self) -> str:
        """Return the lower-case name used in log output."""
        return self.name.lower()


_NAMES = {
    "0": Level.DEBUG,
    "debug": Level.DEBUG,
    "1": Level.INFO,
    "info": Level.INFO,
    "2": Level.WARN,
    "warn": Level.WARN,
    "3": Level.ERROR,
    "error": Level.ERROR,
    "4": Level.FATAL,
    "fatal": Level.FATAL,
}


def parse_level(level: str, default: Level) -> Level:
    """Parse a level name or number, case-insensitively.

    Returns ``default`` when ``level`` is not recognised.
    """
    return _NAMES.get(level.lower(), default)