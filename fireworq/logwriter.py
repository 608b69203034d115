"""Log output destinations that can be reopened, e.g. after log rotation."""

from __future__ import annotations

import io
import os
import threading
from typing import IO, Any, Union

Data = Union[bytes, str]


class Writer:
    """Writes to an existing stream; reopening does nothing."""

    def __init__(self, stream: IO[Any]) -> None:
        self._stream = stream

    def write(self, data: Data) -> int:
        """Write ``data`` to the stream and return its length."""
        if isinstance(self._stream, io.TextIOBase):
            if isinstance(data, bytes):
                data = data.decode("utf-8", errors="replace")
        elif isinstance(data, str):
            data = data.encode("utf-8")
        self._stream.write(data)
        flush = getattr(self._stream, "flush", None)
        if flush is not None:
            flush()
        return len(data)

    def reopen(self) -> None:
        """Do nothing: a plain stream cannot be reopened."""


def _open(name: str) -> IO[bytes]:
    directory = os.path.dirname(name)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return open(name, "ab", buffering=0)


class FileWriter(Writer):
    """Appends to a named file and reopens it by name on request."""

    def __init__(self, name: str) -> None:
        self.name = os.fspath(name)
        self._lock = threading.Lock()
        super().__init__(_open(self.name))

    def write(self, data: Data) -> int:
        if isinstance(data, str):
            data = data.encode("utf-8")
        with self._lock:
            self._stream.write(data)
        return len(data)

    def reopen(self) -> None:
        """Open the file by its name again and switch writing to it."""
        with self._lock:
            stream = _open(self.name)
            self._stream.close()
            self._stream = stream

    def close(self) -> None:
        """Close the underlying file."""
        with self._lock:
            self._stream.close()

    def __enter__(self) -> FileWriter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_file(name: str | os.PathLike[str]) -> FileWriter:
    """Open ``name`` for appending, creating parent directories as needed."""
    return FileWriter(os.fspath(name))