"""
File handles backed by the builtin ``open()``.

These follow stream conventions rather than raising: a failed open, read
or write marks the stream as failed, which ``good()`` reports, and keeps
the underlying exception in ``last_error``. End of data is not a failure;
``readline()`` simply returns ``""``.

- FileStream: readable and writable
- InputFileStream: readable only, READ is always part of the mode
- OutputFileStream: writable only, WRITE is always part of the mode
"""

import codecs
import os
from typing import TextIO

from smartfile.config.environment import Environment
from smartfile.config.logging_config import get_logger
from smartfile.io.open_mode import OpenMode

log = get_logger(__name__)


class _BaseFileStream:
    default_mode: OpenMode = OpenMode.READ | OpenMode.WRITE
    forced_mode: OpenMode = OpenMode(0)

    def __init__(
        self,
        path: str | os.PathLike | None = None,
        mode: OpenMode | None = None,
        encoding: str | None = None,
    ):
        self._file: TextIO | None = None
        self._failed = False
        self.path: str | None = None
        self.last_error: Exception | None = None
        self.encoding = encoding or Environment.get_encoding()
        if path is not None:
            self.open(path, mode)

    def open(self, path: str | os.PathLike, mode: OpenMode | None = None) -> None:
        if self.is_open():
            self._failed = True
            return

        mode = (self.default_mode if mode is None else mode) | self.forced_mode
        try:
            codecs.lookup(self.encoding)
            self._file = open(path, mode.to_python_mode(), encoding=self.encoding)
        except (OSError, ValueError, LookupError) as e:
            log.debug(f"Could not open {os.fspath(path)} ({mode}): {e}")
            self._failed = True
            self.last_error = e
            return

        if OpenMode.READ in mode and OpenMode.APPEND in mode:
            # reads start at the beginning, writes still land at end-of-file
            self._file.seek(0)

        self._failed = False
        self.last_error = None
        self.path = os.fspath(path)
        log.debug(f"Opened {self.path} ({mode})")

    def close(self) -> None:
        if self._file is None:
            self._failed = True
            return

        file, self._file = self._file, None
        try:
            file.close()
        except OSError as e:
            self._failed = True
            self.last_error = e
        log.debug(f"Closed {self.path}")

    def is_open(self) -> bool:
        return self._file is not None and not self._file.closed

    def good(self) -> bool:
        return not self._failed

    def __repr__(self) -> str:
        state = "open" if self.is_open() else "closed"
        return f"{type(self).__name__}(path={self.path!r}, {state})"


class _ReadMixin:
    _file: TextIO | None
    _failed: bool
    last_error: Exception | None

    def readline(self) -> str:
        if self._file is None or self._failed:
            self._failed = True
            return ""
        try:
            return self._file.readline()
        except (OSError, ValueError) as e:
            self._failed = True
            self.last_error = e
            return ""


class _WriteMixin:
    _file: TextIO | None
    _failed: bool
    last_error: Exception | None

    def write(self, text: str) -> int:
        if self._file is None or self._failed:
            self._failed = True
            return 0
        try:
            return self._file.write(text)
        except (OSError, ValueError) as e:
            self._failed = True
            self.last_error = e
            return 0


class FileStream(_ReadMixin, _WriteMixin, _BaseFileStream):
    """Readable and writable file handle."""

    pass


class InputFileStream(_ReadMixin, _BaseFileStream):
    """Read-only file handle."""

    default_mode = OpenMode.READ
    forced_mode = OpenMode.READ


class OutputFileStream(_WriteMixin, _BaseFileStream):
    """Write-only file handle."""

    default_mode = OpenMode.WRITE
    forced_mode = OpenMode.WRITE
