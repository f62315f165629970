"""
Exception classes for scoped file handles.

Open, read and write failures are raised to the immediate caller; none of
them closes the handle.
"""

import os
from typing import Iterable


class SmartFileError(Exception):
    """Base exception for smartfile errors."""

    def __init__(self, message: str, path: str | os.PathLike | None = None):
        self.path = path
        super().__init__(message)


class OpenError(SmartFileError):
    """Raised when opening a handle by name leaves it closed."""

    def __init__(self, path: str | os.PathLike):
        super().__init__(f"Failed to open file: {os.fspath(path)}", path)


class WriteError(SmartFileError):
    """Raised when a write leaves the handle unhealthy."""

    pass


class ReadError(SmartFileError):
    """Raised when a line cannot be extracted from the handle."""

    pass


class EndOfFileError(ReadError):
    """Raised when the handle has no more lines."""

    pass


class ClosedFileError(SmartFileError, ValueError):
    """Raised on I/O against a closed or transferred wrapper."""

    pass


class HandleCapabilityError(SmartFileError, TypeError):
    """Raised when a handle type lacks the capabilities a wrapper needs."""

    def __init__(self, handle_type: type, missing: Iterable[str], requirement: str = "file-like"):
        self.handle_type = handle_type
        self.missing = tuple(missing)
        super().__init__(
            f"{handle_type.__module__}.{handle_type.__qualname__} is not {requirement}: "
            f"missing {', '.join(self.missing)}"
        )
