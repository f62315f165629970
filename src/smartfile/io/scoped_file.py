"""
Scoped ownership of file handles.

A scoped file owns exactly one handle and runs a release policy on it exactly
once when its life ends: on leaving a ``with`` block, or when the object is
finalized, whichever happens first. Ownership can be transferred with
:meth:`ScopedFile.move` but never duplicated.

Which line operations exist depends on the handle type:

- ScopedReader: ``read_line()`` and iteration
- ScopedWriter: ``write_line()`` and ``write_lines()``
- ScopedReadWriter: both

``ScopedFile(handle)`` picks the right class from the handle's capabilities.
Use :func:`scoped_file` or :func:`open_scoped_file` to get precise static
types as well.

Example:
    with open_scoped_file("notes.txt", OpenMode.WRITE) as f:
        f.write_line("hello")

    with open_scoped_file("notes.txt", OpenMode.READ) as f:
        assert f.read_line() == "hello"

Read and write failures leave the handle open; closing the wrapper (or
letting it go out of scope) is the only recovery. Once a wrapper is closed
or has been moved from, ``read_line``/``write_line`` raise
``ClosedFileError`` without touching the handle.
"""

import os
from typing import Any, ClassVar, Generic, Iterable, Iterator, TypeVar, overload

from smartfile.config.environment import Environment
from smartfile.config.logging_config import get_logger
from smartfile.io.capabilities import (
    HandleCapabilities,
    Openable,
    ReadableHandle,
    ReadWriteHandle,
    WritableHandle,
    capabilities_of,
    require_capabilities,
    require_file_like,
)
from smartfile.io.errors import (
    ClosedFileError,
    EndOfFileError,
    OpenError,
    ReadError,
    WriteError,
)
from smartfile.io.file_stream import FileStream
from smartfile.io.open_mode import OpenMode
from smartfile.io.release import DefaultReleasePolicy, ReleasePolicy, release_handle

log = get_logger(__name__)

H = TypeVar("H", bound=Openable)
RH = TypeVar("RH", bound=ReadableHandle)
WH = TypeVar("WH", bound=WritableHandle)
RWH = TypeVar("RWH", bound=ReadWriteHandle)
S = TypeVar("S", bound="ScopedFile[Any]")


class ScopedFile(Generic[H]):
    """
    Move-only owner of a single file handle.

    Args:
        handle: An already opened handle. Ownership passes to the wrapper.
        release: Policy run once at end of life. Defaults to
            :class:`DefaultReleasePolicy` (close if open).

    Raises:
        HandleCapabilityError: If the handle type is not file-like, or lacks
            what the requested wrapper class needs.
    """

    requires_read: ClassVar[bool] = False
    requires_write: ClassVar[bool] = False

    _handle: H | None
    _release: ReleasePolicy
    _owned: bool

    def __new__(cls, handle: H, release: ReleasePolicy | None = None):
        if cls is ScopedFile:
            wrapper_class = _wrapper_class_for(require_file_like(handle))
        else:
            require_capabilities(handle, readable=cls.requires_read, writable=cls.requires_write)
            wrapper_class = cls
        return super().__new__(wrapper_class)

    def __init__(self, handle: H, release: ReleasePolicy | None = None):
        self._handle = handle
        self._release = release if release is not None else DefaultReleasePolicy()
        self._reports_health = capabilities_of(handle).reports_health
        self._owned = True

    @property
    def owns_handle(self) -> bool:
        """True until the handle was released or transferred to another wrapper."""
        return self._owned

    def is_open(self) -> bool:
        """Return True if the owned handle is open. Never raises."""
        handle = self._handle
        if handle is None:
            return False
        try:
            return bool(handle.is_open())
        except Exception:
            return False

    def close(self) -> None:
        """Close the handle if it is open. Calling it again is a no-op."""
        handle = self._handle
        if handle is not None and self.is_open():
            handle.close()

    def move(self: S) -> S:
        """
        Transfer the handle and release policy to a new wrapper.

        This wrapper gives up ownership: its end of life no longer touches
        the handle and :meth:`is_open` returns False.

        Raises:
            ClosedFileError: If this wrapper was already moved from.
        """
        if self._handle is None:
            raise ClosedFileError(f"{type(self).__name__} no longer holds a handle")
        target = object.__new__(type(self))
        target._take(self)
        return target

    def move_from(self, other: "ScopedFile[H]") -> None:
        """
        Replace this wrapper's handle with ``other``'s.

        The current handle is released through this wrapper's policy first;
        ``other`` is left without a handle.

        Raises:
            TypeError: If ``other`` is not an instance of this wrapper's class.
        """
        if other is self:
            return
        if not isinstance(other, type(self)):
            raise TypeError(f"Cannot move {type(other).__name__} into {type(self).__name__}")
        self._end_of_life()
        self._take(other)

    def _take(self, other: "ScopedFile[Any]") -> None:
        self._handle = other._handle
        self._release = other._release
        self._reports_health = other._reports_health
        self._owned = other._owned
        other._handle = None
        other._owned = False
        log.debug(f"Moved {self._handle!r} into a new {type(self).__name__}")

    def _end_of_life(self) -> None:
        # __del__ can run on an instance whose __init__ never completed
        if not getattr(self, "_owned", False):
            return
        self._owned = False
        log.debug(f"Releasing {self._handle!r}")
        release_handle(self._release, self._handle)

    def _require_open(self, action: str) -> H:
        handle = self._handle
        if handle is None or not self.is_open():
            raise ClosedFileError(f"Cannot {action} a closed file", self._path())
        return handle

    def _healthy(self, handle: H) -> bool:
        if not self._reports_health:
            return True
        return bool(handle.good())  # type: ignore[attr-defined]

    def _path(self) -> Any:
        return getattr(self._handle, "path", None)

    def __enter__(self: S) -> S:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._end_of_life()

    def __del__(self) -> None:
        self._end_of_life()

    def __copy__(self):
        raise TypeError(f"{type(self).__name__} cannot be copied; use move() to transfer ownership")

    def __deepcopy__(self, memo):
        raise TypeError(f"{type(self).__name__} cannot be copied; use move() to transfer ownership")

    def __reduce_ex__(self, protocol):
        raise TypeError(f"{type(self).__name__} cannot be pickled")

    def __repr__(self) -> str:
        if self._handle is None:
            status = "moved"
        else:
            status = "open" if self.is_open() else "closed"
        return f"{type(self).__name__}({self._handle!r}, status={status})"


class ScopedReader(ScopedFile[RH]):
    """Scoped file whose handle supports line reads."""

    requires_read = True

    def read_line(self) -> str:
        """
        Read the next line, without its ``"\\n"`` terminator.

        Raises:
            EndOfFileError: If there are no more lines.
            ReadError: If the handle failed or reports itself unhealthy.
            ClosedFileError: If the wrapper is closed or was moved from.
        """
        handle = self._require_open("read from")
        try:
            raw = handle.readline()
        except (OSError, ValueError) as e:
            raise ReadError(f"Read error from file: {e}", self._path()) from e
        if not self._healthy(handle):
            raise ReadError("Read error from file", self._path())
        if raw == "":
            raise EndOfFileError("End of file reached", self._path())
        return raw[:-1] if raw.endswith("\n") else raw

    def __iter__(self) -> Iterator[str]:
        while True:
            try:
                yield self.read_line()
            except EndOfFileError:
                return


class ScopedWriter(ScopedFile[WH]):
    """Scoped file whose handle supports line writes."""

    requires_write = True

    def write_line(self, line: str) -> None:
        """
        Write ``line`` followed by ``"\\n"``.

        Raises:
            WriteError: If the handle failed or reports itself unhealthy.
            ClosedFileError: If the wrapper is closed or was moved from.
        """
        handle = self._require_open("write to")
        try:
            handle.write(line + "\n")
        except (OSError, ValueError) as e:
            raise WriteError(f"Write error to file: {e}", self._path()) from e
        if not self._healthy(handle):
            raise WriteError("Write error to file", self._path())

    def write_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.write_line(line)


class ScopedReadWriter(ScopedReader[RWH], ScopedWriter[RWH]):
    """Scoped file whose handle supports both line reads and writes."""

    pass


def _wrapper_class_for(caps: HandleCapabilities) -> type[ScopedFile[Any]]:
    if caps.readable and caps.writable:
        return ScopedReadWriter
    if caps.readable:
        return ScopedReader
    return ScopedWriter


@overload
def scoped_file(handle: RWH, release: ReleasePolicy | None = None) -> ScopedReadWriter[RWH]: ...


@overload
def scoped_file(handle: RH, release: ReleasePolicy | None = None) -> ScopedReader[RH]: ...


@overload
def scoped_file(handle: WH, release: ReleasePolicy | None = None) -> ScopedWriter[WH]: ...


def scoped_file(handle: Any, release: ReleasePolicy | None = None) -> ScopedFile[Any]:
    """Wrap an already opened handle."""
    return ScopedFile(handle, release)


@overload
def open_scoped_file(
    path: str | os.PathLike,
    mode: OpenMode | str | None = None,
    *,
    release: ReleasePolicy | None = None,
) -> ScopedReadWriter[FileStream]: ...


@overload
def open_scoped_file(
    path: str | os.PathLike,
    mode: OpenMode | str | None = None,
    *,
    handle_type: type[RWH],
    release: ReleasePolicy | None = None,
) -> ScopedReadWriter[RWH]: ...


@overload
def open_scoped_file(
    path: str | os.PathLike,
    mode: OpenMode | str | None = None,
    *,
    handle_type: type[RH],
    release: ReleasePolicy | None = None,
) -> ScopedReader[RH]: ...


@overload
def open_scoped_file(
    path: str | os.PathLike,
    mode: OpenMode | str | None = None,
    *,
    handle_type: type[WH],
    release: ReleasePolicy | None = None,
) -> ScopedWriter[WH]: ...


def open_scoped_file(
    path: str | os.PathLike,
    mode: OpenMode | str | None = None,
    *,
    handle_type: type[Any] = FileStream,
    release: ReleasePolicy | None = None,
) -> ScopedFile[Any]:
    """
    Open ``path`` with a new ``handle_type()`` and wrap it.

    Args:
        path: File to open.
        mode: Open mode, or its textual form (``"read|write"``). Defaults to
            the configured ``SMARTFILE_DEFAULT_MODE`` (read|write|append).
        handle_type: Handle class, constructed without arguments.
        release: Release policy for the wrapper.

    Raises:
        HandleCapabilityError: If ``handle_type`` is not file-like. Checked
            before anything is opened.
        OpenError: If the handle is not open after the attempt.
    """
    if mode is None:
        mode = Environment.get_default_open_mode()
    elif isinstance(mode, str):
        mode = OpenMode.parse(mode)

    require_file_like(handle_type)
    handle = handle_type()
    try:
        handle.open(path, mode)
    except OSError as e:
        raise OpenError(path) from e
    if not handle.is_open():
        raise OpenError(path) from getattr(handle, "last_error", None)
    return ScopedFile(handle, release)


__all__ = [
    "ScopedFile",
    "ScopedReadWriter",
    "ScopedReader",
    "ScopedWriter",
    "open_scoped_file",
    "scoped_file",
]
