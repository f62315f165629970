"""
Capability detection for file handle types.

A handle qualifies as file-like when its type is openable (``open``,
``close``, ``is_open``) and readable (``readline``) or writable (``write``).
Detection only inspects the type's attributes; no handle method is ever
invoked, and results are cached per type.

The protocols below are what static type checkers see: wrapper methods are
only declared on wrapper classes whose handle type satisfies the matching
protocol, so calling ``read_line`` on a write-only wrapper is a type error
as well as an ``AttributeError``.
"""

from functools import lru_cache
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from smartfile.io.errors import HandleCapabilityError
from smartfile.io.open_mode import OpenMode


@runtime_checkable
class Openable(Protocol):
    def open(self, path: Any, mode: OpenMode | None = None) -> None: ...

    def close(self) -> None: ...

    def is_open(self) -> bool: ...


@runtime_checkable
class Readable(Protocol):
    def readline(self) -> str:
        """Return the next line including its terminator, or "" at end of data."""
        ...


@runtime_checkable
class Writable(Protocol):
    def write(self, text: str) -> object: ...


@runtime_checkable
class HealthReporting(Protocol):
    def good(self) -> bool:
        """Return False once an operation on the stream has failed."""
        ...


class ReadableHandle(Openable, Readable, Protocol):
    pass


class WritableHandle(Openable, Writable, Protocol):
    pass


class ReadWriteHandle(Openable, Readable, Writable, Protocol):
    pass


OPENABLE_MEMBERS = ("open", "close", "is_open")
READABLE_MEMBERS = ("readline",)
WRITABLE_MEMBERS = ("write",)
HEALTH_MEMBERS = ("good",)


class HandleCapabilities(BaseModel):
    """Capabilities detected on a handle type."""

    model_config = ConfigDict(frozen=True)

    openable: bool
    readable: bool
    writable: bool
    reports_health: bool = False

    @property
    def file_like(self) -> bool:
        return self.openable and (self.readable or self.writable)


def _as_type(handle_or_type: Any) -> type:
    return handle_or_type if isinstance(handle_or_type, type) else type(handle_or_type)


def _missing(handle_type: type, members: tuple[str, ...]) -> list[str]:
    return [name for name in members if not callable(getattr(handle_type, name, None))]


@lru_cache(maxsize=None)
def _capabilities_of_type(handle_type: type) -> HandleCapabilities:
    return HandleCapabilities(
        openable=not _missing(handle_type, OPENABLE_MEMBERS),
        readable=not _missing(handle_type, READABLE_MEMBERS),
        writable=not _missing(handle_type, WRITABLE_MEMBERS),
        reports_health=not _missing(handle_type, HEALTH_MEMBERS),
    )


def capabilities_of(handle_or_type: Any) -> HandleCapabilities:
    """Return the capabilities of a handle type (or of an instance's type)."""
    return _capabilities_of_type(_as_type(handle_or_type))


def is_openable(handle_or_type: Any) -> bool:
    return capabilities_of(handle_or_type).openable


def is_readable(handle_or_type: Any) -> bool:
    return capabilities_of(handle_or_type).readable


def is_writable(handle_or_type: Any) -> bool:
    return capabilities_of(handle_or_type).writable


def is_file_like(handle_or_type: Any) -> bool:
    return capabilities_of(handle_or_type).file_like


def require_file_like(handle_or_type: Any) -> HandleCapabilities:
    """
    Return the capabilities of a handle type, rejecting non file-like types.

    Raises:
        HandleCapabilityError: If the type is not openable, or is neither
            readable nor writable. The error lists the missing members.
    """
    handle_type = _as_type(handle_or_type)
    caps = _capabilities_of_type(handle_type)
    if caps.file_like:
        return caps

    missing = _missing(handle_type, OPENABLE_MEMBERS)
    if not (caps.readable or caps.writable):
        missing.append(" or ".join(READABLE_MEMBERS + WRITABLE_MEMBERS))
    raise HandleCapabilityError(handle_type, missing)


def require_capabilities(handle_or_type: Any, readable: bool = False, writable: bool = False) -> HandleCapabilities:
    """
    Like :func:`require_file_like`, additionally demanding read and/or write support.

    Raises:
        HandleCapabilityError: If a demanded capability is missing.
    """
    handle_type = _as_type(handle_or_type)
    caps = require_file_like(handle_type)

    missing: list[str] = []
    if readable and not caps.readable:
        missing.extend(_missing(handle_type, READABLE_MEMBERS))
    if writable and not caps.writable:
        missing.extend(_missing(handle_type, WRITABLE_MEMBERS))
    if missing:
        requirement = "readable and writable" if readable and writable else "readable" if readable else "writable"
        raise HandleCapabilityError(handle_type, missing, requirement)
    return caps


__all__ = [
    "HandleCapabilities",
    "HealthReporting",
    "Openable",
    "ReadWriteHandle",
    "Readable",
    "ReadableHandle",
    "Writable",
    "WritableHandle",
    "capabilities_of",
    "is_file_like",
    "is_openable",
    "is_readable",
    "is_writable",
    "require_capabilities",
    "require_file_like",
]
