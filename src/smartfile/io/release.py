from typing import Any, Protocol

from smartfile.config.logging_config import get_logger

log = get_logger(__name__)


class ReleasePolicy(Protocol):
    """Strategy run once when a scoped file reaches the end of its life."""

    def __call__(self, handle: Any) -> None: ...


class DefaultReleasePolicy:
    """Close the handle if it is still open; otherwise do nothing."""

    def __call__(self, handle: Any) -> None:
        try:
            if handle.is_open():
                handle.close()
        except Exception as e:
            log.warning(f"Ignoring error while closing {handle!r}: {e}")

    def __repr__(self) -> str:
        return "DefaultReleasePolicy()"


def release_handle(policy: ReleasePolicy, handle: Any) -> None:
    """Run a release policy, logging and swallowing anything it raises."""
    try:
        policy(handle)
    except Exception as e:
        log.warning(f"Release policy {policy!r} failed for {handle!r}: {e}")
