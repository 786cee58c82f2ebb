"""Protocol for the key/value cache that backs pending conversation state."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheProtocol(Protocol):
    """Minimal key/value cache with per-entry expiry.

    Implementations must provide at least last-write-wins semantics.
    Values are JSON-compatible data (dicts, lists, strings, numbers).
    """

    def put(self, key: str, value: Any, ttl_minutes: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_minutes`` minutes.

        Raises:
            Exception: Backend failures propagate; callers decide how to
                report them.
        """
        ...

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for ``key``, or ``default`` when missing or expired."""
        ...

    def has(self, key: str) -> bool:
        """True if a live entry exists for ``key``."""
        ...

    def pull(self, key: str, default: Any = None) -> Any:
        """Return the value for ``key`` and remove it in the same step."""
        ...
