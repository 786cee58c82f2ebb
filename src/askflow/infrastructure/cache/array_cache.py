"""
In-memory cache

Process-local implementation of CacheProtocol. Pending questions stored here
do not survive a restart, which makes it the backend for tests and for
long-running single-process hosts (socket transports, local demos).

Usage:
    cache = ArrayCache()
    cache.put("session:42", {"question": "Name?"}, ttl_minutes=30)
    cache.pull("session:42")  # returns the value and removes it
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable

from askflow.core.utils.time import utc_now


@dataclass
class CacheEntry:
    """Single cached value with TTL support."""

    value: Any
    ttl_minutes: int
    created_at: datetime = field(default_factory=utc_now)

    def expired(self, now: datetime) -> bool:
        # 0 means no expiry
        if self.ttl_minutes <= 0:
            return False
        return now - self.created_at >= timedelta(minutes=self.ttl_minutes)


class ArrayCache:
    """
    Dictionary-backed cache with per-entry expiry.

    Values are deep-copied on the way in and out so that callers mutating a
    returned dict cannot change what is stored, matching the behaviour of a
    serializing backend.

    Attributes:
        _entries: Key to CacheEntry mapping
        _clock: Callable returning the current UTC time
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._entries: dict[str, CacheEntry] = {}
        self._clock = clock

    def _live_entry(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expired(self._clock()):
            del self._entries[key]
            return None
        return entry

    def put(self, key: str, value: Any, ttl_minutes: int) -> None:
        self._entries[key] = CacheEntry(
            value=copy.deepcopy(value),
            ttl_minutes=ttl_minutes,
            created_at=self._clock(),
        )

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._live_entry(key)
        if entry is None:
            return default
        return copy.deepcopy(entry.value)

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def pull(self, key: str, default: Any = None) -> Any:
        entry = self._live_entry(key)
        if entry is None:
            return default
        del self._entries[key]
        return entry.value

    def clear(self) -> None:
        self._entries.clear()

    @property
    def size(self) -> int:
        """Number of stored entries, expired ones included until touched."""
        return len(self._entries)
