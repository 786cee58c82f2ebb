"""Cache-backed pending question store.

Keeps exactly one pending question per session key. Records are written
through any CacheProtocol backend with a TTL and read once with ``pull``,
so a reply can never be matched to the same pending question twice.

Key layout::

    pending:<session_key>   -> PendingState.to_dict()
"""

from __future__ import annotations

from typing import Any

import structlog

from askflow.core.domain.errors import StorageError
from askflow.core.domain.pending_state import PendingState
from askflow.core.interfaces.cache import CacheProtocol
from askflow.core.interfaces.logging import LoggerProtocol


class CachePendingStateStore:
    """PendingStateStoreProtocol implementation on top of a cache."""

    def __init__(
        self,
        cache: CacheProtocol,
        namespace: str = "pending",
        logger: LoggerProtocol | None = None,
    ) -> None:
        self._cache = cache
        self._namespace = namespace
        self.logger = logger or structlog.get_logger().bind(component="pending_state_store")

    def _key(self, session_key: str) -> str:
        return f"{self._namespace}:{session_key}"

    def store(self, session_key: str, state: PendingState, ttl_minutes: int) -> None:
        try:
            self._cache.put(self._key(session_key), state.to_dict(), ttl_minutes)
        except Exception as exc:
            self.logger.error(
                "pending_state.store_failed",
                session_key=session_key,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise StorageError(
                f"Could not store pending question: {exc}",
                session_key=session_key,
            ) from exc

        self.logger.debug(
            "pending_state.stored",
            session_key=session_key,
            attempt=state.attempt,
            ttl_minutes=ttl_minutes,
        )

    def load(self, session_key: str) -> PendingState | None:
        try:
            raw = self._cache.pull(self._key(session_key))
        except Exception as exc:
            raise StorageError(
                f"Could not load pending question: {exc}",
                session_key=session_key,
            ) from exc
        return self._decode(session_key, raw)

    def peek(self, session_key: str) -> PendingState | None:
        try:
            raw = self._cache.get(self._key(session_key))
        except Exception as exc:
            raise StorageError(
                f"Could not read pending question: {exc}",
                session_key=session_key,
            ) from exc
        return self._decode(session_key, raw)

    def forget(self, session_key: str) -> None:
        try:
            self._cache.pull(self._key(session_key))
        except Exception as exc:
            raise StorageError(
                f"Could not remove pending question: {exc}",
                session_key=session_key,
            ) from exc
        self.logger.debug("pending_state.forgotten", session_key=session_key)

    @staticmethod
    def _decode(session_key: str, raw: Any) -> PendingState | None:
        if raw is None:
            return None
        try:
            return PendingState.from_dict(raw)
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError(
                "Pending question record is malformed",
                session_key=session_key,
                details={"error": str(exc)},
            ) from exc
