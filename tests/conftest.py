"""Test configuration and shared fixtures."""

from __future__ import annotations

import fnmatch
from typing import Any

import pytest

from askflow.application.host import ConversationHost
from askflow.core.domain.config_schema import AskflowSettings, ConversationSettings
from askflow.core.domain.handlers import HandlerRegistry
from askflow.infrastructure.cache.array_cache import ArrayCache
from askflow.infrastructure.persistence.pending_state_store import (
    CachePendingStateStore,
)
from askflow.infrastructure.transport.in_memory_transport import InMemoryTransport


class FakeRedisPipeline:
    """Queues commands and runs them on ``execute`` like a MULTI/EXEC block."""

    def __init__(self, client: "FakeRedisClient") -> None:
        self._client = client
        self._commands: list[tuple[str, tuple[Any, ...]]] = []

    def get(self, name: str) -> "FakeRedisPipeline":
        self._commands.append(("get", (name,)))
        return self

    def delete(self, *names: str) -> "FakeRedisPipeline":
        self._commands.append(("delete", names))
        return self

    def execute(self) -> list[Any]:
        return [getattr(self._client, cmd)(*args) for cmd, args in self._commands]


class FakeRedisClient:
    """In-memory double for the subset of redis-py used by RedisCache.

    Stores bytes like the real client and records the expiry passed to SET.
    """

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}
        self.expiries: dict[str, int | None] = {}

    def set(self, name: str, value: str, ex: int | None = None) -> bool:
        self.data[name] = value.encode("utf-8")
        self.expiries[name] = ex
        return True

    def get(self, name: str) -> bytes | None:
        return self.data.get(name)

    def exists(self, *names: str) -> int:
        return sum(1 for n in names if n in self.data)

    def delete(self, *names: str) -> int:
        removed = 0
        for name in names:
            if self.data.pop(name, None) is not None:
                self.expiries.pop(name, None)
                removed += 1
        return removed

    def pipeline(self, transaction: bool = True) -> FakeRedisPipeline:
        return FakeRedisPipeline(self)

    def scan_iter(self, match: str | None = None):
        for name in list(self.data):
            if match is None or fnmatch.fnmatchcase(name, match):
                yield name


@pytest.fixture
def fake_redis() -> FakeRedisClient:
    return FakeRedisClient()


@pytest.fixture
def transport() -> InMemoryTransport:
    return InMemoryTransport()


@pytest.fixture
def cache() -> ArrayCache:
    return ArrayCache()


@pytest.fixture
def store(cache: ArrayCache) -> CachePendingStateStore:
    return CachePendingStateStore(cache)


@pytest.fixture
def handlers() -> HandlerRegistry:
    return HandlerRegistry()


@pytest.fixture
def conversation_settings() -> ConversationSettings:
    return ConversationSettings()


@pytest.fixture
def host(
    transport: InMemoryTransport,
    store: CachePendingStateStore,
    handlers: HandlerRegistry,
    conversation_settings: ConversationSettings,
) -> ConversationHost:
    return ConversationHost(
        transport,
        store,
        handlers=handlers,
        settings=AskflowSettings(conversation=conversation_settings),
    )
