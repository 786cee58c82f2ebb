"""Protocol compliance tests.

Verifies that concrete implementations satisfy their declared protocols
using ``isinstance()`` checks with ``runtime_checkable`` protocols and
structural attribute/method presence checks.

These tests act as a safety net against protocol drift: if someone adds
a method to a protocol but forgets to implement it in the concrete class,
these tests will catch it.
"""

from __future__ import annotations

import inspect

from askflow.application.host import ConversationHost
from askflow.core.interfaces.cache import CacheProtocol
from askflow.core.interfaces.host import ConversationHostProtocol
from askflow.core.interfaces.logging import LoggerProtocol
from askflow.core.interfaces.transport import (
    PendingStateStoreProtocol,
    TransportProtocol,
)
from askflow.infrastructure.cache.array_cache import ArrayCache
from askflow.infrastructure.cache.redis_cache import RedisCache
from askflow.infrastructure.persistence.pending_state_store import (
    CachePendingStateStore,
)
from askflow.infrastructure.transport.in_memory_transport import InMemoryTransport

# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------


def _get_protocol_methods(protocol_cls: type) -> set[str]:
    """Extract public method and property names declared by a protocol."""
    names: set[str] = set()
    for name, obj in inspect.getmembers(protocol_cls):
        if name.startswith("_"):
            continue
        if callable(obj) or isinstance(obj, property):
            names.add(name)
    return names


def _assert_implements(concrete_cls: type, protocol_cls: type) -> None:
    """Assert that *concrete_cls* has all methods/properties of *protocol_cls*."""
    required = _get_protocol_methods(protocol_cls)
    actual = {name for name in dir(concrete_cls) if not name.startswith("_")}
    missing = required - actual
    assert not missing, (
        f"{concrete_cls.__name__} is missing methods/properties from "
        f"{protocol_cls.__name__}: {sorted(missing)}"
    )


# ---------------------------------------------------------------------------
# CacheProtocol compliance
# ---------------------------------------------------------------------------


class TestCacheProtocolCompliance:
    def test_array_cache(self) -> None:
        _assert_implements(ArrayCache, CacheProtocol)
        assert isinstance(ArrayCache(), CacheProtocol)

    def test_redis_cache(self, fake_redis) -> None:
        _assert_implements(RedisCache, CacheProtocol)
        assert isinstance(RedisCache(client=fake_redis), CacheProtocol)


# ---------------------------------------------------------------------------
# Transport / store compliance
# ---------------------------------------------------------------------------


class TestTransportProtocolCompliance:
    def test_in_memory_transport(self) -> None:
        _assert_implements(InMemoryTransport, TransportProtocol)
        assert isinstance(InMemoryTransport(), TransportProtocol)


class TestPendingStateStoreCompliance:
    def test_cache_pending_state_store(self) -> None:
        _assert_implements(CachePendingStateStore, PendingStateStoreProtocol)
        assert isinstance(CachePendingStateStore(ArrayCache()), PendingStateStoreProtocol)


# ---------------------------------------------------------------------------
# Host compliance
# ---------------------------------------------------------------------------


class TestConversationHostCompliance:
    def test_conversation_host(self) -> None:
        _assert_implements(ConversationHost, ConversationHostProtocol)


class TestLoggerProtocolCompliance:
    def test_bound_structlog_logger(self, host) -> None:
        for method in _get_protocol_methods(LoggerProtocol):
            assert callable(getattr(host.logger, method))
