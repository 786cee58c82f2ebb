"""
Redis cache

Networked implementation of CacheProtocol using redis-py. Every key is
stored under ``key_prefix`` so that all askflow entries can be found (and
cleaned up) by prefix without touching other data in the same database.

Values are JSON-encoded. Connection and authentication errors are not
caught here; they surface as ``redis.exceptions.RedisError`` subclasses.
"""

from __future__ import annotations

import json
from typing import Any

import redis
import structlog


class RedisCache:
    """CacheProtocol implementation on top of a Redis server.

    Args:
        host: Redis host.
        port: Redis port.
        password: Optional AUTH password.
        db: Database index.
        key_prefix: Namespace prepended to every key.
        client: Pre-built client; when given, the connection arguments
            are ignored.
    """

    KEY_PREFIX = "askflow:cache:"

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 6379,
        password: str | None = None,
        db: int = 0,
        *,
        key_prefix: str = KEY_PREFIX,
        client: redis.Redis | None = None,
    ) -> None:
        self._client = client or redis.Redis(
            host=host, port=port, password=password, db=db
        )
        self._prefix = key_prefix
        self.logger = structlog.get_logger().bind(component="redis_cache")

    @property
    def key_prefix(self) -> str:
        return self._prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    @staticmethod
    def _decode(raw: Any, default: Any) -> Any:
        if raw is None:
            return default
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)

    def put(self, key: str, value: Any, ttl_minutes: int) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        # 0 means no expiry
        expiry = ttl_minutes * 60 if ttl_minutes > 0 else None
        self._client.set(self._key(key), payload, ex=expiry)

    def get(self, key: str, default: Any = None) -> Any:
        return self._decode(self._client.get(self._key(key)), default)

    def has(self, key: str) -> bool:
        return bool(self._client.exists(self._key(key)))

    def pull(self, key: str, default: Any = None) -> Any:
        """Read and delete ``key`` in one MULTI/EXEC transaction."""
        pipe = self._client.pipeline(transaction=True)
        pipe.get(self._key(key))
        pipe.delete(self._key(key))
        raw, _ = pipe.execute()
        return self._decode(raw, default)

    def flush_prefix(self) -> int:
        """Delete every key under this cache's prefix. Returns the count."""
        removed = 0
        for name in self._client.scan_iter(match=f"{self._prefix}*"):
            removed += self._client.delete(name)
        self.logger.info("redis_cache.flushed", prefix=self._prefix, removed=removed)
        return removed
