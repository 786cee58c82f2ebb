"""Build the configured cache backend."""

from __future__ import annotations

import structlog

from askflow.core.domain.config_schema import CacheSettings
from askflow.core.interfaces.cache import CacheProtocol
from askflow.infrastructure.cache.array_cache import ArrayCache
from askflow.infrastructure.cache.redis_cache import RedisCache


def build_cache(settings: CacheSettings) -> CacheProtocol:
    """Return the backend selected by ``settings.driver``."""
    logger = structlog.get_logger()

    if settings.driver == "redis":
        logger.info(
            "cache.redis_configured",
            host=settings.host,
            port=settings.port,
            db=settings.db,
            prefix=settings.key_prefix,
        )
        return RedisCache(
            host=settings.host,
            port=settings.port,
            password=settings.password,
            db=settings.db,
            key_prefix=settings.key_prefix,
        )

    logger.info("cache.array_configured")
    return ArrayCache()
