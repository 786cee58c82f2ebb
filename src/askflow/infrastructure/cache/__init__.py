"""
Infrastructure Cache Module

Key/value backends for pending conversation state.
"""

from askflow.infrastructure.cache.array_cache import ArrayCache
from askflow.infrastructure.cache.factory import build_cache
from askflow.infrastructure.cache.redis_cache import RedisCache

__all__ = ["ArrayCache", "RedisCache", "build_cache"]
