"""
Redis-backed cache store — drop-in networked replacement for MemoryCacheStore.

Values are stored as JSON with a native Redis TTL (SET ... EX), so expiry is
Redis's job and there is no local cleanup pass. A non-positive TTL means the
entry would already be expired on the next read, so it is deleted instead.

Every key is written under ``key_prefix`` (``travel-api:city:search:paris``),
and ``clear`` only removes keys under that prefix, so the store can share a
Redis database with other services.

Graceful degradation: every operation is a miss / no-op when redis is None or
a Redis call fails. Failures are logged, never raised. The cache layer has no
error path towards the services.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from services.travel_api.cache.base import CacheStore

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "travel-api:"


class RedisCacheStore(CacheStore):
    """
    Usage:
        store = RedisCacheStore(redis.asyncio.from_url(settings.redis_url))
        await store.set("city:search:paris", payload, 3600)
    """

    def __init__(self, redis: Any, key_prefix: str = DEFAULT_KEY_PREFIX) -> None:
        """
        Args:
            redis:      An async Redis client (redis.asyncio compatible).
                        May be None; all operations degrade gracefully to cache misses.
            key_prefix: Prepended to every key; scopes ``clear``.
        """
        self._redis = redis
        self._prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Any | None:
        if self._redis is None:
            return None
        try:
            raw = await self._redis.get(self._key(key))
        except Exception:
            logger.warning("Cache GET failed for key=%s", key, exc_info=True)
            return None
        if raw is None:
            logger.debug("Cache miss: key=%s", key)
            return None
        try:
            value = json.loads(raw)
        except ValueError:
            logger.warning("Cache entry is not valid JSON, dropping key=%s", key)
            await self.delete(key)
            return None
        logger.debug("Cache hit: key=%s", key)
        return value

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        if self._redis is None:
            return
        if ttl_seconds <= 0:
            await self.delete(key)
            return
        try:
            payload = json.dumps(value, separators=(",", ":"))
        except (TypeError, ValueError):
            logger.warning("Cache value for key=%s is not JSON serialisable; skipping", key, exc_info=True)
            return
        try:
            await self._redis.set(self._key(key), payload, ex=max(1, math.ceil(ttl_seconds)))
            logger.debug("Cache entry stored: key=%s ttl=%ss", key, ttl_seconds)
        except Exception:
            logger.warning("Cache SET failed for key=%s", key, exc_info=True)

    async def delete(self, key: str) -> None:
        if self._redis is None:
            return
        try:
            await self._redis.delete(self._key(key))
        except Exception:
            logger.warning("Cache DELETE failed for key=%s", key, exc_info=True)

    async def clear(self) -> None:
        if self._redis is None:
            return
        removed = 0
        try:
            async for redis_key in self._redis.scan_iter(match=f"{self._prefix}*"):
                await self._redis.delete(redis_key)
                removed += 1
        except Exception:
            logger.warning("Cache CLEAR failed after removing %d keys", removed, exc_info=True)
            return
        logger.info("Cache cleared: prefix=%s removed=%d", self._prefix, removed)
