"""
In-process TTL cache store.

Entries carry an absolute expiry (``now + ttl`` at write time) and are expired
once ``now > expires_at``. Expired entries disappear two ways only:

  - read-triggered: ``get`` on an expired key deletes it and reports a miss
  - size-triggered: a ``set`` that pushes the store above ``max_size`` runs one
    synchronous cleanup pass before returning

There is no background sweep, so an idle store can hold expired entries until
the next oversized write. ``size()`` counts those not-yet-swept entries too.

Thread safety: one coarse lock guards every read/modify/write, including the
cleanup pass, so a sweep can never remove an entry written after it started.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

from services.travel_api.cache.base import CacheStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 1000


@dataclass
class _Entry:
    value: Any
    expires_at: float


class MemoryCacheStore(CacheStore):
    """
    Dict-backed TTL store. The async methods never suspend.

    Args:
        max_size: entry count above which a write triggers cleanup.
        clock:    monotonic seconds source; injectable for tests.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[str, _Entry] = {}
        self._max_size = max_size
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def max_size(self) -> int:
        return self._max_size

    async def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("Cache miss - key not found: key=%s", key)
                return None
            if self._clock() > entry.expires_at:
                del self._entries[key]
                logger.debug("Cache miss - entry expired: key=%s", key)
                return None
            logger.debug("Cache hit: key=%s", key)
            return entry.value

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl_seconds)
            size = len(self._entries)
            logger.debug("Cache entry stored: key=%s ttl=%ss size=%d", key, ttl_seconds, size)
            if size > self._max_size:
                logger.info("Cache cleanup triggered: size=%d max_size=%d", size, self._max_size)
                self._cleanup()

    async def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    async def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        """Entry count, including expired entries not yet swept."""
        with self._lock:
            return len(self._entries)

    def _cleanup(self) -> None:
        # Caller holds the lock.
        now = self._clock()
        size_before = len(self._entries)
        expired = [key for key, entry in self._entries.items() if entry.expires_at < now]
        for key in expired:
            del self._entries[key]
        logger.info(
            "Cache cleanup completed: size_before=%d size_after=%d removed=%d",
            size_before,
            len(self._entries),
            len(expired),
        )
