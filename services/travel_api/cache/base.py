"""
Cache contract shared by every backend, plus the typed per-kind view.

The contract is async even though the in-memory backend never suspends, so a
networked store (Redis) can be substituted without changing any service.

Key scheme:  <namespace>:<suffix>
  city:search:new york
  city:id:2950159
  weather:forecast:52.5200:13.4050:7

Services never touch a CacheStore directly. They hold a TypedCache bound to a
namespace, a TTL and an encode/decode pair, so a reader of ``city:search``
always gets ``list[City]`` back and can never decode a forecast by mistake.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheStore(ABC):
    """Key/value store with per-entry expiration. Never raises on normal use."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the stored value, or None when absent or expired."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store value under key, overwriting any previous entry."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key if present."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry."""


def _identity(value: Any) -> Any:
    return value


class TypedCache(Generic[T]):
    """
    Typed view over a CacheStore for one result kind.

    Usage:
        searches: TypedCache[list[City]] = TypedCache(
            store, "city:search", ttl_seconds=3600,
            encode=lambda cities: [c.to_dict() for c in cities],
            decode=lambda raw: [City.from_dict(d) for d in raw],
        )
        hit = await searches.get("new york")
    """

    def __init__(
        self,
        store: CacheStore,
        namespace: str,
        ttl_seconds: float,
        encode: Callable[[T], Any] = _identity,
        decode: Callable[[Any], T] = _identity,
    ) -> None:
        self._store = store
        self.namespace = namespace.rstrip(":")
        self.ttl_seconds = ttl_seconds
        self._encode = encode
        self._decode = decode

    def key(self, suffix: str) -> str:
        return f"{self.namespace}:{suffix}"

    async def get(self, suffix: str) -> T | None:
        raw = await self._store.get(self.key(suffix))
        if raw is None:
            return None
        try:
            return self._decode(raw)
        except (KeyError, TypeError, ValueError):
            # Undecodable payload is treated as a miss and dropped.
            logger.warning("Discarding undecodable cache entry: key=%s", self.key(suffix), exc_info=True)
            await self._store.delete(self.key(suffix))
            return None

    async def set(self, suffix: str, value: T) -> None:
        await self._store.set(self.key(suffix), self._encode(value), self.ttl_seconds)

    async def delete(self, suffix: str) -> None:
        await self._store.delete(self.key(suffix))
