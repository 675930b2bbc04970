"""
Cache package.

One CacheStore instance is created per app (see main.lifespan) and handed to
the services, which each wrap it in TypedCache views per result kind.
"""

from services.travel_api.cache.base import CacheStore, TypedCache
from services.travel_api.cache.memory import MemoryCacheStore
from services.travel_api.cache.redis_store import RedisCacheStore

__all__ = ["CacheStore", "TypedCache", "MemoryCacheStore", "RedisCacheStore"]
