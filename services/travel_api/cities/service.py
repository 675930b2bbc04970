"""
CitySearchService — cache-aside city search over the geocoding provider.

Pipeline per search(query, limit):
  1. empty / whitespace-only query  -> []            (no cache, no provider)
  2. sanitize                        -> "" means []   (no cache, no provider)
  3. cache key  city:search:<lower(sanitized)>
  4. hit  -> first `limit` of the cached, already-ordered list
  5. miss -> provider.search_cities(sanitized)
  6. order: exact name match first, then population desc, then name
  7. cache the FULL ordered list (later, larger limits are still hits)
  8. return the first `limit`

Provider failures propagate as UpstreamUnavailableError and leave no cache
entry behind, so the next identical search retries upstream.

Concurrent misses for the same query are not deduplicated: each calls the
provider and writes the same entry. Last write wins.
"""

from __future__ import annotations

import logging
import re
import time

from services.travel_api.cache.base import CacheStore, TypedCache
from services.travel_api.cities.models import City
from services.travel_api.errors import NotFoundError, ValidationError
from services.travel_api.monitoring.metrics import Metrics
from services.travel_api.weather.provider import WeatherProvider, call_provider

logger = logging.getLogger(__name__)

CITY_SEARCH_NAMESPACE = "city:search"
CITY_LOOKUP_NAMESPACE = "city:id"
CITY_SEARCH_TTL_SECONDS = 3600
CITY_LOOKUP_TTL_SECONDS = 86400
DEFAULT_LIMIT = 10

# Anything that is not a letter, digit, whitespace, hyphen or apostrophe.
_DISALLOWED_CHARS = re.compile(r"[^\w\s'-]|_")
_WHITESPACE_RUN = re.compile(r"\s+")


def sanitize_query(raw: str) -> str:
    """Strip disallowed characters and collapse whitespace.

    '  New   York!! ' -> 'New York'
    "O'Fallon"        -> "O'Fallon"
    '!!!'             -> ''

    Idempotent: sanitize_query(sanitize_query(q)) == sanitize_query(q).
    """
    sanitized = raw.strip()
    sanitized = _DISALLOWED_CHARS.sub("", sanitized)
    sanitized = _WHITESPACE_RUN.sub(" ", sanitized)
    return sanitized.strip()


def order_by_relevance(cities: list[City], query: str) -> list[City]:
    """Deterministic total order for a result set.

    Exact case-insensitive name match first, then population descending
    (missing population counts as 0), then case-insensitive name. Names that
    differ only in case fall back to the exact name, then the provider id, so
    the result never depends on the order the provider returned.
    """
    query_lower = query.lower()

    def sort_key(city: City) -> tuple[int, int, str, str, int]:
        name_lower = city.name.lower()
        return (
            0 if name_lower == query_lower else 1,
            -(city.population or 0),
            name_lower,
            city.name,
            city.id,
        )

    return sorted(cities, key=sort_key)


def _encode_cities(cities: list[City]) -> list[dict]:
    return [city.to_dict() for city in cities]


def _decode_cities(raw: list[dict]) -> list[City]:
    return [City.from_dict(d) for d in raw]


class CitySearchService:
    """
    Usage:
        service = CitySearchService(provider, MemoryCacheStore(), LoggingMetrics())
        cities = await service.search("  new york ", limit=5)
    """

    def __init__(
        self,
        provider: WeatherProvider,
        cache: CacheStore,
        metrics: Metrics | None = None,
        search_ttl_seconds: float = CITY_SEARCH_TTL_SECONDS,
        lookup_ttl_seconds: float = CITY_LOOKUP_TTL_SECONDS,
        upstream_timeout_s: float | None = None,
    ) -> None:
        self._provider = provider
        self._metrics = metrics or Metrics()
        self._upstream_timeout_s = upstream_timeout_s
        self._searches: TypedCache[list[City]] = TypedCache(
            cache,
            CITY_SEARCH_NAMESPACE,
            search_ttl_seconds,
            encode=_encode_cities,
            decode=_decode_cities,
        )
        self._lookups: TypedCache[City] = TypedCache(
            cache,
            CITY_LOOKUP_NAMESPACE,
            lookup_ttl_seconds,
            encode=City.to_dict,
            decode=City.from_dict,
        )

    def cache_key(self, sanitized_query: str) -> str:
        return self._searches.key(sanitized_query.lower())

    async def search(self, query: str, limit: int = DEFAULT_LIMIT) -> list[City]:
        started = time.monotonic()
        logger.info("City search requested: query=%r limit=%d", query, limit)
        self._metrics.increment_counter("city.search.requests")

        if not query or not query.strip():
            logger.debug("Empty query provided, returning empty results")
            self._metrics.increment_counter("city.search.empty_query")
            return []

        sanitized = sanitize_query(query)
        if not sanitized:
            logger.debug("Query sanitization resulted in empty string: query=%r", query)
            self._metrics.increment_counter("city.search.invalid_query")
            return []

        if limit <= 0:
            return []

        suffix = sanitized.lower()
        cached = await self._searches.get(suffix)
        if cached is not None:
            logger.info("City search cache hit: query=%r results=%d", sanitized, len(cached))
            self._metrics.increment_counter("city.search.cache_hit")
            self._metrics.record_timing("city.search.duration", _elapsed_ms(started), {"cache": "hit"})
            return cached[:limit]

        logger.info("City search cache miss, fetching from provider: query=%r", sanitized)
        self._metrics.increment_counter("city.search.cache_miss")

        api_started = time.monotonic()
        try:
            cities = await call_provider(
                self._provider.search_cities(sanitized),
                "search cities",
                self._upstream_timeout_s,
            )
        except Exception:
            self._metrics.increment_counter("city.search.api_error")
            logger.warning("City search provider call failed: query=%r", sanitized, exc_info=True)
            raise
        self._metrics.record_timing("city.search.api_call", _elapsed_ms(api_started))

        ordered = order_by_relevance(cities, sanitized)
        self._metrics.record_gauge("city.search.result_count", len(ordered))
        await self._searches.set(suffix, ordered)

        self._metrics.record_timing("city.search.duration", _elapsed_ms(started), {"cache": "miss"})
        logger.info("City search completed: query=%r results=%d", sanitized, len(ordered))
        return ordered[:limit]

    async def get_city(self, city_id: int) -> City:
        """Look a city up by provider id. Raises NotFoundError if it does not exist."""
        if isinstance(city_id, bool) or not isinstance(city_id, int) or city_id <= 0:
            raise ValidationError.invalid_input("cityId", city_id, "must be a positive integer")

        suffix = str(city_id)
        cached = await self._lookups.get(suffix)
        if cached is not None:
            self._metrics.increment_counter("city.lookup.cache_hit")
            return cached

        self._metrics.increment_counter("city.lookup.cache_miss")
        city = await call_provider(self._provider.get_city(city_id), "look up city", self._upstream_timeout_s)
        if city is None:
            logger.info("City lookup found nothing: id=%d", city_id)
            raise NotFoundError.city(city_id)

        await self._lookups.set(suffix, city)
        return city


def _elapsed_ms(started: float) -> float:
    return (time.monotonic() - started) * 1000
