"""
WeatherService — cache-aside daily forecasts.

Cache key:  weather:forecast:{lat:.4f}:{lon:.4f}:{days}
TTL:        1800 seconds (30 minutes) by default

Coordinates are rounded to 4 decimals (~11 m) in the key, so two requests for
the same spot share one upstream call. Provider failures are never cached.
"""

from __future__ import annotations

import logging
import math
import time

from services.travel_api.cache.base import CacheStore, TypedCache
from services.travel_api.errors import ValidationError
from services.travel_api.monitoring.metrics import Metrics
from services.travel_api.weather.models import WeatherForecast
from services.travel_api.weather.provider import WeatherProvider, call_provider

logger = logging.getLogger(__name__)

FORECAST_NAMESPACE = "weather:forecast"
FORECAST_TTL_SECONDS = 1800
MIN_FORECAST_DAYS = 1
MAX_FORECAST_DAYS = 16
DEFAULT_FORECAST_DAYS = 7


def validate_coordinates(latitude: float, longitude: float) -> None:
    for name, value in (("latitude", latitude), ("longitude", longitude)):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
            raise ValidationError.invalid_input(name, value, "must be a valid number")
    if not -90 <= latitude <= 90:
        raise ValidationError.invalid_input("latitude", latitude, "must be between -90 and 90")
    if not -180 <= longitude <= 180:
        raise ValidationError.invalid_input("longitude", longitude, "must be between -180 and 180")


def validate_days(days: int) -> None:
    if isinstance(days, bool) or not isinstance(days, int) or not MIN_FORECAST_DAYS <= days <= MAX_FORECAST_DAYS:
        raise ValidationError.invalid_input(
            "days", days, f"must be between {MIN_FORECAST_DAYS} and {MAX_FORECAST_DAYS}"
        )


class WeatherService:
    """
    Usage:
        service = WeatherService(provider, store, metrics)
        forecast = await service.get_weather_forecast(35.68, 139.69, days=5)
    """

    def __init__(
        self,
        provider: WeatherProvider,
        cache: CacheStore,
        metrics: Metrics | None = None,
        ttl_seconds: float = FORECAST_TTL_SECONDS,
        upstream_timeout_s: float | None = None,
    ) -> None:
        self._provider = provider
        self._metrics = metrics or Metrics()
        self._upstream_timeout_s = upstream_timeout_s
        self._forecasts: TypedCache[WeatherForecast] = TypedCache(
            cache,
            FORECAST_NAMESPACE,
            ttl_seconds,
            encode=WeatherForecast.to_dict,
            decode=WeatherForecast.from_dict,
        )

    @staticmethod
    def cache_suffix(latitude: float, longitude: float, days: int) -> str:
        return f"{latitude:.4f}:{longitude:.4f}:{days}"

    async def get_weather_forecast(
        self,
        latitude: float,
        longitude: float,
        days: int = DEFAULT_FORECAST_DAYS,
    ) -> WeatherForecast:
        """
        Forecast for the coordinates, from cache when fresh.

        Raises:
            ValidationError:          coordinates or days out of range.
            UpstreamUnavailableError: provider failed on a cache miss.
        """
        started = time.monotonic()
        logger.info("Weather forecast requested: lat=%s lon=%s days=%s", latitude, longitude, days)
        self._metrics.increment_counter("weather.forecast.requests")

        try:
            validate_coordinates(latitude, longitude)
            validate_days(days)
        except ValidationError as exc:
            logger.warning("Invalid forecast request: %s", exc.message)
            self._metrics.increment_counter("weather.forecast.validation_error")
            raise

        suffix = self.cache_suffix(latitude, longitude, days)
        cached = await self._forecasts.get(suffix)
        if cached is not None:
            logger.info("Weather forecast cache hit: key=%s", self._forecasts.key(suffix))
            self._metrics.increment_counter("weather.forecast.cache_hit")
            self._metrics.record_timing(
                "weather.forecast.duration", (time.monotonic() - started) * 1000, {"cache": "hit"}
            )
            return cached

        logger.info("Weather forecast cache miss, fetching from provider: key=%s", self._forecasts.key(suffix))
        self._metrics.increment_counter("weather.forecast.cache_miss")

        api_started = time.monotonic()
        try:
            forecast = await call_provider(
                self._provider.get_weather_forecast(latitude, longitude, days),
                "fetch weather forecast",
                self._upstream_timeout_s,
            )
        except Exception:
            logger.error("Weather forecast provider call failed: lat=%s lon=%s days=%d", latitude, longitude, days)
            self._metrics.increment_counter("weather.forecast.api_error")
            raise
        self._metrics.record_timing("weather.forecast.api_call", (time.monotonic() - api_started) * 1000)

        await self._forecasts.set(suffix, forecast)
        self._metrics.record_timing(
            "weather.forecast.duration", (time.monotonic() - started) * 1000, {"cache": "miss"}
        )
        return forecast
