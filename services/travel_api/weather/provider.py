"""
Upstream provider contract.

The services only ever talk to the weather/geocoding API through this narrow
interface, so tests can hand in an AsyncMock and a different provider can be
swapped in without touching the cache-aside logic.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, TypeVar

from services.travel_api.cities.models import City
from services.travel_api.errors import UpstreamUnavailableError
from services.travel_api.weather.models import WeatherForecast

T = TypeVar("T")


class WeatherProvider(ABC):
    """Every method raises UpstreamUnavailableError on provider failure."""

    @abstractmethod
    async def search_cities(self, query: str) -> list[City]:
        """Cities whose name matches the (sanitized) query, in provider order."""

    @abstractmethod
    async def get_city(self, city_id: int) -> City | None:
        """A single city by provider id, or None when it does not exist."""

    @abstractmethod
    async def get_weather_forecast(self, latitude: float, longitude: float, days: int) -> WeatherForecast:
        """Daily forecast for the coordinates, ``days`` days ahead."""


async def call_provider(
    awaitable: Awaitable[T],
    operation: str,
    timeout_s: float | None,
) -> T:
    """
    Await a provider call under the caller-level timeout.

    UpstreamUnavailableError passes through unchanged; a timeout or any other
    unexpected exception is wrapped so callers see one failure type. Nothing
    is written to the cache on any of these paths.
    """
    try:
        if timeout_s is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout=timeout_s)
    except UpstreamUnavailableError:
        raise
    except asyncio.TimeoutError as exc:
        raise UpstreamUnavailableError.timeout(operation, timeout_s or 0) from exc
    except Exception as exc:
        raise UpstreamUnavailableError(f"Failed to {operation}", exc) from exc
