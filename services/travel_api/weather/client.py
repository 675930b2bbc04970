"""
OpenMeteoClient — Open-Meteo geocoding + forecast over httpx.

Endpoints:
  {geocoding_url}/search   ?name=&count=10&language=en&format=json
  {geocoding_url}/get      ?id=
  {base_url}/forecast      ?latitude=&longitude=&daily=...&forecast_days=&timezone=auto

Geocoding /search returns:
  {"results": [{"id": 2988507, "name": "Paris", "country": "France",
                "country_code": "FR", "latitude": 48.85, "longitude": 2.35,
                "timezone": "Europe/Paris", "population": 2138551, ...}],
   "generationtime_ms": 0.5}
  ("results" is omitted entirely when nothing matches.)

Forecast returns parallel arrays under "daily", one element per day.

Every failure is translated to UpstreamUnavailableError:
  timeout          -> UpstreamUnavailableError.timeout
  transport error  -> UpstreamUnavailableError.network_error
  4xx / 5xx        -> UpstreamUnavailableError.api_error
  bad payload      -> UpstreamUnavailableError.malformed_response
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from services.travel_api.cities.models import City
from services.travel_api.config import settings
from services.travel_api.errors import UpstreamUnavailableError
from services.travel_api.weather.models import DailyForecast, WeatherForecast
from services.travel_api.weather.provider import WeatherProvider

logger = logging.getLogger(__name__)

_SEARCH_RESULT_COUNT = 10

_DAILY_FIELDS = (
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_sum",
    "windspeed_10m_max",
    "weathercode",
)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _city_from_result(result: dict[str, Any]) -> City:
    return City(
        id=result["id"],
        name=result["name"],
        country=result["country"],
        country_code=result["country_code"],
        latitude=result["latitude"],
        longitude=result["longitude"],
        timezone=result["timezone"],
        population=result.get("population"),
    )


def _forecast_from_payload(payload: dict[str, Any], endpoint: str) -> WeatherForecast:
    daily = payload.get("daily") if isinstance(payload, dict) else None
    if not daily:
        raise UpstreamUnavailableError.malformed_response(endpoint, "Missing daily forecast data in response")

    if "time" not in daily or any(daily.get(name) is None for name in _DAILY_FIELDS):
        raise UpstreamUnavailableError.malformed_response(
            endpoint, "Missing required fields in daily forecast data"
        )

    length = len(daily["time"])
    if any(len(daily[name]) != length for name in _DAILY_FIELDS):
        raise UpstreamUnavailableError.malformed_response(
            endpoint, "Inconsistent array lengths in daily forecast data"
        )

    try:
        days = [
            DailyForecast(
                date=daily["time"][i],
                temperature_max=daily["temperature_2m_max"][i],
                temperature_min=daily["temperature_2m_min"][i],
                precipitation=daily["precipitation_sum"][i],
                wind_speed=daily["windspeed_10m_max"][i],
                weather_code=daily["weathercode"][i],
            )
            for i in range(length)
        ]
        return WeatherForecast(
            latitude=payload["latitude"],
            longitude=payload["longitude"],
            timezone=payload["timezone"],
            daily_forecasts=tuple(days),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise UpstreamUnavailableError.malformed_response(endpoint, str(exc)) from exc


class OpenMeteoClient(WeatherProvider):
    """
    Usage:
        client = OpenMeteoClient()
        cities = await client.search_cities("Paris")
        forecast = await client.get_weather_forecast(48.85, 2.35, days=7)
    """

    def __init__(
        self,
        base_url: str | None = None,
        geocoding_url: str | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url:      Forecast API root (OPENMETEO_BASE_URL).
            geocoding_url: Geocoding API root (OPENMETEO_GEOCODING_URL).
            timeout_s:     Per-request HTTP timeout (OPENMETEO_TIMEOUT_S).
            transport:     Optional httpx transport; tests pass httpx.MockTransport.
        """
        self._base_url = (base_url or settings.openmeteo_base_url).rstrip("/")
        self._geocoding_url = (geocoding_url or settings.openmeteo_geocoding_url).rstrip("/")
        self._timeout_s = timeout_s or settings.openmeteo_timeout_s
        self._transport = transport

    async def search_cities(self, query: str) -> list[City]:
        endpoint = f"{self._geocoding_url}/search"
        started = time.monotonic()
        logger.debug("OpenMeteo geocoding call starting: query=%r", query)

        payload = await self._get_json(
            endpoint,
            {"name": query, "count": _SEARCH_RESULT_COUNT, "language": "en", "format": "json"},
        )
        results = payload.get("results") if isinstance(payload, dict) else None
        logger.info(
            "OpenMeteo geocoding call ok: query=%r results=%d duration_ms=%d",
            query,
            len(results or []),
            _elapsed_ms(started),
        )
        if not results:
            return []

        try:
            return [_city_from_result(result) for result in results]
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamUnavailableError.malformed_response(endpoint, f"Invalid city result: {exc}") from exc

    async def get_city(self, city_id: int) -> City | None:
        endpoint = f"{self._geocoding_url}/get"
        payload = await self._get_json(endpoint, {"id": city_id}, not_found_ok=True)
        if not payload or not isinstance(payload, dict) or "id" not in payload:
            logger.info("OpenMeteo city lookup found nothing: id=%s", city_id)
            return None
        try:
            return _city_from_result(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamUnavailableError.malformed_response(endpoint, f"Invalid city result: {exc}") from exc

    async def get_weather_forecast(self, latitude: float, longitude: float, days: int) -> WeatherForecast:
        endpoint = f"{self._base_url}/forecast"
        started = time.monotonic()
        logger.debug("OpenMeteo forecast call starting: lat=%s lon=%s days=%d", latitude, longitude, days)

        payload = await self._get_json(
            endpoint,
            {
                "latitude": latitude,
                "longitude": longitude,
                "daily": ",".join(_DAILY_FIELDS),
                "forecast_days": days,
                "timezone": "auto",
            },
        )
        forecast = _forecast_from_payload(payload, endpoint)
        logger.info(
            "OpenMeteo forecast call ok: lat=%s lon=%s days=%d duration_ms=%d",
            latitude,
            longitude,
            days,
            _elapsed_ms(started),
        )
        return forecast

    async def _get_json(
        self,
        endpoint: str,
        params: dict[str, Any],
        not_found_ok: bool = False,
    ) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self._timeout_s, transport=self._transport) as client:
                resp = await client.get(endpoint, params=params)
                if not_found_ok and resp.status_code == 404:
                    return None
                resp.raise_for_status()
                return resp.json()
        except httpx.TimeoutException as exc:
            logger.warning("OpenMeteo request timed out: endpoint=%s", endpoint)
            raise UpstreamUnavailableError.timeout(endpoint, self._timeout_s) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning(
                "OpenMeteo returned %d for endpoint=%s: %s",
                status,
                endpoint,
                exc.response.text[:200],
            )
            if status >= 500:
                message = "OpenMeteo API is currently unavailable"
            else:
                message = _error_reason(exc.response) or "Invalid request"
            raise UpstreamUnavailableError.api_error(status, message, endpoint) from exc
        except httpx.TransportError as exc:
            logger.warning("OpenMeteo request failed: endpoint=%s error=%s", endpoint, exc)
            raise UpstreamUnavailableError.network_error(exc, endpoint) from exc
        except ValueError as exc:
            # resp.json() on a non-JSON body
            raise UpstreamUnavailableError.malformed_response(endpoint, "Response body is not JSON") from exc


def _error_reason(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("reason") or body.get("message")
    return None
