"""
Tests for OpenMeteoClient against httpx.MockTransport.

No network: every request is answered by a handler defined in the test.
"""

from __future__ import annotations

import httpx
import pytest

from services.travel_api.errors import UpstreamUnavailableError
from services.travel_api.weather.client import OpenMeteoClient
from services.travel_api.weather.models import WeatherCondition

BASE_URL = "https://api.test/v1"
GEO_URL = "https://geo.test/v1"


def _client(handler) -> OpenMeteoClient:
    return OpenMeteoClient(
        base_url=BASE_URL,
        geocoding_url=GEO_URL,
        timeout_s=2.0,
        transport=httpx.MockTransport(handler),
    )


PARIS_RESULT = {
    "id": 2988507,
    "name": "Paris",
    "latitude": 48.85341,
    "longitude": 2.3488,
    "country_code": "FR",
    "timezone": "Europe/Paris",
    "population": 2138551,
    "country": "France",
    "admin1": "Île-de-France",
}

FORECAST_PAYLOAD = {
    "latitude": 48.86,
    "longitude": 2.34,
    "timezone": "Europe/Paris",
    "daily": {
        "time": ["2026-01-10", "2026-01-11"],
        "temperature_2m_max": [6.1, 4.0],
        "temperature_2m_min": [1.2, -0.5],
        "precipitation_sum": [0.0, 7.3],
        "windspeed_10m_max": [12.5, 30.1],
        "weathercode": [3, 73],
    },
}


# ---------------------------------------------------------------------------
# Geocoding
# ---------------------------------------------------------------------------

class TestSearchCities:
    @pytest.mark.asyncio
    async def test_success_maps_results(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            return httpx.Response(200, json={"results": [PARIS_RESULT], "generationtime_ms": 0.4})

        cities = await _client(handler).search_cities("Paris")

        assert len(cities) == 1
        assert cities[0].id == 2988507
        assert cities[0].country_code == "FR"
        assert seen["url"].path == "/v1/search"
        assert seen["url"].params["name"] == "Paris"
        assert seen["url"].params["count"] == "10"
        assert seen["url"].params["language"] == "en"
        assert seen["url"].params["format"] == "json"

    @pytest.mark.asyncio
    async def test_missing_results_key_is_empty_list(self):
        def handler(request):
            return httpx.Response(200, json={"generationtime_ms": 0.2})

        assert await _client(handler).search_cities("Qwzx") == []

    @pytest.mark.asyncio
    async def test_result_without_required_field_is_malformed(self):
        broken = {k: v for k, v in PARIS_RESULT.items() if k != "timezone"}

        def handler(request):
            return httpx.Response(200, json={"results": [broken]})

        with pytest.raises(UpstreamUnavailableError, match="malformed"):
            await _client(handler).search_cities("Paris")


class TestGetCity:
    @pytest.mark.asyncio
    async def test_found(self):
        def handler(request):
            assert request.url.path == "/v1/get"
            assert request.url.params["id"] == "2988507"
            return httpx.Response(200, json=PARIS_RESULT)

        city = await _client(handler).get_city(2988507)
        assert city is not None and city.name == "Paris"

    @pytest.mark.asyncio
    async def test_404_is_none(self):
        def handler(request):
            return httpx.Response(404, json={"error": True, "reason": "Not found"})

        assert await _client(handler).get_city(1) is None

    @pytest.mark.asyncio
    async def test_payload_without_id_is_none(self):
        def handler(request):
            return httpx.Response(200, json={"generationtime_ms": 0.1})

        assert await _client(handler).get_city(1) is None


# ---------------------------------------------------------------------------
# Forecast
# ---------------------------------------------------------------------------

class TestGetWeatherForecast:
    @pytest.mark.asyncio
    async def test_success_maps_parallel_arrays(self):
        def handler(request):
            assert request.url.path == "/v1/forecast"
            assert request.url.params["forecast_days"] == "2"
            assert request.url.params["timezone"] == "auto"
            assert "weathercode" in request.url.params["daily"]
            return httpx.Response(200, json=FORECAST_PAYLOAD)

        forecast = await _client(handler).get_weather_forecast(48.85, 2.35, 2)

        assert forecast.timezone == "Europe/Paris"
        assert len(forecast.daily_forecasts) == 2
        second = forecast.daily_forecasts[1]
        assert second.precipitation == 7.3
        assert second.weather_condition is WeatherCondition.SNOWY

    @pytest.mark.asyncio
    async def test_missing_daily_block(self):
        def handler(request):
            return httpx.Response(200, json={"latitude": 1, "longitude": 1, "timezone": "UTC"})

        with pytest.raises(UpstreamUnavailableError, match="Missing daily forecast data"):
            await _client(handler).get_weather_forecast(1, 1, 2)

    @pytest.mark.asyncio
    async def test_missing_daily_field(self):
        daily = dict(FORECAST_PAYLOAD["daily"])
        del daily["windspeed_10m_max"]

        def handler(request):
            return httpx.Response(200, json={**FORECAST_PAYLOAD, "daily": daily})

        with pytest.raises(UpstreamUnavailableError, match="Missing required fields"):
            await _client(handler).get_weather_forecast(1, 1, 2)

    @pytest.mark.asyncio
    async def test_inconsistent_array_lengths(self):
        daily = {**FORECAST_PAYLOAD["daily"], "weathercode": [3]}

        def handler(request):
            return httpx.Response(200, json={**FORECAST_PAYLOAD, "daily": daily})

        with pytest.raises(UpstreamUnavailableError, match="Inconsistent array lengths"):
            await _client(handler).get_weather_forecast(1, 1, 2)


# ---------------------------------------------------------------------------
# Transport and status failures
# ---------------------------------------------------------------------------

class TestFailureTranslation:
    @pytest.mark.asyncio
    async def test_server_error(self):
        def handler(request):
            return httpx.Response(503, text="maintenance")

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await _client(handler).search_cities("Paris")

        err = exc_info.value
        assert err.status_code == 502
        assert err.code == "WEATHER_API_ERROR"
        assert err.message == "OpenMeteo API returned error 503: OpenMeteo API is currently unavailable"

    @pytest.mark.asyncio
    async def test_client_error_uses_reason(self):
        def handler(request):
            return httpx.Response(400, json={"error": True, "reason": "Latitude must be in range"})

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await _client(handler).get_weather_forecast(1, 1, 2)

        assert exc_info.value.message == "OpenMeteo API returned error 400: Latitude must be in range"

    @pytest.mark.asyncio
    async def test_client_error_without_body(self):
        def handler(request):
            return httpx.Response(429, text="")

        with pytest.raises(UpstreamUnavailableError, match="Invalid request"):
            await _client(handler).search_cities("Paris")

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(UpstreamUnavailableError, match="timed out after 2000ms"):
            await _client(handler).search_cities("Paris")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await _client(handler).search_cities("Paris")

        assert exc_info.value.message == "Unable to connect to OpenMeteo API"
        assert exc_info.value.details["originalName"] == "ConnectError"

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(UpstreamUnavailableError, match="not JSON"):
            await _client(handler).search_cities("Paris")
