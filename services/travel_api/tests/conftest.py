"""
Shared test fixtures for the travel API test suite.

Provides:
- a controllable clock for TTL tests (no sleeping)
- an AsyncMock provider standing in for Open-Meteo
- an async FastAPI test client wired to the fakes (no network, no Redis)
"""

import os
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure test env vars before any app imports
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("CACHE_BACKEND", "memory")
os.environ.setdefault("SENTRY_DSN", "")

from services.travel_api.cache.memory import MemoryCacheStore  # noqa: E402
from services.travel_api.monitoring.metrics import LoggingMetrics  # noqa: E402
from services.travel_api.tests.factories import FakeClock, make_forecast  # noqa: E402
from services.travel_api.weather.provider import WeatherProvider  # noqa: E402


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> MemoryCacheStore:
    return MemoryCacheStore(max_size=1000, clock=clock)


@pytest.fixture
def metrics() -> LoggingMetrics:
    return LoggingMetrics()


@pytest.fixture
def provider() -> AsyncMock:
    """Provider fake; tests set return_value / side_effect per method."""
    fake = AsyncMock(spec=WeatherProvider)
    fake.search_cities.return_value = []
    fake.get_city.return_value = None
    fake.get_weather_forecast.return_value = make_forecast()
    return fake


@pytest.fixture
def app(store, provider, metrics):
    """The real FastAPI app with its service graph wired to the fakes."""
    from services.travel_api.main import app as _app, wire_services

    wire_services(_app, store, provider, metrics)
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP client bound to the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
