"""Tests for Settings defaults and optional Sentry start-up."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as SettingsValidationError

from services.travel_api.config import Settings
from services.travel_api.middleware import sentry


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("CACHE_BACKEND", "CACHE_MAX_SIZE", "CACHE_TTL_CITY_SEARCH", "UPSTREAM_TIMEOUT_S"):
            monkeypatch.delenv(name, raising=False)
        s = Settings(_env_file=None)
        assert s.cache_backend == "memory"
        assert s.cache_max_size == 1000
        assert s.cache_ttl_city_search == 3600
        assert s.cache_ttl_weather_forecast == 1800
        assert s.upstream_timeout_s == 10.0

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CACHE_BACKEND", "redis")
        monkeypatch.setenv("CACHE_TTL_CITY_SEARCH", "60")
        s = Settings(_env_file=None)
        assert s.cache_backend == "redis"
        assert s.cache_ttl_city_search == 60

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("CACHE_BACKEND", "memcached")
        with pytest.raises(SettingsValidationError):
            Settings(_env_file=None)


class TestSentry:
    def test_disabled_without_dsn(self, monkeypatch):
        monkeypatch.setattr(sentry.settings, "sentry_dsn", "")
        assert sentry.setup_sentry() is False

    def test_initialised_with_dsn(self, monkeypatch):
        calls = []
        monkeypatch.setattr(sentry.settings, "sentry_dsn", "https://key@sentry.example/1")
        monkeypatch.setattr(sentry.sentry_sdk, "init", lambda **kwargs: calls.append(kwargs))

        assert sentry.setup_sentry() is True
        assert calls[0]["dsn"] == "https://key@sentry.example/1"
        assert calls[0]["send_default_pii"] is False
