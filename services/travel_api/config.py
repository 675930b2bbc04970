"""
Application configuration via pydantic-settings.
All config read from environment variables with sensible defaults for local dev.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "travel-api"
    app_version: str = "1.0.0"
    environment: str = Field(default="development", pattern=r"^(development|staging|production)$")
    debug: bool = False
    log_level: str = Field(default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    # CORS
    cors_origins: list[str] = Field(default=["http://localhost:3000"])

    # Sentry
    sentry_dsn: str = ""
    sentry_traces_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)

    # Cache
    # "memory" keeps everything in-process; "redis" swaps in the networked store.
    cache_backend: str = Field(default="memory", pattern=r"^(memory|redis)$")
    cache_max_size: int = Field(default=1000, ge=1)
    redis_url: str = Field(default="redis://localhost:6379/0")
    # Scopes every cache key, and RedisCacheStore.clear, to this service.
    redis_key_prefix: str = "travel-api:"
    cache_ttl_city_search: int = Field(default=3600, ge=0)
    cache_ttl_city_lookup: int = Field(default=86400, ge=0)
    cache_ttl_weather_forecast: int = Field(default=1800, ge=0)

    # Open-Meteo
    openmeteo_base_url: str = "https://api.open-meteo.com/v1"
    openmeteo_geocoding_url: str = "https://geocoding-api.open-meteo.com/v1"
    openmeteo_timeout_s: float = Field(default=5.0, gt=0)

    # Caller-level timeout wrapped around every provider call. None disables it.
    upstream_timeout_s: float | None = Field(default=10.0, gt=0)

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}


settings = Settings()
