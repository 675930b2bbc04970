"""
Travel API FastAPI service — city search, forecasts and activity recommendations.

Entrypoint: uvicorn services.travel_api.main:app --host 0.0.0.0 --port 8000
"""

import logging
import uuid
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from services.travel_api.cache.base import CacheStore
from services.travel_api.cache.memory import MemoryCacheStore
from services.travel_api.cache.redis_store import RedisCacheStore
from services.travel_api.cities.service import CitySearchService
from services.travel_api.config import settings
from services.travel_api.errors import AppError, NotFoundError
from services.travel_api.middleware.cors import setup_cors
from services.travel_api.middleware.sentry import setup_sentry
from services.travel_api.monitoring.metrics import LoggingMetrics, Metrics
from services.travel_api.ranking.activities import ActivityRankingService
from services.travel_api.routers import activities, cities, health, weather
from services.travel_api.weather.client import OpenMeteoClient
from services.travel_api.weather.provider import WeatherProvider
from services.travel_api.weather.service import WeatherService

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def wire_services(app: FastAPI, cache: CacheStore, provider: WeatherProvider, metrics: Metrics) -> None:
    """Attach one cache, provider and service graph to app.state."""
    city_service = CitySearchService(
        provider,
        cache,
        metrics,
        search_ttl_seconds=settings.cache_ttl_city_search,
        lookup_ttl_seconds=settings.cache_ttl_city_lookup,
        upstream_timeout_s=settings.upstream_timeout_s,
    )
    weather_service = WeatherService(
        provider,
        cache,
        metrics,
        ttl_seconds=settings.cache_ttl_weather_forecast,
        upstream_timeout_s=settings.upstream_timeout_s,
    )
    app.state.cache = cache
    app.state.metrics = metrics
    app.state.city_service = city_service
    app.state.weather_service = weather_service
    app.state.activity_service = ActivityRankingService(weather_service, metrics)


async def _create_cache() -> tuple[CacheStore, object | None]:
    if settings.cache_backend == "redis":
        try:
            redis_client = aioredis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
            )
            await redis_client.ping()
            logger.info("Using Redis cache backend")
            return RedisCacheStore(redis_client, settings.redis_key_prefix), redis_client
        except Exception:
            # Fall back to the in-process store rather than refusing to start
            logger.warning("Redis unavailable, falling back to in-memory cache", exc_info=True)
    return MemoryCacheStore(max_size=settings.cache_max_size), None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. The cache lives exactly as long as the app."""
    setup_sentry()

    cache, redis_client = await _create_cache()
    wire_services(app, cache, OpenMeteoClient(), LoggingMetrics())

    yield

    if redis_client is not None:
        await redis_client.aclose()
    else:
        await cache.clear()


app = FastAPI(
    title="Travel API",
    version=settings.app_version,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url=None,
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(cities.router)
app.include_router(weather.router)
app.include_router(activities.router)

# CORS (needs to be outermost to handle preflight)
setup_cors(app)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


def _error_response(request: Request, status_code: int, code: str, message: str, details=None) -> JSONResponse:
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "requestId": _request_id(request)},
    )


# Request ID injection
@app.middleware("http")
async def request_envelope_middleware(request: Request, call_next) -> Response:
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# -- Exception Handlers --

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("Request failed: path=%s code=%s message=%s", request.url.path, exc.code, exc.message)
    return _error_response(
        request,
        exc.status_code,
        exc.code,
        exc.public_message or exc.message,
        exc.details,
    )


@app.exception_handler(404)
async def not_found_handler(request: Request, exc) -> JSONResponse:
    err = NotFoundError.resource("route", request.url.path)
    return _error_response(request, err.status_code, err.code, err.message, err.details)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    return _error_response(
        request,
        422,
        "VALIDATION_ERROR",
        "Request parameters failed validation.",
        {"fields": fields},
    )


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc) -> JSONResponse:
    logger.exception("Unhandled error on path=%s", request.url.path)
    return _error_response(request, 500, "INTERNAL_SERVER_ERROR", "An unexpected error occurred.")
