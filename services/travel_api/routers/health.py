"""
GET /health — liveness + cache and metrics diagnostics
GET /       — service index
"""

from __future__ import annotations

import time

from fastapi import APIRouter, Request

from services.travel_api.cache.memory import MemoryCacheStore
from services.travel_api.config import settings
from services.travel_api.monitoring.metrics import LoggingMetrics
from services.travel_api.routers._deps import API_PREFIX, envelope

router = APIRouter(tags=["health"])

_STARTED_AT = time.monotonic()


@router.get("/health")
async def health(request: Request) -> dict:
    cache = getattr(request.app.state, "cache", None)
    metrics = getattr(request.app.state, "metrics", None)
    cache_info: dict = {"backend": settings.cache_backend}
    if isinstance(cache, MemoryCacheStore):
        cache_info["backend"] = "memory"
        cache_info["size"] = cache.size()
        cache_info["maxSize"] = cache.max_size

    return envelope(
        request,
        {
            "status": "healthy",
            "version": settings.app_version,
            "uptimeSeconds": round(time.monotonic() - _STARTED_AT, 1),
            "cache": cache_info,
            "metrics": metrics.snapshot() if isinstance(metrics, LoggingMetrics) else None,
        },
    )


@router.get("/")
async def index(request: Request) -> dict:
    return envelope(
        request,
        {
            "message": "Travel Planning API",
            "version": settings.app_version,
            "endpoints": {
                "citySearch": f"{API_PREFIX}/cities/search",
                "city": f"{API_PREFIX}/cities/{{cityId}}",
                "weatherForecast": f"{API_PREFIX}/weather/forecast",
                "activityRecommendations": f"{API_PREFIX}/activities/recommendations",
                "health": "/health",
            },
        },
    )
