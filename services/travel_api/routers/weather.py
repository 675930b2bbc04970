"""
GET /v1/api/weather/forecast — daily forecast for a coordinate pair.

Range checks on latitude, longitude and days live in WeatherService and come
back as VALIDATION_ERROR (400).
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Request

from services.travel_api.routers._deps import API_PREFIX, envelope, upstream_message

router = APIRouter(prefix=f"{API_PREFIX}/weather", tags=["weather"])


@router.get("/forecast")
async def get_weather_forecast(
    request: Request,
    latitude: float = Query(..., description="Latitude, -90 to 90"),
    longitude: float = Query(..., description="Longitude, -180 to 180"),
    days: int = Query(7, description="Forecast days, 1 to 16"),
) -> dict:
    weather_service = request.app.state.weather_service
    with upstream_message("Unable to fetch weather forecast at this time. Please try again later."):
        forecast = await weather_service.get_weather_forecast(latitude, longitude, days)
    return envelope(request, forecast.to_dict())
