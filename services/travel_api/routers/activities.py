"""
GET /v1/api/activities/recommendations                  ?cityId=&days=
GET /v1/api/activities/recommendations/by-coordinates   ?latitude=&longitude=&days=

Ranks SKIING / SURFING / INDOOR_SIGHTSEEING / OUTDOOR_SIGHTSEEING against the
forecast. The cityId variant resolves the city through the geocoding lookup
first, so an unknown id is a NOT_FOUND (404).
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Request

from services.travel_api.routers._deps import API_PREFIX, envelope, upstream_message
from services.travel_api.weather.service import validate_days

router = APIRouter(prefix=f"{API_PREFIX}/activities", tags=["activities"])

_UNAVAILABLE = "Unable to fetch activity recommendations at this time. Please try again later."


@router.get("/recommendations")
async def get_activity_recommendations(
    request: Request,
    cityId: int = Query(..., description="Geocoding id of the city"),
    days: int = Query(7, description="Forecast days, 1 to 16"),
) -> dict:
    # Reject bad input before spending an upstream lookup on the city.
    validate_days(days)

    city_service = request.app.state.city_service
    activity_service = request.app.state.activity_service
    with upstream_message(_UNAVAILABLE):
        city = await city_service.get_city(cityId)
        payload = await activity_service.recommend_for_city(city, days)
    return envelope(request, payload)


@router.get("/recommendations/by-coordinates")
async def get_activity_recommendations_by_coordinates(
    request: Request,
    latitude: float = Query(..., description="Latitude, -90 to 90"),
    longitude: float = Query(..., description="Longitude, -180 to 180"),
    days: int = Query(7, description="Forecast days, 1 to 16"),
) -> dict:
    activity_service = request.app.state.activity_service
    with upstream_message(_UNAVAILABLE):
        payload = await activity_service.recommend_for_coordinates(latitude, longitude, days)
    return envelope(request, payload)
