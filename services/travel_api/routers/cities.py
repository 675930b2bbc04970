"""
GET /v1/api/cities/search     — city search by (partial) name
GET /v1/api/cities/{city_id}  — single city by geocoding id

Wraps CitySearchService for HTTP consumers. An empty or punctuation-only
query is a successful empty result, not an error.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, Request

from services.travel_api.errors import ValidationError
from services.travel_api.routers._deps import API_PREFIX, envelope, upstream_message

router = APIRouter(prefix=f"{API_PREFIX}/cities", tags=["cities"])

MAX_LIMIT = 100


@router.get("/search")
async def search_cities(
    request: Request,
    query: str = Query("", max_length=200, description="City name, partial or complete"),
    limit: int = Query(10, description="Max results to return (1-100)"),
) -> dict:
    if limit < 1 or limit > MAX_LIMIT:
        raise ValidationError(f"Limit must be between 1 and {MAX_LIMIT}", "limit", limit)

    city_service = request.app.state.city_service
    with upstream_message("Unable to search cities at this time. Please try again later."):
        cities = await city_service.search(query, limit)

    return envelope(
        request,
        {"results": [city.to_dict() for city in cities], "count": len(cities)},
    )


@router.get("/{city_id}")
async def get_city(request: Request, city_id: int) -> dict:
    city_service = request.app.state.city_service
    with upstream_message("Unable to look up this city at this time. Please try again later."):
        city = await city_service.get_city(city_id)
    return envelope(request, city.to_dict())
