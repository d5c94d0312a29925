"""Nearby fitness location endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Query, Request

from nextrep.api.auth import current_user_id
from nextrep.domain.locations import LocationType, NearbyLocation
from nextrep.services.locations import DEFAULT_LIMIT, DEFAULT_RADIUS_METERS

if TYPE_CHECKING:
    from nextrep.containers import AppContainer

router = APIRouter(prefix="/locations", tags=["locations"])


@router.get("/nearby")
async def nearby_locations(  # noqa: PLR0913
    request: Request,
    lat: float,
    lng: float,
    radius: int = DEFAULT_RADIUS_METERS,
    location_type: str | None = Query(default=None, alias="type"),
    query: str | None = None,
    limit: int = DEFAULT_LIMIT,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return gyms and studios around a point, nearest first."""
    container: AppContainer = request.app.state.container
    nearby = await container.location_service.find_nearby(
        lat, lng, radius, location_type, query, limit
    )
    return {
        "success": True,
        "data": [_location_payload(item) for item in nearby],
        "count": len(nearby),
        "searchParams": {
            "lat": lat,
            "lng": lng,
            "radius": radius,
            "type": location_type or "all",
            "query": query,
            "limit": limit,
        },
    }


@router.get("/categories")
async def location_categories(
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return the venue types a search can filter on."""
    return {"success": True, "data": [str(item) for item in LocationType]}


def _location_payload(item: NearbyLocation) -> dict[str, object]:
    location = item.location
    return {
        "osmId": location.osm_id,
        "name": location.name,
        "address": location.address,
        "coordinates": {"lat": location.lat, "lng": location.lng},
        "type": str(location.type),
        "amenities": list(location.amenities),
        "phone": location.phone,
        "website": location.website,
        "openingHours": location.opening_hours,
        "distance": round(item.distance),
        "distanceFormatted": item.distance_formatted,
    }
