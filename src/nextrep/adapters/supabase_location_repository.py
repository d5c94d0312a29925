"""Supabase cache of fitness locations."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from nextrep.domain.locations import FitnessLocation, LocationType
from nextrep.services.locations import CACHE_READ_LIMIT, LocationRepository


@dataclass
class SupabaseLocationRepository(LocationRepository):
    """Stores OpenStreetMap venues in ``fitness_locations``."""

    client: Client

    def list_in_box(  # noqa: PLR0913
        self,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
        location_type: LocationType | None = None,
        limit: int = CACHE_READ_LIMIT,
    ) -> list[FitnessLocation]:
        """Return cached locations inside a lat/lng box."""
        query = (
            self.client.table("fitness_locations")
            .select("*")
            .gte("lat", min_lat)
            .lte("lat", max_lat)
            .gte("lng", min_lng)
            .lte("lng", max_lng)
        )
        if location_type is not None:
            query = query.eq("type", str(location_type))
        response = query.limit(limit).execute()
        return [_parse_location(row) for row in response.data or []]

    def upsert(self, locations: list[FitnessLocation]) -> int:
        """Insert or refresh locations keyed by OSM id."""
        if not locations:
            return 0
        rows = [_to_row(location) for location in locations]
        response = (
            self.client.table("fitness_locations")
            .upsert(rows, on_conflict="osm_id")
            .execute()
        )
        return len(response.data or [])


def _to_row(location: FitnessLocation) -> dict[str, object]:
    return {
        "osm_id": location.osm_id,
        "name": location.name,
        "address": location.address,
        "lat": location.lat,
        "lng": location.lng,
        "type": str(location.type),
        "amenities": list(location.amenities),
        "phone": location.phone,
        "website": location.website,
        "opening_hours": location.opening_hours,
        "tags": dict(location.tags),
        "last_updated": (
            location.last_updated.isoformat() if location.last_updated else None
        ),
    }


def _parse_location(row: dict[str, object]) -> FitnessLocation:
    last_updated = row.get("last_updated")
    return FitnessLocation(
        osm_id=str(row["osm_id"]),
        name=str(row.get("name") or ""),
        address=str(row.get("address") or ""),
        lat=float(row["lat"]),
        lng=float(row["lng"]),
        type=LocationType(row.get("type") or LocationType.GYM),
        amenities=tuple(row.get("amenities") or ()),
        phone=row.get("phone"),
        website=row.get("website"),
        opening_hours=row.get("opening_hours"),
        tags=dict(row.get("tags") or {}),
        last_updated=(
            datetime.fromisoformat(str(last_updated)) if last_updated else None
        ),
    )
