"""Nearby gym discovery on OpenStreetMap data.

Locations are served from the local cache when enough are stored near the
search point; otherwise the Overpass API is queried and its answer is
classified, cached and merged in.
"""

import logging
import math
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

import httpx

from nextrep.adapters.overpass_client import OverpassClient
from nextrep.domain.locations import FitnessLocation, LocationType, NearbyLocation
from nextrep.errors import UpstreamServiceError, ValidationError
from nextrep.services.calendar import utc_now

_logger = logging.getLogger(__name__)

EARTH_RADIUS_METERS = 6371e3
CACHE_BOX_DEGREES = 0.1
CACHE_READ_LIMIT = 50
MIN_RADIUS_METERS = 100
MAX_RADIUS_METERS = 50000
DEFAULT_RADIUS_METERS = 10000
MAX_LIMIT = 100
DEFAULT_LIMIT = 20
MIN_CACHED_RESULTS = 5
MIN_CACHED_SHARE = 0.3

_BASE_SELECTORS = (
    'node["amenity"="fitness_centre"]',
    'node["leisure"="fitness_centre"]',
    'node["sport"="fitness_centre"]',
    'way["amenity"="fitness_centre"]',
    'way["leisure"="fitness_centre"]',
    'way["sport"="fitness_centre"]',
)

_TYPE_SELECTORS = {
    LocationType.GYM: (
        'node["amenity"="gym"]',
        'way["amenity"="gym"]',
        'node["leisure"="gym"]',
        'way["leisure"="gym"]',
    ),
    LocationType.STUDIO: (
        'node["amenity"="yoga"]',
        'way["amenity"="yoga"]',
        'node["amenity"="dance"]',
        'way["amenity"="dance"]',
        'node["amenity"="pilates"]',
        'way["amenity"="pilates"]',
    ),
    LocationType.CROSSFIT: (
        'node["name"~"crossfit",i]',
        'way["name"~"crossfit",i]',
        'node["brand"="CrossFit"]',
        'way["brand"="CrossFit"]',
    ),
    LocationType.POOL: (
        'node["leisure"="swimming_pool"]',
        'way["leisure"="swimming_pool"]',
        'node["amenity"="swimming_pool"]',
        'way["amenity"="swimming_pool"]',
    ),
    LocationType.MARTIAL_ARTS: (
        'node["sport"="martial_arts"]',
        'way["sport"="martial_arts"]',
        'node["name"~"karate|boxing|judo|taekwondo|kung fu|jiu jitsu",i]',
        'way["name"~"karate|boxing|judo|taekwondo|kung fu|jiu jitsu",i]',
    ),
}

_FITNESS_KEYWORDS = (
    "fitness_centre",
    "gym",
    "fitness",
    "workout",
    "exercise",
    "yoga",
    "pilates",
    "dance",
    "martial_arts",
    "swimming_pool",
    "crossfit",
    "boxing",
    "karate",
    "judo",
    "taekwondo",
)

_POOL_NAME = re.compile(r"pool|aquatic", re.IGNORECASE)
_CROSSFIT_NAME = re.compile(r"crossfit|cross fit|cf ", re.IGNORECASE)
_MARTIAL_ARTS_NAME = re.compile(
    r"karate|boxing|judo|taekwondo|kung fu|jiu jitsu|martial|mma|ufc|kickboxing"
    r"|muay thai",
    re.IGNORECASE,
)
_STUDIO_NAME = re.compile(
    r"yoga|dance|pilates|zumba|spinning|barre|ballet|contemporary|hip hop|jazz",
    re.IGNORECASE,
)

_AMENITY_LABELS = {
    "fitness_centre": "Fitness Centre",
    "gym": "Gym",
    "swimming_pool": "Swimming Pool",
    "sauna": "Sauna",
    "parking": "Parking",
    "childcare": "Childcare",
    "personal_trainer": "Personal Trainer",
    "group_classes": "Group Classes",
    "yoga": "Yoga",
    "dance": "Dance",
    "martial_arts": "Martial Arts",
    "boxing": "Boxing",
    "crossfit": "CrossFit",
    "pilates": "Pilates",
    "zumba": "Zumba",
    "spinning": "Spinning",
    "treadmill": "Treadmill",
    "weights": "Weights",
    "cardio": "Cardio Equipment",
    "changing_room": "Changing Room",
    "leisure": "Leisure Activities",
    "sport": "Sports Facilities",
}

_ADDRESS_KEYS = (
    "addr:housenumber",
    "addr:street",
    "addr:city",
    "addr:postcode",
    "addr:country",
)


class LocationRepository(Protocol):
    """Persistence interface for cached fitness locations."""

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

    def upsert(self, locations: list[FitnessLocation]) -> int:
        """Insert or refresh locations keyed by OSM id."""


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Return the great-circle distance in metres."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def format_distance(meters: float) -> str:
    """Format as ``850m`` below a kilometre and ``1.2km`` above."""
    if meters < 1000:
        return f"{math.floor(meters + 0.5)}m"
    return f"{meters / 1000:.1f}km"


def is_fitness_location(tags: dict[str, str]) -> bool:
    """Return True when OSM tags describe a fitness venue."""
    name = tags.get("name", "").lower()
    return any(
        keyword in (tags.get("amenity"), tags.get("leisure"), tags.get("sport"))
        or keyword in name
        for keyword in _FITNESS_KEYWORDS
    )


def classify(tags: dict[str, str]) -> LocationType:
    """Pick the venue type; pool beats crossfit beats martial arts beats studio."""
    name = tags.get("name", "")
    amenity = tags.get("amenity")
    leisure = tags.get("leisure")
    sport = tags.get("sport")
    if (
        "swimming_pool" in (amenity, leisure)
        or sport == "swimming"
        or _POOL_NAME.search(name)
    ):
        return LocationType.POOL
    if _CROSSFIT_NAME.search(name):
        return LocationType.CROSSFIT
    if "martial_arts" in (sport, amenity) or _MARTIAL_ARTS_NAME.search(name):
        return LocationType.MARTIAL_ARTS
    if (
        amenity in ("yoga", "dance", "pilates")
        or leisure in ("yoga", "dance")
        or _STUDIO_NAME.search(name)
    ):
        return LocationType.STUDIO
    return LocationType.GYM


def extract_amenities(tags: dict[str, str]) -> tuple[str, ...]:
    """Return display labels for the amenities found in the tags."""
    labels: list[str] = []
    for key, value in tags.items():
        if value in _AMENITY_LABELS:
            labels.append(_AMENITY_LABELS[value])
        if key in _AMENITY_LABELS and value == "yes":
            labels.append(_AMENITY_LABELS[key])
    if "fitness_centre" in (tags.get("leisure"), tags.get("amenity")):
        labels.append("Fitness Centre")
    if tags.get("opening_hours"):
        labels.append("Scheduled Hours")
    if tags.get("phone"):
        labels.append("Phone Available")
    if tags.get("website"):
        labels.append("Website Available")
    return tuple(dict.fromkeys(labels))


def build_address(tags: dict[str, str]) -> str:
    parts = [tags[key] for key in _ADDRESS_KEYS if tags.get(key)]
    return ", ".join(parts) if parts else "Address not available"


def extract_name(tags: dict[str, str]) -> str:
    if tags.get("name"):
        return tags["name"]
    if tags.get("brand"):
        return tags["brand"]
    for key in ("amenity", "leisure", "sport"):
        if tags.get(key):
            return tags[key].replace("_", " ").title()
    return "Fitness Location"


def location_from_element(
    element: dict[str, object], now: datetime | None = None
) -> FitnessLocation | None:
    """Convert an Overpass node or way into a location, or None if unsuitable."""
    tags = element.get("tags") or {}
    if not tags or not is_fitness_location(tags):
        return None
    if element.get("type") == "node":
        lat, lng = element.get("lat"), element.get("lon")
    elif element.get("type") == "way" and element.get("center"):
        lat, lng = element["center"].get("lat"), element["center"].get("lon")
    else:
        return None
    if lat is None or lng is None:
        return None
    return FitnessLocation(
        osm_id=str(element["id"]),
        name=extract_name(tags),
        address=build_address(tags),
        lat=float(lat),
        lng=float(lng),
        type=classify(tags),
        amenities=extract_amenities(tags),
        phone=tags.get("phone") or tags.get("contact:phone"),
        website=tags.get("website") or tags.get("contact:website"),
        opening_hours=tags.get("opening_hours"),
        tags=dict(tags),
        last_updated=now,
    )


def build_overpass_query(
    lat: float,
    lng: float,
    radius: int,
    location_type: LocationType | None = None,
    timeout_seconds: int = 30,
) -> str:
    """Return an Overpass QL query for venues of a type around a point."""
    selectors = _TYPE_SELECTORS.get(location_type, _BASE_SELECTORS)
    lines = [f"[out:json][timeout:{timeout_seconds}];("]
    around = f"(around:{radius},{lat},{lng});"
    lines.extend(f"  {selector}{around}" for selector in selectors)
    lines.extend([");", "out center;", ">;", "out skel qt;"])
    return "\n".join(lines)


@dataclass
class LocationService:
    """Finds fitness venues near a point."""

    repository: LocationRepository
    client: OverpassClient
    timeout_seconds: int = 30
    clock: Callable[[], datetime] = utc_now

    async def find_nearby(  # noqa: PLR0913
        self,
        lat: float,
        lng: float,
        radius: int = DEFAULT_RADIUS_METERS,
        location_type: LocationType | str | None = None,
        query: str | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> list[NearbyLocation]:
        """Return venues sorted by distance, at most ``limit`` of them."""
        _validate(lat, lng, radius, limit)
        resolved = _resolve_type(location_type)
        cached = self.repository.list_in_box(
            lat - CACHE_BOX_DEGREES,
            lat + CACHE_BOX_DEGREES,
            lng - CACHE_BOX_DEGREES,
            lng + CACHE_BOX_DEGREES,
            resolved,
        )
        locations = {location.osm_id: location for location in cached}
        if len(cached) < min(MIN_CACHED_RESULTS, limit * MIN_CACHED_SHARE):
            fetched = await self._fetch(lat, lng, radius, resolved)
            if fetched:
                stored = self.repository.upsert(fetched)
                _logger.info(
                    "Cached %s of %s Overpass locations", stored, len(fetched)
                )
            for location in fetched:
                locations[location.osm_id] = location
        return _rank(list(locations.values()), lat, lng, query, limit)

    async def _fetch(
        self,
        lat: float,
        lng: float,
        radius: int,
        location_type: LocationType | None,
    ) -> list[FitnessLocation]:
        overpass_ql = build_overpass_query(
            lat, lng, radius, location_type, self.timeout_seconds
        )
        try:
            payload = await self.client.query(overpass_ql)
        except httpx.TimeoutException as exc:
            _logger.warning("Overpass query timed out: %s", exc)
            raise UpstreamServiceError(
                "Request timeout - OSM API took too long to respond", status_code=504
            ) from exc
        except httpx.HTTPError as exc:
            _logger.warning("Overpass query failed: %s", exc)
            raise UpstreamServiceError("Failed to fetch locations from OSM") from exc
        now = self.clock()
        locations = []
        for element in payload.get("elements", []):
            location = location_from_element(element, now)
            if location is not None:
                locations.append(location)
        return locations


def _validate(lat: float, lng: float, radius: int, limit: int) -> None:
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise ValidationError("Invalid coordinates provided")
    if not MIN_RADIUS_METERS <= radius <= MAX_RADIUS_METERS:
        raise ValidationError("Radius must be between 100m and 50km")
    if not 1 <= limit <= MAX_LIMIT:
        raise ValidationError("Limit must be between 1 and 100")


def _resolve_type(location_type: LocationType | str | None) -> LocationType | None:
    if location_type in (None, "", "all"):
        return None
    try:
        return LocationType(location_type)
    except ValueError as exc:
        raise ValidationError(f"Unknown location type: {location_type}") from exc


def _rank(
    locations: list[FitnessLocation],
    lat: float,
    lng: float,
    query: str | None,
    limit: int,
) -> list[NearbyLocation]:
    if query:
        needle = query.lower()
        locations = [
            location
            for location in locations
            if needle in location.name.lower() or needle in location.address.lower()
        ]
    nearby = []
    for location in locations:
        distance = haversine_distance(lat, lng, location.lat, location.lng)
        nearby.append(
            NearbyLocation(
                location=location,
                distance=distance,
                distance_formatted=format_distance(distance),
            )
        )
    nearby.sort(key=lambda item: item.distance)
    return nearby[:limit]
