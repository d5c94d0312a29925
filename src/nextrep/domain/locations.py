"""Fitness location domain models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class LocationType(StrEnum):
    """Kind of fitness venue."""

    GYM = "gym"
    STUDIO = "studio"
    CROSSFIT = "crossfit"
    POOL = "pool"
    MARTIAL_ARTS = "martial-arts"


@dataclass(frozen=True)
class FitnessLocation:
    """A fitness venue taken from OpenStreetMap."""

    osm_id: str
    name: str
    address: str
    lat: float
    lng: float
    type: LocationType
    amenities: tuple[str, ...] = ()
    phone: str | None = None
    website: str | None = None
    opening_hours: str | None = None
    tags: dict[str, str] = field(default_factory=dict)
    last_updated: datetime | None = None


@dataclass(frozen=True)
class NearbyLocation:
    """A location with its distance from the search point."""

    location: FitnessLocation
    distance: float
    distance_formatted: str
