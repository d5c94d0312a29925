"""User account domain models."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID


@dataclass(frozen=True)
class UserProfile:
    """Account details a user can view and edit; credentials are never held."""

    id: UUID
    email: str
    username: str | None = None
    phone_num: str | None = None
    dob: date | None = None
    country: str | None = None
    height: float | None = None
    weight: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
