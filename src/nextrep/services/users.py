"""User profile business logic."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol
from uuid import UUID

from nextrep.domain.users import UserProfile
from nextrep.errors import NotFoundError, ValidationError
from nextrep.services.calendar import utc_now

_logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("username", "phone_num", "dob", "country", "height", "weight")


class UserRepository(Protocol):
    """Persistence interface for user profiles."""

    def get(self, user_id: UUID) -> UserProfile | None:
        """Return the user's profile, if present."""

    def update(self, user_id: UUID, changes: dict[str, object]) -> UserProfile | None:
        """Apply changes and return the stored profile, or None if missing."""


@dataclass
class UserService:
    """Application service for viewing and editing user details."""

    repository: UserRepository
    clock: Callable[[], datetime] = utc_now

    def get_profile(self, user_id: UUID) -> UserProfile:
        """Return the user's profile or raise ``NotFoundError``."""
        profile = self.repository.get(user_id)
        if profile is None:
            raise NotFoundError("User not found")
        return profile

    def update_profile(self, user_id: UUID, changes: dict[str, object]) -> UserProfile:
        """Apply partial changes to the editable profile fields.

        ``None`` values are ignored; other keys are rejected.
        """
        unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(unknown)}")
        updates = {key: value for key, value in changes.items() if value is not None}
        if not updates:
            raise ValidationError("No profile fields to update")
        now = self.clock()
        _validate(updates, today=now.date())
        updates["updated_at"] = now
        updated = self.repository.update(user_id, updates)
        if updated is None:
            raise NotFoundError("User not found")
        _logger.info("Updated profile fields %s for user %s", sorted(updates), user_id)
        return updated


def _validate(updates: dict[str, object], *, today: date) -> None:
    for key in ("height", "weight"):
        value = updates.get(key)
        if value is not None and float(value) <= 0:  # type: ignore[arg-type]
            raise ValidationError(f"{key.capitalize()} must be positive")
    dob = updates.get("dob")
    if isinstance(dob, datetime):
        dob = dob.date()
        updates["dob"] = dob
    if isinstance(dob, date) and dob > today:
        raise ValidationError("Date of birth cannot be in the future")
    for key in ("username", "country", "phone_num"):
        value = updates.get(key)
        if isinstance(value, str):
            if not value.strip():
                raise ValidationError(f"{key} cannot be empty")
            updates[key] = value.strip()
