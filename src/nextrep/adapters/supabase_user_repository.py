"""Supabase-backed user profile repository."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from nextrep.domain.users import UserProfile
from nextrep.services.users import UserRepository

_COLUMNS = (
    "id, email, username, phone_num, dob, country, height, weight, created_at, "
    "updated_at"
)


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user profiles."""

    client: Client

    def get(self, user_id: UUID) -> UserProfile | None:
        """Return the profile row for a user id, if present."""
        response = (
            self.client.table("users")
            .select(_COLUMNS)
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_user(response.data[0])
        return None

    def update(self, user_id: UUID, changes: dict[str, object]) -> UserProfile | None:
        """Update the profile row and return it."""
        response = (
            self.client.table("users")
            .update(_to_row(changes))
            .eq("id", str(user_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_user(response.data[0])


def _to_row(changes: dict[str, object]) -> dict[str, object]:
    return {
        key: value.isoformat() if isinstance(value, (date, datetime)) else value
        for key, value in changes.items()
    }


def _parse_user(row: dict[str, object]) -> UserProfile:
    return UserProfile(
        id=UUID(str(row["id"])),
        email=str(row["email"]),
        username=_optional_str(row.get("username")),
        phone_num=_optional_str(row.get("phone_num")),
        dob=date.fromisoformat(str(row["dob"])[:10]) if row.get("dob") else None,
        country=_optional_str(row.get("country")),
        height=_optional_float(row.get("height")),
        weight=_optional_float(row.get("weight")),
        created_at=_optional_datetime(row.get("created_at")),
        updated_at=_optional_datetime(row.get("updated_at")),
    )


def _optional_str(value: object) -> str | None:
    return str(value) if value is not None else None


def _optional_float(value: object) -> float | None:
    return float(value) if value is not None else None  # type: ignore[arg-type]


def _optional_datetime(value: object) -> datetime | None:
    return datetime.fromisoformat(str(value)) if value else None
