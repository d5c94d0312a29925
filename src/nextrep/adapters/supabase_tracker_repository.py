"""Supabase repository for trackers."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from nextrep.domain.entries import Tracker, TrackerType
from nextrep.services.trackers import TrackerRepository


@dataclass
class SupabaseTrackerRepository(TrackerRepository):
    """Supabase implementation for trackers."""

    client: Client

    def add(self, tracker: Tracker) -> Tracker:
        """Insert a tracker row."""
        response = self.client.table("trackers").insert(_to_row(tracker)).execute()
        if not response.data:
            raise RuntimeError("Failed to create tracker")
        return _parse_tracker(response.data[0])

    def get(self, tracker_id: UUID) -> Tracker | None:
        response = (
            self.client.table("trackers")
            .select("*")
            .eq("id", str(tracker_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_tracker(response.data[0])

    def update(self, tracker: Tracker) -> Tracker:
        row = _to_row(tracker)
        tracker_id = row.pop("id")
        response = (
            self.client.table("trackers").update(row).eq("id", tracker_id).execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update tracker")
        return _parse_tracker(response.data[0])

    def delete(self, tracker_id: UUID) -> None:
        self.client.table("trackers").delete().eq("id", str(tracker_id)).execute()

    def list_in_range(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[Tracker]:
        """Return a user's trackers dated in ``[start, end)``."""
        response = (
            self.client.table("trackers")
            .select("*")
            .eq("user_id", str(user_id))
            .gte("date", start.isoformat())
            .lt("date", end.isoformat())
            .order("date")
            .execute()
        )
        return [_parse_tracker(row) for row in response.data or []]

    def list_for_references(self, reference_ids: list[UUID]) -> list[Tracker]:
        """Return trackers of the given entries, oldest first."""
        if not reference_ids:
            return []
        response = (
            self.client.table("trackers")
            .select("*")
            .in_("reference_id", [str(item) for item in reference_ids])
            .order("date")
            .execute()
        )
        return [_parse_tracker(row) for row in response.data or []]

    def delete_for_reference(self, reference_id: UUID) -> int:
        """Delete an entry's trackers and return how many went."""
        response = (
            self.client.table("trackers")
            .delete()
            .eq("reference_id", str(reference_id))
            .execute()
        )
        return len(response.data or [])


def _to_row(tracker: Tracker) -> dict[str, object]:
    return {
        "id": str(tracker.id),
        "user_id": str(tracker.user_id),
        "type": str(tracker.type),
        "reference_id": str(tracker.reference_id),
        "date": tracker.date.isoformat(),
        "completed_reps": tracker.completed_reps,
        "completed_time": tracker.completed_time,
        "weight_consumed": tracker.weight_consumed,
        "sleep_hours": tracker.sleep_hours,
    }


def _parse_tracker(row: dict[str, object]) -> Tracker:
    reps = row.get("completed_reps")
    return Tracker(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        type=TrackerType(row["type"]),
        reference_id=UUID(str(row["reference_id"])),
        date=datetime.fromisoformat(str(row["date"])),
        completed_reps=int(reps) if reps is not None else None,
        completed_time=_optional_float(row.get("completed_time")),
        weight_consumed=_optional_float(row.get("weight_consumed")),
        sleep_hours=_optional_float(row.get("sleep_hours")),
    )


def _optional_float(value: object) -> float | None:
    return float(value) if value is not None else None
