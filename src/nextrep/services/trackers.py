"""Tracking of actual completion against scheduled entries."""

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol
from uuid import UUID, uuid4

from nextrep.domain.entries import (
    ScheduledEntry,
    Tracker,
    TrackerType,
    scheduled_at,
)
from nextrep.errors import NotFoundError, ValidationError, parse_id
from nextrep.services.calendar import (
    DateRange,
    ViewType,
    calculate_range,
    day_key,
    to_utc,
    utc_now,
)

# Measurements a tracker may carry, per kind of entry it refers to.
_MEASUREMENTS = {
    TrackerType.DIET: ("weight_consumed",),
    TrackerType.WORKOUT: ("completed_reps", "completed_time"),
    TrackerType.SLEEP: ("sleep_hours",),
}


class TrackerRepository(Protocol):
    """Persistence interface for trackers."""

    def add(self, tracker: Tracker) -> Tracker:
        """Insert a tracker and return it."""

    def get(self, tracker_id: UUID) -> Tracker | None:
        """Return a tracker by id."""

    def update(self, tracker: Tracker) -> Tracker:
        """Replace a stored tracker and return it."""

    def delete(self, tracker_id: UUID) -> None:
        """Delete a tracker by id."""

    def list_in_range(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[Tracker]:
        """Return a user's trackers dated in ``[start, end)``, oldest first."""

    def list_for_references(self, reference_ids: list[UUID]) -> list[Tracker]:
        """Return trackers pointing at any of the given entries, oldest first."""

    def delete_for_reference(self, reference_id: UUID) -> int:
        """Delete every tracker pointing at an entry."""


class EntryLookup(Protocol):
    """Read access to scheduled entries."""

    def get_entry(
        self, user_id: UUID, kind: TrackerType, entry_id: str | UUID
    ) -> ScheduledEntry:
        """Return one of the user's entries or raise ``NotFoundError``."""

    def list_entries(
        self, user_id: UUID, kind: TrackerType, date_range: DateRange
    ) -> list[ScheduledEntry]:
        """Return the user's entries of a kind inside a range."""


@dataclass
class TrackerService:
    """Records and reads trackers."""

    repository: TrackerRepository
    entries: EntryLookup
    clock: Callable[[], datetime] = utc_now

    def add_tracker(  # noqa: PLR0913
        self,
        user_id: UUID,
        kind: TrackerType | str,
        reference_id: str | UUID,
        date: datetime | None = None,
        *,
        completed_reps: int | None = None,
        completed_time: float | None = None,
        weight_consumed: float | None = None,
        sleep_hours: float | None = None,
    ) -> Tracker:
        """Track an entry; measurements that do not apply to its kind are dropped."""
        resolved = TrackerType(kind)
        entry = self.entries.get_entry(user_id, resolved, reference_id)
        measurements = _measurements_for(
            resolved,
            {
                "completed_reps": completed_reps,
                "completed_time": completed_time,
                "weight_consumed": weight_consumed,
                "sleep_hours": sleep_hours,
            },
        )
        tracker = Tracker(
            id=uuid4(),
            user_id=user_id,
            type=resolved,
            reference_id=entry.id,
            date=to_utc(date) if date is not None else self.clock(),
            **measurements,
        )
        return self.repository.add(tracker)

    def get_tracker(self, user_id: UUID, tracker_id: str | UUID) -> Tracker:
        """Return one of the user's trackers."""
        tracker = self.repository.get(parse_id(tracker_id, label="tracker ID"))
        if tracker is None or tracker.user_id != user_id:
            raise NotFoundError("Tracker not found")
        return tracker

    def update_tracker(
        self, user_id: UUID, tracker_id: str | UUID, changes: dict[str, object]
    ) -> Tracker:
        """Update a tracker's date or measurements."""
        tracker = self.get_tracker(user_id, tracker_id)
        updates = {key: value for key, value in changes.items() if value is not None}
        unknown = set(updates) - {"date", *_MEASUREMENTS[tracker.type]}
        if unknown:
            fields = ", ".join(sorted(unknown))
            raise ValidationError(f"Cannot update {fields} on a {tracker.type} tracker")
        _ensure_non_negative(updates)
        if "date" in updates:
            updates["date"] = to_utc(updates["date"])
        return self.repository.update(replace(tracker, **updates))

    def delete_tracker(self, user_id: UUID, tracker_id: str | UUID) -> None:
        """Delete one of the user's trackers."""
        tracker = self.get_tracker(user_id, tracker_id)
        self.repository.delete(tracker.id)

    def trackers_for_day(self, user_id: UUID, day: datetime) -> list[Tracker]:
        """Return the user's trackers dated on the UTC day of ``day``."""
        date_range = calculate_range(ViewType.DAY, anchor=day)
        return self.repository.list_in_range(user_id, date_range.start, date_range.end)

    def tracking_overview(
        self, user_id: UUID, date_range: DateRange
    ) -> dict[str, list[dict[str, object]]]:
        """Group scheduled entries in a range by day, each with its tracker."""
        scheduled: list[tuple[TrackerType, ScheduledEntry]] = []
        for kind in (TrackerType.DIET, TrackerType.WORKOUT, TrackerType.SLEEP):
            for entry in self.entries.list_entries(user_id, kind, date_range):
                scheduled.append((kind, entry))
        trackers = self.repository.list_for_references(
            [entry.id for _, entry in scheduled]
        )
        first: dict[UUID, Tracker] = {}
        for tracker in trackers:
            first.setdefault(tracker.reference_id, tracker)

        grouped: dict[str, list[dict[str, object]]] = defaultdict(list)
        for kind, entry in scheduled:
            tracker = first.get(entry.id)
            if tracker is not None and tracker.type is not kind:
                tracker = None
            grouped[day_key(scheduled_at(entry))].append(
                {"type": str(kind), "data": entry, "tracker": tracker}
            )
        return dict(sorted(grouped.items()))


def _measurements_for(
    kind: TrackerType, values: dict[str, object]
) -> dict[str, object]:
    measurements = {key: values.get(key) for key in _MEASUREMENTS[kind]}
    _ensure_non_negative(measurements)
    return measurements


def _ensure_non_negative(measurements: dict[str, object]) -> None:
    for key, value in measurements.items():
        if key != "date" and value is not None and value < 0:
            raise ValidationError(f"{key} must not be negative")
