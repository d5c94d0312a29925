"""Scheduling of diets and workouts, and sleep logging."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol, TypeVar
from uuid import UUID, uuid4

from nextrep.domain.entries import (
    DietEntry,
    ScheduledEntry,
    SleepEntry,
    TrackerType,
    WorkoutEntry,
    scheduled_at,
)
from nextrep.errors import InvalidCategoryError, NotFoundError, parse_id
from nextrep.services.calendar import (
    DEFAULT_WEEK_START,
    DateRange,
    ViewType,
    calculate_range,
    to_utc,
    utc_now,
)
from nextrep.services.goals import GoalRepository, require_goal
from nextrep.services.trackers import TrackerRepository

_logger = logging.getLogger(__name__)

EntryT = TypeVar("EntryT")

ENTRY_TYPES: dict[TrackerType, type] = {
    TrackerType.DIET: DietEntry,
    TrackerType.WORKOUT: WorkoutEntry,
    TrackerType.SLEEP: SleepEntry,
}

_MOMENT_FIELDS = {
    TrackerType.DIET: "meal_date_and_time",
    TrackerType.WORKOUT: "workout_date_and_time",
    TrackerType.SLEEP: "date",
}

_LABELS = {
    TrackerType.DIET: "Diet",
    TrackerType.WORKOUT: "Workout",
    TrackerType.SLEEP: "Sleep entry",
}


class EntryRepository(Protocol[EntryT]):
    """Persistence interface for one kind of scheduled entry."""

    def add(self, entry: EntryT) -> EntryT:
        """Insert an entry and return it."""

    def get(self, entry_id: UUID) -> EntryT | None:
        """Return an entry by id."""

    def update(self, entry: EntryT) -> EntryT:
        """Replace a stored entry and return it."""

    def delete(self, entry_id: UUID) -> None:
        """Delete an entry by id."""

    def list_in_range(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[EntryT]:
        """Return a user's entries scheduled in ``[start, end)``, oldest first."""

    def list_for_goal(self, goal_id: UUID) -> list[EntryT]:
        """Return entries linked to a goal."""

    def detach_goal(self, goal_id: UUID) -> int:
        """Clear the goal link on every entry pointing at a goal."""


@dataclass
class ScheduleService:
    """Creates, lists and removes scheduled entries of every kind."""

    goals: GoalRepository
    diets: EntryRepository[DietEntry]
    workouts: EntryRepository[WorkoutEntry]
    sleeps: EntryRepository[SleepEntry]
    trackers: TrackerRepository
    week_start: int = DEFAULT_WEEK_START
    clock: Callable[[], datetime] = utc_now

    def repository_for(self, kind: TrackerType | str) -> EntryRepository:
        """Return the repository holding entries of ``kind``."""
        return {
            TrackerType.DIET: self.diets,
            TrackerType.WORKOUT: self.workouts,
            TrackerType.SLEEP: self.sleeps,
        }[TrackerType(kind)]

    def add_entry(
        self, user_id: UUID, kind: TrackerType | str, fields: dict[str, object]
    ) -> ScheduledEntry:
        """Store a new entry built from validated request fields."""
        resolved = TrackerType(kind)
        values = dict(fields)
        values["goal_id"] = self._linked_goal_id(
            user_id, resolved, values.get("goal_id")
        )
        moment_field = _MOMENT_FIELDS[resolved]
        values[moment_field] = to_utc(values[moment_field])
        if "target_muscle_groups" in values:
            values["target_muscle_groups"] = tuple(values["target_muscle_groups"])
        entry = ENTRY_TYPES[resolved](id=uuid4(), user_id=user_id, **values)
        return self.repository_for(resolved).add(entry)

    def get_entry(
        self, user_id: UUID, kind: TrackerType | str, entry_id: str | UUID
    ) -> ScheduledEntry:
        """Return one of the user's entries."""
        resolved = TrackerType(kind)
        label = _LABELS[resolved]
        parsed = parse_id(entry_id, label=f"{label.lower()} ID")
        entry = self.repository_for(resolved).get(parsed)
        if entry is None or entry.user_id != user_id:
            raise NotFoundError(f"{label} not found")
        return entry

    def update_entry(
        self,
        user_id: UUID,
        kind: TrackerType | str,
        entry_id: str | UUID,
        changes: dict[str, object],
    ) -> ScheduledEntry:
        """Apply partial changes to an entry."""
        resolved = TrackerType(kind)
        entry = self.get_entry(user_id, resolved, entry_id)
        updates = {key: value for key, value in changes.items() if value is not None}
        if "goal_id" in updates:
            updates["goal_id"] = self._linked_goal_id(
                user_id, resolved, updates["goal_id"]
            )
        moment_field = _MOMENT_FIELDS[resolved]
        if moment_field in updates:
            updates[moment_field] = to_utc(updates[moment_field])
        if "target_muscle_groups" in updates:
            updates["target_muscle_groups"] = tuple(updates["target_muscle_groups"])
        return self.repository_for(resolved).update(replace(entry, **updates))

    def list_entries(
        self, user_id: UUID, kind: TrackerType | str, date_range: DateRange
    ) -> list[ScheduledEntry]:
        """Return the user's entries of a kind inside a range, oldest first."""
        entries = self.repository_for(kind).list_in_range(
            user_id, date_range.start, date_range.end
        )
        return sorted(entries, key=lambda entry: to_utc(scheduled_at(entry)))

    def list_for_view(
        self,
        user_id: UUID,
        kind: TrackerType | str,
        view_type: ViewType | str,
        offset: int = 0,
        anchor: datetime | None = None,
    ) -> tuple[DateRange, list[ScheduledEntry]]:
        """Return the calendar day, week or month and the entries inside it."""
        date_range = calculate_range(
            view_type,
            offset,
            anchor if anchor is not None else self.clock(),
            week_start=self.week_start,
        )
        return date_range, self.list_entries(user_id, kind, date_range)

    def delete_entry(
        self, user_id: UUID, kind: TrackerType | str, entry_id: str | UUID
    ) -> None:
        """Delete an entry together with its trackers."""
        resolved = TrackerType(kind)
        entry = self.get_entry(user_id, resolved, entry_id)
        removed = self.trackers.delete_for_reference(entry.id)
        self.repository_for(resolved).delete(entry.id)
        _logger.info("Deleted %s %s and %s trackers", resolved, entry.id, removed)

    def detach_goal(self, goal_id: UUID) -> int:
        """Unlink every entry from a goal and return how many were touched."""
        return sum(
            self.repository_for(kind).detach_goal(goal_id) for kind in ENTRY_TYPES
        )

    def delete_for_goal(self, goal_id: UUID) -> int:
        """Delete every entry linked to a goal, with their trackers."""
        deleted = 0
        for kind in ENTRY_TYPES:
            repository = self.repository_for(kind)
            for entry in repository.list_for_goal(goal_id):
                self.trackers.delete_for_reference(entry.id)
                repository.delete(entry.id)
                deleted += 1
        return deleted

    def _linked_goal_id(
        self, user_id: UUID, kind: TrackerType, goal_id: object
    ) -> UUID | None:
        if goal_id is None:
            return None
        goal = require_goal(self.goals, user_id, goal_id)
        if str(goal.category) != str(kind):
            raise InvalidCategoryError(f"Category must be {kind}")
        return goal.id
