"""Supabase repositories for diets, workouts and sleep entries."""

from abc import abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar
from uuid import UUID

from supabase import Client

from nextrep.domain.entries import (
    DietEntry,
    MealType,
    SleepEntry,
    WorkoutEntry,
    WorkoutType,
)
from nextrep.services.schedule import EntryRepository, EntryT


@dataclass
class SupabaseEntryRepository(EntryRepository[EntryT]):
    """Shared table access; subclasses name the table and map rows."""

    client: Client

    table_name: ClassVar[str]
    moment_column: ClassVar[str]
    label: ClassVar[str]

    def add(self, entry: EntryT) -> EntryT:
        """Insert an entry row."""
        response = (
            self.client.table(self.table_name).insert(self._to_row(entry)).execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to create {self.label}")
        return self._parse_row(response.data[0])

    def get(self, entry_id: UUID) -> EntryT | None:
        """Return an entry by id."""
        response = (
            self.client.table(self.table_name)
            .select("*")
            .eq("id", str(entry_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return self._parse_row(response.data[0])

    def update(self, entry: EntryT) -> EntryT:
        """Replace an entry row."""
        row = self._to_row(entry)
        entry_id = row.pop("id")
        response = (
            self.client.table(self.table_name).update(row).eq("id", entry_id).execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update {self.label}")
        return self._parse_row(response.data[0])

    def delete(self, entry_id: UUID) -> None:
        """Delete an entry row."""
        self.client.table(self.table_name).delete().eq("id", str(entry_id)).execute()

    def list_in_range(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[EntryT]:
        """Return a user's entries scheduled in ``[start, end)``."""
        response = (
            self.client.table(self.table_name)
            .select("*")
            .eq("user_id", str(user_id))
            .gte(self.moment_column, start.isoformat())
            .lt(self.moment_column, end.isoformat())
            .order(self.moment_column)
            .execute()
        )
        return [self._parse_row(row) for row in response.data or []]

    def list_for_goal(self, goal_id: UUID) -> list[EntryT]:
        """Return entries linked to a goal."""
        response = (
            self.client.table(self.table_name)
            .select("*")
            .eq("goal_id", str(goal_id))
            .execute()
        )
        return [self._parse_row(row) for row in response.data or []]

    def detach_goal(self, goal_id: UUID) -> int:
        """Clear the goal link on linked rows and return how many changed."""
        response = (
            self.client.table(self.table_name)
            .update({"goal_id": None})
            .eq("goal_id", str(goal_id))
            .execute()
        )
        return len(response.data or [])

    @abstractmethod
    def _to_row(self, entry: EntryT) -> dict[str, object]:
        """Map an entry to a table row."""

    @abstractmethod
    def _parse_row(self, row: dict[str, object]) -> EntryT:
        """Map a table row to an entry."""


@dataclass
class SupabaseDietRepository(SupabaseEntryRepository[DietEntry]):
    """Diet entries stored in ``diets``."""

    table_name: ClassVar[str] = "diets"
    moment_column: ClassVar[str] = "meal_date_and_time"
    label: ClassVar[str] = "diet"

    def _to_row(self, entry: DietEntry) -> dict[str, object]:
        return {
            "id": str(entry.id),
            "user_id": str(entry.user_id),
            "meal_date_and_time": entry.meal_date_and_time.isoformat(),
            "meal": str(entry.meal),
            "food_name": entry.food_name,
            "calories": entry.calories,
            "carbs": entry.carbs,
            "protein": entry.protein,
            "fat": entry.fat,
            "meal_weight": entry.meal_weight,
            "goal_id": _optional_id(entry.goal_id),
        }

    def _parse_row(self, row: dict[str, object]) -> DietEntry:
        return DietEntry(
            id=UUID(str(row["id"])),
            user_id=UUID(str(row["user_id"])),
            meal_date_and_time=datetime.fromisoformat(str(row["meal_date_and_time"])),
            meal=MealType(row["meal"]),
            food_name=str(row.get("food_name") or ""),
            calories=float(row.get("calories") or 0),
            carbs=float(row.get("carbs") or 0),
            protein=float(row.get("protein") or 0),
            fat=float(row.get("fat") or 0),
            meal_weight=_optional_float(row.get("meal_weight")),
            goal_id=_parse_optional_id(row.get("goal_id")),
        )


@dataclass
class SupabaseWorkoutRepository(SupabaseEntryRepository[WorkoutEntry]):
    """Workout entries stored in ``workouts``."""

    table_name: ClassVar[str] = "workouts"
    moment_column: ClassVar[str] = "workout_date_and_time"
    label: ClassVar[str] = "workout"

    def _to_row(self, entry: WorkoutEntry) -> dict[str, object]:
        return {
            "id": str(entry.id),
            "user_id": str(entry.user_id),
            "workout_date_and_time": entry.workout_date_and_time.isoformat(),
            "type": str(entry.type),
            "exercise_name": entry.exercise_name,
            "duration": entry.duration,
            "reps": entry.reps,
            "target_muscle_groups": list(entry.target_muscle_groups),
            "goal_id": _optional_id(entry.goal_id),
        }

    def _parse_row(self, row: dict[str, object]) -> WorkoutEntry:
        reps = row.get("reps")
        return WorkoutEntry(
            id=UUID(str(row["id"])),
            user_id=UUID(str(row["user_id"])),
            workout_date_and_time=datetime.fromisoformat(
                str(row["workout_date_and_time"])
            ),
            type=WorkoutType(row["type"]),
            exercise_name=str(row.get("exercise_name") or ""),
            duration=_optional_float(row.get("duration")),
            reps=int(reps) if reps is not None else None,
            target_muscle_groups=tuple(row.get("target_muscle_groups") or ()),
            goal_id=_parse_optional_id(row.get("goal_id")),
        )


@dataclass
class SupabaseSleepRepository(SupabaseEntryRepository[SleepEntry]):
    """Sleep entries stored in ``sleeps``."""

    table_name: ClassVar[str] = "sleeps"
    moment_column: ClassVar[str] = "date"
    label: ClassVar[str] = "sleep entry"

    def _to_row(self, entry: SleepEntry) -> dict[str, object]:
        return {
            "id": str(entry.id),
            "user_id": str(entry.user_id),
            "date": entry.date.isoformat(),
            "duration": entry.duration,
            "goal_id": _optional_id(entry.goal_id),
        }

    def _parse_row(self, row: dict[str, object]) -> SleepEntry:
        return SleepEntry(
            id=UUID(str(row["id"])),
            user_id=UUID(str(row["user_id"])),
            date=datetime.fromisoformat(str(row["date"])),
            duration=float(row.get("duration") or 0),
            goal_id=_parse_optional_id(row.get("goal_id")),
        )


def _optional_id(value: UUID | None) -> str | None:
    return str(value) if value is not None else None


def _parse_optional_id(value: object) -> UUID | None:
    return UUID(str(value)) if value else None


def _optional_float(value: object) -> float | None:
    return float(value) if value is not None else None
