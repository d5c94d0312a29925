"""Domain models for scheduled entries and trackers."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class MealType(StrEnum):
    """Meal slot of a diet entry."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class WorkoutType(StrEnum):
    """Kind of a scheduled workout."""

    WEIGHT_LIFTING = "weight lifting"
    CARDIO = "cardio"
    CROSS_FIT = "cross fit"
    YOGA = "yoga"


class TrackerType(StrEnum):
    """Kind of scheduled entry a tracker refers to."""

    SLEEP = "sleep"
    DIET = "diet"
    WORKOUT = "workout"


@dataclass(frozen=True)
class DietEntry:
    """A scheduled meal."""

    id: UUID
    user_id: UUID
    meal_date_and_time: datetime
    meal: MealType
    food_name: str
    calories: float
    carbs: float
    protein: float
    fat: float
    meal_weight: float | None = None
    goal_id: UUID | None = None


@dataclass(frozen=True)
class WorkoutEntry:
    """A scheduled workout."""

    id: UUID
    user_id: UUID
    workout_date_and_time: datetime
    type: WorkoutType
    exercise_name: str
    duration: float | None = None
    reps: int | None = None
    target_muscle_groups: tuple[str, ...] = ()
    goal_id: UUID | None = None


@dataclass(frozen=True)
class SleepEntry:
    """Logged sleep; duration is in minutes."""

    id: UUID
    user_id: UUID
    date: datetime
    duration: float
    goal_id: UUID | None = None


@dataclass(frozen=True)
class Tracker:
    """Actual completion or consumption against a scheduled entry."""

    id: UUID
    user_id: UUID
    type: TrackerType
    reference_id: UUID
    date: datetime
    completed_reps: int | None = None
    completed_time: float | None = None
    weight_consumed: float | None = None
    sleep_hours: float | None = None


ScheduledEntry = DietEntry | WorkoutEntry | SleepEntry


def scheduled_at(entry: ScheduledEntry) -> datetime:
    """Return the moment an entry is scheduled or logged for."""
    if isinstance(entry, DietEntry):
        return entry.meal_date_and_time
    if isinstance(entry, WorkoutEntry):
        return entry.workout_date_and_time
    return entry.date
