"""Domain models for goals."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class GoalCategory(StrEnum):
    """Goal categories; each one carries its own data variant."""

    WEIGHT = "weight"
    DIET = "diet"
    SLEEP = "sleep"
    WORKOUT = "workout"


class GoalStatus(StrEnum):
    """Lifecycle status of a goal."""

    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class WeightGoalType(StrEnum):
    """Direction of a weight goal."""

    GAIN = "gain"
    LOSS = "loss"
    MAINTENANCE = "maintenance"


@dataclass(frozen=True)
class WeightEntry:
    """A historical weight measurement."""

    weight: float
    date: datetime


@dataclass(frozen=True)
class WeightGoalData:
    """Target data for a weight goal."""

    goal_type: WeightGoalType
    target_weight: float
    current_weight: float
    previous_weights: tuple[WeightEntry, ...] = ()


@dataclass(frozen=True)
class DietGoalData:
    """Daily nutrient targets for a diet goal."""

    target_calories: float
    target_proteins: float
    target_fats: float
    target_carbs: float


@dataclass(frozen=True)
class SleepGoalData:
    """Nightly sleep target in hours."""

    target_hours: float


@dataclass(frozen=True)
class WorkoutGoalData:
    """Daily workout target."""

    exercise_name: str
    target_minutes: float | None = None
    target_reps: int | None = None


GoalData = WeightGoalData | DietGoalData | SleepGoalData | WorkoutGoalData

_DATA_TYPES: dict[GoalCategory, type] = {
    GoalCategory.WEIGHT: WeightGoalData,
    GoalCategory.DIET: DietGoalData,
    GoalCategory.SLEEP: SleepGoalData,
    GoalCategory.WORKOUT: WorkoutGoalData,
}


def data_type_for(category: GoalCategory) -> type:
    """Return the data variant class for a category."""
    return _DATA_TYPES[category]


@dataclass(frozen=True)
class Goal:
    """A user goal with category-specific target data."""

    id: UUID
    user_id: UUID
    category: GoalCategory
    start_date: datetime
    target_date: datetime
    data: GoalData
    status: GoalStatus = GoalStatus.PENDING
    title: str | None = None
    description: str | None = None
    end_date: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class GoalPage:
    """A page of goals with navigation flags."""

    goals: list[Goal]
    total: int
    prev: bool
    next: bool

