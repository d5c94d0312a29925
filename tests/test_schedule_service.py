"""Tests for scheduling entries."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from nextrep.domain.entries import (
    DietEntry,
    MealType,
    SleepEntry,
    TrackerType,
    WorkoutEntry,
    WorkoutType,
)
from nextrep.domain.goals import (
    DietGoalData,
    GoalCategory,
    SleepGoalData,
    WorkoutGoalData,
)
from nextrep.errors import InvalidCategoryError, InvalidIdError, NotFoundError
from nextrep.services.calendar import DateRange, ViewType
from nextrep.services.schedule import ScheduleService
from tests.conftest import (
    NOW,
    OTHER_USER_ID,
    USER_ID,
    Stores,
    make_diet,
    make_goal,
    make_tracker,
    make_workout,
)

DIET_FIELDS = {
    "meal_date_and_time": datetime(2024, 5, 15, 12, 30),
    "meal": MealType.LUNCH,
    "food_name": "Tuna sandwich",
    "calories": 450,
    "carbs": 40,
    "protein": 30,
    "fat": 15,
    "meal_weight": 250,
    "goal_id": None,
}


def test_add_diet_entry_normalises_time(schedule_service: ScheduleService) -> None:
    entry = schedule_service.add_entry(USER_ID, "diet", DIET_FIELDS)

    assert isinstance(entry, DietEntry)
    assert entry.user_id == USER_ID
    assert entry.meal_date_and_time == datetime(2024, 5, 15, 12, 30, tzinfo=UTC)


def test_add_workout_entry_links_matching_goal(
    schedule_service: ScheduleService, stores: Stores
) -> None:
    goal = stores.goals.add(make_goal(DietGoalData(1, 1, 1, 1), GoalCategory.DIET))
    workout_goal = stores.goals.add(
        make_goal(WorkoutGoalData("Rowing", target_minutes=30), GoalCategory.WORKOUT)
    )
    fields = {
        "workout_date_and_time": NOW,
        "type": WorkoutType.CARDIO,
        "exercise_name": "Rowing",
        "duration": 30,
        "reps": None,
        "target_muscle_groups": ["back", "arms"],
        "goal_id": str(workout_goal.id),
    }

    entry = schedule_service.add_entry(USER_ID, TrackerType.WORKOUT, fields)

    assert isinstance(entry, WorkoutEntry)
    assert entry.goal_id == workout_goal.id
    assert entry.target_muscle_groups == ("back", "arms")
    with pytest.raises(InvalidCategoryError, match="Category must be workout"):
        schedule_service.add_entry(
            USER_ID, TrackerType.WORKOUT, {**fields, "goal_id": str(goal.id)}
        )


def test_add_entry_rejects_foreign_goal(
    schedule_service: ScheduleService, stores: Stores
) -> None:
    goal = stores.goals.add(
        make_goal(SleepGoalData(8), GoalCategory.SLEEP, user_id=OTHER_USER_ID)
    )

    with pytest.raises(NotFoundError):
        schedule_service.add_entry(
            USER_ID,
            "sleep",
            {"date": NOW, "duration": 420, "goal_id": str(goal.id)},
        )


def test_get_entry_checks_owner_and_id(
    schedule_service: ScheduleService, stores: Stores
) -> None:
    entry = stores.diets.add(make_diet(NOW, user_id=OTHER_USER_ID))

    with pytest.raises(NotFoundError, match="Diet not found"):
        schedule_service.get_entry(USER_ID, "diet", entry.id)
    with pytest.raises(InvalidIdError, match="Invalid workout ID"):
        schedule_service.get_entry(USER_ID, "workout", "abc")


def test_update_entry_applies_partial_changes(
    schedule_service: ScheduleService,
) -> None:
    entry = schedule_service.add_entry(USER_ID, "diet", DIET_FIELDS)

    updated = schedule_service.update_entry(
        USER_ID, "diet", entry.id, {"calories": 500, "food_name": None}
    )

    assert updated.calories == 500
    assert updated.food_name == "Tuna sandwich"


def test_list_for_view_returns_calendar_week(
    schedule_service: ScheduleService, stores: Stores
) -> None:
    inside = stores.workouts.add(make_workout(datetime(2024, 5, 13, 7, tzinfo=UTC)))
    earlier = stores.workouts.add(make_workout(datetime(2024, 5, 12, 7, tzinfo=UTC)))
    stores.workouts.add(make_workout(datetime(2024, 5, 19, 7, tzinfo=UTC)))

    date_range, entries = schedule_service.list_for_view(
        USER_ID, "workout", ViewType.WEEK, 0, NOW
    )

    assert date_range.start == datetime(2024, 5, 12, tzinfo=UTC)
    assert [entry.id for entry in entries] == [earlier.id, inside.id]


def test_list_entries_uses_explicit_range(
    schedule_service: ScheduleService, stores: Stores
) -> None:
    night = SleepEntry(
        id=uuid4(), user_id=USER_ID, date=NOW - timedelta(days=1), duration=1
    )
    stores.sleeps.add(night)
    date_range = DateRange(start=NOW - timedelta(days=2), end=NOW)

    assert schedule_service.list_entries(USER_ID, "sleep", date_range) == [night]
    assert schedule_service.list_entries(OTHER_USER_ID, "sleep", date_range) == []


def test_delete_entry_removes_trackers(
    schedule_service: ScheduleService, stores: Stores
) -> None:
    entry = stores.diets.add(make_diet(NOW))
    other = stores.diets.add(make_diet(NOW))
    stores.trackers.add(make_tracker(entry, TrackerType.DIET, weight_consumed=50))
    kept = stores.trackers.add(make_tracker(other, TrackerType.DIET))

    schedule_service.delete_entry(USER_ID, "diet", str(entry.id))

    assert stores.diets.get(entry.id) is None
    assert list(stores.trackers.trackers) == [kept.id]
