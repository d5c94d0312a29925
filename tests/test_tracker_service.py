"""Tests for the tracker service."""

from datetime import UTC, datetime, timedelta

import pytest

from nextrep.domain.entries import TrackerType
from nextrep.errors import NotFoundError, ValidationError
from nextrep.services.calendar import DateRange
from nextrep.services.trackers import TrackerService
from tests.conftest import (
    NOW,
    OTHER_USER_ID,
    USER_ID,
    Stores,
    make_diet,
    make_sleep,
    make_tracker,
    make_workout,
)


def test_add_tracker_keeps_only_measurements_of_its_kind(
    tracker_service: TrackerService, stores: Stores
) -> None:
    meal = stores.diets.add(make_diet(NOW))

    tracker = tracker_service.add_tracker(
        USER_ID, "diet", str(meal.id), weight_consumed=150, completed_reps=12
    )

    assert tracker.type is TrackerType.DIET
    assert tracker.reference_id == meal.id
    assert tracker.weight_consumed == 150
    assert tracker.completed_reps is None
    assert tracker.date == NOW


def test_add_tracker_validates_reference_and_values(
    tracker_service: TrackerService, stores: Stores
) -> None:
    foreign = stores.workouts.add(make_workout(NOW, user_id=OTHER_USER_ID))
    own = stores.workouts.add(make_workout(NOW))

    with pytest.raises(NotFoundError, match="Workout not found"):
        tracker_service.add_tracker(USER_ID, "workout", foreign.id, completed_time=10)
    with pytest.raises(ValidationError):
        tracker_service.add_tracker(USER_ID, "workout", own.id, completed_time=-5)


def test_update_tracker(tracker_service: TrackerService, stores: Stores) -> None:
    night = stores.sleeps.add(make_sleep(NOW))
    tracker = stores.trackers.add(
        make_tracker(night, TrackerType.SLEEP, sleep_hours=6)
    )

    updated = tracker_service.update_tracker(
        USER_ID, tracker.id, {"sleep_hours": 7.5, "date": None}
    )

    assert updated.sleep_hours == 7.5
    with pytest.raises(ValidationError, match="completed_reps"):
        tracker_service.update_tracker(USER_ID, tracker.id, {"completed_reps": 3})


def test_delete_tracker_is_owner_scoped(
    tracker_service: TrackerService, stores: Stores
) -> None:
    meal = stores.diets.add(make_diet(NOW, user_id=OTHER_USER_ID))
    tracker = stores.trackers.add(make_tracker(meal, TrackerType.DIET))

    with pytest.raises(NotFoundError, match="Tracker not found"):
        tracker_service.delete_tracker(USER_ID, tracker.id)
    tracker_service.delete_tracker(OTHER_USER_ID, tracker.id)

    assert stores.trackers.trackers == {}


def test_trackers_for_day(tracker_service: TrackerService, stores: Stores) -> None:
    meal = stores.diets.add(make_diet(NOW))
    today = stores.trackers.add(make_tracker(meal, TrackerType.DIET))
    stores.trackers.add(
        make_tracker(meal, TrackerType.DIET, when=NOW - timedelta(days=1))
    )

    assert tracker_service.trackers_for_day(USER_ID, NOW) == [today]


def test_tracking_overview_groups_entries_by_day(
    tracker_service: TrackerService, stores: Stores
) -> None:
    breakfast = stores.diets.add(make_diet(datetime(2024, 5, 14, 8, tzinfo=UTC)))
    run = stores.workouts.add(make_workout(datetime(2024, 5, 14, 18, tzinfo=UTC)))
    night = stores.sleeps.add(make_sleep(datetime(2024, 5, 15, 1, tzinfo=UTC)))
    tracker = stores.trackers.add(
        make_tracker(run, TrackerType.WORKOUT, completed_time=40)
    )
    date_range = DateRange(
        start=datetime(2024, 5, 14, tzinfo=UTC), end=datetime(2024, 5, 16, tzinfo=UTC)
    )

    overview = tracker_service.tracking_overview(USER_ID, date_range)

    assert list(overview) == ["2024-05-14", "2024-05-15"]
    assert overview["2024-05-14"] == [
        {"type": "diet", "data": breakfast, "tracker": None},
        {"type": "workout", "data": run, "tracker": tracker},
    ]
    assert overview["2024-05-15"] == [
        {"type": "sleep", "data": night, "tracker": None}
    ]
