"""Tests for filling missing days in graph series."""

from datetime import UTC, datetime, timedelta

from nextrep.services.buckets import (
    diet_placeholder,
    fill_gaps,
    sleep_placeholder,
    workout_placeholder,
)
from nextrep.services.calendar import DateRange

WEEK = DateRange(
    start=datetime(2024, 5, 9, tzinfo=UTC), end=datetime(2024, 5, 16, tzinfo=UTC)
)


def test_fill_gaps_returns_one_record_per_day() -> None:
    records = [{"date": "2024-05-11", "duration": 420}]

    filled = fill_gaps(records, WEEK, sleep_placeholder)

    dates = [record["date"] for record in filled]
    assert len(filled) == 7
    assert dates == sorted(set(dates))
    assert dates[0] == "2024-05-09"
    assert dates[-1] == "2024-05-15"
    assert filled[2] == {"date": "2024-05-11", "duration": 420}
    assert filled[0] == {"date": "2024-05-09", **sleep_placeholder()}


def test_fill_gaps_keeps_dense_input_unchanged() -> None:
    records = [
        {"date": f"2024-05-{day:02d}", "duration": day * 10} for day in range(9, 16)
    ]

    assert fill_gaps(records, WEEK, sleep_placeholder) == records


def test_fill_gaps_sorts_unordered_records() -> None:
    records = [
        {"date": "2024-05-14", "duration": 1},
        {"date": "2024-05-10", "duration": 2},
    ]

    filled = fill_gaps(records, WEEK, sleep_placeholder)

    assert [record["duration"] for record in filled] == [0, 2, 0, 0, 0, 1, 0]


def test_placeholders_have_null_actuals() -> None:
    diet = diet_placeholder()
    workout = workout_placeholder()

    assert diet["scheduled"]["calories"] == 0
    assert set(diet["actual"].values()) == {None}
    assert set(diet["adherence"].values()) == {None}
    assert workout["actual"] == {"totalDuration": None, "completedWorkouts": None}
    assert workout["workoutSummary"]["details"] == []


def test_placeholders_are_fresh_objects() -> None:
    first = diet_placeholder()
    first["scheduled"]["calories"] = 99

    assert diet_placeholder()["scheduled"]["calories"] == 0


def test_fill_gaps_mid_day_range_matches_day_count() -> None:
    start = datetime(2024, 5, 1, 10, tzinfo=UTC)
    date_range = DateRange(start=start, end=start + timedelta(days=2))

    filled = fill_gaps([], date_range, workout_placeholder)

    assert len(filled) == date_range.days == 2
    assert [record["date"] for record in filled] == ["2024-05-01", "2024-05-02"]
