"""Dense daily buckets for graph series."""

from collections.abc import Callable

from nextrep.services.calendar import DateRange, day_key, iter_days

Bucket = dict[str, object]


def fill_gaps(
    records: list[Bucket],
    date_range: DateRange,
    placeholder_factory: Callable[[], Bucket],
) -> list[Bucket]:
    """Return one record per day of the range, in ascending date order.

    Records are matched on their ``date`` key (``YYYY-MM-DD``); callers must
    pre-aggregate so each date appears at most once. Days without a record get
    ``{"date": day, **placeholder_factory()}``.
    """
    by_date = {str(record["date"]): record for record in records}
    filled: list[Bucket] = []
    for day in iter_days(date_range):
        key = day_key(day)
        existing = by_date.get(key)
        if existing is not None:
            filled.append(existing)
        else:
            filled.append({"date": key, **placeholder_factory()})
    return filled


def diet_placeholder() -> Bucket:
    """Return an empty diet day."""
    return {
        "scheduled": {"calories": 0, "proteins": 0, "fats": 0, "carbs": 0},
        "actual": {"calories": None, "proteins": None, "fats": None, "carbs": None},
        "adherence": {
            "calories": None,
            "proteins": None,
            "fats": None,
            "carbs": None,
        },
    }


def workout_placeholder() -> Bucket:
    """Return an empty workout day."""
    return {
        "scheduled": {"totalDuration": 0, "workoutCount": 0},
        "actual": {"totalDuration": None, "completedWorkouts": None},
        "adherence": {"durationAdherence": None, "workoutCompletion": None},
        "workoutSummary": {"types": [], "targetMuscleGroups": [], "details": []},
    }


def sleep_placeholder() -> Bucket:
    """Return an empty sleep day."""
    return {"duration": 0, "averageDuration": 0, "sleepCount": 0, "goalId": None}
