"""Day-level scheduled versus actual series for progress graphs."""

from collections import defaultdict
from collections.abc import Iterable

from nextrep.domain.entries import (
    DietEntry,
    SleepEntry,
    Tracker,
    TrackerType,
    WorkoutEntry,
)
from nextrep.domain.goals import Goal, WeightGoalData
from nextrep.services.buckets import (
    Bucket,
    diet_placeholder,
    fill_gaps,
    sleep_placeholder,
    workout_placeholder,
)
from nextrep.services.calendar import DateRange, day_key, to_utc
from nextrep.services.metrics import consumption_ratio, percent, round2
from nextrep.services.scoring import MINUTES_PER_HOUR, NUTRIENTS


def earliest_trackers(
    trackers: Iterable[Tracker], tracker_type: TrackerType
) -> dict[object, Tracker]:
    """Map each referenced entry id to its earliest tracker of the given type."""
    first: dict[object, Tracker] = {}
    for tracker in sorted(trackers, key=lambda item: to_utc(item.date)):
        if tracker.type is tracker_type:
            first.setdefault(tracker.reference_id, tracker)
    return first


def build_diet_graph(
    entries: list[DietEntry], trackers: list[Tracker], date_range: DateRange
) -> list[Bucket]:
    """Return one diet bucket per day of the range.

    ``scheduled`` sums every meal of the day; ``actual`` sums the consumed share
    of tracked meals only. A day with no tracked meal reports ``None`` for every
    actual and adherence value.
    """
    first_trackers = earliest_trackers(trackers, TrackerType.DIET)
    days: dict[str, list[DietEntry]] = defaultdict(list)
    for entry in entries:
        if date_range.contains(entry.meal_date_and_time):
            days[day_key(entry.meal_date_and_time)].append(entry)

    records: list[Bucket] = []
    for key, day_entries in sorted(days.items()):
        scheduled = {name: 0.0 for name, _, _ in NUTRIENTS}
        actual = {name: 0.0 for name, _, _ in NUTRIENTS}
        tracked = False
        for entry in day_entries:
            tracker = first_trackers.get(entry.id)
            ratio = 0.0
            if tracker is not None:
                tracked = True
                ratio = consumption_ratio(tracker.weight_consumed, entry.meal_weight)
            for name, attr, _ in NUTRIENTS:
                value = getattr(entry, attr)
                scheduled[name] += value
                actual[name] += value * ratio
        records.append(
            {
                "date": key,
                "scheduled": {name: round2(value) for name, value in scheduled.items()},
                "actual": {
                    name: round2(value) if tracked else None
                    for name, value in actual.items()
                },
                "adherence": {
                    name: _adherence(actual[name], scheduled[name], tracked)
                    for name in scheduled
                },
            }
        )
    return fill_gaps(records, date_range, diet_placeholder)


def build_workout_graph(
    entries: list[WorkoutEntry], trackers: list[Tracker], date_range: DateRange
) -> list[Bucket]:
    """Return one workout bucket per day of the range.

    Minutes come from the workout ``duration`` when scheduled and from the
    tracker ``completed_time`` when done.
    """
    first_trackers = earliest_trackers(trackers, TrackerType.WORKOUT)
    days: dict[str, list[WorkoutEntry]] = defaultdict(list)
    for entry in entries:
        if date_range.contains(entry.workout_date_and_time):
            days[day_key(entry.workout_date_and_time)].append(entry)

    records: list[Bucket] = []
    for key, day_entries in sorted(days.items()):
        scheduled_minutes = 0.0
        actual_minutes = 0.0
        completed = 0
        types: set[str] = set()
        muscle_groups: set[str] = set()
        details = []
        for entry in day_entries:
            tracker = first_trackers.get(entry.id)
            scheduled_minutes += entry.duration or 0
            types.add(str(entry.type))
            muscle_groups.update(entry.target_muscle_groups)
            if tracker is not None:
                completed += 1
                actual_minutes += tracker.completed_time or 0
            details.append(
                {
                    "id": str(entry.id),
                    "exerciseName": entry.exercise_name,
                    "type": str(entry.type),
                    "scheduledDuration": entry.duration,
                    "scheduledReps": entry.reps,
                    "completedDuration": tracker.completed_time if tracker else None,
                    "completedReps": tracker.completed_reps if tracker else None,
                    "completed": tracker is not None,
                }
            )
        tracked = completed > 0
        records.append(
            {
                "date": key,
                "scheduled": {
                    "totalDuration": round2(scheduled_minutes),
                    "workoutCount": len(day_entries),
                },
                "actual": {
                    "totalDuration": round2(actual_minutes) if tracked else None,
                    "completedWorkouts": completed if tracked else None,
                },
                "adherence": {
                    "durationAdherence": _adherence(
                        actual_minutes, scheduled_minutes, tracked
                    ),
                    "workoutCompletion": _adherence(
                        completed, len(day_entries), tracked
                    ),
                },
                "workoutSummary": {
                    "types": sorted(types),
                    "targetMuscleGroups": sorted(muscle_groups),
                    "details": details,
                },
            }
        )
    return fill_gaps(records, date_range, workout_placeholder)


def build_sleep_graph(
    entries: list[SleepEntry], trackers: list[Tracker], date_range: DateRange
) -> list[Bucket]:
    """Return one sleep bucket per day of the range, durations in minutes.

    A sleep tracker with ``sleep_hours`` overrides the logged duration of the
    entry it refers to.
    """
    first_trackers = earliest_trackers(trackers, TrackerType.SLEEP)
    days: dict[str, list[SleepEntry]] = defaultdict(list)
    for entry in sorted(entries, key=lambda item: to_utc(item.date)):
        if date_range.contains(entry.date):
            days[day_key(entry.date)].append(entry)

    records: list[Bucket] = []
    for key, day_entries in sorted(days.items()):
        durations = []
        for entry in day_entries:
            tracker = first_trackers.get(entry.id)
            if tracker is not None and tracker.sleep_hours is not None:
                durations.append(tracker.sleep_hours * MINUTES_PER_HOUR)
            else:
                durations.append(entry.duration)
        goal_id = day_entries[0].goal_id
        records.append(
            {
                "date": key,
                "duration": round2(sum(durations)),
                "averageDuration": round2(sum(durations) / len(durations)),
                "sleepCount": len(durations),
                "goalId": str(goal_id) if goal_id else None,
            }
        )
    return fill_gaps(records, date_range, sleep_placeholder)


def build_weight_graph(goals: list[Goal]) -> list[Bucket]:
    """Return weight points from every weight goal, one per date, ascending.

    Each goal contributes its history plus its current weight dated at the
    goal's last update. When two points share a date the later one wins.
    """
    points = []
    for goal in goals:
        if not isinstance(goal.data, WeightGoalData):
            continue
        for entry in goal.data.previous_weights:
            points.append((to_utc(entry.date), entry.weight, goal))
        current_at = goal.updated_at or goal.start_date
        points.append((to_utc(current_at), goal.data.current_weight, goal))

    by_date: dict[str, Bucket] = {}
    for moment, weight, goal in sorted(points, key=lambda point: point[0]):
        key = day_key(moment)
        by_date[key] = {
            "date": key,
            "weight": weight,
            "goalId": str(goal.id),
            "goalType": str(goal.data.goal_type),
        }
    return [by_date[key] for key in sorted(by_date)]


def _adherence(actual: float, scheduled: float, tracked: bool) -> float | None:
    if not tracked or scheduled <= 0:
        return None
    return percent(actual, scheduled)
