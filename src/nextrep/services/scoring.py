"""Goal progress scoring.

Each goal category has its own formula. Scores are percentages in ``[0, 100]``
rounded to two decimals; a report with an empty ``progress`` mapping means
there is nothing to score yet.
"""

import math
from collections import defaultdict
from datetime import UTC, datetime, timedelta
from typing import TypeVar

from nextrep.domain.entries import (
    DietEntry,
    ScheduledEntry,
    SleepEntry,
    Tracker,
    TrackerType,
    WorkoutEntry,
)
from nextrep.domain.goals import (
    DietGoalData,
    Goal,
    SleepGoalData,
    WeightGoalData,
    WeightGoalType,
    WorkoutGoalData,
)
from nextrep.domain.progress import ProgressReport
from nextrep.errors import InvalidGoalDataError, InvalidGoalDurationError
from nextrep.services.calendar import day_key, to_utc, utc_midnight
from nextrep.services.metrics import consumption_ratio, percent, round2

SECONDS_PER_DAY = 86400
MINUTES_PER_HOUR = 60
MAINTENANCE_TOLERANCE = 2
SLEEP_COMPONENT_WEIGHT = 50

GoalDataT = TypeVar("GoalDataT")

# (response key, diet entry attribute, diet goal attribute)
NUTRIENTS = (
    ("calories", "calories", "target_calories"),
    ("proteins", "protein", "target_proteins"),
    ("fats", "fat", "target_fats"),
    ("carbs", "carbs", "target_carbs"),
)


def score_goal(
    goal: Goal,
    scheduled: list[ScheduledEntry],
    trackers: list[Tracker],
    now: datetime | None = None,
) -> ProgressReport:
    """Score a goal with the formula matching its data variant."""
    data = goal.data
    if isinstance(data, WeightGoalData):
        return score_weight_goal(goal)
    if isinstance(data, DietGoalData):
        diets = [entry for entry in scheduled if isinstance(entry, DietEntry)]
        return score_diet_goal(goal, diets, trackers)
    if isinstance(data, SleepGoalData):
        sleeps = [entry for entry in scheduled if isinstance(entry, SleepEntry)]
        return score_sleep_goal(goal, sleeps, trackers, now=now)
    if isinstance(data, WorkoutGoalData):
        workouts = [entry for entry in scheduled if isinstance(entry, WorkoutEntry)]
        return score_workout_goal(goal, workouts, trackers)
    raise InvalidGoalDataError(f"Unsupported goal data: {type(data).__name__}")


def weight_progress(data: WeightGoalData) -> float:
    """Return the weight goal completion percentage."""
    start = data.previous_weights[0].weight if data.previous_weights else None
    if start is None:
        start = data.current_weight
    target = data.target_weight
    current = data.current_weight
    total_change = abs(target - start)
    current_change = abs(current - start)

    if data.goal_type is WeightGoalType.MAINTENANCE:
        deviation = abs(current - target)
        progress = max(0.0, 100 - deviation / MAINTENANCE_TOLERANCE * 100)
    elif data.goal_type is WeightGoalType.LOSS and current <= target:
        progress = 100.0
    elif data.goal_type is WeightGoalType.GAIN and current >= target:
        progress = 100.0
    elif total_change == 0:
        progress = 0.0
    else:
        progress = current_change / total_change * 100
    return round2(min(max(progress, 0.0), 100.0))


def score_weight_goal(goal: Goal) -> ProgressReport:
    """Score a weight goal from its weight history."""
    data = _goal_data(goal, WeightGoalData)
    start = (
        data.previous_weights[0].weight
        if data.previous_weights
        else data.current_weight
    )
    return ProgressReport(
        message="Weight goal progress calculated successfully",
        progress={
            "weight": {
                "goalType": str(data.goal_type),
                "startWeight": start,
                "currentWeight": data.current_weight,
                "targetWeight": data.target_weight,
                "totalChange": round2(abs(data.target_weight - start)),
                "currentChange": round2(abs(data.current_weight - start)),
            },
            "overall": {"progress": weight_progress(data)},
        },
    )


def score_diet_goal(
    goal: Goal, entries: list[DietEntry], trackers: list[Tracker]
) -> ProgressReport:
    """Score a diet goal from the consumed share of its scheduled meals."""
    data = _goal_data(goal, DietGoalData)
    if not entries:
        return ProgressReport("No diet has been scheduled with reference to this goal")
    entries_by_id = {entry.id: entry for entry in entries}
    relevant = _trackers_for(trackers, TrackerType.DIET, entries_by_id)
    if not relevant:
        return ProgressReport("No tracking data found for scheduled diets")

    totals = {key: 0.0 for key, _, _ in NUTRIENTS}
    for tracker in relevant:
        entry = entries_by_id[tracker.reference_id]
        ratio = consumption_ratio(tracker.weight_consumed, entry.meal_weight)
        for key, entry_attr, _ in NUTRIENTS:
            totals[key] += getattr(entry, entry_attr) * ratio

    progress: dict[str, object] = {}
    scores = []
    for key, _, target_attr in NUTRIENTS:
        target = getattr(data, target_attr)
        actual = totals[key]
        score = percent(actual, target)
        scores.append(score)
        progress[key] = {
            "target": target,
            "actual": round2(actual),
            "progress": score,
            "status": "on_track" if actual <= target else "exceeded",
        }
    progress["overall"] = {"averageProgress": round2(sum(scores) / len(scores))}
    return ProgressReport("Diet goal progress calculated successfully", progress)


def score_sleep_goal(
    goal: Goal,
    entries: list[SleepEntry],
    trackers: list[Tracker],
    now: datetime | None = None,
) -> ProgressReport:
    """Score a sleep goal on logging consistency and nights meeting the target.

    Half of the score rewards days with any data, half rewards days whose
    recorded hours reach the target. A tracker's ``sleep_hours`` replaces the
    duration of the entry it refers to.
    """
    data = _goal_data(goal, SleepGoalData)
    if not entries:
        return ProgressReport("No sleep has been logged with reference to this goal")
    current = to_utc(now) if now is not None else datetime.now(tz=UTC)
    start = to_utc(goal.start_date)

    hours_by_entry = {entry.id: entry.duration / MINUTES_PER_HOUR for entry in entries}
    for tracker in sorted(trackers, key=lambda item: to_utc(item.date)):
        if (
            tracker.type is TrackerType.SLEEP
            and tracker.reference_id in hours_by_entry
            and tracker.sleep_hours is not None
        ):
            hours_by_entry[tracker.reference_id] = tracker.sleep_hours

    window_start = utc_midnight(start)
    window_end = utc_midnight(current) + timedelta(days=1)
    daily_hours: dict[str, float] = defaultdict(float)
    for entry in entries:
        moment = to_utc(entry.date)
        if window_start <= moment < window_end:
            daily_hours[day_key(moment)] += hours_by_entry[entry.id]

    days_since_start = math.ceil((current - start).total_seconds() / SECONDS_PER_DAY)
    # The window opens at midnight, so a mid-day start can see one extra day.
    days_with_data = min(len(daily_hours), max(days_since_start, 0))
    days_meeting_target = min(
        sum(1 for hours in daily_hours.values() if hours >= data.target_hours),
        days_with_data,
    )
    if days_since_start > 0:
        tracking = days_with_data / days_since_start * SLEEP_COMPONENT_WEIGHT
        meeting = days_meeting_target / days_since_start * SLEEP_COMPONENT_WEIGHT
    else:
        tracking = meeting = 0.0
    recorded = list(daily_hours.values())
    return ProgressReport(
        message="Sleep goal progress calculated successfully",
        progress={
            "sleep": {
                "targetHours": data.target_hours,
                "daysSinceStart": max(days_since_start, 0),
                "daysWithData": days_with_data,
                "daysMeetingTarget": days_meeting_target,
                "averageHours": round2(sum(recorded) / len(recorded))
                if recorded
                else 0.0,
            },
            "trackingProgress": round2(tracking),
            "targetProgress": round2(meeting),
            "overall": {"progress": round2(min(tracking + meeting, 100.0))},
        },
    )


def goal_duration_days(goal: Goal) -> int:
    """Return the whole days between start and target, rounded up."""
    span = to_utc(goal.target_date) - to_utc(goal.start_date)
    days = math.ceil(span.total_seconds() / SECONDS_PER_DAY)
    if days <= 0:
        raise InvalidGoalDurationError("Goal target date must be after its start date")
    return days


def score_workout_goal(
    goal: Goal, workouts: list[WorkoutEntry], trackers: list[Tracker]
) -> ProgressReport:
    """Score a workout goal against its daily target over the goal span."""
    data = _goal_data(goal, WorkoutGoalData)
    duration_days = goal_duration_days(goal)
    if not workouts:
        return ProgressReport(
            "No workout has been scheduled with reference to this goal"
        )
    workouts_by_id = {workout.id: workout for workout in workouts}
    relevant = _trackers_for(trackers, TrackerType.WORKOUT, workouts_by_id)
    if not relevant:
        return ProgressReport("No tracking data found for scheduled workouts")

    daily_minutes = data.target_minutes or 0
    total_minutes = daily_minutes * duration_days
    actual_minutes = sum(tracker.completed_time or 0 for tracker in relevant)
    minutes_met = actual_minutes >= total_minutes
    tracked_days = {day_key(tracker.date) for tracker in relevant}
    completed_workouts = {tracker.reference_id for tracker in relevant}
    duration_progress = percent(actual_minutes, total_minutes)

    progress: dict[str, object] = {
        "duration": {
            "dailyTarget": daily_minutes,
            "target": total_minutes,
            "actual": round2(actual_minutes),
            "progress": duration_progress,
            "status": "completed" if minutes_met else "in_progress",
        },
        "workoutSessions": {
            "scheduled": len(workouts),
            "completed": len(completed_workouts),
            "scheduledMinutes": round2(
                sum(workout.duration or 0 for workout in workouts)
            ),
            "completedMinutes": round2(actual_minutes),
        },
        "goalDurationDays": duration_days,
        "dayCompletionRate": round2(len(tracked_days) / duration_days * 100),
    }
    completion_rate = duration_progress
    achieved = minutes_met
    if data.target_reps is not None:
        total_reps = data.target_reps * duration_days
        actual_reps = sum(tracker.completed_reps or 0 for tracker in relevant)
        reps_met = actual_reps >= total_reps
        progress["reps"] = {
            "dailyTarget": data.target_reps,
            "target": total_reps,
            "actual": actual_reps,
            "progress": percent(actual_reps, total_reps),
            "status": "completed" if reps_met else "in_progress",
        }
        if data.target_minutes is None:
            completion_rate = percent(actual_reps, total_reps)
            achieved = reps_met
    progress["overall"] = {
        "completionRate": completion_rate,
        "status": "goal_achieved" if achieved else "working_towards_goal",
    }
    return ProgressReport("Workout goal progress calculated successfully", progress)


def _trackers_for(
    trackers: list[Tracker], tracker_type: TrackerType, entries: dict
) -> list[Tracker]:
    return [
        tracker
        for tracker in trackers
        if tracker.type is tracker_type and tracker.reference_id in entries
    ]


def _goal_data(goal: Goal, data_type: type[GoalDataT]) -> GoalDataT:
    if not isinstance(goal.data, data_type):
        raise InvalidGoalDataError(
            f"Goal {goal.id} does not carry {data_type.__name__}"
        )
    return goal.data
