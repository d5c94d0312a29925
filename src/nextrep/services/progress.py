"""Progress reports for goals and graph views."""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from nextrep.domain.entries import (
    DietEntry,
    ScheduledEntry,
    SleepEntry,
    Tracker,
    TrackerType,
    WorkoutEntry,
)
from nextrep.domain.goals import Goal, GoalCategory, GoalStatus
from nextrep.domain.progress import GraphReport, OverviewProgress, ProgressReport
from nextrep.errors import InvalidCategoryError, NextRepError
from nextrep.services.calendar import (
    TRAILING_MONTH_DAYS,
    TRAILING_WEEK_DAYS,
    ViewType,
    calculate_trailing_range,
    utc_now,
)
from nextrep.services.goals import GoalRepository, require_goal
from nextrep.services.graphs import (
    build_diet_graph,
    build_sleep_graph,
    build_weight_graph,
    build_workout_graph,
)
from nextrep.services.schedule import EntryRepository
from nextrep.services.scoring import score_goal
from nextrep.services.trackers import TrackerRepository

_logger = logging.getLogger(__name__)

_GRAPH_BUILDERS = {
    TrackerType.DIET: (build_diet_graph, "Diet graph progress retrieved successfully"),
    TrackerType.WORKOUT: (
        build_workout_graph,
        "Workout graph progress retrieved successfully",
    ),
    TrackerType.SLEEP: (build_sleep_graph, "Sleep graph data retrieved successfully"),
}


@dataclass
class ProgressService:
    """Scores goals and builds graph series from stored entries."""

    goals: GoalRepository
    diets: EntryRepository[DietEntry]
    workouts: EntryRepository[WorkoutEntry]
    sleeps: EntryRepository[SleepEntry]
    trackers: TrackerRepository
    clock: Callable[[], datetime] = utc_now
    trailing_week_days: int = TRAILING_WEEK_DAYS
    trailing_month_days: int = TRAILING_MONTH_DAYS

    def goal_progress(
        self,
        user_id: UUID,
        goal_id: str | UUID,
        category: GoalCategory | str,
    ) -> ProgressReport:
        """Score one of the user's goals, which must belong to ``category``."""
        expected = GoalCategory(category)
        goal = require_goal(self.goals, user_id, goal_id)
        if goal.category is not expected:
            raise InvalidCategoryError(f"Category must be {expected}")
        return self._score(goal)

    def weight_goal_progress(
        self, user_id: UUID, goal_id: str | UUID
    ) -> ProgressReport:
        return self.goal_progress(user_id, goal_id, GoalCategory.WEIGHT)

    def diet_goal_progress(self, user_id: UUID, goal_id: str | UUID) -> ProgressReport:
        return self.goal_progress(user_id, goal_id, GoalCategory.DIET)

    def sleep_goal_progress(
        self, user_id: UUID, goal_id: str | UUID
    ) -> ProgressReport:
        return self.goal_progress(user_id, goal_id, GoalCategory.SLEEP)

    def workout_goal_progress(
        self, user_id: UUID, goal_id: str | UUID
    ) -> ProgressReport:
        return self.goal_progress(user_id, goal_id, GoalCategory.WORKOUT)

    def graph(
        self,
        user_id: UUID,
        kind: TrackerType | str,
        view_type: ViewType | str = ViewType.WEEK,
        offset: int = 0,
        anchor: datetime | None = None,
    ) -> GraphReport:
        """Return the day series of a trailing window ending today.

        ``offset`` moves the window back (negative) or forward by whole windows.
        """
        resolved = TrackerType(kind)
        view = ViewType(view_type)
        date_range = calculate_trailing_range(
            view,
            offset,
            anchor if anchor is not None else self.clock(),
            week_days=self.trailing_week_days,
            month_days=self.trailing_month_days,
        )
        entries = self._repository(resolved).list_in_range(
            user_id, date_range.start, date_range.end
        )
        trackers = self.trackers.list_for_references([entry.id for entry in entries])
        builder, message = _GRAPH_BUILDERS[resolved]
        return GraphReport(
            message=message,
            data=builder(entries, trackers, date_range),
            date_range=date_range.to_payload(view),
        )

    def weight_graph(self, user_id: UUID) -> GraphReport:
        """Return the weight history across all of the user's weight goals."""
        goals = self.goals.list(user_id, category=GoalCategory.WEIGHT)
        points = build_weight_graph(goals)
        if not points:
            return GraphReport(
                message="No weight data found",
                data=[],
                date_range={"start": None, "end": None},
            )
        return GraphReport(
            message="Weight graph data retrieved successfully",
            data=points,
            date_range={"start": points[0]["date"], "end": points[-1]["date"]},
        )

    def overview(self, user_id: UUID) -> OverviewProgress:
        """Count goals per status and average their progress.

        Completed goals count as 100, overdue goals as 0 and pending goals as
        their current score.
        """
        completed = pending = overdue = 0
        total_progress = 0.0
        for goal in self.goals.list(user_id):
            if goal.status is GoalStatus.COMPLETED:
                completed += 1
                total_progress += 100
            elif goal.status is GoalStatus.OVERDUE:
                overdue += 1
            else:
                pending += 1
                total_progress += self._pending_progress(goal)
        total = completed + pending + overdue
        return OverviewProgress(
            progress=math.floor(total_progress / total + 0.5) if total else 0,
            completed=completed,
            pending=pending,
            overdue=overdue,
            total=total,
        )

    def _score(self, goal: Goal) -> ProgressReport:
        scheduled: list[ScheduledEntry] = []
        if goal.category is not GoalCategory.WEIGHT:
            repository = self._repository(TrackerType(str(goal.category)))
            scheduled = repository.list_for_goal(goal.id)
        trackers: list[Tracker] = []
        if scheduled:
            trackers = self.trackers.list_for_references(
                [entry.id for entry in scheduled]
            )
        return score_goal(goal, scheduled, trackers, now=self.clock())

    def _pending_progress(self, goal: Goal) -> float:
        try:
            report = self._score(goal)
        except NextRepError as exc:
            _logger.warning("Skipping progress for goal %s: %s", goal.id, exc.message)
            return 0.0
        overall = report.progress.get("overall", {})
        for key in ("progress", "averageProgress", "completionRate"):
            if key in overall:
                return min(float(overall[key]), 100.0)
        return 0.0

    def _repository(self, kind: TrackerType) -> EntryRepository:
        return {
            TrackerType.DIET: self.diets,
            TrackerType.WORKOUT: self.workouts,
            TrackerType.SLEEP: self.sleeps,
        }[kind]
