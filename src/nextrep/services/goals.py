"""Goal management service."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol
from uuid import UUID, uuid4

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from nextrep.domain.goals import (
    Goal,
    GoalCategory,
    GoalData,
    GoalPage,
    GoalStatus,
    WeightEntry,
    WeightGoalData,
    WorkoutGoalData,
    data_type_for,
)
from nextrep.errors import (
    InvalidCategoryError,
    InvalidGoalDataError,
    NotFoundError,
    ValidationError,
    parse_id,
)
from nextrep.services.calendar import to_utc, utc_now

_logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


class GoalRepository(Protocol):
    """Persistence interface for goals."""

    def add(self, goal: Goal) -> Goal:
        """Insert a goal and return the stored record."""

    def get(self, goal_id: UUID) -> Goal | None:
        """Return a goal by id."""

    def list(
        self,
        user_id: UUID,
        *,
        category: GoalCategory | None = None,
        status: GoalStatus | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Goal]:
        """Return a user's goals, newest start date first."""

    def count(
        self,
        user_id: UUID,
        *,
        category: GoalCategory | None = None,
        status: GoalStatus | None = None,
    ) -> int:
        """Count a user's goals matching the filters."""

    def update(self, goal: Goal) -> Goal:
        """Replace a stored goal and return it."""

    def delete(self, goal_id: UUID) -> None:
        """Delete a goal by id."""


class GoalCleanup(Protocol):
    """Removes or detaches records that point at a deleted goal."""

    def detach_goal(self, goal_id: UUID) -> int:
        """Clear the goal reference on linked records."""

    def delete_for_goal(self, goal_id: UUID) -> int:
        """Delete linked records and their trackers."""


def goal_data_from_payload(
    category: GoalCategory | str, raw: dict[str, object]
) -> GoalData:
    """Build the data variant for ``category`` from an untyped mapping."""
    try:
        resolved = GoalCategory(category)
    except ValueError as exc:
        raise InvalidCategoryError(f"Unknown goal category: {category}") from exc
    data_type = data_type_for(resolved)
    try:
        data = TypeAdapter(data_type).validate_python(raw)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise InvalidGoalDataError(
            f"Invalid {resolved} goal data: {location} {first['msg']}".strip()
        ) from exc
    if (
        isinstance(data, WorkoutGoalData)
        and data.target_minutes is None
        and data.target_reps is None
    ):
        raise InvalidGoalDataError(
            "Workout goal needs target_minutes or target_reps"
        )
    return data


def require_goal(
    repository: GoalRepository, user_id: UUID, goal_id: str | UUID
) -> Goal:
    """Return the user's goal or raise ``InvalidIdError``/``NotFoundError``."""
    parsed = parse_id(goal_id, label="goal ID")
    goal = repository.get(parsed)
    if goal is None or goal.user_id != user_id:
        raise NotFoundError("Goal not found")
    return goal


def status_for_target(target_date: datetime, now: datetime) -> GoalStatus:
    """Return the open status a goal with this target date should carry."""
    return GoalStatus.OVERDUE if to_utc(target_date) < now else GoalStatus.PENDING


@dataclass
class GoalService:
    """Creates, queries and maintains user goals."""

    repository: GoalRepository
    entries: GoalCleanup
    clock: Callable[[], datetime] = utc_now

    def add_goal(  # noqa: PLR0913
        self,
        user_id: UUID,
        category: GoalCategory | str,
        start_date: datetime,
        target_date: datetime,
        data: dict[str, object],
        *,
        title: str | None = None,
        description: str | None = None,
    ) -> Goal:
        """Validate and store a new goal."""
        goal_data = goal_data_from_payload(category, data)
        _ensure_dates(start_date, target_date)
        now = self.clock()
        goal = Goal(
            id=uuid4(),
            user_id=user_id,
            category=GoalCategory(category),
            start_date=to_utc(start_date),
            target_date=to_utc(target_date),
            data=goal_data,
            status=status_for_target(target_date, now),
            title=title,
            description=description,
            updated_at=now,
        )
        return self.repository.add(goal)

    def get_goal(self, user_id: UUID, goal_id: str | UUID) -> Goal:
        """Return one of the user's goals."""
        return require_goal(self.repository, user_id, goal_id)

    def list_goals(  # noqa: PLR0913
        self,
        user_id: UUID,
        *,
        category: GoalCategory | None = None,
        status: GoalStatus | None = None,
        skip: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> GoalPage:
        """Return a page of goals with prev/next flags."""
        if skip < 0 or limit <= 0:
            raise ValidationError("skip must be >= 0 and limit must be > 0")
        total = self.repository.count(user_id, category=category, status=status)
        goals = self.repository.list(
            user_id, category=category, status=status, offset=skip, limit=limit
        )
        return GoalPage(
            goals=goals, total=total, prev=skip > 0, next=skip + limit < total
        )

    def count_goals(
        self,
        user_id: UUID,
        *,
        category: GoalCategory | None = None,
        status: GoalStatus | None = None,
    ) -> int:
        """Count the user's goals matching the filters."""
        return self.repository.count(user_id, category=category, status=status)

    def update_goal(
        self, user_id: UUID, goal_id: str | UUID, changes: dict[str, object]
    ) -> Goal:
        """Apply partial changes to a goal.

        When the dates move, an open (pending or overdue) goal gets its status
        recomputed from the new target date. A completed goal keeps its status.
        """
        goal = require_goal(self.repository, user_id, goal_id)
        updates = {key: value for key, value in changes.items() if value is not None}
        raw_category = updates.pop("category", goal.category)
        try:
            category = GoalCategory(raw_category)
        except ValueError as exc:
            raise InvalidCategoryError(
                f"Unknown goal category: {raw_category}"
            ) from exc
        if "data" in updates:
            updates["data"] = goal_data_from_payload(category, updates["data"])
        elif category is not goal.category:
            raise InvalidGoalDataError("Changing the category requires new goal data")
        if "status" in updates:
            updates["status"] = GoalStatus(updates["status"])
        for key in ("start_date", "target_date", "end_date"):
            if key in updates:
                updates[key] = to_utc(updates[key])
        now = self.clock()
        updated = replace(goal, category=category, updated_at=now, **updates)
        _ensure_dates(updated.start_date, updated.target_date)
        dates_changed = "start_date" in updates or "target_date" in updates
        if (
            dates_changed
            and "status" not in updates
            and goal.status is not GoalStatus.COMPLETED
        ):
            updated = replace(
                updated, status=status_for_target(updated.target_date, now)
            )
        return self.repository.update(updated)

    def delete_goal(
        self, user_id: UUID, goal_id: str | UUID, *, cascade: bool = False
    ) -> None:
        """Delete a goal.

        Linked scheduled entries are detached, or deleted together with their
        trackers when ``cascade`` is set.
        """
        goal = require_goal(self.repository, user_id, goal_id)
        if cascade:
            affected = self.entries.delete_for_goal(goal.id)
        else:
            affected = self.entries.detach_goal(goal.id)
        self.repository.delete(goal.id)
        _logger.info(
            "Deleted goal %s (cascade=%s, linked entries=%s)",
            goal.id,
            cascade,
            affected,
        )

    def toggle_status(self, user_id: UUID, goal_id: str | UUID) -> Goal:
        """Mark an open goal completed, or reopen a completed one."""
        goal = require_goal(self.repository, user_id, goal_id)
        now = self.clock()
        if goal.status is GoalStatus.COMPLETED:
            updated = replace(
                goal,
                status=status_for_target(goal.target_date, now),
                end_date=None,
                updated_at=now,
            )
        else:
            updated = replace(
                goal, status=GoalStatus.COMPLETED, end_date=now, updated_at=now
            )
        return self.repository.update(updated)

    def update_current_weight(
        self, user_id: UUID, goal_id: str | UUID, new_weight: float
    ) -> Goal:
        """Push the current weight into history and record a new one."""
        goal = require_goal(self.repository, user_id, goal_id)
        if not isinstance(goal.data, WeightGoalData):
            raise InvalidCategoryError("Only weight goals allowed for this function")
        if new_weight <= 0:
            raise ValidationError("Weight must be positive")
        now = self.clock()
        history = (
            *goal.data.previous_weights,
            WeightEntry(weight=goal.data.current_weight, date=now),
        )
        data = replace(goal.data, current_weight=new_weight, previous_weights=history)
        return self.repository.update(replace(goal, data=data, updated_at=now))

    def upcoming_goals(self, user_id: UUID) -> list[Goal]:
        """Return pending goals not yet due, soonest first."""
        now = self.clock()
        goals = self.repository.list(user_id, status=GoalStatus.PENDING)
        upcoming = [goal for goal in goals if to_utc(goal.target_date) >= now]
        return sorted(upcoming, key=lambda goal: to_utc(goal.target_date))

    def mark_overdue(self, user_id: UUID) -> int:
        """Flip past-due pending goals to overdue and return how many changed."""
        now = self.clock()
        changed = 0
        for goal in self.repository.list(user_id, status=GoalStatus.PENDING):
            if to_utc(goal.target_date) < now:
                self.repository.update(
                    replace(goal, status=GoalStatus.OVERDUE, updated_at=now)
                )
                changed += 1
        if changed:
            _logger.info("Marked %s goals overdue for user %s", changed, user_id)
        return changed


def _ensure_dates(start_date: datetime, target_date: datetime) -> None:
    if to_utc(target_date) < to_utc(start_date):
        raise ValidationError("target_date must not be before start_date")
