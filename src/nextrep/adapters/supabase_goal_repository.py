"""Supabase repository for goals."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from pydantic import TypeAdapter
from supabase import Client

from nextrep.domain.goals import Goal, GoalCategory, GoalData, GoalStatus
from nextrep.services.goals import GoalRepository, goal_data_from_payload

_COLUMNS = (
    "id, user_id, category, start_date, target_date, end_date, status, title, "
    "description, data, updated_at"
)


@dataclass
class SupabaseGoalRepository(GoalRepository):
    """Supabase implementation for goals; category data lives in a JSON column."""

    client: Client

    def add(self, goal: Goal) -> Goal:
        """Insert a goal row."""
        response = self.client.table("goals").insert(_to_row(goal)).execute()
        if not response.data:
            raise RuntimeError("Failed to create goal")
        return _parse_goal(response.data[0])

    def get(self, goal_id: UUID) -> Goal | None:
        """Return a goal by id."""
        response = (
            self.client.table("goals")
            .select(_COLUMNS)
            .eq("id", str(goal_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_goal(response.data[0])

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
        query = (
            self.client.table("goals").select(_COLUMNS).eq("user_id", str(user_id))
        )
        if category is not None:
            query = query.eq("category", str(category))
        if status is not None:
            query = query.eq("status", str(status))
        query = query.order("start_date", desc=True)
        if limit is not None:
            query = query.range(offset, offset + limit - 1)
        response = query.execute()
        return [_parse_goal(row) for row in response.data or []]

    def count(
        self,
        user_id: UUID,
        *,
        category: GoalCategory | None = None,
        status: GoalStatus | None = None,
    ) -> int:
        """Count a user's goals matching the filters."""
        query = (
            self.client.table("goals")
            .select("id", count="exact")
            .eq("user_id", str(user_id))
        )
        if category is not None:
            query = query.eq("category", str(category))
        if status is not None:
            query = query.eq("status", str(status))
        response = query.execute()
        if response.count is not None:
            return int(response.count)
        return len(response.data or [])

    def update(self, goal: Goal) -> Goal:
        """Replace a goal row."""
        row = _to_row(goal)
        row.pop("id")
        response = (
            self.client.table("goals").update(row).eq("id", str(goal.id)).execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update goal")
        return _parse_goal(response.data[0])

    def delete(self, goal_id: UUID) -> None:
        """Delete a goal row."""
        self.client.table("goals").delete().eq("id", str(goal_id)).execute()


def goal_data_to_json(data: GoalData) -> dict[str, object]:
    """Return goal data as a JSON-ready mapping."""
    return TypeAdapter(type(data)).dump_python(data, mode="json")


def _to_row(goal: Goal) -> dict[str, object]:
    return {
        "id": str(goal.id),
        "user_id": str(goal.user_id),
        "category": str(goal.category),
        "start_date": goal.start_date.isoformat(),
        "target_date": goal.target_date.isoformat(),
        "end_date": goal.end_date.isoformat() if goal.end_date else None,
        "status": str(goal.status),
        "title": goal.title,
        "description": goal.description,
        "data": goal_data_to_json(goal.data),
        "updated_at": goal.updated_at.isoformat() if goal.updated_at else None,
    }


def _parse_goal(row: dict[str, object]) -> Goal:
    category = GoalCategory(row["category"])
    return Goal(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        category=category,
        start_date=datetime.fromisoformat(str(row["start_date"])),
        target_date=datetime.fromisoformat(str(row["target_date"])),
        data=goal_data_from_payload(category, row.get("data") or {}),
        status=GoalStatus(row.get("status") or GoalStatus.PENDING),
        title=row.get("title"),
        description=row.get("description"),
        end_date=_parse_optional(row.get("end_date")),
        updated_at=_parse_optional(row.get("updated_at")),
    )


def _parse_optional(value: object) -> datetime | None:
    return datetime.fromisoformat(str(value)) if value else None
