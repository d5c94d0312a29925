"""Goal endpoints."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from nextrep.api.auth import current_user_id
from nextrep.domain.goals import GoalCategory, GoalStatus

if TYPE_CHECKING:
    from nextrep.containers import AppContainer

router = APIRouter(prefix="/goals", tags=["goals"])


class GoalCreate(BaseModel):
    """Body of a new goal; ``data`` is validated against the category."""

    category: str
    start_date: datetime
    target_date: datetime
    data: dict[str, object]
    title: str | None = None
    description: str | None = None


class GoalUpdate(BaseModel):
    category: str | None = None
    start_date: datetime | None = None
    target_date: datetime | None = None
    end_date: datetime | None = None
    status: GoalStatus | None = None
    data: dict[str, object] | None = None
    title: str | None = None
    description: str | None = None


class WeightUpdate(BaseModel):
    weight: float


@router.post("", status_code=201)
async def create_goal(
    body: GoalCreate, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Create a goal."""
    container: AppContainer = request.app.state.container
    goal = container.goal_service.add_goal(
        user_id,
        body.category,
        body.start_date,
        body.target_date,
        body.data,
        title=body.title,
        description=body.description,
    )
    return {"message": "Goal created successfully", "goal": jsonable_encoder(goal)}


@router.get("")
async def list_goals(  # noqa: PLR0913
    request: Request,
    category: GoalCategory | None = None,
    status: GoalStatus | None = None,
    skip: int = 0,
    limit: int = 10,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return a page of goals."""
    container: AppContainer = request.app.state.container
    page = container.goal_service.list_goals(
        user_id, category=category, status=status, skip=skip, limit=limit
    )
    return jsonable_encoder(page)


@router.get("/count")
async def count_goals(
    request: Request,
    category: GoalCategory | None = None,
    status: GoalStatus | None = None,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, int]:
    container: AppContainer = request.app.state.container
    total = container.goal_service.count_goals(
        user_id, category=category, status=status
    )
    return {"count": total}


@router.get("/upcoming")
async def upcoming_goals(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return pending goals that are not yet due."""
    container: AppContainer = request.app.state.container
    goals = container.goal_service.upcoming_goals(user_id)
    return {"goals": jsonable_encoder(goals)}


@router.post("/refresh-status")
async def refresh_status(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Mark past-due pending goals overdue."""
    container: AppContainer = request.app.state.container
    changed = container.goal_service.mark_overdue(user_id)
    return {"message": "Goal statuses refreshed", "updated": changed}


@router.get("/{goal_id}")
async def get_goal(
    goal_id: str, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return jsonable_encoder(container.goal_service.get_goal(user_id, goal_id))


@router.patch("/{goal_id}")
async def update_goal(
    goal_id: str,
    body: GoalUpdate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Apply partial changes to a goal."""
    container: AppContainer = request.app.state.container
    goal = container.goal_service.update_goal(
        user_id, goal_id, body.model_dump(exclude_unset=True)
    )
    return {"message": "Goal updated successfully", "goal": jsonable_encoder(goal)}


@router.delete("/{goal_id}")
async def delete_goal(
    goal_id: str,
    request: Request,
    cascade: bool = False,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, str]:
    """Delete a goal; ``cascade`` also removes linked entries."""
    container: AppContainer = request.app.state.container
    container.goal_service.delete_goal(user_id, goal_id, cascade=cascade)
    return {"message": "Goal deleted successfully"}


@router.post("/{goal_id}/status")
async def toggle_status(
    goal_id: str, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Toggle a goal between completed and open."""
    container: AppContainer = request.app.state.container
    goal = container.goal_service.toggle_status(user_id, goal_id)
    return {"message": "Goal status updated", "goal": jsonable_encoder(goal)}


@router.post("/{goal_id}/weight")
async def update_weight(
    goal_id: str,
    body: WeightUpdate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Record a new current weight on a weight goal."""
    container: AppContainer = request.app.state.container
    goal = container.goal_service.update_current_weight(user_id, goal_id, body.weight)
    return {"message": "Weight updated successfully", "goal": jsonable_encoder(goal)}
