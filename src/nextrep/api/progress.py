"""Goal progress, graph and overview endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Query, Request
from fastapi.encoders import jsonable_encoder

from nextrep.api.auth import current_user_id
from nextrep.domain.entries import TrackerType
from nextrep.domain.goals import GoalCategory
from nextrep.services.calendar import ViewType

if TYPE_CHECKING:
    from nextrep.containers import AppContainer

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("/overview")
async def overview(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, int]:
    """Return goal counts per status and the mean goal progress."""
    container: AppContainer = request.app.state.container
    result = container.progress_service.overview(user_id)
    return {
        "progress": result.progress,
        "completed": result.completed,
        "pending": result.pending,
        "overdue": result.overdue,
        "total": result.total,
    }


@router.get("/weight-graph")
async def weight_graph(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the weight history across the user's weight goals."""
    container: AppContainer = request.app.state.container
    report = container.progress_service.weight_graph(user_id)
    return jsonable_encoder(report.to_payload())


@router.get("/{category}-goal/{goal_id}")
async def goal_progress(
    category: GoalCategory,
    goal_id: str,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Score one goal of the given category."""
    container: AppContainer = request.app.state.container
    report = container.progress_service.goal_progress(user_id, goal_id, category)
    return jsonable_encoder({"message": report.message, "progress": report.progress})


@router.get("/{kind}-graph")
async def graph(
    kind: TrackerType,
    request: Request,
    view_type: ViewType = Query(default=ViewType.WEEK, alias="viewType"),
    offset: int = 0,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return the trailing day series of diets, workouts or sleep."""
    container: AppContainer = request.app.state.container
    report = container.progress_service.graph(user_id, kind, view_type, offset)
    return jsonable_encoder(report.to_payload())
