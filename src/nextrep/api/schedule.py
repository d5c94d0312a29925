"""Endpoints for scheduled diets, workouts and logged sleep."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from nextrep.api.auth import current_user_id
from nextrep.domain.entries import MealType, TrackerType, WorkoutType
from nextrep.errors import ValidationError
from nextrep.services.calendar import DateRange, ViewType, to_utc

if TYPE_CHECKING:
    from nextrep.containers import AppContainer

router = APIRouter(tags=["schedule"])


class DietCreate(BaseModel):
    meal_date_and_time: datetime
    meal: MealType
    food_name: str = Field(min_length=1)
    calories: float = Field(ge=0)
    carbs: float = Field(ge=0)
    protein: float = Field(ge=0)
    fat: float = Field(ge=0)
    meal_weight: float | None = Field(default=None, ge=0)
    goal_id: str | None = None


class DietUpdate(BaseModel):
    meal_date_and_time: datetime | None = None
    meal: MealType | None = None
    food_name: str | None = Field(default=None, min_length=1)
    calories: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)
    meal_weight: float | None = Field(default=None, ge=0)
    goal_id: str | None = None


class WorkoutCreate(BaseModel):
    workout_date_and_time: datetime
    type: WorkoutType
    exercise_name: str = Field(min_length=1)
    duration: float | None = Field(default=None, ge=0)
    reps: int | None = Field(default=None, ge=0)
    target_muscle_groups: list[str] = Field(default_factory=list)
    goal_id: str | None = None


class WorkoutUpdate(BaseModel):
    workout_date_and_time: datetime | None = None
    type: WorkoutType | None = None
    exercise_name: str | None = Field(default=None, min_length=1)
    duration: float | None = Field(default=None, ge=0)
    reps: int | None = Field(default=None, ge=0)
    target_muscle_groups: list[str] | None = None
    goal_id: str | None = None


class SleepCreate(BaseModel):
    """Logged sleep; ``duration`` is in minutes."""

    date: datetime
    duration: float = Field(ge=0)
    goal_id: str | None = None


class SleepUpdate(BaseModel):
    date: datetime | None = None
    duration: float | None = Field(default=None, ge=0)
    goal_id: str | None = None


def _explicit_range(start: datetime | None, end: datetime | None) -> DateRange | None:
    """Return ``[start, end)`` when both bounds are given."""
    if start is None and end is None:
        return None
    if start is None or end is None:
        raise ValidationError("start and end must be given together")
    date_range = DateRange(start=to_utc(start), end=to_utc(end))
    if date_range.end <= date_range.start:
        raise ValidationError("end must be after start")
    return date_range


def _register(  # noqa: PLR0913
    kind: TrackerType,
    path: str,
    label: str,
    create_model: type[BaseModel],
    update_model: type[BaseModel],
) -> None:
    """Add create, list, get, update and delete routes for one kind of entry."""

    async def create_entry(
        body: create_model,  # type: ignore[valid-type]
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> dict[str, object]:
        container: AppContainer = request.app.state.container
        entry = container.schedule_service.add_entry(user_id, kind, body.model_dump())
        return {
            "message": f"{label} created successfully",
            "data": jsonable_encoder(entry),
        }

    async def list_entries(  # noqa: PLR0913
        request: Request,
        start: datetime | None = None,
        end: datetime | None = None,
        view_type: ViewType = Query(default=ViewType.WEEK, alias="viewType"),
        offset: int = 0,
        user_id: UUID = Depends(current_user_id),
    ) -> dict[str, object]:
        container: AppContainer = request.app.state.container
        service = container.schedule_service
        date_range = _explicit_range(start, end)
        resolved_view: ViewType | None = None
        if date_range is None:
            resolved_view = view_type
            date_range, entries = service.list_for_view(
                user_id, kind, view_type, offset
            )
        else:
            entries = service.list_entries(user_id, kind, date_range)
        return {
            "message": "Entries retrieved successfully",
            "data": jsonable_encoder(entries),
            "dateRange": date_range.to_payload(resolved_view),
        }

    async def get_entry(
        entry_id: str, request: Request, user_id: UUID = Depends(current_user_id)
    ) -> dict[str, object]:
        container: AppContainer = request.app.state.container
        entry = container.schedule_service.get_entry(user_id, kind, entry_id)
        return {"data": jsonable_encoder(entry)}

    async def update_entry(
        entry_id: str,
        body: update_model,  # type: ignore[valid-type]
        request: Request,
        user_id: UUID = Depends(current_user_id),
    ) -> dict[str, object]:
        container: AppContainer = request.app.state.container
        entry = container.schedule_service.update_entry(
            user_id, kind, entry_id, body.model_dump(exclude_unset=True)
        )
        return {
            "message": f"{label} updated successfully",
            "data": jsonable_encoder(entry),
        }

    async def delete_entry(
        entry_id: str, request: Request, user_id: UUID = Depends(current_user_id)
    ) -> dict[str, str]:
        container: AppContainer = request.app.state.container
        container.schedule_service.delete_entry(user_id, kind, entry_id)
        return {"message": f"{label} deleted successfully"}

    router.add_api_route(path, create_entry, methods=["POST"], status_code=201)
    router.add_api_route(path, list_entries, methods=["GET"])
    router.add_api_route(f"{path}/{{entry_id}}", get_entry, methods=["GET"])
    router.add_api_route(f"{path}/{{entry_id}}", update_entry, methods=["PATCH"])
    router.add_api_route(f"{path}/{{entry_id}}", delete_entry, methods=["DELETE"])


_register(TrackerType.DIET, "/diets", "Diet", DietCreate, DietUpdate)
_register(TrackerType.WORKOUT, "/workouts", "Workout", WorkoutCreate, WorkoutUpdate)
_register(TrackerType.SLEEP, "/sleep", "Sleep entry", SleepCreate, SleepUpdate)
