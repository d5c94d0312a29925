"""Tracker endpoints."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from nextrep.api.auth import current_user_id
from nextrep.domain.entries import TrackerType
from nextrep.errors import ValidationError
from nextrep.services.calendar import DateRange, to_utc

if TYPE_CHECKING:
    from nextrep.containers import AppContainer

router = APIRouter(prefix="/trackers", tags=["trackers"])


class TrackerCreate(BaseModel):
    """Completion of a scheduled entry; only the kind's measurements are kept."""

    type: TrackerType
    reference_id: str
    date: datetime | None = None
    completed_reps: int | None = Field(default=None, ge=0)
    completed_time: float | None = Field(default=None, ge=0)
    weight_consumed: float | None = Field(default=None, ge=0)
    sleep_hours: float | None = Field(default=None, ge=0)


class TrackerUpdate(BaseModel):
    date: datetime | None = None
    completed_reps: int | None = Field(default=None, ge=0)
    completed_time: float | None = Field(default=None, ge=0)
    weight_consumed: float | None = Field(default=None, ge=0)
    sleep_hours: float | None = Field(default=None, ge=0)


@router.post("", status_code=201)
async def create_tracker(
    body: TrackerCreate, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Record completion of a scheduled entry."""
    container: AppContainer = request.app.state.container
    tracker = container.tracker_service.add_tracker(
        user_id,
        body.type,
        body.reference_id,
        body.date,
        completed_reps=body.completed_reps,
        completed_time=body.completed_time,
        weight_consumed=body.weight_consumed,
        sleep_hours=body.sleep_hours,
    )
    return {
        "message": "Tracker created successfully",
        "data": jsonable_encoder(tracker),
    }


@router.get("")
async def trackers_for_day(
    request: Request,
    date: datetime | None = None,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return the trackers dated on a UTC day, today by default."""
    container: AppContainer = request.app.state.container
    service = container.tracker_service
    day = date if date is not None else service.clock()
    return {"data": jsonable_encoder(service.trackers_for_day(user_id, day))}


@router.get("/overview")
async def tracking_overview(
    request: Request,
    start: datetime,
    end: datetime,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return scheduled entries grouped by day, each with its tracker or null."""
    date_range = DateRange(start=to_utc(start), end=to_utc(end))
    if date_range.end <= date_range.start:
        raise ValidationError("end must be after start")
    container: AppContainer = request.app.state.container
    overview = container.tracker_service.tracking_overview(user_id, date_range)
    return {
        "message": "Tracking overview retrieved successfully",
        "data": jsonable_encoder(overview),
        "dateRange": date_range.to_payload(),
    }


@router.get("/{tracker_id}")
async def get_tracker(
    tracker_id: str, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    tracker = container.tracker_service.get_tracker(user_id, tracker_id)
    return {"data": jsonable_encoder(tracker)}


@router.patch("/{tracker_id}")
async def update_tracker(
    tracker_id: str,
    body: TrackerUpdate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    tracker = container.tracker_service.update_tracker(
        user_id, tracker_id, body.model_dump(exclude_unset=True)
    )
    return {
        "message": "Tracker updated successfully",
        "data": jsonable_encoder(tracker),
    }


@router.delete("/{tracker_id}")
async def delete_tracker(
    tracker_id: str, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, str]:
    container: AppContainer = request.app.state.container
    container.tracker_service.delete_tracker(user_id, tracker_id)
    return {"message": "Tracker deleted successfully"}
