"""User profile endpoints."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from nextrep.api.auth import current_user_id

if TYPE_CHECKING:
    from nextrep.containers import AppContainer

router = APIRouter(prefix="/users", tags=["users"])


class ProfileUpdate(BaseModel):
    username: str | None = None
    phone_num: str | None = None
    dob: date | None = None
    country: str | None = None
    height: float | None = None
    weight: float | None = None


@router.get("/me")
async def get_profile(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the authenticated user's details."""
    container: AppContainer = request.app.state.container
    profile = container.user_service.get_profile(user_id)
    return {
        "message": "User details fetched successfully",
        "user": jsonable_encoder(profile),
    }


@router.patch("/me")
async def update_profile(
    body: ProfileUpdate, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    profile = container.user_service.update_profile(
        user_id, body.model_dump(exclude_unset=True)
    )
    return {
        "message": "User details updated successfully",
        "user": jsonable_encoder(profile),
    }
