"""Food search endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder

from nextrep.api.auth import current_user_id
from nextrep.services.food import MAX_RESULTS

if TYPE_CHECKING:
    from nextrep.containers import AppContainer

router = APIRouter(prefix="/foods", tags=["foods"])


@router.get("/search")
async def search_foods(
    request: Request,
    query: str = "",
    number: int = MAX_RESULTS,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Search foods with their calories and macros."""
    container: AppContainer = request.app.state.container
    results = await container.food_service.search(query, number)
    return {
        "message": "Food search completed successfully",
        "data": jsonable_encoder(results),
    }


@router.get("/{food_id}/nutrition")
async def food_nutrition(
    food_id: int, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    nutrition = await container.food_service.nutrition(food_id)
    return {"data": jsonable_encoder(nutrition)}
