"""Meal logging endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, HTTPException, Request, status

from nutrition_diary.api.auth import require_token
from nutrition_diary.api.models import (  # noqa: TC001
    AssembleMealRequest,
    DescribeMealRequest,
    EditQuantityRequest,
)

if TYPE_CHECKING:
    from nutrition_diary.containers import AppContainer

router = APIRouter(
    prefix="/meals", tags=["meals"], dependencies=[Depends(require_token)]
)


@router.post("", status_code=status.HTTP_201_CREATED)
async def assemble_meal(
    body: AssembleMealRequest, request: Request
) -> dict[str, object]:
    """Price and log a meal from parsed ingredients."""
    container: AppContainer = request.app.state.container
    logged = await container.diary_service.assemble_meal(
        [item.to_domain() for item in body.ingredients],
        meal_date=body.date,
        meal_type=body.meal_type,
        meal_name=body.meal_name,
    )
    return {"meal": logged.meal, "cache_stats": logged.cache_stats}


@router.post("/describe", status_code=status.HTTP_201_CREATED)
async def describe_meal(
    body: DescribeMealRequest, request: Request
) -> dict[str, object]:
    """Parse, price and log a meal from a free-text description."""
    container: AppContainer = request.app.state.container
    logged = await container.diary_service.assemble_meal_from_description(
        body.description,
        meal_date=body.date,
        meal_type=body.meal_type,
    )
    return {"meal": logged.meal, "cache_stats": logged.cache_stats}


@router.get("/{meal_id}")
async def get_meal(meal_id: UUID, request: Request) -> dict[str, object]:
    """Return a logged meal."""
    container: AppContainer = request.app.state.container
    meal = container.diary_service.get_meal(meal_id)
    if meal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"meal": meal}


@router.patch("/{meal_id}/ingredients/{index}")
async def edit_ingredient_quantity(
    meal_id: UUID, index: int, body: EditQuantityRequest, request: Request
) -> dict[str, object]:
    """Rescale one ingredient of a meal without calling the oracle."""
    container: AppContainer = request.app.state.container
    meal = container.diary_service.edit_ingredient_quantity(
        meal_id, index, body.quantity, body.unit
    )
    if meal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"meal": meal}
