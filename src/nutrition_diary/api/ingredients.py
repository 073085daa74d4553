"""Ingredient cache maintenance endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status

from nutrition_diary.api.auth import require_token
from nutrition_diary.api.models import (  # noqa: TC001
    CorrectIngredientRequest,
    MergeIngredientsRequest,
)

if TYPE_CHECKING:
    from nutrition_diary.containers import AppContainer

router = APIRouter(
    prefix="/ingredients", tags=["ingredients"], dependencies=[Depends(require_token)]
)


@router.get("")
async def list_ingredients(request: Request) -> dict[str, object]:
    """Return cached ingredients, most used first."""
    container: AppContainer = request.app.state.container
    return {"ingredients": container.ingredient_cache.list_ingredients()}


@router.put("/{canonical_name}")
async def correct_ingredient(
    canonical_name: str, body: CorrectIngredientRequest, request: Request
) -> dict[str, object]:
    """Correct a cached profile and propagate it to meals in scope."""
    container: AppContainer = request.app.state.container
    result = container.diary_service.correct_ingredient_and_propagate(
        canonical_name, body.nutrients_per_100g.to_domain(), body.scope
    )
    return {"updated": result.updated, "failed": result.failed}


@router.delete("/{canonical_name}")
async def delete_ingredient(canonical_name: str, request: Request) -> dict[str, str]:
    """Drop a cache entry; the next meal using it asks the oracle again."""
    container: AppContainer = request.app.state.container
    container.ingredient_cache.delete(canonical_name)
    return {"status": "ok"}


@router.post("/merge")
async def merge_ingredients(
    body: MergeIngredientsRequest, request: Request
) -> dict[str, object]:
    """Merge duplicate cache entries into one averaged profile."""
    container: AppContainer = request.app.state.container
    try:
        result = container.diary_service.merge_ingredients(
            body.canonical_names, body.display_name
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return {
        "updated": result.updated,
        "merged": result.merged,
        "nutrients_per_100g": result.nutrients_per_100g,
        "failed": result.failed,
    }


@router.post("/backfill")
async def backfill_cache(request: Request) -> dict[str, object]:
    """Rebuild missing cache entries from historical meals."""
    container: AppContainer = request.app.state.container
    result = container.diary_service.backfill_cache()
    return {"added": result.added, "unresolved": result.unresolved}
