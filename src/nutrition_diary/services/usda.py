"""Nutrition oracle backed by USDA FoodData Central."""

import logging
from dataclasses import dataclass

import httpx

from nutrition_diary.adapters.fdc_client import FdcClient
from nutrition_diary.domain.errors import OracleResponseError, OracleUnavailableError
from nutrition_diary.domain.ingredients import IngredientSource
from nutrition_diary.domain.nutrients import NutrientVector

# Candidate nutrient ids per field in order of preference. Foundation foods
# report energy under the Atwater ids and sugar as NLEA total. FDC publishes
# no purine data, so purines stay at zero.
_NUTRIENT_IDS: dict[str, tuple[int, ...]] = {
    "calories": (1008, 2047, 2048),
    "protein": (1003,),
    "carbs": (1005,),
    "fat": (1004,),
    "fiber": (1079,),
    "sodium": (1093,),
    "sugar": (2000, 1063),
}

_logger = logging.getLogger(__name__)


@dataclass
class FdcNutritionOracle:
    """Oracle that resolves an ingredient to its best FDC match."""

    fdc_client: FdcClient
    source: IngredientSource = IngredientSource.USDA

    async def estimate(self, ingredient_name: str) -> NutrientVector:
        """Return per-100g nutrients of the top FDC search hit."""
        try:
            payload = await self.fdc_client.search_foods(ingredient_name, page_size=1)
            foods = payload.get("foods") or []
            if not foods:
                raise OracleResponseError(f"No FDC match for {ingredient_name!r}")
            fdc_id = int(foods[0]["fdcId"])
            food = await self.fdc_client.get_food(fdc_id)
        except httpx.HTTPError as exc:
            status_code = _status_code_from_exception(exc)
            raise OracleUnavailableError(
                f"FDC lookup failed (status={status_code}): {exc}"
            ) from exc
        _logger.info(
            "Oracle FDC match: ingredient=%s fdc_id=%s", ingredient_name, fdc_id
        )
        return _extract_nutrients(food.get("foodNutrients") or [])


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _extract_nutrients(food_nutrients: list[dict[str, object]]) -> NutrientVector:
    """Map FDC nutrient rows (amounts per 100 g) onto a nutrient vector."""
    amounts: dict[object, object] = {}
    for nutrient in food_nutrients:
        nutrient_info = nutrient.get("nutrient") or {}
        nutrient_id = nutrient_info.get("id") or nutrient.get("nutrientId")
        amount = nutrient.get("amount")
        if amount is not None:
            amounts.setdefault(nutrient_id, amount)
    values: dict[str, object] = {}
    for field_name, nutrient_ids in _NUTRIENT_IDS.items():
        for nutrient_id in nutrient_ids:
            if nutrient_id in amounts:
                values[field_name] = amounts[nutrient_id]
                break
    return NutrientVector.from_mapping(values)
