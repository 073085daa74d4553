"""Nutrition oracle backed by a structured-output LLM."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from nutrition_diary.domain.errors import OracleResponseError
from nutrition_diary.domain.estimates import MealEstimate, NutrientEstimate
from nutrition_diary.domain.ingredients import IngredientSource
from nutrition_diary.domain.nutrients import NUTRIENT_FIELDS, NutrientVector

_logger = logging.getLogger(__name__)

_NUTRIENT_PROPERTIES: dict[str, object] = {
    name: {"type": "number", "minimum": 0.0} for name in NUTRIENT_FIELDS
}

_NUTRIENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": _NUTRIENT_PROPERTIES,
    "required": list(NUTRIENT_FIELDS),
    "additionalProperties": False,
}

MEAL_ESTIMATE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "meal_name": {"anyOf": [{"type": "string"}, {"type": "null"}]},
        "ingredients": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "quantity": {"type": "number", "minimum": 0.0},
                    "unit": {"type": "string"},
                    "grams": {"type": "number", "minimum": 0.0},
                    "nutrients": _NUTRIENT_SCHEMA,
                },
                "required": ["name", "quantity", "unit", "grams", "nutrients"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["meal_name", "ingredients"],
    "additionalProperties": False,
}


class NutritionOracle(Protocol):
    """Estimates per-100g nutrients for a named ingredient."""

    source: IngredientSource

    async def estimate(self, ingredient_name: str) -> NutrientVector:
        """Return the per-100g nutrient profile or raise."""


class MealEstimator(Protocol):
    """Parses a meal description and prices it in one round trip."""

    async def estimate_meal(self, description: str) -> MealEstimate:
        """Return parsed ingredients with absolute nutrients and grams."""


class StructuredCompletionClient(Protocol):
    """Interface for LLM calls constrained to a JSON schema."""

    async def complete(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema_name: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return the parsed JSON answer."""


@dataclass
class LLMNutritionOracle:
    """Oracle that prompts an LLM for nutrition estimates."""

    client: StructuredCompletionClient
    model: str
    reasoning_effort: str | None
    store: bool
    source: IngredientSource = IngredientSource.AI

    async def estimate(self, ingredient_name: str) -> NutrientVector:
        """Estimate nutrients per 100 g for a single ingredient."""
        prompt = (
            "Estimate complete nutritional information per 100g for this "
            f'ingredient: "{ingredient_name}". '
            "Calories in kcal, purines and sodium in mg, everything else in grams. "
            "Use USDA database values when available; if uncertain, provide "
            "conservative estimates."
        )
        raw = await self.client.complete(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            schema_name="nutrients_per_100g",
            schema=_NUTRIENT_SCHEMA,
            prompt=prompt,
        )
        try:
            estimate = NutrientEstimate.model_validate(raw)
        except ValidationError as exc:
            raise OracleResponseError(
                f"Invalid nutrient estimate for {ingredient_name!r}"
            ) from exc
        _logger.info("Oracle estimate: ingredient=%s", ingredient_name)
        return NutrientVector.from_mapping(estimate.model_dump())

    async def estimate_meal(self, description: str) -> MealEstimate:
        """Parse a meal description into priced ingredients."""
        prompt = (
            "Parse this meal description into ingredients and estimate the "
            f'nutrition of each portion: "{description}". '
            "Give a short meal name (max 50 chars). For each ingredient return "
            "its name, quantity, unit (g, ml, cup, tbsp, tsp, oz, slice or piece), "
            "the portion weight in grams and the nutrients for that portion. "
            "Calories in kcal, purines and sodium in mg, everything else in grams. "
            "Make reasonable portion estimates if not specified."
        )
        raw = await self.client.complete(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            schema_name="meal_estimate",
            schema=MEAL_ESTIMATE_SCHEMA,
            prompt=prompt,
        )
        try:
            return MealEstimate.model_validate(raw)
        except ValidationError as exc:
            raise OracleResponseError("Invalid meal estimate") from exc
