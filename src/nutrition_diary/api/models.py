"""Request models for the diary API."""

import datetime

from pydantic import BaseModel, Field

from nutrition_diary.domain.meals import DEFAULT_MEAL_TYPE, MealType, RawIngredient
from nutrition_diary.domain.nutrients import NutrientVector
from nutrition_diary.services.propagation import DateScope


class IngredientInput(BaseModel):
    """Parsed ingredient supplied by the client."""

    name: str = Field(min_length=1)
    quantity: float = Field(ge=0.0)
    unit: str = "g"

    def to_domain(self) -> RawIngredient:
        return RawIngredient(name=self.name, quantity=self.quantity, unit=self.unit)


class NutrientsInput(BaseModel):
    """Per-100g nutrient values; omitted fields are zero."""

    calories: float = Field(default=0.0, ge=0.0)
    purines: float = Field(default=0.0, ge=0.0)
    protein: float = Field(default=0.0, ge=0.0)
    carbs: float = Field(default=0.0, ge=0.0)
    fat: float = Field(default=0.0, ge=0.0)
    fiber: float = Field(default=0.0, ge=0.0)
    sodium: float = Field(default=0.0, ge=0.0)
    sugar: float = Field(default=0.0, ge=0.0)

    def to_domain(self) -> NutrientVector:
        return NutrientVector.from_mapping(self.model_dump())


class AssembleMealRequest(BaseModel):
    """Log a meal from already-parsed ingredients."""

    date: datetime.date
    meal_type: MealType = DEFAULT_MEAL_TYPE
    meal_name: str | None = None
    ingredients: list[IngredientInput] = Field(min_length=1)


class DescribeMealRequest(BaseModel):
    """Log a meal from a free-text description."""

    date: datetime.date
    meal_type: MealType = DEFAULT_MEAL_TYPE
    description: str = Field(min_length=1)


class EditQuantityRequest(BaseModel):
    """New quantity, and optionally unit, for one meal ingredient."""

    quantity: float = Field(ge=0.0)
    unit: str | None = None


class CorrectIngredientRequest(BaseModel):
    """Corrected profile and how far back to apply it."""

    nutrients_per_100g: NutrientsInput
    scope: DateScope | None = None


class MergeIngredientsRequest(BaseModel):
    """Cache entries to merge and the display name to keep."""

    canonical_names: list[str] = Field(min_length=2)
    display_name: str = Field(min_length=1)
