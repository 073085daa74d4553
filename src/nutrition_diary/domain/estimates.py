"""Structured oracle output models."""

from pydantic import BaseModel, Field


class NutrientEstimate(BaseModel):
    """Nutrient values returned by the oracle."""

    calories: float = Field(default=0.0, ge=0.0)
    purines: float = Field(default=0.0, ge=0.0)
    protein: float = Field(default=0.0, ge=0.0)
    carbs: float = Field(default=0.0, ge=0.0)
    fat: float = Field(default=0.0, ge=0.0)
    fiber: float = Field(default=0.0, ge=0.0)
    sodium: float = Field(default=0.0, ge=0.0)
    sugar: float = Field(default=0.0, ge=0.0)


class EstimatedIngredient(BaseModel):
    """Single ingredient from a combined meal estimate."""

    name: str
    quantity: float = Field(ge=0.0)
    unit: str
    grams: float = Field(ge=0.0)
    nutrients: NutrientEstimate


class MealEstimate(BaseModel):
    """Combined oracle answer: parsed ingredients with absolute nutrients."""

    meal_name: str | None = None
    ingredients: list[EstimatedIngredient]
