"""Domain models for meals."""

from dataclasses import dataclass, field
from datetime import date
from typing import Literal, get_args
from uuid import UUID

from nutrition_diary.domain.nutrients import NutrientVector

MealType = Literal["breakfast", "lunch", "dinner", "snack"]

MEAL_TYPES: tuple[str, ...] = get_args(MealType)
DEFAULT_MEAL_TYPE: MealType = "snack"
DEFAULT_MEAL_NAME = "Unnamed Meal"


@dataclass(frozen=True)
class RawIngredient:
    """Ingredient as parsed from user input, before pricing."""

    name: str
    quantity: float
    unit: str


@dataclass(frozen=True)
class MealIngredientEntry:
    """Snapshot of one priced ingredient inside a meal."""

    name: str
    canonical_name: str
    quantity: float
    unit: str
    grams: float
    nutrients: NutrientVector
    nutrients_per_100g: NutrientVector | None = None


@dataclass(frozen=True)
class CacheStats:
    """Cache hits and misses observed while assembling a meal."""

    hits: int = 0
    misses: int = 0


@dataclass(frozen=True)
class AssembledMeal:
    """Priced meal that has not been persisted yet."""

    meal_name: str | None
    ingredients: list[MealIngredientEntry]
    total_nutrients: NutrientVector
    cache_stats: CacheStats = field(default_factory=CacheStats)


@dataclass(frozen=True)
class Meal:
    """Persisted meal with its embedded ingredient snapshots."""

    id: UUID
    date: date
    meal_type: str
    meal_name: str
    ingredients: list[MealIngredientEntry]
    total_nutrients: NutrientVector


@dataclass(frozen=True)
class PropagationResult:
    """Outcome of a bulk propagation."""

    updated: int
    failed: list[UUID] = field(default_factory=list)


@dataclass(frozen=True)
class MergeResult:
    """Outcome of merging cache entries."""

    updated: int
    merged: list[str]
    nutrients_per_100g: NutrientVector
    failed: list[UUID] = field(default_factory=list)


@dataclass(frozen=True)
class LoggedMeal:
    """Persisted meal together with the cache stats of its assembly."""

    meal: Meal
    cache_stats: CacheStats
