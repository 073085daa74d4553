"""Domain models for the ingredient cache."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from nutrition_diary.domain.nutrients import NutrientVector


class IngredientSource(str, Enum):
    """Where a cached nutrient profile came from."""

    AI = "ai"
    MANUAL = "manual"
    USDA = "usda"


@dataclass(frozen=True)
class CachedIngredient:
    """Per-100g nutrient profile cached under a canonical name."""

    canonical_name: str
    display_name: str
    nutrients_per_100g: NutrientVector
    use_count: int
    last_used: datetime | None
    source: IngredientSource


@dataclass(frozen=True)
class BackfillResult:
    """Outcome of a cache backfill scan."""

    added: list[str]
    unresolved: list[str]
