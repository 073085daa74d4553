"""Supabase repository for meals."""

import json
from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import Client

from nutrition_diary.adapters.supabase_support import execute
from nutrition_diary.domain.errors import StoreIOError
from nutrition_diary.domain.meals import (
    DEFAULT_MEAL_NAME,
    DEFAULT_MEAL_TYPE,
    Meal,
    MealIngredientEntry,
)
from nutrition_diary.domain.nutrients import NutrientVector
from nutrition_diary.services.meal_repository import MealRepository
from nutrition_diary.services.normalization import normalize_ingredient_name
from nutrition_diary.services.units import to_grams

_TABLE = "meals"


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meals with embedded ingredients."""

    client: Client

    def create_meal(self, meal: Meal) -> None:
        """Insert a meal row."""
        response = execute(
            self.client.table(_TABLE).insert(_meal_row(meal)),
            action=f"insert {_TABLE}",
        )
        if not response.data:
            raise StoreIOError(f"Failed to create meal {meal.id}")

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id."""
        response = execute(
            self.client.table(_TABLE).select("*").eq("id", str(meal_id)).limit(1),
            action=f"get {_TABLE}",
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def update_meal(self, meal: Meal) -> None:
        """Overwrite ingredients and totals of a meal."""
        response = execute(
            self.client.table(_TABLE)
            .update(
                {
                    "ingredients": [_entry_row(entry) for entry in meal.ingredients],
                    "total_nutrients": meal.total_nutrients.to_dict(),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", str(meal.id)),
            action=f"update {_TABLE}",
        )
        if not response.data:
            raise StoreIOError(f"Failed to update meal {meal.id}")

    def list_meals(self) -> list[Meal]:
        """Return every meal ordered by date."""
        response = execute(
            self.client.table(_TABLE).select("*").order("date", desc=False),
            action=f"list {_TABLE}",
        )
        return [_parse_meal(row) for row in response.data or []]

    def list_meals_with_ingredient(
        self, canonical_name: str, since: date | None
    ) -> list[Meal]:
        """Return meals whose ingredients contain the canonical name."""
        query = (
            self.client.table(_TABLE)
            .select("*")
            .contains("ingredients", json.dumps([{"canonical_name": canonical_name}]))
        )
        if since is not None:
            query = query.gte("date", since.isoformat())
        response = execute(
            query.order("date", desc=False), action=f"query {_TABLE} by ingredient"
        )
        return [_parse_meal(row) for row in response.data or []]


def _meal_row(meal: Meal) -> dict[str, object]:
    return {
        "id": str(meal.id),
        "date": meal.date.isoformat(),
        "meal_type": meal.meal_type,
        "meal_name": meal.meal_name,
        "ingredients": [_entry_row(entry) for entry in meal.ingredients],
        "total_nutrients": meal.total_nutrients.to_dict(),
    }


def _entry_row(entry: MealIngredientEntry) -> dict[str, object]:
    return {
        "name": entry.name,
        "canonical_name": entry.canonical_name,
        "quantity": entry.quantity,
        "unit": entry.unit,
        "grams": entry.grams,
        "nutrients": entry.nutrients.to_dict(),
        "nutrients_per_100g": (
            entry.nutrients_per_100g.to_dict()
            if entry.nutrients_per_100g is not None
            else None
        ),
    }


def _parse_meal(row: dict[str, object]) -> Meal:
    """Parse a meal row into a domain model."""
    ingredients = [_parse_entry(item) for item in row.get("ingredients") or []]
    return Meal(
        id=UUID(str(row["id"])),
        date=date.fromisoformat(str(row["date"])),
        meal_type=str(row.get("meal_type") or DEFAULT_MEAL_TYPE),
        meal_name=str(row.get("meal_name") or DEFAULT_MEAL_NAME),
        ingredients=ingredients,
        total_nutrients=NutrientVector.from_mapping(row.get("total_nutrients")),
    )


def _parse_entry(item: dict[str, object]) -> MealIngredientEntry:
    """Parse an embedded ingredient, accepting rows written before grams existed."""
    name = str(item.get("name", ""))
    quantity = _to_float(item.get("quantity"))
    unit = str(item.get("unit") or "g")
    canonical_name = item.get("canonical_name") or item.get("normalized_name")
    grams_raw = item.get("grams")
    per_100g_raw = item.get("nutrients_per_100g")
    return MealIngredientEntry(
        name=name,
        canonical_name=(
            str(canonical_name)
            if canonical_name
            else normalize_ingredient_name(name)
        ),
        quantity=quantity,
        unit=unit,
        grams=(
            _to_float(grams_raw) if grams_raw is not None else to_grams(quantity, unit)
        ),
        nutrients=NutrientVector.from_mapping(
            item.get("nutrients") or item.get("nutrients_per_unit")
        ),
        nutrients_per_100g=(
            NutrientVector.from_mapping(per_100g_raw) if per_100g_raw else None
        ),
    )


def _to_float(value: object) -> float:
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0
