"""Persistence interface for meals."""

from datetime import date
from typing import Protocol
from uuid import UUID

from nutrition_diary.domain.meals import Meal


class MealRepository(Protocol):
    """Persistence interface for meals and their embedded ingredients."""

    def create_meal(self, meal: Meal) -> None:
        """Persist a new meal."""

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a meal by id."""

    def update_meal(self, meal: Meal) -> None:
        """Overwrite a meal's ingredients and totals."""

    def list_meals(self) -> list[Meal]:
        """Return every meal."""

    def list_meals_with_ingredient(
        self, canonical_name: str, since: date | None
    ) -> list[Meal]:
        """Return meals using an ingredient, dated on or after ``since``."""
