"""Diary service: the caller-facing surface of the ingredient engine."""

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date
from uuid import UUID, uuid4

from nutrition_diary.domain.errors import OracleUnavailableError
from nutrition_diary.domain.ingredients import BackfillResult
from nutrition_diary.domain.meals import (
    DEFAULT_MEAL_NAME,
    DEFAULT_MEAL_TYPE,
    MEAL_TYPES,
    AssembledMeal,
    LoggedMeal,
    Meal,
    MergeResult,
    PropagationResult,
    RawIngredient,
)
from nutrition_diary.domain.nutrients import NutrientVector
from nutrition_diary.services.ingredient_cache import IngredientCacheService
from nutrition_diary.services.meal_assembly import MealAssembler
from nutrition_diary.services.meal_repository import MealRepository
from nutrition_diary.services.merge import MergeService
from nutrition_diary.services.oracle import MealEstimator
from nutrition_diary.services.propagation import (
    DateScope,
    PropagationService,
    coerce_scope,
)
from nutrition_diary.services.recalculation import (
    recompute_meal_totals,
    rescale_by_quantity,
    rescale_by_quantity_and_unit,
)


@dataclass
class DiaryService:
    """Logs meals and applies Settings-level corrections."""

    assembler: MealAssembler
    cache: IngredientCacheService
    repository: MealRepository
    propagation: PropagationService
    merger: MergeService
    estimator: MealEstimator | None = None

    async def assemble_meal(
        self,
        ingredients: Iterable[RawIngredient],
        meal_date: date,
        meal_type: str = DEFAULT_MEAL_TYPE,
        meal_name: str | None = None,
    ) -> LoggedMeal:
        """Price the ingredients and persist the meal."""
        meal_type = _resolve_meal_type(meal_type)
        assembled = await self.assembler.assemble(ingredients, meal_name=meal_name)
        return self._save(assembled, meal_date, meal_type)

    async def assemble_meal_from_description(
        self,
        description: str,
        meal_date: date,
        meal_type: str = DEFAULT_MEAL_TYPE,
    ) -> LoggedMeal:
        """Parse and price a free-text description in one oracle round trip."""
        meal_type = _resolve_meal_type(meal_type)
        if self.estimator is None:
            raise OracleUnavailableError("No meal estimator configured")
        estimate = await self.estimator.estimate_meal(description)
        assembled = self.assembler.assemble_estimate(estimate)
        return self._save(assembled, meal_date, meal_type)

    def get_meal(self, meal_id: UUID) -> Meal | None:
        """Return a stored meal."""
        return self.repository.get_meal(meal_id)

    def edit_ingredient_quantity(
        self,
        meal_id: UUID,
        index: int,
        quantity: float,
        unit: str | None = None,
    ) -> Meal | None:
        """Rescale one ingredient locally and refresh the meal totals."""
        meal = self.repository.get_meal(meal_id)
        if meal is None or not 0 <= index < len(meal.ingredients):
            return None
        entry = meal.ingredients[index]
        if unit is None or unit == entry.unit:
            rescaled = rescale_by_quantity(entry, quantity)
        else:
            rescaled = rescale_by_quantity_and_unit(entry, quantity, unit)
        ingredients = list(meal.ingredients)
        ingredients[index] = rescaled
        updated = replace(
            meal,
            ingredients=ingredients,
            total_nutrients=recompute_meal_totals(ingredients),
        )
        self.repository.update_meal(updated)
        return updated

    def correct_ingredient_and_propagate(
        self,
        canonical_name: str,
        nutrients_per_100g: NutrientVector,
        scope: DateScope | str | None = None,
    ) -> PropagationResult:
        """Store a manual correction and push it into meals within scope.

        Names missing from the cache, for example after a merge or a delete,
        get a new manual entry so their historical meals stay correctable.
        """
        resolved_scope = coerce_scope(scope)
        self.cache.correct(canonical_name, nutrients_per_100g)
        return self.propagation.propagate(
            canonical_name, nutrients_per_100g, resolved_scope
        )

    def merge_ingredients(
        self, canonical_names: Iterable[str], chosen_display_name: str
    ) -> MergeResult:
        """Merge duplicate cache entries."""
        return self.merger.merge(canonical_names, chosen_display_name)

    def backfill_cache(self) -> BackfillResult:
        """Rebuild missing cache entries from every stored meal."""
        return self.cache.backfill(self.repository.list_meals())

    def _save(
        self, assembled: AssembledMeal, meal_date: date, meal_type: str
    ) -> LoggedMeal:
        meal = Meal(
            id=uuid4(),
            date=meal_date,
            meal_type=_resolve_meal_type(meal_type),
            meal_name=assembled.meal_name or DEFAULT_MEAL_NAME,
            ingredients=assembled.ingredients,
            total_nutrients=assembled.total_nutrients,
        )
        self.repository.create_meal(meal)
        return LoggedMeal(meal=meal, cache_stats=assembled.cache_stats)


def _resolve_meal_type(meal_type: str | None) -> str:
    if not meal_type:
        return DEFAULT_MEAL_TYPE
    if meal_type not in MEAL_TYPES:
        raise ValueError(f"Unknown meal type {meal_type!r}")
    return meal_type
