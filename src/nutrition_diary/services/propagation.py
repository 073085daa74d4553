"""Propagation of corrected ingredient profiles into historical meals."""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from enum import Enum
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_diary.domain.errors import StoreIOError
from nutrition_diary.domain.meals import Meal, PropagationResult
from nutrition_diary.domain.nutrients import NutrientVector
from nutrition_diary.services.meal_repository import MealRepository
from nutrition_diary.services.recalculation import (
    apply_profile,
    recompute_meal_totals,
)

_logger = logging.getLogger(__name__)


class DateScope(str, Enum):
    """How far back a propagation reaches."""

    ALL = "all"
    WEEK = "week"
    MONTH = "month"


_SCOPE_DAYS = {
    DateScope.WEEK: 7,
    DateScope.MONTH: 30,
}


@dataclass
class PropagationService:
    """Rewrites meal snapshots that use a given ingredient."""

    repository: MealRepository
    timezone_name: str = "UTC"

    def propagate(
        self,
        canonical_name: str,
        nutrients_per_100g: NutrientVector,
        scope: DateScope | str | None = None,
    ) -> PropagationResult:
        """Reprice every matching entry in scope and persist each meal.

        The ingredient cache is not touched. A failed write is logged and
        reported in ``failed`` while the remaining meals are still updated.
        """
        since = self.scope_start(scope)
        meals = self.repository.list_meals_with_ingredient(canonical_name, since)
        updated = 0
        failed: list[UUID] = []
        for meal in meals:
            if since is not None and meal.date < since:
                continue
            rewritten = _reprice_meal(meal, canonical_name, nutrients_per_100g)
            if rewritten is None:
                continue
            try:
                self.repository.update_meal(rewritten)
            except StoreIOError:
                _logger.exception(
                    "Propagation write failed: meal_id=%s ingredient=%s",
                    meal.id,
                    canonical_name,
                )
                failed.append(meal.id)
                continue
            updated += 1

        _logger.info(
            "Propagated ingredient=%s scope=%s updated=%s failed=%s",
            canonical_name,
            coerce_scope(scope).value,
            updated,
            len(failed),
        )
        return PropagationResult(updated=updated, failed=failed)

    def scope_start(self, scope: DateScope | str | None) -> date | None:
        """Return the earliest meal date included by a scope."""
        days = _SCOPE_DAYS.get(coerce_scope(scope))
        if days is None:
            return None
        today = datetime.now(tz=ZoneInfo(self.timezone_name)).date()
        return today - timedelta(days=days - 1)


def coerce_scope(scope: DateScope | str | None) -> DateScope:
    """Resolve a scope value; None means all time."""
    if scope is None:
        return DateScope.ALL
    return DateScope(scope)


def _reprice_meal(
    meal: Meal, canonical_name: str, nutrients_per_100g: NutrientVector
) -> Meal | None:
    matched = False
    ingredients = []
    for entry in meal.ingredients:
        if entry.canonical_name == canonical_name:
            matched = True
            ingredients.append(apply_profile(entry, nutrients_per_100g))
        else:
            ingredients.append(entry)
    if not matched:
        return None
    return replace(
        meal,
        ingredients=ingredients,
        total_nutrients=recompute_meal_totals(ingredients),
    )
