"""Meal assembly: prices ingredients through the cache and the oracle."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from nutrition_diary.domain.estimates import EstimatedIngredient, MealEstimate
from nutrition_diary.domain.ingredients import IngredientSource
from nutrition_diary.domain.meals import (
    AssembledMeal,
    CacheStats,
    MealIngredientEntry,
    RawIngredient,
)
from nutrition_diary.domain.nutrients import NutrientVector
from nutrition_diary.services.ingredient_cache import IngredientCacheService
from nutrition_diary.services.normalization import normalize_ingredient_name
from nutrition_diary.services.oracle import NutritionOracle
from nutrition_diary.services.recalculation import price_entry, recompute_meal_totals
from nutrition_diary.services.units import to_grams

_logger = logging.getLogger(__name__)


@dataclass
class MealAssembler:
    """Turns raw ingredients into a fully priced meal."""

    cache: IngredientCacheService
    oracle: NutritionOracle
    isolate_failures: bool = True

    async def assemble(
        self,
        ingredients: Iterable[RawIngredient],
        meal_name: str | None = None,
    ) -> AssembledMeal:
        """Price each ingredient, calling the oracle only on cache misses.

        With ``isolate_failures`` an oracle error leaves that ingredient
        zero-filled instead of aborting the meal.
        """
        entries: list[MealIngredientEntry] = []
        hits = 0
        misses = 0
        for raw in ingredients:
            canonical_name = normalize_ingredient_name(raw.name)
            cached = self.cache.lookup(canonical_name)
            if cached is not None:
                hits += 1
                self.cache.record_usage(canonical_name)
                entries.append(
                    price_entry(
                        raw.name,
                        canonical_name,
                        raw.quantity,
                        raw.unit,
                        cached.nutrients_per_100g,
                    )
                )
                continue

            misses += 1
            profile = await self._estimate(raw.name)
            if profile is None:
                entries.append(_unresolved_entry(raw, canonical_name))
                continue
            self.cache.add(raw.name, profile, self.oracle.source)
            entries.append(
                price_entry(raw.name, canonical_name, raw.quantity, raw.unit, profile)
            )

        return self._finish(meal_name, entries, hits, misses)

    def assemble_estimate(self, estimate: MealEstimate) -> AssembledMeal:
        """Price a combined oracle answer, preferring cached profiles."""
        entries: list[MealIngredientEntry] = []
        hits = 0
        misses = 0
        for item in estimate.ingredients:
            canonical_name = normalize_ingredient_name(item.name)
            grams = item.grams if item.grams > 0 else to_grams(item.quantity, item.unit)
            cached = self.cache.lookup(canonical_name)
            if cached is not None:
                hits += 1
                self.cache.record_usage(canonical_name)
                entries.append(
                    price_entry(
                        item.name,
                        canonical_name,
                        item.quantity,
                        item.unit,
                        cached.nutrients_per_100g,
                        grams=grams,
                    )
                )
                continue

            misses += 1
            entries.append(self._cache_estimated(item, canonical_name, grams))

        return self._finish(estimate.meal_name, entries, hits, misses)

    async def _estimate(self, name: str) -> NutrientVector | None:
        try:
            return await self.oracle.estimate(name)
        except Exception as exc:
            if not self.isolate_failures:
                raise
            _logger.warning(
                "Oracle failed for %r, using zero nutrients: %s", name, exc
            )
            return None

    def _cache_estimated(
        self, item: EstimatedIngredient, canonical_name: str, grams: float
    ) -> MealIngredientEntry:
        nutrients = NutrientVector.from_mapping(item.nutrients.model_dump())
        if item.grams <= 0:
            return MealIngredientEntry(
                name=item.name,
                canonical_name=canonical_name,
                quantity=item.quantity,
                unit=item.unit,
                grams=grams,
                nutrients=nutrients.rounded(),
            )
        per_100g = nutrients.scale(100 / item.grams)
        self.cache.add(item.name, per_100g, IngredientSource.AI)
        return price_entry(
            item.name, canonical_name, item.quantity, item.unit, per_100g, grams=grams
        )

    @staticmethod
    def _finish(
        meal_name: str | None,
        entries: list[MealIngredientEntry],
        hits: int,
        misses: int,
    ) -> AssembledMeal:
        _logger.info(
            "Meal assembled: ingredients=%s cache_hits=%s cache_misses=%s",
            len(entries),
            hits,
            misses,
        )
        return AssembledMeal(
            meal_name=meal_name,
            ingredients=entries,
            total_nutrients=recompute_meal_totals(entries),
            cache_stats=CacheStats(hits=hits, misses=misses),
        )


def _unresolved_entry(raw: RawIngredient, canonical_name: str) -> MealIngredientEntry:
    return MealIngredientEntry(
        name=raw.name,
        canonical_name=canonical_name,
        quantity=raw.quantity,
        unit=raw.unit,
        grams=to_grams(raw.quantity, raw.unit),
        nutrients=NutrientVector.zero(),
    )
