"""Local nutrient recalculation for meal entries.

Nothing here calls the oracle or touches storage; callers persist results.
"""

from collections.abc import Iterable
from dataclasses import replace

from nutrition_diary.domain.meals import MealIngredientEntry
from nutrition_diary.domain.nutrients import NutrientVector, sum_vectors
from nutrition_diary.services.units import to_grams


def price_entry(
    name: str,
    canonical_name: str,
    quantity: float,
    unit: str,
    nutrients_per_100g: NutrientVector,
    grams: float | None = None,
) -> MealIngredientEntry:
    """Build an entry whose nutrients are derived from a per-100g profile."""
    resolved_grams = to_grams(quantity, unit) if grams is None else grams
    return MealIngredientEntry(
        name=name,
        canonical_name=canonical_name,
        quantity=quantity,
        unit=unit,
        grams=resolved_grams,
        nutrients=nutrients_per_100g.scale(resolved_grams / 100),
        nutrients_per_100g=nutrients_per_100g,
    )


def rescale_by_quantity(
    entry: MealIngredientEntry, new_quantity: float
) -> MealIngredientEntry:
    """Scale grams and nutrients by the ratio of new to old quantity."""
    old_quantity = entry.quantity or 1
    ratio = new_quantity / old_quantity
    return replace(
        entry,
        quantity=new_quantity,
        grams=entry.grams * ratio,
        nutrients=entry.nutrients.scale(ratio),
    )


def rescale_by_quantity_and_unit(
    entry: MealIngredientEntry, new_quantity: float, new_unit: str
) -> MealIngredientEntry:
    """Recompute grams from the unit table and nutrients from the baseline."""
    baseline = per_100g_baseline(entry)
    if baseline is None:
        rescaled = rescale_by_quantity(entry, new_quantity)
        return replace(rescaled, unit=new_unit)
    grams = to_grams(new_quantity, new_unit)
    return replace(
        entry,
        quantity=new_quantity,
        unit=new_unit,
        grams=grams,
        nutrients=baseline.scale(grams / 100),
        nutrients_per_100g=baseline,
    )


def apply_profile(
    entry: MealIngredientEntry, nutrients_per_100g: NutrientVector
) -> MealIngredientEntry:
    """Reprice an entry at its existing grams against a new profile."""
    return replace(
        entry,
        nutrients=nutrients_per_100g.scale(entry.grams / 100),
        nutrients_per_100g=nutrients_per_100g,
    )


def recompute_meal_totals(
    ingredients: Iterable[MealIngredientEntry],
) -> NutrientVector:
    """Field-wise sum of entry nutrients."""
    return sum_vectors(entry.nutrients for entry in ingredients)


def per_100g_baseline(entry: MealIngredientEntry) -> NutrientVector | None:
    """Return the stored baseline, deriving it from grams for legacy entries."""
    if entry.nutrients_per_100g is not None:
        return entry.nutrients_per_100g
    if entry.grams > 0:
        return entry.nutrients.scale(100 / entry.grams)
    return None
