"""Unit to gram conversion."""

import logging

UNIT_TO_GRAMS: dict[str, float] = {
    "g": 1.0,
    "gram": 1.0,
    "grams": 1.0,
    "kg": 1000.0,
    "kilogram": 1000.0,
    "kilograms": 1000.0,
    "oz": 28.35,
    "ounce": 28.35,
    "ounces": 28.35,
    "lb": 453.6,
    "lbs": 453.6,
    "pound": 453.6,
    "pounds": 453.6,
    # Volume and count units are rough averages across ingredients.
    "cup": 240.0,
    "cups": 240.0,
    "tbsp": 15.0,
    "tablespoon": 15.0,
    "tablespoons": 15.0,
    "tsp": 5.0,
    "teaspoon": 5.0,
    "teaspoons": 5.0,
    "ml": 1.0,
    "milliliter": 1.0,
    "milliliters": 1.0,
    "millilitre": 1.0,
    "millilitres": 1.0,
    "slice": 30.0,
    "slices": 30.0,
    "piece": 50.0,
    "pieces": 50.0,
}

_logger = logging.getLogger(__name__)


def grams_per_unit(unit: str | None) -> float:
    """Return the gram multiplier for a unit, 1.0 when unknown."""
    key = (unit or "").strip().lower()
    multiplier = UNIT_TO_GRAMS.get(key)
    if multiplier is None:
        _logger.warning("Unknown unit %r, treating quantity as grams", unit)
        return 1.0
    return multiplier


def to_grams(quantity: float, unit: str | None) -> float:
    """Convert a quantity in the given unit to grams."""
    return quantity * grams_per_unit(unit)
