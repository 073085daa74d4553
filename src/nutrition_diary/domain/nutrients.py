"""Nutrient vector value object."""

import math
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, fields

NUTRIENT_FIELDS = (
    "calories",
    "purines",
    "protein",
    "carbs",
    "fat",
    "fiber",
    "sodium",
    "sugar",
)


@dataclass(frozen=True)
class NutrientVector:
    """Fixed set of nutrients; every field defaults to zero.

    Units: calories in kcal, purines and sodium in mg, the rest in grams.
    Depending on context a vector is either a per-100g profile or the
    absolute amount for a portion.
    """

    calories: float = 0.0
    purines: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sodium: float = 0.0
    sugar: float = 0.0

    @classmethod
    def zero(cls) -> "NutrientVector":
        """Return the all-zero vector."""
        return cls()

    @classmethod
    def from_mapping(cls, data: Mapping[str, object] | None) -> "NutrientVector":
        """Build a vector from a loose mapping, ignoring unknown keys."""
        if not data:
            return cls()
        return cls(**{name: _to_float(data.get(name)) for name in NUTRIENT_FIELDS})

    def to_dict(self) -> dict[str, float]:
        """Return the storage representation."""
        return asdict(self)

    def scale(self, factor: float) -> "NutrientVector":
        """Multiply every field by factor, rounding to one decimal."""
        return NutrientVector(
            **{
                item.name: round_one(getattr(self, item.name) * factor)
                for item in fields(self)
            }
        )

    def rounded(self) -> "NutrientVector":
        """Return a copy rounded to one decimal."""
        return self.scale(1.0)

    def is_zero(self) -> bool:
        """Return True when every field is zero."""
        return all(getattr(self, name) == 0 for name in NUTRIENT_FIELDS)

    def __add__(self, other: "NutrientVector") -> "NutrientVector":
        if not isinstance(other, NutrientVector):
            return NotImplemented
        return NutrientVector(
            **{
                name: getattr(self, name) + getattr(other, name)
                for name in NUTRIENT_FIELDS
            }
        )


def sum_vectors(vectors: Iterable[NutrientVector]) -> NutrientVector:
    """Field-wise sum without rounding."""
    total = NutrientVector()
    for vector in vectors:
        total = total + vector
    return total


def mean_vector(vectors: Iterable[NutrientVector]) -> NutrientVector:
    """Field-wise arithmetic mean rounded to one decimal."""
    items = list(vectors)
    if not items:
        return NutrientVector()
    return sum_vectors(items).scale(1 / len(items))


def round_one(value: float) -> float:
    """Round to one decimal place, halves rounding up."""
    return math.floor(value * 10 + 0.5) / 10


def _to_float(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0
