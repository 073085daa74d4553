"""Services for the canonical ingredient cache."""

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol

from nutrition_diary.domain.ingredients import (
    BackfillResult,
    CachedIngredient,
    IngredientSource,
)
from nutrition_diary.domain.meals import Meal
from nutrition_diary.domain.nutrients import NutrientVector
from nutrition_diary.services.normalization import normalize_ingredient_name

_logger = logging.getLogger(__name__)


class IngredientCacheRepository(Protocol):
    """Persistence interface for cached ingredient profiles."""

    def get(self, canonical_name: str) -> CachedIngredient | None:
        """Return a cached ingredient, if present."""

    def upsert(self, ingredient: CachedIngredient) -> None:
        """Create or overwrite a cached ingredient."""

    def delete(self, canonical_name: str) -> None:
        """Remove a cached ingredient."""

    def list_all(self) -> list[CachedIngredient]:
        """Return every cached ingredient."""


@dataclass
class IngredientCacheService:
    """Application service for ingredient cache operations."""

    repository: IngredientCacheRepository

    def lookup(self, canonical_name: str) -> CachedIngredient | None:
        """Return the cached ingredient for a canonical name."""
        return self.repository.get(canonical_name)

    def add(
        self,
        display_name: str,
        nutrients_per_100g: NutrientVector,
        source: IngredientSource,
    ) -> str:
        """Create or overwrite an entry and return its canonical name."""
        canonical_name = normalize_ingredient_name(display_name)
        self.repository.upsert(
            CachedIngredient(
                canonical_name=canonical_name,
                display_name=display_name,
                nutrients_per_100g=nutrients_per_100g,
                use_count=1,
                last_used=datetime.now(tz=UTC),
                source=source,
            )
        )
        return canonical_name

    def record_usage(self, canonical_name: str) -> None:
        """Bump the use counter; missing entries are ignored."""
        existing = self.repository.get(canonical_name)
        if existing is None:
            return
        self.repository.upsert(
            replace(
                existing,
                use_count=existing.use_count + 1,
                last_used=datetime.now(tz=UTC),
            )
        )

    def update(
        self,
        canonical_name: str,
        nutrients_per_100g: NutrientVector,
        source: IngredientSource | None = None,
    ) -> CachedIngredient | None:
        """Overwrite the nutrient profile of an existing entry."""
        existing = self.repository.get(canonical_name)
        if existing is None:
            return None
        updated = replace(
            existing,
            nutrients_per_100g=nutrients_per_100g,
            source=source or existing.source,
        )
        self.repository.upsert(updated)
        return updated

    def correct(
        self, canonical_name: str, nutrients_per_100g: NutrientVector
    ) -> CachedIngredient:
        """Store a manual profile under the exact key, recreating dropped entries."""
        updated = self.update(
            canonical_name, nutrients_per_100g, source=IngredientSource.MANUAL
        )
        if updated is not None:
            return updated
        created = CachedIngredient(
            canonical_name=canonical_name,
            display_name=canonical_name.replace("_", " "),
            nutrients_per_100g=nutrients_per_100g,
            use_count=0,
            last_used=None,
            source=IngredientSource.MANUAL,
        )
        self.repository.upsert(created)
        return created

    def delete(self, canonical_name: str) -> None:
        """Remove an entry; historical meals keep their snapshots."""
        self.repository.delete(canonical_name)

    def list_ingredients(self) -> list[CachedIngredient]:
        """Return cached ingredients, most recently and frequently used first."""
        return self._rank(self.repository.list_all())

    def backfill(self, meals: Iterable[Meal]) -> BackfillResult:
        """Populate missing cache entries from historical meal snapshots."""
        candidates: dict[str, CachedIngredient] = {}
        occurrences: Counter[str] = Counter()
        cached: set[str] = set()
        unresolved: list[str] = []
        for meal in meals:
            for entry in meal.ingredients:
                canonical_name = entry.canonical_name or normalize_ingredient_name(
                    entry.name
                )
                occurrences[canonical_name] += 1
                if canonical_name in candidates or canonical_name in cached:
                    continue
                if self.repository.get(canonical_name) is not None:
                    cached.add(canonical_name)
                    continue
                if entry.nutrients_per_100g is None:
                    if canonical_name not in unresolved:
                        unresolved.append(canonical_name)
                    continue
                candidates[canonical_name] = CachedIngredient(
                    canonical_name=canonical_name,
                    display_name=entry.name,
                    nutrients_per_100g=entry.nutrients_per_100g,
                    use_count=1,
                    last_used=datetime.now(tz=UTC),
                    source=IngredientSource.AI,
                )

        for canonical_name, ingredient in candidates.items():
            self.repository.upsert(
                replace(ingredient, use_count=occurrences[canonical_name])
            )
        resolved_later = [name for name in unresolved if name not in candidates]
        _logger.info(
            "Ingredient cache backfill: added=%s unresolved=%s",
            len(candidates),
            len(resolved_later),
        )
        return BackfillResult(added=list(candidates), unresolved=resolved_later)

    @staticmethod
    def _rank(items: list[CachedIngredient]) -> list[CachedIngredient]:
        """Rank ingredients by recent use then frequency."""
        return sorted(
            items,
            key=lambda item: (
                item.last_used or datetime.min.replace(tzinfo=UTC),
                item.use_count,
            ),
            reverse=True,
        )
