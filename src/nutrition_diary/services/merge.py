"""Merging of duplicate ingredient cache entries."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from nutrition_diary.domain.ingredients import IngredientSource
from nutrition_diary.domain.meals import MergeResult
from nutrition_diary.domain.nutrients import mean_vector
from nutrition_diary.services.ingredient_cache import IngredientCacheService
from nutrition_diary.services.propagation import DateScope, PropagationService

_logger = logging.getLogger(__name__)


@dataclass
class MergeService:
    """Collapses several cache entries into one averaged profile."""

    cache: IngredientCacheService
    propagation: PropagationService
    eager_recache: bool = False

    def merge(
        self, canonical_names: Iterable[str], chosen_display_name: str
    ) -> MergeResult:
        """Average the profiles, propagate them to all meals, drop the entries.

        The merged ingredient gets a new cache entry under
        ``chosen_display_name`` only when ``eager_recache`` is set; otherwise
        it is cached again the next time a meal uses it.
        """
        names = sorted(set(canonical_names))
        entries = [
            entry
            for entry in (self.cache.lookup(name) for name in names)
            if entry is not None
        ]
        if not entries:
            raise ValueError("None of the ingredients to merge are cached")
        averaged = mean_vector(entry.nutrients_per_100g for entry in entries)

        updated = 0
        failed = []
        for name in names:
            result = self.propagation.propagate(name, averaged, DateScope.ALL)
            updated += result.updated
            failed.extend(result.failed)

        for name in names:
            self.cache.delete(name)
        if self.eager_recache:
            self.cache.add(chosen_display_name, averaged, IngredientSource.MANUAL)

        _logger.info(
            "Merged ingredients=%s into=%r updated=%s failed=%s",
            ",".join(names),
            chosen_display_name,
            updated,
            len(failed),
        )
        return MergeResult(
            updated=updated,
            merged=names,
            nutrients_per_100g=averaged,
            failed=failed,
        )
