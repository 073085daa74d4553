"""Supabase repository for the ingredient cache."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from nutrition_diary.adapters.supabase_support import execute
from nutrition_diary.domain.errors import StoreIOError
from nutrition_diary.domain.ingredients import CachedIngredient, IngredientSource
from nutrition_diary.domain.nutrients import NutrientVector
from nutrition_diary.services.ingredient_cache import IngredientCacheRepository

_TABLE = "ingredient_cache"


@dataclass
class SupabaseIngredientCacheRepository(IngredientCacheRepository):
    """Supabase-backed ingredient cache keyed by canonical name."""

    client: Client

    def get(self, canonical_name: str) -> CachedIngredient | None:
        """Return a cached ingredient, if present."""
        response = execute(
            self.client.table(_TABLE)
            .select("*")
            .eq("canonical_name", canonical_name)
            .limit(1),
            action=f"get {_TABLE}",
        )
        if not response.data:
            return None
        return _parse_ingredient(response.data[0])

    def upsert(self, ingredient: CachedIngredient) -> None:
        """Create or overwrite a cached ingredient."""
        response = execute(
            self.client.table(_TABLE).upsert(
                _ingredient_row(ingredient), on_conflict="canonical_name"
            ),
            action=f"upsert {_TABLE}",
        )
        if not response.data:
            raise StoreIOError(
                f"Failed to store ingredient {ingredient.canonical_name!r}"
            )

    def delete(self, canonical_name: str) -> None:
        """Remove a cached ingredient."""
        execute(
            self.client.table(_TABLE).delete().eq("canonical_name", canonical_name),
            action=f"delete {_TABLE}",
        )

    def list_all(self) -> list[CachedIngredient]:
        """Return every cached ingredient."""
        response = execute(
            self.client.table(_TABLE).select("*").order("canonical_name"),
            action=f"list {_TABLE}",
        )
        return [_parse_ingredient(row) for row in response.data or []]


def _ingredient_row(ingredient: CachedIngredient) -> dict[str, object]:
    return {
        "canonical_name": ingredient.canonical_name,
        "display_name": ingredient.display_name,
        "nutrients_per_100g": ingredient.nutrients_per_100g.to_dict(),
        "use_count": ingredient.use_count,
        "last_used": (
            ingredient.last_used.isoformat() if ingredient.last_used else None
        ),
        "source": ingredient.source.value,
    }


def _parse_ingredient(row: dict[str, object]) -> CachedIngredient:
    """Parse an ingredient cache row into a domain model."""
    last_used_raw = row.get("last_used")
    last_used = (
        datetime.fromisoformat(last_used_raw)
        if isinstance(last_used_raw, str) and last_used_raw
        else None
    )
    source_raw = str(row.get("source") or IngredientSource.MANUAL.value)
    try:
        source = IngredientSource(source_raw)
    except ValueError:
        source = IngredientSource.MANUAL
    return CachedIngredient(
        canonical_name=str(row["canonical_name"]),
        display_name=str(row.get("display_name") or row["canonical_name"]),
        nutrients_per_100g=NutrientVector.from_mapping(row.get("nutrients_per_100g")),
        use_count=int(row.get("use_count") or 0),
        last_used=last_used,
        source=source,
    )
