"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import date
from uuid import UUID, uuid4

import pytest

from nutrition_diary.config import Settings
from nutrition_diary.containers import AppContainer
from nutrition_diary.domain.errors import OracleUnavailableError, StoreIOError
from nutrition_diary.domain.estimates import MealEstimate
from nutrition_diary.domain.ingredients import CachedIngredient, IngredientSource
from nutrition_diary.domain.meals import Meal, MealIngredientEntry
from nutrition_diary.domain.nutrients import NutrientVector
from nutrition_diary.services.ingredient_cache import (
    IngredientCacheRepository,
    IngredientCacheService,
)
from nutrition_diary.services.meal_assembly import MealAssembler
from nutrition_diary.services.meal_repository import MealRepository
from nutrition_diary.services.meals import DiaryService
from nutrition_diary.services.merge import MergeService
from nutrition_diary.services.normalization import normalize_ingredient_name
from nutrition_diary.services.propagation import PropagationService
from nutrition_diary.services.recalculation import price_entry, recompute_meal_totals


@dataclass
class InMemoryIngredientCacheRepository(IngredientCacheRepository):
    """In-memory ingredient cache for tests."""

    entries: dict[str, CachedIngredient] = field(default_factory=dict)

    def get(self, canonical_name: str) -> CachedIngredient | None:
        return self.entries.get(canonical_name)

    def upsert(self, ingredient: CachedIngredient) -> None:
        self.entries[ingredient.canonical_name] = ingredient

    def delete(self, canonical_name: str) -> None:
        self.entries.pop(canonical_name, None)

    def list_all(self) -> list[CachedIngredient]:
        return list(self.entries.values())


@dataclass
class InMemoryMealRepository(MealRepository):
    """In-memory meal repository for tests."""

    meals: dict[UUID, Meal] = field(default_factory=dict)
    failing_ids: set[UUID] = field(default_factory=set)

    def create_meal(self, meal: Meal) -> None:
        self.meals[meal.id] = meal

    def get_meal(self, meal_id: UUID) -> Meal | None:
        return self.meals.get(meal_id)

    def update_meal(self, meal: Meal) -> None:
        if meal.id in self.failing_ids:
            raise StoreIOError(f"write failed for {meal.id}")
        self.meals[meal.id] = meal

    def list_meals(self) -> list[Meal]:
        return sorted(self.meals.values(), key=lambda meal: meal.date)

    def list_meals_with_ingredient(
        self, canonical_name: str, since: date | None
    ) -> list[Meal]:
        return [
            meal
            for meal in self.list_meals()
            if (since is None or meal.date >= since)
            and any(
                entry.canonical_name == canonical_name for entry in meal.ingredients
            )
        ]


@dataclass
class FakeOracle:
    """Oracle returning fixed profiles and counting calls."""

    profiles: dict[str, NutrientVector] = field(default_factory=dict)
    failing: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)
    source: IngredientSource = IngredientSource.AI

    async def estimate(self, ingredient_name: str) -> NutrientVector:
        self.calls.append(ingredient_name)
        if ingredient_name in self.failing:
            raise OracleUnavailableError("oracle offline")
        return self.profiles.get(ingredient_name, NutrientVector(calories=100))


@dataclass
class FakeEstimator:
    """Meal estimator returning a fixed combined answer."""

    estimate: MealEstimate
    descriptions: list[str] = field(default_factory=list)

    async def estimate_meal(self, description: str) -> MealEstimate:
        self.descriptions.append(description)
        return self.estimate


def make_cached(
    display_name: str,
    nutrients: NutrientVector,
    use_count: int = 1,
    source: IngredientSource = IngredientSource.AI,
) -> CachedIngredient:
    return CachedIngredient(
        canonical_name=normalize_ingredient_name(display_name),
        display_name=display_name,
        nutrients_per_100g=nutrients,
        use_count=use_count,
        last_used=None,
        source=source,
    )


def make_meal(
    meal_date: date,
    *items: tuple[str, float, NutrientVector],
    meal_type: str = "lunch",
) -> Meal:
    """Build a meal from (name, grams, per-100g profile) tuples."""
    entries: list[MealIngredientEntry] = [
        price_entry(name, normalize_ingredient_name(name), grams, "g", profile)
        for name, grams, profile in items
    ]
    return Meal(
        id=uuid4(),
        date=meal_date,
        meal_type=meal_type,
        meal_name="Test meal",
        ingredients=entries,
        total_nutrients=recompute_meal_totals(entries),
    )


@dataclass
class Engine:
    """Services wired against in-memory fakes."""

    cache_repository: InMemoryIngredientCacheRepository
    meal_repository: InMemoryMealRepository
    oracle: FakeOracle
    cache: IngredientCacheService
    propagation: PropagationService
    merger: MergeService
    assembler: MealAssembler
    diary: DiaryService


def build_engine(
    oracle: FakeOracle | None = None,
    estimator: FakeEstimator | None = None,
    eager_recache: bool = False,
) -> Engine:
    cache_repository = InMemoryIngredientCacheRepository()
    meal_repository = InMemoryMealRepository()
    resolved_oracle = oracle or FakeOracle()
    cache = IngredientCacheService(cache_repository)
    propagation = PropagationService(meal_repository)
    merger = MergeService(cache, propagation, eager_recache=eager_recache)
    assembler = MealAssembler(cache=cache, oracle=resolved_oracle)
    diary = DiaryService(
        assembler=assembler,
        cache=cache,
        repository=meal_repository,
        propagation=propagation,
        merger=merger,
        estimator=estimator,
    )
    return Engine(
        cache_repository=cache_repository,
        meal_repository=meal_repository,
        oracle=resolved_oracle,
        cache=cache,
        propagation=propagation,
        merger=merger,
        assembler=assembler,
        diary=diary,
    )


@pytest.fixture
def engine() -> Engine:
    return build_engine()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        api_token="api-token",
        openai_api_key="openai-key",
        _env_file=None,
    )


@pytest.fixture
def container(settings: Settings, engine: Engine) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        ingredient_cache=engine.cache,
        diary_service=engine.diary,
        close_resources=close_resources,
    )
