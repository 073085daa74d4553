"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_diary.adapters.fdc_client import HttpxFdcClient
from nutrition_diary.adapters.openai_completion_client import OpenAICompletionClient
from nutrition_diary.adapters.supabase_ingredient_cache_repository import (
    SupabaseIngredientCacheRepository,
)
from nutrition_diary.adapters.supabase_meal_repository import SupabaseMealRepository
from nutrition_diary.config import Settings
from nutrition_diary.services.ingredient_cache import IngredientCacheService
from nutrition_diary.services.meal_assembly import MealAssembler
from nutrition_diary.services.meals import DiaryService
from nutrition_diary.services.merge import MergeService
from nutrition_diary.services.oracle import LLMNutritionOracle, NutritionOracle
from nutrition_diary.services.propagation import PropagationService
from nutrition_diary.services.usda import FdcNutritionOracle


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ingredient_cache: IngredientCacheService
    diary_service: DiaryService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    cache = IngredientCacheService(SupabaseIngredientCacheRepository(supabase_client))
    meal_repository = SupabaseMealRepository(supabase_client)

    completion_client = OpenAICompletionClient.create(resolved_settings.openai_api_key)
    llm_oracle = LLMNutritionOracle(
        client=completion_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    fdc_client: HttpxFdcClient | None = None
    oracle: NutritionOracle = llm_oracle
    if resolved_settings.oracle_backend == "usda":
        if not resolved_settings.fdc_api_key:
            raise ValueError("FDC_API_KEY is required for the usda oracle backend")
        fdc_client = HttpxFdcClient.create(
            api_key=resolved_settings.fdc_api_key,
            base_url=resolved_settings.fdc_base_url,
        )
        oracle = FdcNutritionOracle(fdc_client)

    propagation = PropagationService(
        repository=meal_repository,
        timezone_name=resolved_settings.timezone,
    )
    diary_service = DiaryService(
        assembler=MealAssembler(
            cache=cache,
            oracle=oracle,
            isolate_failures=resolved_settings.isolate_oracle_failures,
        ),
        cache=cache,
        repository=meal_repository,
        propagation=propagation,
        merger=MergeService(
            cache=cache,
            propagation=propagation,
            eager_recache=resolved_settings.merge_eager_recache,
        ),
        estimator=llm_oracle,
    )

    async def close_resources() -> None:
        await completion_client.close()
        if fdc_client is not None:
            await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        ingredient_cache=cache,
        diary_service=diary_service,
        close_resources=close_resources,
    )
