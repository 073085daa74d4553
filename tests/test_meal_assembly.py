"""Tests for meal assembly."""

import asyncio

import pytest

from nutrition_diary.domain.errors import OracleUnavailableError
from nutrition_diary.domain.estimates import (
    EstimatedIngredient,
    MealEstimate,
    NutrientEstimate,
)
from nutrition_diary.domain.ingredients import IngredientSource
from nutrition_diary.domain.meals import RawIngredient
from nutrition_diary.domain.nutrients import NutrientVector, sum_vectors
from nutrition_diary.services.meal_assembly import MealAssembler
from tests.conftest import Engine, FakeOracle, build_engine, make_cached


def test_cached_variant_spelling_hits_without_oracle_call(engine: Engine) -> None:
    engine.cache_repository.upsert(
        make_cached("chicken breast", NutrientVector(calories=165, purines=175), 3)
    )

    assembled = asyncio.run(
        engine.assembler.assemble([RawIngredient("Chicken Breasts", 200, "g")])
    )

    entry = assembled.ingredients[0]
    assert engine.oracle.calls == []
    assert entry.canonical_name == "chicken_breast"
    assert entry.nutrients == NutrientVector(calories=330, purines=350)
    assert assembled.cache_stats.hits == 1
    assert assembled.cache_stats.misses == 0
    cached = engine.cache.lookup("chicken_breast")
    assert cached is not None
    assert cached.use_count == 4


def test_miss_calls_oracle_once_and_caches_profile() -> None:
    oracle = FakeOracle(profiles={"Brown rice": NutrientVector(calories=112)})
    engine = build_engine(oracle=oracle)

    first = asyncio.run(
        engine.assembler.assemble([RawIngredient("Brown rice", 1, "cup")])
    )
    second = asyncio.run(
        engine.assembler.assemble([RawIngredient("brown rice", 150, "g")])
    )

    assert oracle.calls == ["Brown rice"]
    assert first.ingredients[0].grams == 240
    assert first.ingredients[0].nutrients.calories == 268.8
    assert second.ingredients[0].nutrients.calories == 168
    assert first.cache_stats.misses == 1
    assert second.cache_stats.hits == 1
    cached = engine.cache.lookup("brown_rice")
    assert cached is not None
    assert cached.source is IngredientSource.AI


def test_oracle_failure_is_isolated_to_one_ingredient() -> None:
    oracle = FakeOracle(
        profiles={"Egg": NutrientVector(calories=155, protein=13)},
        failing={"Dragonfruit"},
    )
    engine = build_engine(oracle=oracle)

    assembled = asyncio.run(
        engine.assembler.assemble(
            [RawIngredient("Egg", 100, "g"), RawIngredient("Dragonfruit", 1, "piece")],
            meal_name="Breakfast bowl",
        )
    )

    egg, dragonfruit = assembled.ingredients
    assert assembled.meal_name == "Breakfast bowl"
    assert egg.nutrients == NutrientVector(calories=155, protein=13)
    assert dragonfruit.nutrients.is_zero()
    assert dragonfruit.nutrients_per_100g is None
    assert dragonfruit.grams == 50
    assert engine.cache.lookup("dragonfruit") is None
    assert assembled.total_nutrients == egg.nutrients


def test_oracle_failure_propagates_without_isolation() -> None:
    oracle = FakeOracle(failing={"Dragonfruit"})
    engine = build_engine(oracle=oracle)
    assembler = MealAssembler(
        cache=engine.cache, oracle=oracle, isolate_failures=False
    )

    with pytest.raises(OracleUnavailableError):
        asyncio.run(assembler.assemble([RawIngredient("Dragonfruit", 1, "piece")]))


def test_totals_equal_sum_of_entries() -> None:
    oracle = FakeOracle(
        profiles={
            "Oats": NutrientVector(calories=389, protein=16.9, fiber=10.6),
            "Milk": NutrientVector(calories=42, protein=3.4, sugar=5),
        }
    )
    engine = build_engine(oracle=oracle)

    assembled = asyncio.run(
        engine.assembler.assemble(
            [RawIngredient("Oats", 0.5, "cup"), RawIngredient("Milk", 1, "cup")]
        )
    )

    assert assembled.total_nutrients == sum_vectors(
        entry.nutrients for entry in assembled.ingredients
    )


def test_assemble_estimate_caches_derived_profile(engine: Engine) -> None:
    estimate = MealEstimate(
        meal_name="Salmon dinner",
        ingredients=[
            EstimatedIngredient(
                name="Salmon fillet",
                quantity=1,
                unit="piece",
                grams=150,
                nutrients=NutrientEstimate(calories=312, protein=30, purines=255),
            )
        ],
    )

    assembled = engine.assembler.assemble_estimate(estimate)

    entry = assembled.ingredients[0]
    cached = engine.cache.lookup("salmon_fillet")
    assert assembled.meal_name == "Salmon dinner"
    assert cached is not None
    assert cached.nutrients_per_100g == NutrientVector(
        calories=208, protein=20, purines=170
    )
    assert entry.grams == 150
    assert entry.nutrients == NutrientVector(calories=312, protein=30, purines=255)
    assert entry.nutrients == cached.nutrients_per_100g.scale(entry.grams / 100)
    assert assembled.cache_stats.misses == 1


def test_assemble_estimate_prefers_cached_profile(engine: Engine) -> None:
    engine.cache_repository.upsert(make_cached("rice", NutrientVector(calories=130)))
    estimate = MealEstimate(
        meal_name=None,
        ingredients=[
            EstimatedIngredient(
                name="Rice",
                quantity=1,
                unit="cup",
                grams=200,
                nutrients=NutrientEstimate(calories=999),
            )
        ],
    )

    assembled = engine.assembler.assemble_estimate(estimate)

    assert assembled.ingredients[0].nutrients.calories == 260
    assert assembled.cache_stats.hits == 1
    assert engine.oracle.calls == []


def test_assemble_estimate_without_grams_is_not_cached(engine: Engine) -> None:
    estimate = MealEstimate(
        meal_name=None,
        ingredients=[
            EstimatedIngredient(
                name="Mystery sauce",
                quantity=2,
                unit="tbsp",
                grams=0,
                nutrients=NutrientEstimate(calories=45.25),
            )
        ],
    )

    assembled = engine.assembler.assemble_estimate(estimate)

    entry = assembled.ingredients[0]
    assert entry.grams == 30
    assert entry.nutrients.calories == 45.3
    assert engine.cache.lookup("mystery_sauce") is None
