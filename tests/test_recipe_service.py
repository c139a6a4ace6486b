"""Tests for recipe generation."""

import asyncio

from smart_fridge.domain.inventory import CollectionKind
from smart_fridge.domain.sessions import UserScope
from smart_fridge.services.recipes import (
    FULL_RECIPE_FALLBACK,
    RECOMMENDATION_FALLBACK,
    RecipeService,
)
from tests.conftest import FakeTextGenerator, InMemoryCollectionRepository


def test_generate_full_recipe_saves_recipe(
    repository: InMemoryCollectionRepository,
    text_generator: FakeTextGenerator,
    scope: UserScope,
) -> None:
    service = RecipeService(generator=text_generator, repository=repository)

    recipe = asyncio.run(service.generate_full_recipe(scope, " Omelette "))

    assert recipe.name == "Omelette"
    assert recipe.content == text_generator.text
    assert "'Omelette'" in text_generator.prompts[0]
    assert "**Cooking Instructions:**" in text_generator.prompts[0]
    stored = repository.documents[(scope.user_id, CollectionKind.RECIPES)]
    assert stored[recipe.id] == recipe


def test_blank_answer_uses_fallback(
    repository: InMemoryCollectionRepository, scope: UserScope
) -> None:
    generator = FakeTextGenerator(text="  ")
    service = RecipeService(generator=generator, repository=repository)

    recipe = asyncio.run(service.generate_full_recipe(scope, "Soup"))
    recommendation = asyncio.run(service.recommend_recipe(["eggs"]))

    assert recipe.content == FULL_RECIPE_FALLBACK
    assert recommendation == RECOMMENDATION_FALLBACK


def test_generation_error_becomes_content(
    repository: InMemoryCollectionRepository, scope: UserScope
) -> None:
    generator = FakeTextGenerator(error=ConnectionError("timed out"))
    service = RecipeService(generator=generator, repository=repository)

    recipe = asyncio.run(service.generate_full_recipe(scope, "Soup"))

    assert recipe.content == "Network Error: timed out"


def test_recommend_recipe_lists_ingredients_and_does_not_save(
    repository: InMemoryCollectionRepository,
    text_generator: FakeTextGenerator,
) -> None:
    service = RecipeService(generator=text_generator, repository=repository)

    text = asyncio.run(service.recommend_recipe(["eggs", "spinach"]))

    assert text == text_generator.text
    assert "eggs, spinach" in text_generator.prompts[0]
    assert repository.documents == {}
