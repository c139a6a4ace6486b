"""Recipe generation backed by a text generator."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from smart_fridge.domain.inventory import Recipe
from smart_fridge.domain.sessions import UserScope
from smart_fridge.services.collections import CollectionRepository

_logger = logging.getLogger(__name__)

FULL_RECIPE_FALLBACK = "Could not generate recipe."
RECOMMENDATION_FALLBACK = "No recommendation available."


class TextGenerator(Protocol):
    """Opaque prompt-to-text generator."""

    async def generate(self, prompt: str) -> str:
        """Return generated text for a prompt."""


def full_recipe_prompt(dish_name: str) -> str:
    """Build the prompt asking for a complete recipe."""
    return (
        f"Create a practical cooking recipe for '{dish_name}'.\n"
        "Strictly follow this format in English:\n\n"
        "**Ingredients & Seasonings:**\n"
        "[List detailed ingredients and seasonings with quantities]\n\n"
        "**Missing/Key Ingredients:**\n"
        "[Mention main items needed]\n\n"
        "**Cooking Instructions:**\n"
        "[Detailed step-by-step guide]\n\n"
        "IMPORTANT: Direct cooking steps only. No introduction."
    )


def recommendation_prompt(ingredients: Sequence[str]) -> str:
    """Build the prompt asking for one dish from the given ingredients."""
    return (
        f"I have these ingredients: {', '.join(ingredients)}.\n"
        "Task: Recommend ONE best dish I can make.\n\n"
        "**Dish Name:** [Name]\n\n"
        "**Ingredients from My Fridge:**\n"
        "[List items I already have]\n\n"
        "**Missing Ingredients:**\n"
        "[List essential ingredients I may need]\n\n"
        "**Cooking Instructions:**\n"
        "[Detailed step-by-step guide]\n\n"
        "IMPORTANT: Do NOT include introduction."
    )


@dataclass
class RecipeService:
    """Generates recipes and stores the ones the user keeps."""

    generator: TextGenerator
    repository: CollectionRepository

    async def generate_full_recipe(self, scope: UserScope, dish_name: str) -> Recipe:
        """Generate a recipe for a dish and save it."""
        name = dish_name.strip()
        content = await self._generate(full_recipe_prompt(name), FULL_RECIPE_FALLBACK)
        recipe = Recipe(name=name, content=content)
        self.repository.upsert(scope, recipe)
        return recipe

    async def recommend_recipe(self, ingredients: Sequence[str]) -> str:
        """Suggest one dish from the selected ingredients."""
        _logger.debug("Recommending a recipe for %s", list(ingredients))
        return await self._generate(
            recommendation_prompt(ingredients), RECOMMENDATION_FALLBACK
        )

    async def _generate(self, prompt: str, fallback: str) -> str:
        try:
            text = await self.generator.generate(prompt)
        except Exception as exc:
            _logger.exception("Recipe generation failed")
            return f"Network Error: {str(exc) or 'Unknown error'}"
        return text if text and text.strip() else fallback
