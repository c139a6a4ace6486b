"""Inventory write and read operations for the foreground app."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace

from smart_fridge.domain.inventory import (
    DEFAULT_CATEGORIES,
    Category,
    CollectionKind,
    Item,
    Recipe,
    parse_quantity,
    sort_by_expiry,
)
from smart_fridge.domain.sessions import UserScope
from smart_fridge.services.collections import CollectionRepository

_logger = logging.getLogger(__name__)


@dataclass
class InventoryService:
    """Application service for items, categories and saved recipes.

    Writes are sequential; there is no multi-document transaction, so a failed
    write raises to the caller and leaves earlier writes in place.
    """

    repository: CollectionRepository

    def list_items(self, scope: UserScope) -> list[Item]:
        """Return items sorted by expiry date."""
        items = self.repository.read(scope, CollectionKind.ITEMS)
        return sort_by_expiry(item for item in items if isinstance(item, Item))

    def list_categories(self, scope: UserScope) -> list[Category]:
        """Return all categories."""
        return [
            entity
            for entity in self.repository.read(scope, CollectionKind.CATEGORIES)
            if isinstance(entity, Category)
        ]

    def list_recipes(self, scope: UserScope) -> list[Recipe]:
        """Return all saved recipes."""
        return [
            entity
            for entity in self.repository.read(scope, CollectionKind.RECIPES)
            if isinstance(entity, Recipe)
        ]

    def save_item(self, scope: UserScope, item: Item) -> Item:
        """Create or replace an item."""
        self.repository.upsert(scope, item)
        return item

    add_item = save_item
    update_item = save_item

    def change_quantity(
        self, scope: UserScope, item: Item, raw_quantity: object
    ) -> Item:
        """Set a new quantity from user input."""
        return self.save_item(
            scope, replace(item, quantity=parse_quantity(raw_quantity))
        )

    def delete_item(self, scope: UserScope, item_id: str) -> None:
        """Delete an item by id."""
        self.repository.delete(scope, CollectionKind.ITEMS, item_id)

    def bulk_add(self, scope: UserScope, items: Iterable[Item]) -> list[Item]:
        """Save several items one after another."""
        saved = [self.save_item(scope, item) for item in items]
        _logger.info("Imported %d items into %s", len(saved), scope.namespace)
        return saved

    def add_category(self, scope: UserScope, name: str) -> Category:
        """Create a category."""
        category = Category(name=name.strip())
        self.repository.upsert(scope, category)
        return category

    def rename_category(
        self, scope: UserScope, category: Category, name: str
    ) -> Category:
        """Rename a category. Items keep the area name they were saved with."""
        renamed = replace(category, name=name.strip())
        self.repository.upsert(scope, renamed)
        return renamed

    def delete_category(self, scope: UserScope, category_id: str) -> None:
        """Delete a category by id."""
        self.repository.delete(scope, CollectionKind.CATEGORIES, category_id)

    def seed_default_categories(self, scope: UserScope) -> list[Category]:
        """Create the default categories when the user has none yet."""
        if self.repository.read(scope, CollectionKind.CATEGORIES):
            return []
        return [self.add_category(scope, name) for name in DEFAULT_CATEGORIES]

    def delete_recipe(self, scope: UserScope, recipe_id: str) -> None:
        """Delete a saved recipe by id."""
        self.repository.delete(scope, CollectionKind.RECIPES, recipe_id)
