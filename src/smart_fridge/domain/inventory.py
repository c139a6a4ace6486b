"""Domain models for the food inventory."""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from uuid import uuid4

_logger = logging.getLogger(__name__)

DEFAULT_AREA = "Uncategorized"
DEFAULT_SHELF_LIFE_DAYS = 7
_ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
DEFAULT_CATEGORIES = (
    "Vegetables",
    "Meat",
    "Seafood",
    "Fruit",
    "Condiments",
    "Drinks",
    "Snacks",
    "Other",
)


def _new_id() -> str:
    return str(uuid4())


def default_expiry() -> str:
    return (date.today() + timedelta(days=DEFAULT_SHELF_LIFE_DAYS)).isoformat()


@dataclass(frozen=True)
class Item:
    """A perishable item stored in one of the user's areas.

    ``area`` holds a copy of the category name rather than a reference to the
    category id. Renaming a category leaves existing items on the old name.
    """

    name: str = ""
    expiry_date: str = field(default_factory=default_expiry)
    area: str = DEFAULT_AREA
    notes: str = ""
    quantity: int = 1
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", parse_quantity(self.quantity))

    def expiry(self) -> date | None:
        """Return the parsed expiry date, or None when it is malformed."""
        return parse_expiry(self.expiry_date)


@dataclass(frozen=True)
class Category:
    """A storage area such as "Fridge" or "Vegetables"."""

    name: str = ""
    id: str = field(default_factory=_new_id)


@dataclass(frozen=True)
class Recipe:
    """A recipe produced by the text generator."""

    name: str = ""
    content: str = ""
    id: str = field(default_factory=_new_id)


Entity = Item | Category | Recipe


class CollectionKind(Enum):
    """Logical collections kept per user."""

    ITEMS = "items"
    CATEGORIES = "categories"
    RECIPES = "recipes"

    @property
    def table(self) -> str:
        """Name of the remote table backing the collection."""
        return _TABLES[self]

    @classmethod
    def of(cls, entity: Entity) -> "CollectionKind":
        """Return the collection an entity belongs to."""
        if isinstance(entity, Item):
            return cls.ITEMS
        if isinstance(entity, Category):
            return cls.CATEGORIES
        if isinstance(entity, Recipe):
            return cls.RECIPES
        raise TypeError(f"Unsupported entity type: {type(entity).__name__}")


_TABLES = {
    CollectionKind.ITEMS: "foods",
    CollectionKind.CATEGORIES: "areas",
    CollectionKind.RECIPES: "recipes",
}


def parse_quantity(raw: object) -> int:
    """Parse a quantity, falling back to 1 for anything that is not >= 1."""
    if isinstance(raw, bool):
        return 1
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        _logger.debug("Unparseable quantity %r, using 1", raw)
        return 1
    return value if value >= 1 else 1


def parse_expiry(raw: object) -> date | None:
    """Parse a "YYYY-MM-DD" calendar date string."""
    if not isinstance(raw, str) or not _ISO_DATE.fullmatch(raw):
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def sort_by_expiry(items: Iterable[Item]) -> list[Item]:
    """Deduplicate items by id and sort them by expiry date ascending."""
    unique: dict[str, Item] = {}
    for item in items:
        unique[item.id] = item
    return sorted(unique.values(), key=lambda item: item.expiry_date)


def to_document(entity: Entity) -> dict[str, object]:
    """Serialize an entity into its remote document shape."""
    if isinstance(entity, Item):
        return {
            "id": entity.id,
            "name": entity.name,
            "expiryDate": entity.expiry_date,
            "area": entity.area,
            "notes": entity.notes,
            "quantity": entity.quantity,
        }
    if isinstance(entity, Category):
        return {"id": entity.id, "name": entity.name}
    if isinstance(entity, Recipe):
        return {"id": entity.id, "name": entity.name, "content": entity.content}
    raise TypeError(f"Unsupported entity type: {type(entity).__name__}")


def from_document(kind: CollectionKind, document: dict[str, object]) -> Entity:
    """Build an entity from a remote document, defaulting missing fields."""
    entity_id = str(document["id"])
    name = _text(document.get("name"))
    if kind is CollectionKind.ITEMS:
        expiry = document.get("expiryDate")
        return Item(
            id=entity_id,
            name=name,
            expiry_date=str(expiry) if expiry is not None else default_expiry(),
            area=_text(document.get("area"), DEFAULT_AREA),
            notes=_text(document.get("notes")),
            quantity=parse_quantity(document.get("quantity", 1)),
        )
    if kind is CollectionKind.CATEGORIES:
        return Category(id=entity_id, name=name)
    return Recipe(id=entity_id, name=name, content=_text(document.get("content")))


def _text(value: object, default: str = "") -> str:
    return default if value is None else str(value)
