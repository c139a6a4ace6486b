"""Tests for inventory domain helpers."""

from datetime import date, timedelta

import pytest

from smart_fridge.domain.inventory import (
    DEFAULT_AREA,
    Category,
    CollectionKind,
    Item,
    Recipe,
    from_document,
    parse_expiry,
    parse_quantity,
    sort_by_expiry,
    to_document,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("3", 3), (" 12 ", 12), ("0", 1), ("-4", 1), ("abc", 1), ("", 1), (5, 5)],
)
def test_parse_quantity_falls_back_to_one(raw: object, expected: int) -> None:
    assert parse_quantity(raw) == expected


def test_parse_expiry_rejects_malformed_dates() -> None:
    assert parse_expiry("2024-05-12") == date(2024, 5, 12)
    assert parse_expiry("12/05/2024") is None
    assert parse_expiry("2024-02-30") is None
    assert parse_expiry("20240602") is None
    assert parse_expiry("2024-W22-7") is None
    assert parse_expiry(" 2024-06-02 ") is None
    assert parse_expiry(None) is None


def test_new_item_defaults() -> None:
    item = Item(name="Milk")

    assert item.area == DEFAULT_AREA
    assert item.quantity == 1
    assert item.notes == ""
    assert item.expiry() == date.today() + timedelta(days=7)
    assert item.id


def test_sort_by_expiry_orders_and_deduplicates() -> None:
    late = Item(id="a", name="Rice", expiry_date="2024-06-01")
    early = Item(id="b", name="Milk", expiry_date="2024-05-11")
    replaced = Item(id="a", name="Brown rice", expiry_date="2024-05-20")

    result = sort_by_expiry([late, early, replaced])

    assert [item.name for item in result] == ["Milk", "Brown rice"]


def test_item_document_uses_remote_field_names() -> None:
    item = Item(id="i1", name="Eggs", expiry_date="2024-05-12", quantity=6)

    document = to_document(item)

    assert document == {
        "id": "i1",
        "name": "Eggs",
        "expiryDate": "2024-05-12",
        "area": DEFAULT_AREA,
        "notes": "",
        "quantity": 6,
    }
    assert from_document(CollectionKind.ITEMS, document) == item


def test_from_document_defaults_missing_fields() -> None:
    item = from_document(
        CollectionKind.ITEMS, {"id": "i2", "name": "Tofu", "quantity": "zero"}
    )

    assert isinstance(item, Item)
    assert item.area == DEFAULT_AREA
    assert item.quantity == 1
    assert item.expiry() is not None


def test_collection_kind_of_entity() -> None:
    assert CollectionKind.of(Item()) is CollectionKind.ITEMS
    assert CollectionKind.of(Category(name="Meat")) is CollectionKind.CATEGORIES
    assert CollectionKind.of(Recipe(name="Soup")) is CollectionKind.RECIPES
    assert CollectionKind.ITEMS.table == "foods"
    assert CollectionKind.CATEGORIES.table == "areas"
    assert CollectionKind.RECIPES.table == "recipes"


@pytest.mark.parametrize("quantity", [0, -3])
def test_item_quantity_never_drops_below_one(quantity: int) -> None:
    item = Item(name="Milk", quantity=quantity)

    assert item.quantity == 1
    assert to_document(item)["quantity"] == 1
