"""Request models for the inventory API."""

from pydantic import BaseModel, ConfigDict, Field

from smart_fridge.domain.inventory import (
    DEFAULT_AREA,
    Item,
    default_expiry,
    parse_quantity,
)


class ItemPayload(BaseModel):
    """Item fields as sent by clients, using the remote document names."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    expiry_date: str = Field(default_factory=default_expiry, alias="expiryDate")
    area: str = DEFAULT_AREA
    notes: str = ""
    quantity: int | str = 1

    def to_item(self, item_id: str | None = None) -> Item:
        fields = {
            "name": self.name.strip(),
            "expiry_date": self.expiry_date,
            "area": self.area,
            "notes": self.notes,
            "quantity": parse_quantity(self.quantity),
        }
        if item_id is not None:
            return Item(id=item_id, **fields)
        return Item(**fields)


class QuantityPayload(BaseModel):
    """New quantity typed by the user."""

    quantity: int | str


class SessionPayload(BaseModel):
    """Identity returned by the authentication provider."""

    id: str = Field(min_length=1)
    label: str = ""


class NamePayload(BaseModel):
    """Payload carrying a single display name."""

    name: str = Field(min_length=1)


class RecommendPayload(BaseModel):
    """Ingredients selected for a recommendation."""

    ingredients: list[str] = Field(min_length=1)
