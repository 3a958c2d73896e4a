"""
Cart state types.

State values are immutable: the reducer builds a new state for every
change and never edits one in place.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProductSnapshot(BaseModel):
    """
    Copy of catalog data taken when a product is added to a cart.

    Later catalog price changes do not reach items already in a cart.
    Built from the catalog's camelCase product JSON; unknown fields are
    ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        frozen=True,
    )

    id: int
    name: str
    price: Decimal = Field(ge=0)
    unit: str = "un"
    establishment_id: int
    category_name: str | None = None

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class CartLineItem:
    product: ProductSnapshot
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.product.price * self.quantity


def compute_total(items: tuple[CartLineItem, ...]) -> Decimal:
    """Exact sum of price x quantity over the items."""
    return sum((item.subtotal for item in items), Decimal("0"))


@dataclass(frozen=True)
class EstablishmentCart:
    """
    Items of one establishment.

    ``total`` is always derived from ``items``; build carts through
    ``with_items`` so the two never disagree.
    """

    items: tuple[CartLineItem, ...] = ()
    total: Decimal = Decimal("0")

    @classmethod
    def with_items(cls, items: tuple[CartLineItem, ...]) -> "EstablishmentCart":
        return cls(items=items, total=compute_total(items))

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def find(self, product_id: int) -> CartLineItem | None:
        for item in self.items:
            if item.product.id == product_id:
                return item
        return None


EMPTY_CART = EstablishmentCart()


@dataclass(frozen=True)
class CartState:
    carts: dict[int, EstablishmentCart] = field(default_factory=dict)
    current_establishment_id: int | None = None
    is_visible: bool = False

    def cart_for(self, establishment_id: int) -> EstablishmentCart:
        return self.carts.get(establishment_id, EMPTY_CART)

    @property
    def current_cart(self) -> EstablishmentCart:
        if self.current_establishment_id is None:
            return EMPTY_CART
        return self.cart_for(self.current_establishment_id)
