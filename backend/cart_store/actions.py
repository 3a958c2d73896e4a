"""
Cart actions.

``CartAction`` is the closed set of changes the reducer accepts.
"""

from dataclasses import dataclass

from .models import ProductSnapshot


@dataclass(frozen=True)
class SetCurrentEstablishment:
    establishment_id: int | None


@dataclass(frozen=True)
class AddItem:
    product: ProductSnapshot
    establishment_id: int


@dataclass(frozen=True)
class RemoveItem:
    product_id: int
    establishment_id: int


@dataclass(frozen=True)
class UpdateQuantity:
    product_id: int
    quantity: int
    establishment_id: int


@dataclass(frozen=True)
class ClearCart:
    """Empty one establishment's cart, or every cart when no id is given."""

    establishment_id: int | None = None


@dataclass(frozen=True)
class ToggleVisible:
    pass


@dataclass(frozen=True)
class OpenCart:
    pass


@dataclass(frozen=True)
class CloseCart:
    pass


CartAction = (
    SetCurrentEstablishment
    | AddItem
    | RemoveItem
    | UpdateQuantity
    | ClearCart
    | ToggleVisible
    | OpenCart
    | CloseCart
)
