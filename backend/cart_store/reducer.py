"""
Cart reducer.

``reduce(state, action)`` is a pure function: no I/O, no mutation of
its arguments. Every transition that touches items recomputes the cart
total from scratch.
"""

from dataclasses import replace
from typing import assert_never

from .actions import (
    AddItem,
    CartAction,
    ClearCart,
    CloseCart,
    OpenCart,
    RemoveItem,
    SetCurrentEstablishment,
    ToggleVisible,
    UpdateQuantity,
)
from .models import EMPTY_CART, CartLineItem, CartState, EstablishmentCart


def _with_cart(state: CartState, establishment_id: int, cart: EstablishmentCart) -> CartState:
    return replace(state, carts={**state.carts, establishment_id: cart})


def _add_item(state: CartState, action: AddItem) -> CartState:
    cart = state.cart_for(action.establishment_id)
    if cart.find(action.product.id) is not None:
        items = tuple(
            replace(item, quantity=item.quantity + 1) if item.product.id == action.product.id else item
            for item in cart.items
        )
    else:
        items = (*cart.items, CartLineItem(product=action.product, quantity=1))
    return _with_cart(state, action.establishment_id, EstablishmentCart.with_items(items))


def _remove_item(state: CartState, action: RemoveItem) -> CartState:
    cart = state.carts.get(action.establishment_id)
    if cart is None:
        return state
    items = tuple(item for item in cart.items if item.product.id != action.product_id)
    return _with_cart(state, action.establishment_id, EstablishmentCart.with_items(items))


def _update_quantity(state: CartState, action: UpdateQuantity) -> CartState:
    if action.quantity <= 0:
        return _remove_item(state, RemoveItem(action.product_id, action.establishment_id))

    cart = state.carts.get(action.establishment_id)
    if cart is None:
        return state
    items = tuple(
        replace(item, quantity=action.quantity) if item.product.id == action.product_id else item
        for item in cart.items
    )
    return _with_cart(state, action.establishment_id, EstablishmentCart.with_items(items))


def _clear_cart(state: CartState, action: ClearCart) -> CartState:
    if action.establishment_id is None:
        return replace(state, carts={establishment_id: EMPTY_CART for establishment_id in state.carts})
    return _with_cart(state, action.establishment_id, EMPTY_CART)


def reduce(state: CartState, action: CartAction) -> CartState:
    """Apply one action and return the new state."""
    if isinstance(action, SetCurrentEstablishment):
        return replace(state, current_establishment_id=action.establishment_id)
    elif isinstance(action, AddItem):
        return _add_item(state, action)
    elif isinstance(action, RemoveItem):
        return _remove_item(state, action)
    elif isinstance(action, UpdateQuantity):
        return _update_quantity(state, action)
    elif isinstance(action, ClearCart):
        return _clear_cart(state, action)
    elif isinstance(action, ToggleVisible):
        return replace(state, is_visible=not state.is_visible)
    elif isinstance(action, OpenCart):
        return replace(state, is_visible=True)
    elif isinstance(action, CloseCart):
        return replace(state, is_visible=False)
    else:
        assert_never(action)
