"""
Client-side shopping carts, one per establishment.

A pure reducer over a closed set of actions, an explicit store object
and a pluggable persistence slot.
"""

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
from .models import CartLineItem, CartState, EstablishmentCart, ProductSnapshot, compute_total
from .persistence import STORAGE_KEY, CartPersistence, CartSlot, FileSlot, MemorySlot
from .reducer import reduce
from .store import CartStore

__all__ = [
    # Actions
    "AddItem",
    "CartAction",
    "ClearCart",
    "CloseCart",
    "OpenCart",
    "RemoveItem",
    "SetCurrentEstablishment",
    "ToggleVisible",
    "UpdateQuantity",
    # State
    "CartLineItem",
    "CartState",
    "EstablishmentCart",
    "ProductSnapshot",
    "compute_total",
    # Persistence
    "STORAGE_KEY",
    "CartPersistence",
    "CartSlot",
    "FileSlot",
    "MemorySlot",
    # Store
    "reduce",
    "CartStore",
]
