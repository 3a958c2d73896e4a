"""
CartStore: explicit holder of one session's cart state.

Usage:
    store = CartStore(CartPersistence(FileSlot(settings.cart_file)))
    store.rehydrate()
    store.dispatch(AddItem(product, establishment_id=1))
"""

from typing import Any

from shared.config.logging import get_logger

from .actions import AddItem, CartAction, UpdateQuantity
from .models import CartState, ProductSnapshot
from .persistence import CartPersistence
from .reducer import reduce

logger = get_logger(__name__)


def replay_actions(data: dict[str, Any]) -> list[CartAction]:
    """
    Actions that rebuild persisted carts: one AddItem per line item, plus
    UpdateQuantity when the stored quantity is above one.

    Raises:
        ValueError, TypeError, KeyError: Malformed persisted data.
    """
    actions: list[CartAction] = []
    for raw_id, raw_cart in data.items():
        establishment_id = int(raw_id)
        for raw_item in raw_cart["items"]:
            product = ProductSnapshot.model_validate(raw_item["product"])
            quantity = int(raw_item["quantity"])
            actions.append(AddItem(product=product, establishment_id=establishment_id))
            if quantity > 1:
                actions.append(UpdateQuantity(product.id, quantity, establishment_id))
    return actions


class CartStore:
    """
    Holds the state, applies actions through the reducer and saves the
    ``carts`` map after every change to it.
    """

    def __init__(self, persistence: CartPersistence, state: CartState | None = None):
        self._persistence = persistence
        self._state = state or CartState()

    @property
    def state(self) -> CartState:
        return self._state

    def dispatch(self, action: CartAction) -> CartState:
        previous = self._state
        self._state = reduce(previous, action)
        if self._state.carts != previous.carts:
            self._persistence.save(self._state.carts)
        return self._state

    def rehydrate(self) -> CartState:
        """
        Rebuild carts from the persisted blob.

        Corrupt or unreadable data leaves the store empty; the error is
        logged and never raised.
        """
        try:
            data = self._persistence.load()
            if data is None:
                return self._state
            state = CartState(
                current_establishment_id=self._state.current_establishment_id,
                is_visible=self._state.is_visible,
            )
            for action in replay_actions(data):
                state = reduce(state, action)
        except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning("Discarding unreadable persisted carts", error=str(e))
            self._state = CartState(
                current_establishment_id=self._state.current_establishment_id,
                is_visible=self._state.is_visible,
            )
            return self._state

        self._state = state
        return self._state
