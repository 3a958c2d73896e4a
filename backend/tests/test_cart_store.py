"""
Tests for the cart reducer, CartStore and cart persistence.
"""

import json
from decimal import Decimal

import pytest

from cart_store import (
    STORAGE_KEY,
    AddItem,
    CartPersistence,
    CartState,
    CartStore,
    ClearCart,
    CloseCart,
    FileSlot,
    MemorySlot,
    OpenCart,
    ProductSnapshot,
    RemoveItem,
    SetCurrentEstablishment,
    ToggleVisible,
    UpdateQuantity,
    reduce,
)


def snapshot(product_id: int, price: str, establishment_id: int = 1, name: str | None = None) -> ProductSnapshot:
    return ProductSnapshot(
        id=product_id,
        name=name or f"Product {product_id}",
        price=Decimal(price),
        unit="un",
        establishment_id=establishment_id,
    )


APPLE = snapshot(1, "10.00")
MILK = snapshot(2, "4.25")
BREAD = snapshot(3, "8.00", establishment_id=2)


def apply(*actions, state: CartState | None = None) -> CartState:
    state = state or CartState()
    for action in actions:
        state = reduce(state, action)
    return state


class TestReducer:
    def test_add_new_product_appends_with_quantity_one(self):
        state = apply(AddItem(APPLE, 1))
        cart = state.cart_for(1)
        assert [(i.product.id, i.quantity) for i in cart.items] == [(1, 1)]
        assert cart.total == Decimal("10.00")

    def test_add_existing_product_merges(self):
        state = apply(AddItem(APPLE, 1), AddItem(MILK, 1), AddItem(APPLE, 1))
        cart = state.cart_for(1)
        assert [(i.product.id, i.quantity) for i in cart.items] == [(1, 2), (2, 1)]
        assert cart.total == Decimal("24.25")

    def test_add_does_not_touch_other_establishments(self):
        before = apply(AddItem(BREAD, 2))
        after = reduce(before, AddItem(APPLE, 1))
        assert after.cart_for(2) == before.cart_for(2)

    def test_snapshot_price_is_frozen_at_add_time(self):
        state = apply(AddItem(APPLE, 1))
        repriced = snapshot(1, "99.00")
        state = reduce(state, AddItem(repriced, 1))
        # Merge keeps the original snapshot
        assert state.cart_for(1).items[0].product.price == Decimal("10.00")
        assert state.cart_for(1).total == Decimal("20.00")

    def test_remove_item(self):
        state = apply(AddItem(APPLE, 1), AddItem(MILK, 1), RemoveItem(1, 1))
        assert [i.product.id for i in state.cart_for(1).items] == [2]
        assert state.cart_for(1).total == Decimal("4.25")

    def test_remove_without_cart_is_noop(self):
        state = CartState()
        assert reduce(state, RemoveItem(1, 1)) is state

    def test_update_quantity(self):
        state = apply(AddItem(APPLE, 1), UpdateQuantity(1, 3, 1))
        assert state.cart_for(1).items[0].quantity == 3
        assert state.cart_for(1).total == Decimal("30.00")

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_update_to_zero_or_less_removes(self, quantity):
        base = apply(AddItem(APPLE, 1), AddItem(MILK, 1))
        updated = reduce(base, UpdateQuantity(1, quantity, 1))
        removed = reduce(base, RemoveItem(1, 1))
        assert updated == removed
        assert all(i.quantity > 0 for i in updated.cart_for(1).items)

    def test_update_without_cart_is_noop(self):
        state = CartState()
        assert reduce(state, UpdateQuantity(1, 5, 1)) is state

    def test_clear_one_establishment(self):
        state = apply(AddItem(APPLE, 1), AddItem(BREAD, 2), ClearCart(1))
        assert state.cart_for(1).items == ()
        assert state.cart_for(1).total == Decimal("0")
        assert len(state.cart_for(2).items) == 1

    def test_clear_all_keeps_visibility(self):
        state = apply(AddItem(APPLE, 1), AddItem(BREAD, 2), OpenCart(), ClearCart())
        assert all(not cart.items for cart in state.carts.values())
        assert state.is_visible is True

    def test_visibility_actions(self):
        state = apply(AddItem(APPLE, 1))
        assert reduce(state, OpenCart()).is_visible is True
        assert reduce(reduce(state, OpenCart()), CloseCart()).is_visible is False
        toggled = reduce(state, ToggleVisible())
        assert toggled.is_visible is not state.is_visible
        assert toggled.carts == state.carts

    def test_set_current_establishment(self):
        state = apply(AddItem(APPLE, 1), SetCurrentEstablishment(1))
        assert state.current_establishment_id == 1
        assert state.current_cart.total == Decimal("10.00")

    def test_reducer_does_not_mutate_input(self):
        state = apply(AddItem(APPLE, 1))
        carts_before = dict(state.carts)
        reduce(state, AddItem(MILK, 1))
        assert state.carts == carts_before

    def test_unknown_action_is_rejected(self):
        with pytest.raises(AssertionError):
            reduce(CartState(), object())


class TestCartStore:
    def test_dispatch_persists_after_cart_changes(self):
        slot = MemorySlot()
        store = CartStore(CartPersistence(slot))
        store.dispatch(AddItem(APPLE, 1))

        saved = json.loads(slot.read(STORAGE_KEY))
        assert saved["1"]["items"][0]["product"]["id"] == 1
        assert saved["1"]["total"] == "10.00"

    def test_visibility_change_does_not_persist(self):
        slot = MemorySlot()
        store = CartStore(CartPersistence(slot))
        store.dispatch(ToggleVisible())
        assert slot.read(STORAGE_KEY) is None

    def test_round_trip_two_establishments(self):
        slot = MemorySlot()
        store = CartStore(CartPersistence(slot))
        for action in (
            AddItem(APPLE, 1),
            AddItem(MILK, 1),
            UpdateQuantity(2, 3, 1),
            AddItem(BREAD, 2),
            AddItem(snapshot(4, "2.50", establishment_id=2), 2),
            AddItem(BREAD, 2),
        ):
            store.dispatch(action)

        restored = CartStore(CartPersistence(slot))
        restored.rehydrate()

        for establishment_id in (1, 2):
            original = store.state.cart_for(establishment_id)
            rebuilt = restored.state.cart_for(establishment_id)
            assert {(i.product.id, i.quantity) for i in rebuilt.items} == {
                (i.product.id, i.quantity) for i in original.items
            }
            assert rebuilt.total == original.total

    def test_rehydrate_with_nothing_saved(self):
        store = CartStore(CartPersistence(MemorySlot()))
        assert store.rehydrate().carts == {}

    @pytest.mark.parametrize(
        "blob",
        [
            "{not json",
            "[1, 2, 3]",
            json.dumps({"1": {"items": [{"product": {"id": 1}, "quantity": 1}]}}),
            json.dumps({"abc": {"items": []}}),
            json.dumps({"1": "nope"}),
        ],
    )
    def test_corrupt_data_starts_empty(self, blob):
        store = CartStore(CartPersistence(MemorySlot({STORAGE_KEY: blob})))
        state = store.rehydrate()
        assert state.carts == {}

    def test_file_slot_round_trip(self, tmp_path):
        path = tmp_path / "carts" / "establishment-carts.json"
        store = CartStore(CartPersistence(FileSlot(path)))
        store.dispatch(AddItem(APPLE, 1))
        store.dispatch(UpdateQuantity(1, 4, 1))

        restored = CartStore(CartPersistence(FileSlot(path)))
        restored.rehydrate()
        assert restored.state.cart_for(1).items[0].quantity == 4
        assert restored.state.cart_for(1).total == Decimal("40.00")

    def test_file_slot_with_garbage_starts_empty(self, tmp_path):
        path = tmp_path / "carts.json"
        path.write_text("garbage", encoding="utf-8")
        store = CartStore(CartPersistence(FileSlot(path)))
        assert store.rehydrate().carts == {}


class TestProductSnapshot:
    def test_built_from_catalog_json(self):
        product = ProductSnapshot.model_validate(
            {
                "id": 7,
                "name": "Milk",
                "price": "6.00",
                "unit": "un",
                "establishmentId": 1,
                "categoryName": "Dairy",
                "stock": 10,
            }
        )
        assert product.price == Decimal("6.00")
        assert product.category_name == "Dairy"

    def test_is_immutable(self):
        with pytest.raises(Exception):
            APPLE.price = Decimal("1.00")
