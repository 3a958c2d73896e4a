"""
Property-based tests for the cart reducer with Hypothesis.
"""

from decimal import Decimal

from hypothesis import given, settings, strategies as st

from cart_store import AddItem, CartState, ProductSnapshot, RemoveItem, UpdateQuantity, reduce

ESTABLISHMENTS = [1, 2, 3]

products = st.builds(
    ProductSnapshot,
    id=st.integers(min_value=1, max_value=8),
    name=st.just("Product"),
    price=st.decimals(min_value=0, max_value=1000, places=2, allow_nan=False, allow_infinity=False),
    unit=st.just("un"),
    establishment_id=st.sampled_from(ESTABLISHMENTS),
)

actions = st.one_of(
    st.builds(AddItem, product=products, establishment_id=st.sampled_from(ESTABLISHMENTS)),
    st.builds(
        RemoveItem,
        product_id=st.integers(min_value=1, max_value=8),
        establishment_id=st.sampled_from(ESTABLISHMENTS),
    ),
    st.builds(
        UpdateQuantity,
        product_id=st.integers(min_value=1, max_value=8),
        quantity=st.integers(min_value=-3, max_value=50),
        establishment_id=st.sampled_from(ESTABLISHMENTS),
    ),
)


class TestCartProperties:
    @given(st.lists(actions, max_size=40))
    @settings(max_examples=100)
    def test_total_matches_items_after_every_step(self, action_list):
        """Property: total == sum(price * quantity) after any transition."""
        state = CartState()
        for action in action_list:
            state = reduce(state, action)
            for cart in state.carts.values():
                assert cart.total == sum(
                    (i.product.price * i.quantity for i in cart.items), Decimal("0")
                )

    @given(st.lists(actions, max_size=40))
    @settings(max_examples=100)
    def test_no_duplicates_and_positive_quantities(self, action_list):
        state = CartState()
        for action in action_list:
            state = reduce(state, action)
        for cart in state.carts.values():
            ids = [i.product.id for i in cart.items]
            assert len(ids) == len(set(ids))
            assert all(i.quantity >= 1 for i in cart.items)

    @given(st.lists(actions, max_size=20), products)
    @settings(max_examples=100)
    def test_add_only_touches_its_establishment(self, action_list, product):
        state = CartState()
        for action in action_list:
            state = reduce(state, action)
        after = reduce(state, AddItem(product, 1))
        for establishment_id in (2, 3):
            assert after.cart_for(establishment_id) == state.cart_for(establishment_id)
