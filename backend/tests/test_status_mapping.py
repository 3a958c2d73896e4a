"""Vendor status vocabularies."""

import pytest

from rest_api.services.payments import (
    map_remote_order_event,
    map_remote_order_status,
    map_stripe_intent_status,
)


@pytest.mark.parametrize(
    "status, expected",
    [
        ("paid", "paid"),
        ("PAID", "paid"),
        ("pending", "pending"),
        ("processing", "pending"),
        ("waiting_payment", "pending"),
        ("failed", "failed"),
        ("canceled", "failed"),
        ("something_new", "failed"),
        (None, "failed"),
    ],
)
def test_remote_order_status(status, expected):
    assert map_remote_order_status(status) == expected


@pytest.mark.parametrize(
    "event_type, expected",
    [
        ("order.paid", "paid"),
        ("charge.paid", "paid"),
        ("order.payment_failed", "failed"),
        ("order.canceled", "failed"),
        ("charge.refused", "failed"),
        ("order.created", "pending"),
        ("charge.pending", "pending"),
        ("", "pending"),
    ],
)
def test_remote_order_event(event_type, expected):
    assert map_remote_order_event(event_type) == expected


@pytest.mark.parametrize(
    "status, expected",
    [
        ("succeeded", "paid"),
        ("canceled", "failed"),
        ("processing", "pending"),
        ("requires_payment_method", "pending"),
        ("requires_action", "pending"),
    ],
)
def test_stripe_intent_status(status, expected):
    assert map_stripe_intent_status(status) == expected
