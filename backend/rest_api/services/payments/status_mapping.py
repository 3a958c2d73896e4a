"""
Vendor status vocabularies mapped onto PaymentStatus.

One pure function per vendor surface. Nothing outside this module should
compare against vendor status strings.
"""

from shared.config.constants import PaymentStatus

# Pagar.me order / charge / transaction statuses that mean "accepted, not settled yet"
_PAGARME_PENDING = frozenset({
    "pending",
    "processing",
    "waiting_payment",
    "authorized_pending_capture",
    "partial_capture",
    "generated",
})

_PAGARME_PAID = frozenset({"paid", "captured"})

_PAGARME_PAID_EVENTS = frozenset({"order.paid", "charge.paid"})

_PAGARME_FAILED_EVENTS = frozenset({
    "order.payment_failed",
    "order.canceled",
    "charge.payment_failed",
    "charge.refused",
    "charge.canceled",
})


def map_remote_order_status(status: str | None) -> str:
    """
    Pagar.me order/charge status -> PaymentStatus.

    paid -> paid, provisional statuses -> pending, anything else
    (refused, failed, canceled, unknown) -> failed.
    """
    normalized = (status or "").strip().lower()
    if normalized in _PAGARME_PAID:
        return PaymentStatus.PAID
    if normalized in _PAGARME_PENDING:
        return PaymentStatus.PENDING
    return PaymentStatus.FAILED


def map_remote_order_event(event_type: str | None) -> str:
    """Pagar.me webhook event type -> PaymentStatus (unknown events stay pending)."""
    normalized = (event_type or "").strip().lower()
    if normalized in _PAGARME_PAID_EVENTS:
        return PaymentStatus.PAID
    if normalized in _PAGARME_FAILED_EVENTS:
        return PaymentStatus.FAILED
    return PaymentStatus.PENDING


def map_stripe_intent_status(status: str | None) -> str:
    """Stripe PaymentIntent status -> PaymentStatus."""
    normalized = (status or "").strip().lower()
    if normalized == "succeeded":
        return PaymentStatus.PAID
    if normalized == "canceled":
        return PaymentStatus.FAILED
    return PaymentStatus.PENDING
