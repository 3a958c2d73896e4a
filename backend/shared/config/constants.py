"""
Centralized constants for the backend application.

Usage:
    from shared.config.constants import PaymentStatus, OrderStatus

    if order.payment_status == PaymentStatus.PAID:
        ...
"""

from typing import Final


# =============================================================================
# Establishments
# =============================================================================


class EstablishmentType:
    """Kinds of establishment served by the storefront."""

    SUPERMARKET: Final[str] = "supermarket"
    BUTCHER: Final[str] = "butcher"
    BAKERY: Final[str] = "bakery"

    ALL: Final[list[str]] = [SUPERMARKET, BUTCHER, BAKERY]


# =============================================================================
# Order / Payment Status Constants
# =============================================================================


class PaymentMethod:
    """Payment methods accepted at checkout."""

    INSTANT_TRANSFER: Final[str] = "instant_transfer"
    CREDIT_CARD: Final[str] = "credit_card"

    ALL: Final[list[str]] = [INSTANT_TRANSFER, CREDIT_CARD]

    # Vendor / legacy spellings accepted on input
    ALIASES: Final[dict[str, str]] = {"pix": INSTANT_TRANSFER}


class PaymentStatus:
    """Canonical payment status. Vendor vocabularies are mapped onto these."""

    PENDING: Final[str] = "pending"
    PAID: Final[str] = "paid"
    FAILED: Final[str] = "failed"

    ALL: Final[list[str]] = [PENDING, PAID, FAILED]


class OrderStatus:
    """Fulfillment status of an order."""

    PROCESSING: Final[str] = "processing"
    CONFIRMED: Final[str] = "confirmed"
    PREPARING: Final[str] = "preparing"
    DELIVERING: Final[str] = "delivering"
    DELIVERED: Final[str] = "delivered"
    CANCELLED: Final[str] = "cancelled"

    ALL: Final[list[str]] = [PROCESSING, CONFIRMED, PREPARING, DELIVERING, DELIVERED, CANCELLED]
    TERMINAL: Final[list[str]] = [DELIVERED, CANCELLED]


# Only consulted when settings.enforce_order_status_transitions is enabled.
ORDER_TRANSITIONS: Final[dict[str, list[str]]] = {
    OrderStatus.PROCESSING: [OrderStatus.CONFIRMED, OrderStatus.CANCELLED],
    OrderStatus.CONFIRMED: [OrderStatus.PREPARING, OrderStatus.CANCELLED],
    OrderStatus.PREPARING: [OrderStatus.DELIVERING, OrderStatus.CANCELLED],
    OrderStatus.DELIVERING: [OrderStatus.DELIVERED, OrderStatus.CANCELLED],
    OrderStatus.DELIVERED: [],  # Terminal state
    OrderStatus.CANCELLED: [],  # Terminal state
}


class ProductSort:
    """Accepted values for the catalog sortBy query parameter."""

    PRICE_ASC: Final[str] = "price_asc"
    PRICE_DESC: Final[str] = "price_desc"
    NAME_ASC: Final[str] = "name_asc"
    NAME_DESC: Final[str] = "name_desc"
    BEST_SELLERS: Final[str] = "best_sellers"
    DISCOUNT: Final[str] = "discount"

    ALL: Final[list[str]] = [PRICE_ASC, PRICE_DESC, NAME_ASC, NAME_DESC, BEST_SELLERS, DISCOUNT]


class Limits:
    """Validation limits."""

    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 999

    MAX_NAME_LENGTH: Final[int] = 200
    MAX_SEARCH_RESULTS: Final[int] = 20


# Key of the persisted client-side cart blob
CART_STORAGE_KEY: Final[str] = "establishment-carts"


# =============================================================================
# Status Validation Functions
# =============================================================================


def normalize_payment_method(value: str) -> str:
    """Map accepted spellings onto a PaymentMethod value (unchanged if unknown)."""
    value = value.strip().lower()
    return PaymentMethod.ALIASES.get(value, value)


def is_valid_order_status(status: str) -> bool:
    return status in OrderStatus.ALL


def is_valid_payment_status(status: str) -> bool:
    return status in PaymentStatus.ALL


def validate_order_transition(current_status: str, new_status: str) -> bool:
    """
    Check if an order status transition is allowed by ORDER_TRANSITIONS.

    Re-applying the current status is always allowed.
    """
    if current_status == new_status:
        return True
    allowed = ORDER_TRANSITIONS.get(current_status, [])
    return new_status in allowed
