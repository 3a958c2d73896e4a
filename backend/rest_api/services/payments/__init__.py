"""
Payment Services - Payment processors and their reconciliation.

Provides:
- Vendor status vocabularies mapped onto PaymentStatus
- Circuit breakers for provider resilience
- Intent-based processor client (Stripe)
- Order-based processor client (Pagar.me) and remote checkout
- Webhook reconciliation
"""

from .status_mapping import (
    map_remote_order_status,
    map_remote_order_event,
    map_stripe_intent_status,
)
from .circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerError,
    CircuitState,
    stripe_breaker,
    pagarme_breaker,
    get_all_breaker_stats,
)
from .intent_gateway import PaymentIntent, StripeIntentGateway, get_intent_gateway
from .remote_order_gateway import (
    PagarmeOrderGateway,
    RemoteOrderResult,
    get_remote_order_gateway,
)
from .remote_checkout import RemoteCheckoutResult, RemoteCheckoutService
from .webhook_reconciler import (
    WebhookOutcome,
    WebhookReconciler,
    verify_signature,
    parse_event,
)

__all__ = [
    # Status mapping
    "map_remote_order_status",
    "map_remote_order_event",
    "map_stripe_intent_status",
    # Circuit breaker
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerError",
    "CircuitState",
    "stripe_breaker",
    "pagarme_breaker",
    "get_all_breaker_stats",
    # Intent flow
    "PaymentIntent",
    "StripeIntentGateway",
    "get_intent_gateway",
    # Remote-order flow
    "PagarmeOrderGateway",
    "RemoteOrderResult",
    "get_remote_order_gateway",
    "RemoteCheckoutResult",
    "RemoteCheckoutService",
    # Webhook
    "WebhookOutcome",
    "WebhookReconciler",
    "verify_signature",
    "parse_event",
]
