"""
Remote-order webhook reconciliation.

The provider delivers events at least once, possibly out of order, and
retries on any non-2xx answer. Handling rules:
- events are matched to orders by the provider's order/charge id
- unknown references are acknowledged and dropped
- re-delivery of an applied event writes nothing
- the last delivered event wins
- internal failures are logged and still acknowledged
- only malformed payloads are rejected

Sales aggregates are never touched here.
"""

import hashlib
import hmac
from enum import Enum
from typing import Any

from sqlalchemy.orm import Session

from shared.config.logging import mask_reference, payments_logger as logger
from shared.config.settings import settings
from shared.utils.exceptions import AuthError, ValidationError
from rest_api.services.domain import OrderService
from .status_mapping import map_remote_order_event

SIGNATURE_HEADER = "X-Hub-Signature"


class WebhookOutcome(str, Enum):
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    UNKNOWN_REFERENCE = "unknown_reference"
    ERROR = "error"


def verify_signature(raw_body: bytes, signature: str | None, secret: str | None = None) -> None:
    """
    Check the ``X-Hub-Signature: sha1=<hex>`` header.

    Skipped when no webhook secret is configured.

    Raises:
        AuthError: Missing or mismatching signature.
    """
    secret = secret if secret is not None else settings.pagarme_webhook_secret
    if not secret:
        logger.debug("Webhook signature verification skipped - no secret configured")
        return

    if not signature or "=" not in signature:
        raise AuthError("Missing webhook signature")

    algorithm, _, received = signature.partition("=")
    if algorithm.lower() != "sha1":
        raise AuthError("Unsupported webhook signature algorithm")

    expected = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha1).hexdigest()
    if not hmac.compare_digest(expected, received.strip().lower()):
        raise AuthError("Invalid webhook signature", received=received[:8])


def parse_event(body: Any) -> tuple[str, dict[str, Any]]:
    """
    Split a webhook body into (event_type, data).

    Raises:
        ValidationError: Body is not a provider event.
    """
    if not isinstance(body, dict):
        raise ValidationError("Malformed webhook payload")
    event_type = body.get("type")
    data = body.get("data")
    if not isinstance(event_type, str) or not event_type or not isinstance(data, dict):
        raise ValidationError("Malformed webhook payload", keys=sorted(body.keys())[:10])
    return event_type, data


def extract_references(data: dict[str, Any]) -> list[str]:
    """Provider ids that may identify the local order (order id first)."""
    refs: list[str] = []

    def add(value: Any) -> None:
        if isinstance(value, (str, int)) and str(value) and str(value) not in refs:
            refs.append(str(value))

    order = data.get("order")
    if isinstance(order, dict):
        add(order.get("id"))
    add(data.get("id"))
    charge = data.get("charge")
    if isinstance(charge, dict):
        add(charge.get("id"))
    for item in data.get("charges") or []:
        if isinstance(item, dict):
            add(item.get("id"))
    return refs


class WebhookReconciler:
    """Applies provider events to orders through OrderService."""

    def __init__(self, db: Session):
        self._db = db
        self._orders = OrderService(db)

    def handle(self, event_type: str, payload: dict[str, Any]) -> WebhookOutcome:
        """
        Apply one event. ``payload`` is the event's ``data`` object.

        Raises:
            ValidationError: payload carries no provider reference.
        """
        refs = extract_references(payload)
        if not refs:
            raise ValidationError("Webhook payload has no order or charge id", event_type=event_type)

        new_status = map_remote_order_event(event_type)

        try:
            order = self._orders.find_by_external_ref(refs, lock=True)
            if order is None:
                self._db.rollback()
                logger.warning(
                    "Webhook for unknown reference acknowledged",
                    event_type=event_type,
                    refs=[mask_reference(r) for r in refs],
                )
                return WebhookOutcome.UNKNOWN_REFERENCE

            if order.payment_status == new_status:
                self._db.rollback()
                logger.info(
                    "Webhook already applied",
                    event_type=event_type,
                    order_id=order.id,
                    payment_status=new_status,
                )
                return WebhookOutcome.UNCHANGED

            old_status = order.payment_status
            order_id = order.id
            self._orders.apply_payment_status(order, new_status)
        except Exception as e:
            self._db.rollback()
            logger.error(
                "Webhook processing failed, acknowledged anyway",
                event_type=event_type,
                refs=[mask_reference(r) for r in refs],
                error=str(e),
                exc_info=True,
            )
            return WebhookOutcome.ERROR

        logger.info(
            "Webhook applied",
            event_type=event_type,
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
        )
        return WebhookOutcome.UPDATED
