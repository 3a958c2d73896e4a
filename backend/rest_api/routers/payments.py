"""
Payment router.

- Intent flow: the client obtains a client secret, confirms the payment
  itself, then reports success through /api/orders/{id}/payment-success.
- Remote-order flow: the server creates the provider order and, when the
  provider accepts it, the local order.
- Provider webhooks reconcile payment status afterwards.
"""

import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from shared.config.logging import payments_logger as logger
from shared.infrastructure.db import get_db
from shared.security.rate_limit import limiter
from shared.utils.exceptions import AppException, ValidationError
from shared.utils.schemas import (
    PaymentIntentRequest,
    PaymentIntentResponse,
    RemoteOrderRequest,
    RemoteOrderResponse,
)
from rest_api.services.payments import (
    PagarmeOrderGateway,
    RemoteCheckoutService,
    StripeIntentGateway,
    WebhookReconciler,
    get_intent_gateway,
    get_remote_order_gateway,
    parse_event,
    verify_signature,
)
from rest_api.services.payments.webhook_reconciler import SIGNATURE_HEADER


router = APIRouter(prefix="/api", tags=["payments"])


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
@limiter.limit("20/minute")
async def create_payment_intent(
    request: Request,
    body: PaymentIntentRequest,
    gateway: StripeIntentGateway = Depends(get_intent_gateway),
):
    intent = await gateway.create_payment_intent(body.amount)
    return PaymentIntentResponse(client_secret=intent.client_secret)


@router.post("/payment-provider/create-order", response_model=RemoteOrderResponse)
@limiter.limit("10/minute")
async def create_remote_order(
    request: Request,
    body: RemoteOrderRequest,
    db: Session = Depends(get_db),
    gateway: PagarmeOrderGateway = Depends(get_remote_order_gateway),
):
    """
    Charge through the order-based provider.

    Failures answer ``{"success": false, "error": ...}`` with the status
    code of the failure (400, 402, 404, 500 or 503).
    """
    try:
        result = await RemoteCheckoutService(db, gateway).checkout(body)
    except AppException as e:
        return JSONResponse(
            status_code=e.status_code,
            content=RemoteOrderResponse(success=False, error=e.detail).model_dump(),
            headers=e.headers,
        )

    remote = result.remote
    return RemoteOrderResponse(
        success=True,
        order_id=result.order.id,
        transaction_id=remote.transaction_ref,
        status=result.order.payment_status,
        pix_qr_code=remote.pix_qr_code,
        pix_qr_code_url=remote.pix_qr_code_url,
        pix_expires_at=remote.pix_expires_at,
    )


@router.post("/payment-provider/webhook")
async def payment_provider_webhook(request: Request, db: Session = Depends(get_db)):
    """
    Provider event receiver.

    Answers 2xx for every well-formed event, including unknown
    references and internal failures, so the provider stops retrying.
    Bad signatures get 401 and malformed payloads 400.
    """
    raw_body = await request.body()
    verify_signature(raw_body, request.headers.get(SIGNATURE_HEADER))

    try:
        body = json.loads(raw_body)
    except ValueError as e:
        raise ValidationError("Webhook body is not valid JSON") from e

    event_type, data = parse_event(body)
    outcome = WebhookReconciler(db).handle(event_type, data)

    logger.debug("Webhook handled", event_type=event_type, outcome=outcome.value)
    return {"received": True, "outcome": outcome.value}
