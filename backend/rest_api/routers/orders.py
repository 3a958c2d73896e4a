"""
Orders router.
Order creation from a storefront cart, order lookup, fulfillment status
and the client-side confirmation of intent-based payments.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from shared.config.constants import PaymentStatus
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.rate_limit import limiter
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import (
    CreateOrderRequest,
    ErrorResponse,
    OrderDetailOutput,
    OrderOutput,
    OrderStatusUpdate,
    PaymentSuccessRequest,
)
from rest_api.services.domain import OrderService
from rest_api.services.payments import StripeIntentGateway, get_intent_gateway


router = APIRouter(
    prefix="/api/orders",
    tags=["orders"],
    responses={400: {"model": ErrorResponse}},
)


@router.post("", response_model=OrderOutput, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def create_order(request: Request, body: CreateOrderRequest, db: Session = Depends(get_db)):
    """
    Create an order with its items.

    Every product must exist and belong to the order's establishment.
    The order, its items and the sales counters are stored together or
    not at all.
    """
    return OrderService(db).create_order(body.order, body.items)


@router.get(
    "/{order_id}",
    response_model=OrderDetailOutput,
    responses={404: {"model": ErrorResponse}},
)
def get_order(order_id: int, db: Session = Depends(get_db)):
    return OrderService(db).get_order(order_id)


@router.patch("/{order_id}/status", response_model=OrderOutput)
def update_order_status(order_id: int, body: OrderStatusUpdate, db: Session = Depends(get_db)):
    return OrderService(db).update_order_status(order_id, body.status)


@router.post("/{order_id}/payment-success", response_model=OrderOutput)
async def payment_success(
    order_id: int,
    body: PaymentSuccessRequest,
    db: Session = Depends(get_db),
    gateway: StripeIntentGateway = Depends(get_intent_gateway),
):
    """
    Mark an order paid after the client confirmed its payment intent.

    The client's assertion is trusted unless
    ``stripe_verify_payment_success`` is enabled, in which case the
    intent status is fetched from the processor first.
    """
    service = OrderService(db)
    service.get_order(order_id)

    new_status = PaymentStatus.PAID
    if settings.stripe_verify_payment_success:
        intent = await gateway.retrieve_payment_intent(body.payment_intent_id)
        if intent.status != PaymentStatus.PAID:
            raise ValidationError(
                "Payment not confirmed by the processor",
                order_id=order_id,
                intent_status=intent.status,
            )

    return service.update_order_payment_status(order_id, new_status, body.payment_intent_id)
