"""
Remote-order checkout.

Local state is only written after the provider accepted the payment at
least provisionally:

    validate -> provider order -> (accepted) local order + items + sales
                               -> (refused)  ProviderRejected, nothing stored
                               -> (timeout)  ProviderUnreachable, nothing stored
"""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from shared.config.logging import mask_reference, payments_logger as logger
from shared.utils.exceptions import PersistenceError, ProviderRejected, ValidationError
from shared.utils.schemas import (
    DeliveryAddress,
    LineItemInput,
    OrderDraft,
    RemoteOrderRequest,
)
from shared.utils.validators import from_minor_units
from rest_api.models import Order
from rest_api.services.domain import OrderService
from .remote_order_gateway import PagarmeOrderGateway, RemoteOrderResult


@dataclass(frozen=True)
class RemoteCheckoutResult:
    order: Order
    remote: RemoteOrderResult


def build_order_draft(request: RemoteOrderRequest, delivery_fee_cents: int) -> OrderDraft:
    """Local order draft for a provider checkout request."""
    address = request.address
    return OrderDraft(
        customer_name=request.customer.name,
        customer_email=request.customer.email,
        customer_phone=request.customer.phone,
        delivery_address=DeliveryAddress(
            zip_code=address.zipcode,
            street=address.street,
            number=address.number,
            complement=address.complement,
            neighborhood=address.neighborhood,
            city=address.city,
            state=address.state or None,
        ),
        payment_method=request.payment_method,
        total_amount=from_minor_units(request.total_amount),
        delivery_fee=from_minor_units(delivery_fee_cents),
        establishment_id=request.establishment_id,
    )


def build_line_items(request: RemoteOrderRequest) -> list[LineItemInput]:
    return [
        LineItemInput(
            product_id=item.id,
            quantity=item.quantity,
            price=from_minor_units(item.price),
        )
        for item in request.items
    ]


class RemoteCheckoutService:
    """Creates a provider order, then the matching local order."""

    def __init__(self, db: Session, gateway: PagarmeOrderGateway):
        self._db = db
        self._gateway = gateway
        self._orders = OrderService(db)

    async def checkout(self, request: RemoteOrderRequest) -> RemoteCheckoutResult:
        """
        Raises:
            ValidationError: Inconsistent amounts or invalid items.
            EstablishmentNotFoundError: Unknown establishment.
            ProviderRejected: Provider refused the payment (reason verbatim).
            ProviderUnreachable: Provider did not answer.
            PersistenceError: Provider accepted but the local write failed.
        """
        items_cents = sum(item.price * item.quantity for item in request.items)
        delivery_fee_cents = request.total_amount - items_cents
        if delivery_fee_cents < 0:
            raise ValidationError(
                "total_amount is lower than the sum of the items",
                total_amount=request.total_amount,
                items_amount=items_cents,
            )

        draft = build_order_draft(request, delivery_fee_cents)
        items = build_line_items(request)

        # Everything that can be checked locally is checked before charging
        self._orders.validate_order(draft, items)

        remote = await self._gateway.create_remote_order(request, delivery_fee_cents)
        if not remote.accepted:
            raise ProviderRejected(
                remote.reason or "Payment refused",
                provider_status=remote.provider_status,
                establishment_id=request.establishment_id,
            )

        try:
            order = self._orders.create_order(
                draft,
                items,
                payment_status=remote.payment_status,
                external_transaction_ref=remote.transaction_ref,
                external_order_ref=remote.order_ref,
            )
        except PersistenceError:
            # Provider holds an order with no local counterpart
            logger.critical(
                "Remote order accepted but local order not stored, manual reconciliation required",
                order_ref=remote.order_ref,
                transaction_ref=remote.transaction_ref,
                payment_status=remote.payment_status,
            )
            raise

        logger.info(
            "Remote checkout completed",
            order_id=order.id,
            order_ref=mask_reference(remote.order_ref),
            payment_status=remote.payment_status,
        )
        return RemoteCheckoutResult(order=order, remote=remote)
