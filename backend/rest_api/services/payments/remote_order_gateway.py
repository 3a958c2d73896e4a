"""
Order-based payment processor (Pagar.me Core API v5).

A remote order carries the customer, items, shipping and a single
payment (credit card or instant transfer). The synchronous answer tells
whether the payment was accepted (paid or provisionally pending);
the final outcome arrives later through the webhook.
"""

import re
from dataclasses import dataclass
from typing import Any

import httpx

from shared.config.constants import PaymentMethod, PaymentStatus
from shared.config.logging import mask_email, mask_reference, payments_logger as logger
from shared.config.settings import settings
from shared.utils.exceptions import ProviderUnreachable
from shared.utils.schemas import RemoteOrderRequest
from .circuit_breaker import CircuitBreakerError, pagarme_breaker
from .status_mapping import map_remote_order_status

PROVIDER_NAME = "pagarme"

# Instant transfer is called "pix" by the provider
_PROVIDER_METHODS = {
    PaymentMethod.CREDIT_CARD: "credit_card",
    PaymentMethod.INSTANT_TRANSFER: "pix",
}


@dataclass(frozen=True)
class RemoteOrderResult:
    """Provider answer translated into internal vocabulary."""

    order_ref: str | None
    transaction_ref: str | None
    provider_status: str
    payment_status: str  # PaymentStatus value
    reason: str | None = None
    pix_qr_code: str | None = None
    pix_qr_code_url: str | None = None
    pix_expires_at: str | None = None

    @property
    def accepted(self) -> bool:
        return self.payment_status in (PaymentStatus.PAID, PaymentStatus.PENDING)


def _digits(value: str | None) -> str:
    return re.sub(r"\D", "", value or "")


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def build_order_payload(request: RemoteOrderRequest, delivery_fee_cents: int) -> dict[str, Any]:
    """Provider request body for a checkout (amounts in minor units)."""
    customer: dict[str, Any] = {
        "name": request.customer.name,
        "email": str(request.customer.email),
        "type": "individual",
    }
    document = _digits(request.customer.document)
    if document:
        customer["document"] = document
        customer["document_type"] = "CPF" if len(document) == 11 else "CNPJ"
    phone = _digits(request.customer.phone)
    if len(phone) >= 10:
        customer["phones"] = {
            "mobile_phone": {"country_code": "55", "area_code": phone[:2], "number": phone[2:]}
        }

    address = request.address
    provider_address = {
        "line_1": ", ".join(p for p in (address.number, address.street, address.neighborhood) if p),
        "line_2": address.complement or "",
        "zip_code": _digits(address.zipcode),
        "city": address.city,
        "state": address.state,
        "country": "BR",
    }

    method = _PROVIDER_METHODS[request.payment_method]
    if request.payment_method == PaymentMethod.CREDIT_CARD:
        card = request.card
        payment = {
            "payment_method": method,
            "credit_card": {
                "installments": 1,
                "statement_descriptor": "STOREFRONT",
                "card": {
                    "number": card.number,
                    "holder_name": card.holder_name,
                    "exp_month": card.exp_month,
                    "exp_year": card.exp_year,
                    "cvv": card.cvv,
                    "billing_address": provider_address,
                },
            },
        }
    else:
        payment = {"payment_method": method, "pix": {"expires_in": settings.pix_expires_in}}

    return {
        "customer": customer,
        "items": [
            {
                "amount": item.price,
                "description": item.description,
                "quantity": item.quantity,
                "code": str(item.id),
            }
            for item in request.items
        ],
        "shipping": {
            "amount": delivery_fee_cents,
            "description": "Delivery",
            "recipient_name": request.customer.name,
            "address": provider_address,
        },
        "payments": [payment],
        "metadata": {"establishment_id": str(request.establishment_id)},
    }


def parse_order_response(body: dict[str, Any]) -> RemoteOrderResult:
    """Translate a provider order into a RemoteOrderResult."""
    charges = body.get("charges")
    charge = _as_dict(charges[0]) if isinstance(charges, list) and charges else {}
    transaction = _as_dict(charge.get("last_transaction"))

    # The charge status is the payment outcome; fall back to the order status
    provider_status = str(charge.get("status") or body.get("status") or "")
    payment_status = map_remote_order_status(provider_status)

    reason = None
    if payment_status == PaymentStatus.FAILED:
        gateway_errors = _as_dict(transaction.get("gateway_response")).get("errors")
        first_error = gateway_errors[0] if isinstance(gateway_errors, list) and gateway_errors else None
        reason = (
            transaction.get("acquirer_message")
            or _as_dict(first_error).get("message")
            or f"Payment {provider_status or 'refused'}"
        )

    return RemoteOrderResult(
        order_ref=body.get("id"),
        transaction_ref=charge.get("id") or transaction.get("id"),
        provider_status=provider_status,
        payment_status=payment_status,
        reason=reason,
        pix_qr_code=transaction.get("qr_code"),
        pix_qr_code_url=transaction.get("qr_code_url"),
        pix_expires_at=transaction.get("expires_at"),
    )


class PagarmeOrderGateway:
    """Async client for POST /orders with a bounded timeout."""

    def __init__(
        self,
        secret_key: str | None = None,
        api_base: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._secret_key = secret_key if secret_key is not None else settings.pagarme_secret_key
        self._api_base = (api_base or settings.pagarme_api_base).rstrip("/")
        self._timeout = timeout or settings.payment_provider_timeout
        self._transport = transport

    async def create_remote_order(
        self,
        request: RemoteOrderRequest,
        delivery_fee_cents: int,
    ) -> RemoteOrderResult:
        """
        Create the remote order.

        Refusals come back as a result with ``accepted == False``.

        Raises:
            ProviderUnreachable: timeout, transport error, provider 5xx,
                unreadable response or open circuit.
        """
        if not self._secret_key:
            logger.error("Remote order attempted without provider credentials")
            raise ProviderUnreachable(PROVIDER_NAME)

        payload = build_order_payload(request, delivery_fee_cents)

        try:
            async with pagarme_breaker.call():
                async with httpx.AsyncClient(
                    base_url=self._api_base,
                    auth=(self._secret_key, ""),
                    timeout=self._timeout,
                    transport=self._transport,
                ) as client:
                    response = await client.post("/orders", json=payload)
                if response.status_code >= 500:
                    response.raise_for_status()
        except CircuitBreakerError as e:
            raise ProviderUnreachable(PROVIDER_NAME, retry_after=round(e.retry_after) or 1) from e
        except httpx.HTTPError as e:
            raise ProviderUnreachable(PROVIDER_NAME, error=type(e).__name__) from e

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderUnreachable(PROVIDER_NAME, error="invalid_json") from e
        if not isinstance(body, dict):
            raise ProviderUnreachable(PROVIDER_NAME, error="invalid_json")

        if response.status_code >= 400:
            # Request refused as a whole (validation, invalid card data)
            message = body.get("message")
            logger.warning(
                "Remote order refused",
                http_status=response.status_code,
                customer_email=mask_email(str(request.customer.email)),
            )
            return RemoteOrderResult(
                order_ref=None,
                transaction_ref=None,
                provider_status="refused",
                payment_status=PaymentStatus.FAILED,
                reason=message or "Payment refused by the processor",
            )

        result = parse_order_response(body)
        logger.info(
            "Remote order created",
            order_ref=mask_reference(result.order_ref),
            provider_status=result.provider_status,
            payment_status=result.payment_status,
            payment_method=request.payment_method,
        )
        return result


def get_remote_order_gateway() -> PagarmeOrderGateway:
    """FastAPI dependency (overridden in tests with a mocked transport)."""
    return PagarmeOrderGateway()
