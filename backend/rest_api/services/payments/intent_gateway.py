"""
Intent-based payment processor (Stripe PaymentIntents REST API).

The server only creates the intent and hands its client secret to the
browser, which confirms the payment directly with Stripe. The server
learns the outcome through the client-asserted payment-success call
(optionally double-checked with retrieve_payment_intent).

Usage:
    gateway = get_intent_gateway()
    intent = await gateway.create_payment_intent(Decimal("25.50"))
    intent.client_secret
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

import httpx

from shared.config.logging import mask_reference, payments_logger as logger
from shared.config.settings import settings
from shared.utils.exceptions import PaymentIntentError, ValidationError
from shared.utils.validators import to_minor_units
from .circuit_breaker import CircuitBreakerError, stripe_breaker
from .status_mapping import map_stripe_intent_status


@dataclass(frozen=True)
class PaymentIntent:
    id: str
    client_secret: str | None
    amount: int
    currency: str
    status: str  # PaymentStatus value

    def __repr__(self) -> str:
        return f"PaymentIntent(id={self.id!r}, amount={self.amount}, status={self.status!r})"


def _coerce_amount(amount: Decimal | int | float | str) -> Decimal:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError("Invalid amount", amount=str(amount))
    if not value.is_finite() or value <= 0:
        raise ValidationError("Invalid amount", amount=str(amount))
    return value


def _error_reason(response: httpx.Response) -> str:
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return f"processor returned HTTP {response.status_code}"


class StripeIntentGateway:
    """Thin async client for the PaymentIntents endpoints."""

    def __init__(
        self,
        secret_key: str | None = None,
        api_base: str | None = None,
        currency: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._secret_key = secret_key if secret_key is not None else settings.stripe_secret_key
        self._api_base = (api_base or settings.stripe_api_base).rstrip("/")
        self._currency = currency or settings.stripe_currency
        self._timeout = timeout or settings.payment_provider_timeout
        self._transport = transport

    async def _request(self, method: str, path: str, data: dict | None = None) -> dict:
        if not self._secret_key:
            raise PaymentIntentError("payment processor is not configured")

        try:
            async with stripe_breaker.call():
                async with httpx.AsyncClient(
                    base_url=self._api_base,
                    auth=(self._secret_key, ""),
                    timeout=self._timeout,
                    transport=self._transport,
                ) as client:
                    response = await client.request(method, path, data=data)
                if response.status_code >= 500:
                    response.raise_for_status()
        except CircuitBreakerError as e:
            raise PaymentIntentError(
                "payment processor temporarily unavailable", retry_after=round(e.retry_after)
            ) from e
        except httpx.HTTPError as e:
            raise PaymentIntentError(
                f"could not reach payment processor ({type(e).__name__})", path=path
            ) from e

        if response.status_code >= 400:
            raise PaymentIntentError(_error_reason(response), status_code_upstream=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise PaymentIntentError("invalid response from payment processor") from e

    @staticmethod
    def _to_intent(body: dict) -> PaymentIntent:
        return PaymentIntent(
            id=body.get("id", ""),
            client_secret=body.get("client_secret"),
            amount=int(body.get("amount", 0)),
            currency=body.get("currency", ""),
            status=map_stripe_intent_status(body.get("status")),
        )

    async def create_payment_intent(
        self,
        amount: Decimal | int | float | str,
        currency: str | None = None,
    ) -> PaymentIntent:
        """
        Create an intent for ``amount`` major units.

        Raises:
            ValidationError: amount is not a positive number (no network call).
            PaymentIntentError: processor refused or could not be reached.
        """
        minor_units = to_minor_units(_coerce_amount(amount))
        if minor_units <= 0:
            raise ValidationError("Invalid amount", amount=str(amount))

        currency = (currency or self._currency).lower()
        body = await self._request(
            "POST",
            "/v1/payment_intents",
            data={
                "amount": str(minor_units),
                "currency": currency,
                "automatic_payment_methods[enabled]": "true",
            },
        )
        intent = self._to_intent(body)
        if not intent.client_secret:
            raise PaymentIntentError("processor response has no client secret")

        logger.info(
            "Payment intent created",
            intent_id=mask_reference(intent.id),
            amount=minor_units,
            currency=currency,
        )
        return intent

    async def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent:
        if not intent_id:
            raise ValidationError("paymentIntentId is required")
        body = await self._request("GET", f"/v1/payment_intents/{intent_id}")
        return self._to_intent(body)


def get_intent_gateway() -> StripeIntentGateway:
    """FastAPI dependency (overridden in tests with a mocked transport)."""
    return StripeIntentGateway()
