"""
Centralized HTTP exceptions for consistent error handling.

Usage:
    from shared.utils.exceptions import NotFoundError, ValidationError

    raise NotFoundError("Product", product_id)
    raise ValidationError("Quantity must be at least 1", field="quantity")
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Product", 123)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class EstablishmentNotFoundError(NotFoundError):
    def __init__(self, establishment_id: int | None = None, **log_context: Any):
        super().__init__("Establishment", establishment_id, **log_context)


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: int | None = None, **log_context: Any):
        super().__init__("Product", product_id, **log_context)


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Amount must be positive")
        raise ValidationError("Invalid quantity", field="quantity", value=-1)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class InvalidTransitionError(ValidationError):
    """Invalid status transition."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        detail = f"Invalid transition from '{from_status}' to '{to_status}' for {entity}"
        super().__init__(detail, entity=entity, from_status=from_status, to_status=to_status, **log_context)


# =============================================================================
# 401 Unauthorized Errors
# =============================================================================


class AuthError(AppException):
    """Bad or missing admin credentials (401)."""

    def __init__(self, detail: str = "Invalid credentials", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            log_level="warning",
            headers={"WWW-Authenticate": "Bearer"},
            **log_context,
        )


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Failed to process payment", order_id=123)
    """

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class PersistenceError(InternalError):
    """
    Durable-store write failure.

    The client message names the operation only; the underlying database
    error goes to the log through ``error``.
    """

    def __init__(self, operation: str, item_index: int | None = None, **log_context: Any):
        self.operation = operation
        self.item_index = item_index
        if item_index is not None:
            detail = f"Could not complete {operation} (item {item_index}). Please try again."
        else:
            detail = f"Could not complete {operation}. Please try again."
        super().__init__(detail, operation=operation, item_index=item_index, **log_context)


# =============================================================================
# Payment provider errors
# =============================================================================


class PaymentIntentError(AppException):
    """The intent-based processor refused or could not be reached (502)."""

    def __init__(self, reason: str, **log_context: Any):
        self.reason = reason
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Error creating payment intent: {reason}",
            log_level="error",
            **log_context,
        )


class ProviderRejected(AppException):
    """
    The remote-order processor refused the payment (402).

    ``reason`` is the provider's refusal text, surfaced verbatim.
    """

    def __init__(self, reason: str, provider_status: str | None = None, **log_context: Any):
        self.reason = reason
        self.provider_status = provider_status
        super().__init__(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail=reason,
            log_level="warning",
            provider_status=provider_status,
            **log_context,
        )


class ProviderUnreachable(AppException):
    """The payment provider did not answer in time or is failing fast (503)."""

    def __init__(self, provider: str, retry_after: int | None = None, **log_context: Any):
        self.provider = provider
        headers = {"Retry-After": str(retry_after)} if retry_after else None
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not reach the payment processor ({provider}). Please try again.",
            log_level="error",
            headers=headers,
            provider=provider,
            **log_context,
        )
