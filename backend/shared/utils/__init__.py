"""
Utilities module: Exceptions, validators, schemas.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    EstablishmentNotFoundError,
    OrderNotFoundError,
    ProductNotFoundError,
    ValidationError,
    InvalidTransitionError,
    AuthError,
    PersistenceError,
    PaymentIntentError,
    ProviderRejected,
    ProviderUnreachable,
)
from shared.utils.validators import (
    validate_image_url,
    escape_like_pattern,
    sanitize_search_term,
    to_minor_units,
    from_minor_units,
)
from shared.utils.schemas import ErrorResponse

__all__ = [
    # exceptions
    "AppException",
    "NotFoundError",
    "EstablishmentNotFoundError",
    "OrderNotFoundError",
    "ProductNotFoundError",
    "ValidationError",
    "InvalidTransitionError",
    "AuthError",
    "PersistenceError",
    "PaymentIntentError",
    "ProviderRejected",
    "ProviderUnreachable",
    # validators
    "validate_image_url",
    "escape_like_pattern",
    "sanitize_search_term",
    "to_minor_units",
    "from_minor_units",
    # schemas
    "ErrorResponse",
]
