"""
Shared validators for input sanitization and money handling.
"""

import re
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from urllib.parse import urlparse

# Hosts that should never appear in product image URLs (SSRF prevention)
BLOCKED_HOSTS = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "10.",
    "192.168.",
    "169.254.",  # Link-local and cloud metadata
    "[::1]",
    "metadata.google",
]

CENTS = Decimal("0.01")


def validate_image_url(url: str | None) -> str | None:
    """
    Validate a product image URL.

    Only http(s) URLs to public hosts are accepted (CDN image URLs often
    carry no file extension).

    Raises:
        ValueError: If the URL is not acceptable.
    """
    if not url:
        return None

    url = url.strip()
    parsed = urlparse(url)

    if parsed.scheme not in ("http", "https"):
        raise ValueError("Image URL must use http or https")

    host = (parsed.hostname or "").lower()
    if not host or any(host.startswith(blocked) for blocked in BLOCKED_HOSTS):
        raise ValueError("Image URL host is not allowed")

    return url


def escape_like_pattern(value: str) -> str:
    """
    Escape special characters in LIKE patterns.

    SQL LIKE uses % and _ as wildcards; escaping them keeps a search term
    a literal substring. Use together with ``escape="\\\\"``.
    """
    if not value:
        return value

    # Escape the escape character first, then the wildcards
    value = value.replace("\\", "\\\\")
    value = value.replace("%", "\\%")
    value = value.replace("_", "\\_")
    return value


def sanitize_search_term(term: str | None, max_length: int = 100) -> str:
    """
    Sanitize search term for safe use in queries.

    Trims whitespace, caps the length and strips control characters.
    """
    if not term:
        return ""

    term = term.strip()[:max_length]
    return re.sub(r"[\x00-\x1f\x7f-\x9f]", "", term)


def to_minor_units(amount: Decimal | int | float | str) -> int:
    """
    Convert a major-unit amount into integer minor units (cents).

    Rounds half up, matching round(amount * 100).

    Raises:
        ValueError: If amount is not a number.
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int) -> Decimal:
    """Convert integer minor units (cents) into a 2-decimal major-unit amount."""
    return (Decimal(amount) / 100).quantize(CENTS)
