"""
Security module: password hashing, opaque admin tokens, rate limiting.
"""

from shared.security.password import hash_password, verify_password
from shared.security.tokens import generate_token, hash_token, get_bearer_token
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler

__all__ = [
    # password
    "hash_password",
    "verify_password",
    # tokens
    "generate_token",
    "hash_token",
    "get_bearer_token",
    # rate limiting
    "limiter",
    "rate_limit_exceeded_handler",
]
