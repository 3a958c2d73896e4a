"""
Opaque bearer tokens for the admin surface.

Tokens are random hex strings handed to the client once. Only their
SHA-256 digest is persisted, so a leaked database does not leak
usable tokens.
"""

import hashlib
import secrets

from fastapi import Request

TOKEN_BYTES = 32


def generate_token() -> str:
    """Return a new random 64-character hex token."""
    return secrets.token_hex(TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Digest used to store and look up a token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def get_bearer_token(request: Request) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
