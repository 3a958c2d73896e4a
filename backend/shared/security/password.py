"""
Password hashing utilities using bcrypt.
"""

import bcrypt

from shared.config.logging import get_logger

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Returns:
        Hashed password string (includes salt and algorithm info),
        something like: $2b$12$...
    """
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Plaintext or foreign hashes are rejected: every stored password
    must be bcrypt ($2a$, $2b$, $2y$ prefixed).
    """
    if not hashed_password.startswith(("$2a$", "$2b$", "$2y$")):
        logger.warning(
            "SECURITY: Attempted login against a non-bcrypt password hash"
        )
        return False

    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
