"""
Login Backend - Password Hashing Utilities

Password hashing using bcrypt.
Work factor comes from settings and defaults to 12.

Security:
- Never log or expose plaintext passwords
- bcrypt includes a fresh salt on every call
- Supports hash upgrades on login
"""

from typing import Optional

import bcrypt

from login_backend.config import settings


# bcrypt only reads the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Empty passwords are hashed like any other input; length policy
    belongs to the request schemas, not here.

    Args:
        password: Plaintext password

    Returns:
        bcrypt hash string (includes salt)

    Example:
        >>> hashed = hash_password("pw1")
        >>> hashed.startswith("$2b$")
        True
    """
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_WORK_FACTOR)
    hashed = bcrypt.hashpw(_password_bytes(password), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Returns False instead of raising when the stored hash is malformed.

    Example:
        >>> hashed = hash_password("pw1")
        >>> verify_password("pw1", hashed)
        True
        >>> verify_password("wrong", hashed)
        False
    """
    try:
        return bcrypt.checkpw(
            _password_bytes(plain_password),
            hashed_password.encode("utf-8"),
        )
    except (ValueError, TypeError, AttributeError):
        # Invalid hash format
        return False


def needs_rehash(hashed_password: str, target_work_factor: Optional[int] = None) -> bool:
    """
    Check if a password hash was made with a lower work factor than wanted.

    Example:
        # After raising BCRYPT_WORK_FACTOR from 10 to 12:
        >>> needs_rehash(old_hash)  # Generated with factor 10
        True
    """
    target = target_work_factor or settings.BCRYPT_WORK_FACTOR
    try:
        # bcrypt hash format: $2b$XX$...
        _, work_factor_str, _ = hashed_password.split("$")[1:4]
        return int(work_factor_str) < target
    except (ValueError, AttributeError):
        # Not a valid bcrypt hash, definitely needs rehash
        return True
