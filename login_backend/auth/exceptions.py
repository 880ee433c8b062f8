"""
Login Backend - Authentication Errors

Every failure in the authentication core is a per-request AuthError.
The HTTP layer renders them as {"detail": message} with status_code.
"""

from typing import Optional

from fastapi import status


class AuthError(Exception):
    """Base class for client-facing authentication failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Authentication error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateLoginIdError(AuthError):
    """Login ID is already registered."""
    default_message = "Login ID already in use"


class DuplicateNicknameError(AuthError):
    """Nickname is already taken by another user."""
    default_message = "Nickname already in use"


class InvalidCredentialsError(AuthError):
    """
    Unknown login ID or wrong password.

    Both cases share one message so callers cannot tell which check failed.
    """
    default_message = "Invalid login ID or password"


class InvalidTokenError(AuthError):
    """Token is malformed, expired, mis-signed, or not the one on record."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid Refresh Token"


class UnauthenticatedError(AuthError):
    """No valid principal on a path that requires one."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class ForbiddenError(AuthError):
    """Principal is valid but its role does not satisfy the path rule."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"
