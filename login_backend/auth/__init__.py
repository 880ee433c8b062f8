"""
Login Backend - Authentication Package

Authentication core with:
- bcrypt password hashing
- HS256 access and refresh tokens
- Stored refresh token per user for server-side revocation
"""

from login_backend.auth.models import User, Role
from login_backend.auth.directory import UserDirectory
from login_backend.auth.tokens import TokenConfig, TokenService, TokenClaims

__all__ = [
    "User",
    "Role",
    "UserDirectory",
    "TokenConfig",
    "TokenService",
    "TokenClaims",
]
