"""
Login Backend - JWT Token Management

Creates and validates signed bearer tokens:
- Access tokens carry subject (login ID), nickname and role
- Refresh tokens carry only the subject and are also stored on the user

Security:
- HS256 with a secret injected at startup via TokenConfig
- Expiry is checked against the service clock; exp <= now is expired
- jti makes every issued token unique
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import jwt, JWTError
from pydantic import BaseModel, Field, field_validator

from login_backend.auth.exceptions import InvalidTokenError
from login_backend.auth.models import Role
from login_backend.config import Settings


logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenConfig(BaseModel):
    """
    Signing configuration, built once at startup and never mutated.

    Attributes:
        secret_key: HMAC signing secret
        algorithm: JWS algorithm
        access_ttl: Access token lifetime
        refresh_ttl: Refresh token lifetime
    """
    model_config = {"frozen": True}

    secret_key: str = Field(..., min_length=1)
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=60)
    refresh_ttl: timedelta = timedelta(days=7)

    @field_validator("secret_key")
    @classmethod
    def secret_not_blank(cls, v):
        if not v.strip():
            raise ValueError("SECRET_KEY must be set")
        return v

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenConfig":
        return cls(
            secret_key=settings.SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )


class TokenClaims(BaseModel):
    """
    Decoded token payload.

    Attributes:
        sub: Subject (login ID)
        typ: "access" or "refresh"
        jti: Unique token ID
        iat: Issued-at timestamp
        exp: Expiration timestamp
        nickname: Nickname (access tokens only)
        role: User role (access tokens only)
    """
    sub: str
    typ: str
    jti: str
    iat: datetime
    exp: datetime
    nickname: Optional[str] = None
    role: Optional[Role] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Issues and checks access and refresh tokens.

    Usage:
        service = TokenService(TokenConfig.from_settings(settings))
        token = service.create_access_token("alice", "Al", Role.USER)
        service.validate_token(token, "alice")  # True
    """

    def __init__(self, config: TokenConfig, clock: Callable[[], datetime] = None):
        self._config = config
        self._clock = clock or _utcnow

    def _now(self) -> datetime:
        # JWT timestamps have one-second resolution
        return self._clock().replace(microsecond=0)

    def _encode(self, claims: dict, ttl: timedelta) -> str:
        now = self._now()
        payload = {
            **claims,
            "jti": secrets.token_hex(16),
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(
            payload,
            self._config.secret_key,
            algorithm=self._config.algorithm,
        )

    def create_access_token(self, login_id: str, nickname: str, role: Role) -> str:
        """
        Create a short-lived access token.

        Args:
            login_id: Subject of the token
            nickname: User's nickname
            role: User's role

        Returns:
            Encoded JWT string
        """
        return self._encode(
            {
                "sub": login_id,
                "nickname": nickname,
                "role": Role(role).value,
                "typ": ACCESS_TOKEN_TYPE,
            },
            self._config.access_ttl,
        )

    def create_refresh_token(self, login_id: str) -> str:
        """Create a long-lived refresh token for login_id."""
        return self._encode(
            {"sub": login_id, "typ": REFRESH_TOKEN_TYPE},
            self._config.refresh_ttl,
        )

    def parse_claims(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry, then decode the payload.

        Raises:
            InvalidTokenError: If token is malformed, mis-signed or expired
        """
        if not token:
            raise InvalidTokenError("Token is empty")

        try:
            payload = jwt.decode(
                token,
                self._config.secret_key,
                algorithms=[self._config.algorithm],
                options={"verify_exp": False},
            )
            claims = TokenClaims(**payload)
        except (JWTError, ValueError, TypeError) as e:
            logger.debug("Token rejected: %s", e)
            raise InvalidTokenError(f"Token validation failed: {e}")

        if claims.exp <= self._now():
            logger.debug("Token rejected: expired at %s", claims.exp.isoformat())
            raise InvalidTokenError("Token has expired")

        return claims

    def validate_token(
        self,
        token: str,
        expected_subject: str,
        token_type: Optional[str] = None,
    ) -> bool:
        """
        Check a token without raising.

        Returns:
            False if the token does not parse, has expired, belongs to a
            different subject, or is not of token_type (when given)
        """
        try:
            claims = self.parse_claims(token)
        except InvalidTokenError:
            return False

        if claims.sub != expected_subject:
            return False
        if token_type is not None and claims.typ != token_type:
            return False
        return True

    def refresh_token_expires_at(self, token: str) -> datetime:
        """Expiry of a refresh token, stored alongside it."""
        return self.parse_claims(token).exp
