"""
Login Backend - Request Authentication

Turns the Authorization header of a request into an optional principal.
No principal means the request is anonymous; whether that is allowed is
decided later by the authorization gate for the requested path.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi.security.utils import get_authorization_scheme_param
from pydantic import BaseModel

from login_backend.auth.exceptions import InvalidTokenError, UnauthenticatedError
from login_backend.auth.models import Role
from login_backend.auth.tokens import TokenService, ACCESS_TOKEN_TYPE


logger = logging.getLogger(__name__)

# Declares the bearer scheme in OpenAPI; the middleware does the real work
security = HTTPBearer(auto_error=False)


class AuthenticatedPrincipal(BaseModel):
    """Identity of the caller for the duration of one request."""
    login_id: str
    nickname: Optional[str] = None
    role: Role


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from "Bearer <token>", or None."""
    scheme, token = get_authorization_scheme_param(authorization)
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def principal_from_token(
    token: str,
    token_service: TokenService,
) -> Optional[AuthenticatedPrincipal]:
    """Principal for a raw access token; None if it does not check out."""
    try:
        claims = token_service.parse_claims(token)
    except InvalidTokenError:
        logger.debug("Ignoring invalid bearer token; request is anonymous")
        return None

    if claims.typ != ACCESS_TOKEN_TYPE or claims.role is None:
        logger.debug("Ignoring non-access token for %s", claims.sub)
        return None

    return AuthenticatedPrincipal(
        login_id=claims.sub,
        nickname=claims.nickname,
        role=claims.role,
    )


def resolve_principal(
    authorization: Optional[str],
    token_service: TokenService,
) -> Optional[AuthenticatedPrincipal]:
    """
    Build the caller's principal from an Authorization header value.

    Missing, invalid, expired and refresh-typed tokens all yield None.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        return None
    return principal_from_token(token, token_service)


async def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthenticatedPrincipal:
    """
    FastAPI dependency returning the caller's principal.

    Uses the principal attached by AuthenticationMiddleware. Without the
    middleware, the bearer credentials are resolved here instead.

    Raises:
        UnauthenticatedError: If the request is anonymous
    """
    if hasattr(request.state, "principal"):
        principal = request.state.principal
    elif credentials is not None:
        principal = principal_from_token(
            credentials.credentials, request.app.state.token_service
        )
    else:
        principal = None

    if principal is None:
        raise UnauthenticatedError()
    return principal
