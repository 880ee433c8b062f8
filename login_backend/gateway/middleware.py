"""
Login Backend - Request Middleware

Request/response middleware for:
- Bearer token authentication and path authorization
- Request ID injection for tracing
- Security headers and request timing
"""

import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from login_backend.auth.exceptions import AuthError
from login_backend.gateway.auth import resolve_principal


logger = logging.getLogger(__name__)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Runs once per request before route dispatch.

    1. Resolves the bearer token into request.state.principal (or None)
    2. Applies the authorization gate to the request path
    3. Short-circuits with 401/403 when the gate denies

    Expects app.state.token_service and app.state.authorization_gate.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        state = request.app.state
        principal = resolve_principal(
            request.headers.get("Authorization"),
            state.token_service,
        )
        request.state.principal = principal

        try:
            state.authorization_gate.check(request.url.path, principal)
        except AuthError as e:
            headers = {"WWW-Authenticate": "Bearer"} if e.status_code == 401 else None
            return JSONResponse(
                status_code=e.status_code,
                content={"detail": e.message},
                headers=headers,
            )

        return await call_next(request)


class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Security-focused middleware for all incoming requests.

    Responsibilities:
    1. Inject X-Request-ID header for tracing
    2. Add security headers to response
    3. Log request timing
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Cache-Control"] = "no-store"

        logger.debug(
            "%s %s -> %d in %.1fms [%s]",
            request.method, request.url.path, response.status_code, duration_ms, request_id,
        )
        return response
