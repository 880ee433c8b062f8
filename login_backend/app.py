"""
Login Backend - FastAPI Application Entrypoint

This module initializes the FastAPI application with:
- CORS, security and authentication middleware
- Account and token routes
- Database lifecycle management

Security: Every path not listed as public in policies.yaml requires a
valid access token; role-gated paths also require the matching role.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from login_backend import __version__
from login_backend.config import settings, configure_logging
from login_backend.auth.database import get_engine, init_db, get_session_factory
from login_backend.auth.directory import UserDirectory
from login_backend.auth.exceptions import AuthError
from login_backend.auth.routes import router as users_router, protected_router
from login_backend.auth.tokens import TokenConfig, TokenService
from login_backend.gateway.middleware import AuthenticationMiddleware, SecurityMiddleware
from login_backend.gateway.rbac import AuthorizationGate, load_policy


logger = logging.getLogger(__name__)

VERSION = __version__


def configure_app_state(
    app: FastAPI,
    engine: Engine,
    token_service: TokenService,
    gate: AuthorizationGate,
) -> None:
    """Attach the shared collaborators used by middleware and routes."""
    app.state.db_engine = engine
    app.state.db_session_factory = get_session_factory(engine)
    app.state.token_service = token_service
    app.state.authorization_gate = gate
    app.state.user_directory = UserDirectory(app.state.db_session_factory, token_service)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
        - Configure logging
        - Initialize SQLModel database (users)
        - Build the token service from settings (fails on empty SECRET_KEY)
        - Load the path access policy

    Shutdown:
        - Dispose the database engine
    """
    configure_logging()

    engine = get_engine(settings.DATABASE_URL)
    init_db(engine)

    configure_app_state(
        app,
        engine,
        TokenService(TokenConfig.from_settings(settings)),
        load_policy(settings.POLICY_FILE, role_hierarchy=settings.ROLE_HIERARCHY),
    )
    logger.info("Login backend started (database: %s)", engine.url.render_as_string(hide_password=True))

    yield

    engine.dispose()


app = FastAPI(
    title="Login Backend",
    description="User registration, login and JWT token issuance",
    version=VERSION,
    lifespan=lifespan,
)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Render request validation failures as 400 {"detail": message}."""
    errors = [
        "{}: {}".format(".".join(str(p) for p in err["loc"] if p != "body"), err["msg"])
        for err in exc.errors()
    ]
    logger.info("Rejected malformed request to %s: %s", request.url.path, errors)
    return JSONResponse(
        status_code=400,
        content={"detail": "; ".join(errors)},
    )


# Added first so it runs innermost, after request IDs and CORS
app.add_middleware(AuthenticationMiddleware)

# Security middleware for request IDs, headers and timing
app.add_middleware(SecurityMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "PUT", "PATCH"],
    allow_headers=["Authorization", "Content-Type"],
)


app.include_router(users_router)
app.include_router(protected_router)


@app.get("/health")
async def health_check():
    """Health check endpoint for local dev tooling."""
    return {"status": "healthy", "version": VERSION}


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Login Backend",
        "version": VERSION,
        "docs": "/docs",
        "health": "/health",
    }
