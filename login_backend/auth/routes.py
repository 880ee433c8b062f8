"""
Login Backend - Authentication Routes

API endpoints for accounts and tokens:
- POST /api/users/register       - Create an account
- GET  /api/users/check-id       - Check whether a login ID is free
- POST /api/users/login          - Issue access and refresh tokens
- POST /api/users/refresh-token  - Exchange a refresh token for an access token

Role-gated endpoints:
- GET  /api/v1/user/me           - Current user's profile (USER)
- GET  /api/v1/admin/users       - All accounts (ADMIN)
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from login_backend.auth.directory import UserDirectory
from login_backend.auth.models import User
from login_backend.auth.schemas import (
    RegisterRequest,
    RegisterResponse,
    AvailabilityResponse,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    UserResponse,
    ErrorResponse,
)
from login_backend.gateway.auth import AuthenticatedPrincipal, get_current_principal


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])
protected_router = APIRouter(prefix="/api/v1", tags=["protected"])


def get_directory(request: Request) -> UserDirectory:
    """Get the user directory from app state."""
    return request.app.state.user_directory


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        login_id=user.login_id,
        nickname=user.nickname,
        role=user.role.value,
    )


@router.post(
    "/register",
    response_model=RegisterResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Register a new user",
)
def register(
    body: RegisterRequest,
    directory: UserDirectory = Depends(get_directory),
):
    """
    Create a USER account.

    A nickname is generated when the request omits one.

    Raises:
        400: Login ID or nickname already in use
    """
    user = directory.register_user(body.login_id, body.password, body.nickname)
    return RegisterResponse(id=user.id, login_id=user.login_id, nickname=user.nickname)


@router.get(
    "/check-id",
    response_model=AvailabilityResponse,
    responses={409: {"model": AvailabilityResponse}},
    summary="Check login ID availability",
)
def check_id(
    login_id: str = Query(..., alias="loginId"),
    directory: UserDirectory = Depends(get_directory),
):
    """Returns 200 when the login ID is free, 409 when it is taken."""
    if directory.is_login_id_available(login_id):
        return AvailabilityResponse(available=True)

    logger.warning("Login ID %s is already taken", login_id)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"available": False},
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Authenticate and issue tokens",
)
def login(
    body: LoginRequest,
    directory: UserDirectory = Depends(get_directory),
):
    """
    Authenticate with login ID and password.

    On success:
    1. Issues an access token with the stored nickname and role
    2. Issues a refresh token and stores it, revoking any earlier one

    Raises:
        400: Invalid credentials (same message for unknown ID and wrong password)
    """
    access_token = directory.login_user(body.login_id, body.password)
    refresh_token = directory.issue_refresh_token(body.login_id)
    return LoginResponse(access_token=access_token, refresh_token=refresh_token)


@router.post(
    "/refresh-token",
    response_model=RefreshResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Refresh the access token",
)
def refresh_token(
    body: RefreshRequest,
    directory: UserDirectory = Depends(get_directory),
):
    """
    Exchange the stored refresh token for a new access token.

    The new token carries the nickname and role on record; the nickname in
    the request body is not trusted.

    Raises:
        401: Refresh token invalid, expired, or not the latest issued
    """
    access_token = directory.refresh(body.login_id, body.refresh_token)
    return RefreshResponse(access_token=access_token)


@protected_router.get(
    "/user/me",
    response_model=UserResponse,
    summary="Get current user information",
)
def get_me(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    directory: UserDirectory = Depends(get_directory),
):
    """Profile of the authenticated caller."""
    user = directory.get_user(principal.login_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return _user_response(user)


@protected_router.get(
    "/admin/users",
    response_model=List[UserResponse],
    summary="List all users (admin only)",
)
def list_users(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    directory: UserDirectory = Depends(get_directory),
):
    """All registered accounts, oldest first."""
    return [_user_response(user) for user in directory.list_users()]
