"""
Login Backend - Authentication Request/Response Schemas

Pydantic models for API request validation and response serialization.
JSON fields are camelCase; Python attributes are snake_case.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class RegisterRequest(CamelModel):
    """Request body for POST /api/users/register."""
    login_id: str = Field(..., alias="loginId", min_length=1, max_length=64)
    password: str = Field(..., max_length=128)
    nickname: Optional[str] = Field(default=None, max_length=64)


class RegisterResponse(CamelModel):
    """Response body for successful registration."""
    id: UUID
    login_id: str = Field(..., alias="loginId")
    nickname: str


class AvailabilityResponse(CamelModel):
    """Response body for GET /api/users/check-id."""
    available: bool


class LoginRequest(CamelModel):
    """Request body for POST /api/users/login."""
    login_id: str = Field(..., alias="loginId")
    password: str


class LoginResponse(CamelModel):
    """Response body for successful login."""
    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")


class RefreshRequest(CamelModel):
    """Request body for POST /api/users/refresh-token."""
    login_id: str = Field(..., alias="loginId")
    nickname: Optional[str] = None
    refresh_token: str = Field(..., alias="refreshToken")


class RefreshResponse(CamelModel):
    """Response body for token refresh."""
    access_token: str = Field(..., alias="accessToken")


class UserResponse(CamelModel):
    """Public view of a user account."""
    id: UUID
    login_id: str = Field(..., alias="loginId")
    nickname: str
    role: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    detail: str
