"""
Login Backend - User Database Model

SQLModel-based user record for registration, login and refresh tokens.
Uses PostgreSQL for production, SQLite for local development.

Security:
- Passwords stored as bcrypt hashes only
- Only the latest refresh token is kept; issuing a new one revokes the old
- All timestamps in UTC
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    """User roles checked by the authorization gate."""
    USER = "USER"
    ADMIN = "ADMIN"


class User(SQLModel, table=True):
    """
    User account.

    Attributes:
        id: Unique identifier (UUIDv4)
        login_id: Login identifier (unique, never changed after creation)
        password_hash: bcrypt hash (never store plaintext)
        nickname: Display name (unique)
        role: Role used by path authorization
        refresh_token: Latest issued refresh token, if any
        refresh_token_expiry: Expiry of refresh_token
        created_at: Account creation timestamp (UTC)
        updated_at: Last modification timestamp (UTC)
    """
    __tablename__ = "users"

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        description="Unique user identifier"
    )
    login_id: str = Field(
        sa_column=Column(String(64), unique=True, index=True, nullable=False),
        description="Login identifier"
    )
    password_hash: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="bcrypt password hash"
    )
    nickname: str = Field(
        sa_column=Column(String(64), unique=True, nullable=False),
        description="Unique display name"
    )
    role: Role = Field(
        default=Role.USER,
        sa_column=Column(SQLEnum(Role), nullable=False, default=Role.USER),
        description="User role"
    )
    refresh_token: Optional[str] = Field(
        default=None,
        sa_column=Column(String(512), nullable=True),
        description="Currently valid refresh token"
    )
    refresh_token_expiry: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
        description="Refresh token expiration time"
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=utcnow),
        description="Account creation timestamp"
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow),
        description="Last update timestamp"
    )
