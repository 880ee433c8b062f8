"""
Login Backend - Database Configuration

Storage for the users table.

- get_engine: SQLite (single shared connection) or pooled PostgreSQL
- init_db: creates the users table and its unique constraints
- get_session_factory: sessions that keep loaded users usable after commit
"""

from typing import Callable, Optional

from sqlmodel import SQLModel, Session, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from login_backend.config import settings


def get_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Build the engine for database_url, falling back to DATABASE_URL.

    SQLite shares one connection across threads so in-memory databases
    survive between sessions.
    """
    url = database_url or settings.DATABASE_URL

    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        url,
        echo=echo,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


def init_db(engine: Engine) -> None:
    """Create missing tables. Existing tables are left alone."""
    # Registers the users table on SQLModel.metadata
    from login_backend.auth.models import User  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session_factory(engine: Engine) -> Callable[[], Session]:
    """Session factory handed to UserDirectory."""
    def session_factory() -> Session:
        return Session(engine, expire_on_commit=False)

    return session_factory
