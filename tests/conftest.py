"""
Login Backend - Test Configuration

Pytest fixtures for authentication testing.
Provides test database, token service, user directory and client fixtures.
"""

import os

# Must be set before login_backend.config builds its settings
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["BCRYPT_WORK_FACTOR"] = "4"

from typing import Callable, Dict, Generator

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, create_engine
from sqlalchemy.pool import StaticPool

from login_backend.app import app, configure_app_state
from login_backend.auth.database import get_session_factory
from login_backend.auth.directory import UserDirectory
from login_backend.auth.models import User, Role
from login_backend.auth.tokens import TokenConfig, TokenService
from login_backend.gateway.rbac import load_policy


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"
TEST_SECRET = "unit-test-signing-secret"


@pytest.fixture(scope="function")
def test_engine():
    """Create a fresh test database engine for each test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    yield engine

    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return get_session_factory(test_engine)


@pytest.fixture
def token_config() -> TokenConfig:
    return TokenConfig(secret_key=TEST_SECRET)


@pytest.fixture
def token_service(token_config) -> TokenService:
    return TokenService(token_config)


@pytest.fixture
def directory(session_factory, token_service) -> UserDirectory:
    return UserDirectory(session_factory, token_service)


@pytest.fixture
def gate():
    return load_policy()


@pytest.fixture(scope="function")
def client(test_engine, token_service, gate) -> Generator[TestClient, None, None]:
    """Create a test client wired to the test database."""
    configure_app_state(app, test_engine, token_service, gate)

    # Lifespan is not run: state above replaces what startup would build
    yield TestClient(app)


@pytest.fixture
def alice(directory) -> User:
    """Registered USER account."""
    return directory.register_user("alice", "pw1", "Al")


@pytest.fixture
def admin(directory) -> User:
    """Registered ADMIN account."""
    return directory.register_user("root", "rootpw", "Boss", role=Role.ADMIN)


@pytest.fixture
def login(client) -> Callable[[str, str], Dict[str, str]]:
    """Log in through the API and return the token pair."""
    def _login(login_id: str, password: str) -> Dict[str, str]:
        response = client.post(
            "/api/users/login",
            json={"loginId": login_id, "password": password},
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _login

