"""
Login Backend - Admin Seed Script

Self-registration only creates USER accounts; this creates an ADMIN.

Usage:
    python -m scripts.seed_admin <login_id> <password> [nickname]
"""

import sys

from login_backend.config import settings, configure_logging
from login_backend.auth.database import get_engine, init_db, get_session_factory
from login_backend.auth.directory import UserDirectory
from login_backend.auth.exceptions import AuthError
from login_backend.auth.models import Role
from login_backend.auth.tokens import TokenConfig, TokenService


def seed_admin_user(login_id: str, password: str, nickname: str = None) -> int:
    """Create an admin account; returns a process exit code."""
    engine = get_engine(settings.DATABASE_URL)
    init_db(engine)

    directory = UserDirectory(
        get_session_factory(engine),
        TokenService(TokenConfig.from_settings(settings)),
    )

    try:
        user = directory.register_user(login_id, password, nickname, role=Role.ADMIN)
    except AuthError as e:
        print(f"Admin user not created: {e.message}")
        return 1
    finally:
        engine.dispose()

    print("Admin user created successfully!")
    print(f"  Login ID: {user.login_id}")
    print(f"  Nickname: {user.nickname}")
    print(f"  Role: {user.role.value}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) not in (3, 4):
        print(__doc__)
        sys.exit(2)
    configure_logging()
    sys.exit(seed_admin_user(*sys.argv[1:]))
