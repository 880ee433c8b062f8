"""
Login Backend - User Directory

Registration, credential checks and refresh-token bookkeeping.

Security:
- Unknown login ID and wrong password raise the same error after the
  same bcrypt work
- Uniqueness is enforced by the database; a lost registration race
  surfaces as DuplicateLoginIdError, never as a second row
- One refresh token per user; saving a new one revokes the previous
"""

import hmac
import logging
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session as DBSession, select

from login_backend.auth.exceptions import (
    DuplicateLoginIdError,
    DuplicateNicknameError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from login_backend.auth.models import User, Role, utcnow
from login_backend.auth.nicknames import generate_nickname
from login_backend.auth.password import hash_password, verify_password, needs_rehash
from login_backend.auth.tokens import TokenService, REFRESH_TOKEN_TYPE


logger = logging.getLogger(__name__)

# Attempts at finding an unused generated nickname
NICKNAME_ATTEMPTS = 5

# Verified against for unknown login IDs
_DUMMY_HASH = hash_password("unknown-login-id")


class UserDirectory:
    """
    User-facing account operations on top of the users table.

    Args:
        session_factory: Callable returning a new database session
        token_service: Issues and checks tokens
        nickname_generator: Produces candidate nicknames when none is given
    """

    def __init__(
        self,
        session_factory: Callable[[], DBSession],
        token_service: TokenService,
        nickname_generator: Callable[[], str] = generate_nickname,
    ):
        self._session_factory = session_factory
        self._tokens = token_service
        self._generate_nickname = nickname_generator

    @staticmethod
    def _find(db: DBSession, login_id: str) -> Optional[User]:
        return db.exec(select(User).where(User.login_id == login_id)).first()

    @staticmethod
    def _nickname_taken(db: DBSession, nickname: str) -> bool:
        return db.exec(select(User.id).where(User.nickname == nickname)).first() is not None

    def _pick_nickname(self, db: DBSession) -> str:
        for _ in range(NICKNAME_ATTEMPTS):
            candidate = self._generate_nickname()
            if not self._nickname_taken(db, candidate):
                return candidate
        raise DuplicateNicknameError("Could not generate a unique nickname")

    def is_login_id_available(self, login_id: str) -> bool:
        """True if no user has registered login_id."""
        with self._session_factory() as db:
            return self._find(db, login_id) is None

    def get_user(self, login_id: str) -> Optional[User]:
        with self._session_factory() as db:
            return self._find(db, login_id)

    def list_users(self) -> List[User]:
        with self._session_factory() as db:
            return list(db.exec(select(User).order_by(User.created_at)).all())

    def register_user(
        self,
        login_id: str,
        password: str,
        nickname: Optional[str] = None,
        role: Role = Role.USER,
    ) -> User:
        """
        Create a new account.

        Args:
            login_id: Requested login ID
            password: Plaintext password, hashed before storage
            nickname: Optional nickname; generated when omitted
            role: Account role (USER for self-registration)

        Returns:
            The stored User

        Raises:
            DuplicateLoginIdError: login_id is taken, including when another
                registration wins the race after the availability check
            DuplicateNicknameError: nickname is taken
        """
        with self._session_factory() as db:
            if self._find(db, login_id) is not None:
                logger.warning("Registration rejected: duplicate login ID %s", login_id)
                raise DuplicateLoginIdError()

            if nickname:
                if self._nickname_taken(db, nickname):
                    raise DuplicateNicknameError()
            else:
                nickname = self._pick_nickname(db)

            user = User(
                login_id=login_id,
                password_hash=hash_password(password),
                nickname=nickname,
                role=role,
            )
            db.add(user)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                if self._find(db, login_id) is not None:
                    logger.warning("Registration lost race for login ID %s", login_id)
                    raise DuplicateLoginIdError()
                raise DuplicateNicknameError()
            db.refresh(user)

        logger.info("Registered user %s (%s)", login_id, user.id)
        return user

    def login_user(self, login_id: str, password: str) -> str:
        """
        Check credentials and issue an access token.

        Raises:
            InvalidCredentialsError: Unknown login ID or wrong password
        """
        with self._session_factory() as db:
            user = self._find(db, login_id)
            stored_hash = user.password_hash if user else _DUMMY_HASH
            if not verify_password(password, stored_hash) or user is None:
                logger.warning("Login failed for %s", login_id)
                raise InvalidCredentialsError()

            # Upgrade hashes made with an older work factor
            if needs_rehash(user.password_hash):
                user.password_hash = hash_password(password)
                db.add(user)
                db.commit()

            logger.info("Login succeeded for %s", login_id)
            return self._tokens.create_access_token(user.login_id, user.nickname, user.role)

    def save_refresh_token(self, login_id: str, refresh_token: str) -> None:
        """
        Store refresh_token as the only valid refresh token for login_id.

        Raises:
            InvalidCredentialsError: login_id does not exist
        """
        expiry = self._tokens.refresh_token_expires_at(refresh_token)
        with self._session_factory() as db:
            user = self._find(db, login_id)
            if user is None:
                raise InvalidCredentialsError()
            user.refresh_token = refresh_token
            user.refresh_token_expiry = expiry
            user.updated_at = utcnow()
            db.add(user)
            db.commit()

    def issue_refresh_token(self, login_id: str) -> str:
        """Create a refresh token for login_id and store it."""
        refresh_token = self._tokens.create_refresh_token(login_id)
        self.save_refresh_token(login_id, refresh_token)
        return refresh_token

    def refresh(self, login_id: str, presented_refresh_token: str) -> str:
        """
        Exchange a refresh token for a new access token.

        The presented token must verify, be unexpired, belong to login_id
        and equal the token on record. The stored token is not rotated.

        Raises:
            InvalidTokenError: Any of the checks above fails
        """
        if not self._tokens.validate_token(
            presented_refresh_token, login_id, token_type=REFRESH_TOKEN_TYPE
        ):
            logger.warning("Refresh rejected for %s: token failed validation", login_id)
            raise InvalidTokenError()

        with self._session_factory() as db:
            user = self._find(db, login_id)
            stored = user.refresh_token if user else None
            if not stored or not hmac.compare_digest(
                stored.encode("utf-8"), presented_refresh_token.encode("utf-8")
            ):
                logger.warning("Refresh rejected for %s: token not on record", login_id)
                raise InvalidTokenError()

            logger.info("Issued refreshed access token for %s", login_id)
            return self._tokens.create_access_token(user.login_id, user.nickname, user.role)
