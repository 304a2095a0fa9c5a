# Overview: Service-layer operations for identity; registration, login and bearer sessions.

"""
Identity Service

PASSWORDS:
- Hashed with bcrypt (cost factor from IdentityConfig, 12 by default)
- Minimum 8 characters

SESSIONS:
- Opaque bearer tokens: 32 random bytes, hex encoded (64 characters)
- Only an HMAC-SHA256 of the token, keyed by IdentityConfig.secret_key, is
  stored; a leaked session table cannot be replayed without the key
- Absolute lifetime IdentityConfig.session_ttl, revocable on logout
- Dummy-login sessions carry a role but no user account

The secret is never read from the environment here. create_app builds an
IdentityConfig from the Flask config and passes it in.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import timedelta

import bcrypt

from pvz.domain import USER_ROLES, Session, User
from pvz.errors import (
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRoleError,
    PasswordValidationError,
    UserNotFoundError,
)
from pvz.stores.base import SessionStore, UserStore
from pvz.time_utils import utcnow

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
DUMMY_EMAIL = "dummy@example.com"


@dataclass(frozen=True)
class IdentityConfig:
    secret_key: str
    session_ttl: timedelta = timedelta(hours=24)
    bcrypt_rounds: int = 12

    def __post_init__(self):
        if not self.secret_key:
            raise ValueError("secret_key is required")


@dataclass
class SessionContext:
    """Identity attached to an authenticated request."""
    role: str
    user_id: str | None = None
    email: str | None = None

    @property
    def is_dummy(self) -> bool:
        return self.user_id is None


def validate_password_strength(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def validate_role(role: str) -> None:
    if role not in USER_ROLES:
        raise InvalidRoleError(role)


def generate_token() -> str:
    return secrets.token_hex(32)


class IdentityService:
    def __init__(self, users: UserStore, sessions: SessionStore, config: IdentityConfig):
        self.users = users
        self.sessions = sessions
        self.config = config

    # -- passwords ---------------------------------------------------------

    def hash_password(self, password: str) -> str:
        validate_password_strength(password)
        salt = bcrypt.gensalt(rounds=self.config.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # malformed hash
            return False

    # -- tokens ------------------------------------------------------------

    def hash_token(self, token: str) -> str:
        return hmac.new(
            self.config.secret_key.encode("utf-8"),
            token.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def _issue_session(self, role: str, user: User | None = None) -> str:
        token = generate_token()
        now = utcnow()
        self.sessions.create(Session(
            token_hash=self.hash_token(token),
            role=role,
            created_at=now,
            expires_at=now + self.config.session_ttl,
            user_id=user.id if user else None,
            email=user.email if user else None,
        ))
        return token

    # -- operations --------------------------------------------------------

    def register_user(self, email: str, password: str, role: str) -> User:
        """
        Raises:
            InvalidRoleError, PasswordValidationError, EmailExistsError
        """
        validate_role(role)
        if not email:
            raise ValueError("email is required")

        try:
            self.users.get_user_by_email(email)
        except UserNotFoundError:
            pass
        else:
            raise EmailExistsError()

        user = User(
            id=str(uuid.uuid4()),
            email=email,
            role=role,
            password_hash=self.hash_password(password),
        )
        self.users.create_user(user)

        logger.info("Registered %s user %s", role, user.id)
        return user

    def login(self, email: str, password: str) -> tuple[User, str]:
        """
        Authenticate and open a session.

        Unknown email and wrong password both raise InvalidCredentialsError.
        """
        try:
            user = self.users.get_user_by_email(email)
        except UserNotFoundError:
            logger.info("Login failed: unknown email")
            raise InvalidCredentialsError()

        if not self.verify_password(password, user.password_hash):
            logger.info("Login failed for user %s: bad password", user.id)
            raise InvalidCredentialsError()

        return user, self._issue_session(user.role, user)

    def dummy_login(self, role: str) -> str:
        """Issue a token for a synthetic identity of the given role."""
        validate_role(role)
        return self._issue_session(role)

    def validate_token(self, token: str) -> SessionContext | None:
        """Return the session context, or None if unknown, expired or revoked."""
        if not token:
            return None

        session = self.sessions.get_by_hash(self.hash_token(token))
        if session is None or session.is_revoked:
            return None
        if session.expires_at <= utcnow():
            return None

        return SessionContext(
            role=session.role,
            user_id=session.user_id,
            email=session.email if session.user_id else DUMMY_EMAIL,
        )

    def logout(self, token: str) -> bool:
        return self.sessions.revoke(self.hash_token(token), utcnow())
