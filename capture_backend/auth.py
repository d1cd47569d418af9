"""
Sign-up, sign-in and sign-out on top of the profile table and session store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import bcrypt

from capture_backend.db import DbClient, DuplicateEmailError, UserRecord
from capture_backend.sessions import SessionStore

logger = logging.getLogger(__name__)

# bcrypt only hashes the first 72 bytes and newer releases reject longer input.
MAX_PASSWORD_BYTES = 72


class AuthError(Exception):
    """Raised when credentials or session tokens are rejected."""


class EmailTakenError(AuthError):
    pass


def hash_password(password: str) -> str:
    pwd_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=12))
    return pwd_hash.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bool(
            bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        )
    except (ValueError, AttributeError):
        return False


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@dataclass
class AuthService:
    db: DbClient
    sessions: SessionStore
    session_ttl_seconds: int = 86400

    def sign_up(
        self, email: str, password: str, full_name: str | None = None
    ) -> UserRecord:
        email = normalize_email(email)
        if not email or not password:
            raise AuthError("Email and password are required")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise AuthError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
            )
        try:
            user = self.db.create_user(email, hash_password(password), full_name)
        except DuplicateEmailError:
            raise EmailTakenError("An account with this email already exists")
        logger.info("Created profile %s", user.user_id)
        return user

    def sign_in(self, email: str, password: str) -> tuple[UserRecord, str]:
        user = self.db.get_user_by_email(normalize_email(email))
        if not user or not verify_password(password, user.password_hash):
            raise AuthError("Invalid login credentials")
        token = self.sessions.create(user.user_id, self.session_ttl_seconds)
        return user, token

    def sign_out(self, token: str) -> None:
        self.sessions.delete(token)

    def resolve(self, token: str) -> UserRecord:
        """Return the user behind a session token or raise AuthError."""
        user_id = self.sessions.get_user_id(token)
        if not user_id:
            raise AuthError("Session expired or invalid")
        user = self.db.get_user(user_id)
        if not user:
            logger.warning("Session %s... points at a missing profile", token[:6])
            self.sessions.delete(token)
            raise AuthError("Session expired or invalid")
        return user
