"""
Session store abstraction for signed-in users.

Supports an in-memory fallback for tests/local runs and a Redis-backed
implementation for production.
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

logger = logging.getLogger(__name__)


def new_session_token() -> str:
    return secrets.token_urlsafe(32)


class SessionStore(Protocol):
    """Minimal interface mapping opaque session tokens to user ids."""

    def create(self, user_id: str, ttl_seconds: int) -> str:
        ...

    def get_user_id(self, token: str) -> Optional[str]:
        ...

    def delete(self, token: str) -> None:
        ...


@dataclass
class InMemorySessionStore:
    """Token -> (user_id, expiry) map for testing/dev."""

    sessions: dict[str, tuple[str, float]] = field(default_factory=dict)

    def create(self, user_id: str, ttl_seconds: int) -> str:
        token = new_session_token()
        self.sessions[token] = (user_id, time.time() + ttl_seconds)
        return token

    def get_user_id(self, token: str) -> Optional[str]:
        entry = self.sessions.get(token)
        if entry is None:
            return None
        user_id, expiry = entry
        if time.time() > expiry:
            self.sessions.pop(token, None)
            return None
        return user_id

    def delete(self, token: str) -> None:
        self.sessions.pop(token, None)

    def reset(self) -> None:
        self.sessions.clear()


@dataclass
class RedisSessionStore:
    """Redis-backed sessions using keys with an expiry."""

    url: str
    key_prefix: str = "capture:session:"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, token: str) -> str:
        return f"{self.key_prefix}{token}"

    def _call(self, method: str, *args, **kwargs):
        """
        Run a client call, reconnecting and retrying once on a connection reset.
        """
        try:
            return getattr(self.client, method)(*args, **kwargs)
        except redis_exceptions.ConnectionError:
            # Connection resets can happen on managed Redis.
            logger.warning("Redis connection lost during %s; reconnecting", method)
            self.client = redis.Redis.from_url(self.url)
            return getattr(self.client, method)(*args, **kwargs)

    def create(self, user_id: str, ttl_seconds: int) -> str:
        token = new_session_token()
        self._call("set", self._key(token), user_id, ex=ttl_seconds)
        return token

    def get_user_id(self, token: str) -> Optional[str]:
        try:
            value = self._call("get", self._key(token))
        except redis_exceptions.ConnectionError:
            logger.exception("Redis unavailable while resolving a session")
            return None
        if value is None:
            return None
        return value.decode("utf-8")

    def delete(self, token: str) -> None:
        self._call("delete", self._key(token))
