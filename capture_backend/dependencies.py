"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from capture_backend.auth import AuthError, AuthService
from capture_backend.config import get_settings
from capture_backend.db import DbClient, InMemoryDbClient, PostgresDbClient, UserRecord
from capture_backend.sessions import InMemorySessionStore, RedisSessionStore, SessionStore
from capture_backend.storage import InMemoryStorageClient, S3StorageClient, StorageClient

_db_client: DbClient | None = None
_storage_client: StorageClient | None = None
_session_store: SessionStore | None = None

security = HTTPBearer(auto_error=False)


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so captures persist across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = PostgresDbClient(settings.database_url)
    return _db_client


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.s3_bucket:
        _storage_client = InMemoryStorageClient()
    else:
        _storage_client = S3StorageClient(
            bucket=settings.s3_bucket,
            region=settings.s3_region or "",
            endpoint=settings.s3_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
            public_base_url=settings.storage_public_base_url,
        )
    return _storage_client


def get_session_store() -> SessionStore:
    global _session_store
    if _session_store:
        return _session_store

    settings = get_settings()
    if settings.redis_url and not settings.use_in_memory_backends:
        _session_store = RedisSessionStore(
            url=settings.redis_url,
            key_prefix=settings.redis_session_prefix,
        )
    else:
        _session_store = InMemorySessionStore()
    return _session_store


def get_auth_service(
    db: DbClient = Depends(get_db_client),
    sessions: SessionStore = Depends(get_session_store),
) -> AuthService:
    return AuthService(
        db=db,
        sessions=sessions,
        session_ttl_seconds=get_settings().session_ttl_seconds,
    )


def get_session_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    if not credentials or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or malformed Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
) -> UserRecord:
    """Dependency resolving the signed-in user for every capture route."""
    try:
        return auth.resolve(token)
    except AuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        )
