"""
Database abstraction for Postgres and an in-memory test implementation.

Every capture operation takes the owning user's id and filters on it, so a
user can only ever see or change their own captures.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

from sqlalchemy import JSON, Column, Float, Index, String, create_engine, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from capture_backend.enums import CaptureStatus


class DbClient(Protocol):
    """Interface for database access."""

    def create_capture(
        self,
        user_id: str,
        title: str,
        description: str | None,
        data: dict,
        status: CaptureStatus = CaptureStatus.DRAFT,
        *,
        created_at: float | None = None,
    ) -> "CaptureRecord":
        ...

    def list_captures(self, user_id: str) -> list["CaptureRecord"]:
        ...

    def get_capture(
        self, user_id: str, capture_id: str
    ) -> Optional["CaptureRecord"]:
        ...

    def update_capture(
        self,
        user_id: str,
        capture_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        data: Optional[dict] = None,
        status: Optional[CaptureStatus] = None,
    ) -> Optional["CaptureRecord"]:
        ...

    def delete_capture(self, user_id: str, capture_id: str) -> bool:
        ...

    def create_user(
        self, email: str, password_hash: str, full_name: str | None = None
    ) -> "UserRecord":
        ...

    def get_user(self, user_id: str) -> Optional["UserRecord"]:
        ...

    def get_user_by_email(self, email: str) -> Optional["UserRecord"]:
        ...

    def update_user_profile(
        self, user_id: str, *, full_name: Optional[str] = None
    ) -> Optional["UserRecord"]:
        ...


class DuplicateEmailError(ValueError):
    """Raised when a profile with the same email already exists."""


@dataclass
class CaptureRecord:
    capture_id: str
    user_id: str
    title: str
    description: Optional[str]
    data: dict
    status: CaptureStatus = CaptureStatus.DRAFT
    created_at: float = field(default_factory=lambda: time.time())
    updated_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {
            "id": self.capture_id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "data": self.data,
            "status": self.status.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class UserRecord:
    user_id: str
    email: str
    password_hash: str
    full_name: Optional[str] = None
    created_at: float = field(default_factory=lambda: time.time())

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


def _sorted_newest_first(records: list[CaptureRecord]) -> list[CaptureRecord]:
    return sorted(records, key=lambda record: record.created_at, reverse=True)


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.captures: Dict[str, CaptureRecord] = {}
        self.users: Dict[str, UserRecord] = {}

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.captures.clear()
        self.users.clear()

    def create_capture(
        self,
        user_id: str,
        title: str,
        description: str | None,
        data: dict,
        status: CaptureStatus = CaptureStatus.DRAFT,
        *,
        created_at: float | None = None,
    ) -> CaptureRecord:
        now = created_at if created_at is not None else time.time()
        record = CaptureRecord(
            capture_id=uuid.uuid4().hex,
            user_id=user_id,
            title=title,
            description=description,
            data=dict(data),
            status=CaptureStatus(status),
            created_at=now,
            updated_at=now,
        )
        self.captures[record.capture_id] = record
        return record

    def list_captures(self, user_id: str) -> list[CaptureRecord]:
        owned = [c for c in self.captures.values() if c.user_id == user_id]
        return _sorted_newest_first(owned)

    def get_capture(self, user_id: str, capture_id: str) -> Optional[CaptureRecord]:
        record = self.captures.get(capture_id)
        if record is None or record.user_id != user_id:
            return None
        return record

    def update_capture(
        self,
        user_id: str,
        capture_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        data: Optional[dict] = None,
        status: Optional[CaptureStatus] = None,
    ) -> Optional[CaptureRecord]:
        record = self.get_capture(user_id, capture_id)
        if not record:
            return None
        if title is not None:
            record.title = title
        if description is not None:
            record.description = description
        if data is not None:
            record.data = dict(data)
        if status is not None:
            record.status = CaptureStatus(status)
        record.updated_at = time.time()
        return record

    def delete_capture(self, user_id: str, capture_id: str) -> bool:
        if not self.get_capture(user_id, capture_id):
            return False
        del self.captures[capture_id]
        return True

    def create_user(
        self, email: str, password_hash: str, full_name: str | None = None
    ) -> UserRecord:
        if self.get_user_by_email(email):
            raise DuplicateEmailError(email)
        record = UserRecord(
            user_id=uuid.uuid4().hex,
            email=email,
            password_hash=password_hash,
            full_name=full_name,
        )
        self.users[record.user_id] = record
        return record

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        return self.users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    def update_user_profile(
        self, user_id: str, *, full_name: Optional[str] = None
    ) -> Optional[UserRecord]:
        user = self.users.get(user_id)
        if not user:
            return None
        if full_name is not None:
            user.full_name = full_name
        return user


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_capture_record(self, row: "CaptureRow") -> CaptureRecord:
        return CaptureRecord(
            capture_id=row.id,
            user_id=row.user_id,
            title=row.title,
            description=row.description,
            data=dict(row.data or {}),
            status=CaptureStatus(row.status),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _to_user_record(self, row: "ProfileRow") -> UserRecord:
        return UserRecord(
            user_id=row.id,
            email=row.email,
            password_hash=row.password_hash,
            full_name=row.full_name,
            created_at=row.created_at,
        )

    def _owned_capture(
        self, session: Session, user_id: str, capture_id: str
    ) -> Optional["CaptureRow"]:
        stmt = select(CaptureRow).where(
            CaptureRow.id == capture_id, CaptureRow.user_id == user_id
        )
        return session.execute(stmt).scalar_one_or_none()

    def create_capture(
        self,
        user_id: str,
        title: str,
        description: str | None,
        data: dict,
        status: CaptureStatus = CaptureStatus.DRAFT,
        *,
        created_at: float | None = None,
    ) -> CaptureRecord:
        now = created_at if created_at is not None else time.time()
        with self.Session() as session:
            row = CaptureRow(
                id=uuid.uuid4().hex,
                user_id=user_id,
                title=title,
                description=description,
                data=dict(data),
                status=CaptureStatus(status).value,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_capture_record(row)

    def list_captures(self, user_id: str) -> list[CaptureRecord]:
        with self.Session() as session:
            stmt = (
                select(CaptureRow)
                .where(CaptureRow.user_id == user_id)
                .order_by(CaptureRow.created_at.desc())
            )
            rows = session.execute(stmt).scalars().all()
            return [self._to_capture_record(row) for row in rows]

    def get_capture(self, user_id: str, capture_id: str) -> Optional[CaptureRecord]:
        with self.Session() as session:
            row = self._owned_capture(session, user_id, capture_id)
            if not row:
                return None
            return self._to_capture_record(row)

    def update_capture(
        self,
        user_id: str,
        capture_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        data: Optional[dict] = None,
        status: Optional[CaptureStatus] = None,
    ) -> Optional[CaptureRecord]:
        with self.Session() as session:
            row = self._owned_capture(session, user_id, capture_id)
            if not row:
                return None
            if title is not None:
                row.title = title
            if description is not None:
                row.description = description
            if data is not None:
                # Reassign so SQLAlchemy notices the JSON change.
                row.data = dict(data)
            if status is not None:
                row.status = CaptureStatus(status).value
            row.updated_at = time.time()
            session.commit()
            session.refresh(row)
            return self._to_capture_record(row)

    def delete_capture(self, user_id: str, capture_id: str) -> bool:
        with self.Session() as session:
            row = self._owned_capture(session, user_id, capture_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    def create_user(
        self, email: str, password_hash: str, full_name: str | None = None
    ) -> UserRecord:
        with self.Session() as session:
            existing = session.execute(
                select(ProfileRow).where(ProfileRow.email == email)
            ).scalar_one_or_none()
            if existing:
                raise DuplicateEmailError(email)
            row = ProfileRow(
                id=uuid.uuid4().hex,
                email=email,
                password_hash=password_hash,
                full_name=full_name,
                created_at=time.time(),
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_user_record(row)

    def get_user(self, user_id: str) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.get(ProfileRow, user_id)
            return self._to_user_record(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.execute(
                select(ProfileRow).where(ProfileRow.email == email)
            ).scalar_one_or_none()
            return self._to_user_record(row) if row else None

    def update_user_profile(
        self, user_id: str, *, full_name: Optional[str] = None
    ) -> Optional[UserRecord]:
        with self.Session() as session:
            row = session.get(ProfileRow, user_id)
            if not row:
                return None
            if full_name is not None:
                row.full_name = full_name
            session.commit()
            session.refresh(row)
            return self._to_user_record(row)


Base = declarative_base()


class ProfileRow(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    full_name = Column(String, nullable=True)
    created_at = Column(Float, nullable=False)


class CaptureRow(Base):
    __tablename__ = "captures"
    __table_args__ = (
        Index("idx_captures_user_id", "user_id"),
        Index("idx_captures_status", "status"),
        Index("idx_captures_created_at", "created_at"),
    )

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    data = Column(JSON, nullable=False)
    status = Column(String, nullable=False, default=CaptureStatus.DRAFT.value)
    created_at = Column(Float, nullable=False)
    updated_at = Column(Float, nullable=False)
