"""Accounts and cookie sessions, plus the id/timestamp helpers every table uses."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, String, Text
from sqlmodel import Field, SQLModel
from ulid import ULID

from ctrlaltvibe.core.domain import UserRole


def generate_ulid() -> str:
    return str(ULID())


def utc_now() -> datetime:
    return datetime.now(UTC)


def _tz(**kwargs) -> Column:
    return Column(DateTime(timezone=True), **kwargs)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    username: str = Field(unique=True, index=True, max_length=30)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str
    bio: str | None = Field(default=None, sa_column=Column(Text))
    avatar_url: str | None = Field(default=None, max_length=512)
    role: UserRole = Field(default=UserRole.USER, sa_type=String)
    created_at: datetime = Field(default_factory=utc_now, sa_column=_tz())
    updated_at: datetime = Field(default_factory=utc_now, sa_column=_tz())

    # Lockout bookkeeping, reset on a successful login
    failed_login_attempts: int = Field(default=0)
    locked_until: datetime | None = Field(default=None, sa_column=_tz())
    last_failed_at: datetime | None = Field(default=None, sa_column=_tz())

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class Session(SQLModel, table=True):
    """Server-side record behind the `session` cookie."""

    __tablename__ = "sessions"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_column=_tz())
    expires_at: datetime = Field(sa_column=_tz())
    revoked_at: datetime | None = Field(default=None, sa_column=_tz())
