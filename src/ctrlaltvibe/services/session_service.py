"""Cookie session lifecycle.

A user holds at most one live session: logging in again replaces the
previous one, which signs out any other browser.
"""

from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col

from ctrlaltvibe.app.config import get_settings
from ctrlaltvibe.core.models import Session


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class SessionService:
    DEFAULT_SESSION_TTL_SECONDS = get_settings().security.session_ttl

    @staticmethod
    async def create(
        db: AsyncSession, user_id: str, ttl_seconds: int | None = None
    ) -> Session:
        """Start a session for `user_id`, dropping any it already had."""
        ttl = ttl_seconds or SessionService.DEFAULT_SESSION_TTL_SECONDS

        await db.execute(delete(Session).where(col(Session.user_id) == user_id))
        session = Session(user_id=user_id, expires_at=datetime.now(UTC) + timedelta(seconds=ttl))
        db.add(session)
        await db.commit()
        await db.refresh(session)
        return session

    @staticmethod
    async def get_valid(db: AsyncSession, session_id: str) -> Session | None:
        session = await db.get(Session, session_id)
        if session is None or not SessionService.is_valid(session):
            return None
        return session

    @staticmethod
    async def revoke(db: AsyncSession, session_id: str) -> bool:
        """Mark a session revoked. Returns False when the id is unknown."""
        result = await db.execute(
            update(Session)
            .where(col(Session.id) == session_id, col(Session.revoked_at).is_(None))
            .values(revoked_at=datetime.now(UTC))
        )
        await db.commit()
        return result.rowcount > 0

    @staticmethod
    def is_valid(session: Session) -> bool:
        if session.revoked_at is not None:
            return False
        return _as_utc(session.expires_at) > datetime.now(UTC)
