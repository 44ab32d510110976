"""Shared FastAPI dependencies: DB session, session-cookie auth and externals.

Session lookups are cached for a few seconds (CACHE_SESSION_TTL) so a page
load that fans out into many API calls hits the database once.
"""

from typing import Annotated

from cachetools_async import cached
from fastapi import Cookie, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ctrlaltvibe.app.logging import set_user_id
from ctrlaltvibe.core.errors import ForbiddenError, UnauthorizedError
from ctrlaltvibe.core.models import User
from ctrlaltvibe.infra import (
    ChannelPublisher,
    get_redis,
    get_session,
    is_redis_available,
    session_cache,
)
from ctrlaltvibe.infra.evaluator import VibeEvaluator, get_evaluator
from ctrlaltvibe.infra.recaptcha import RecaptchaVerifier
from ctrlaltvibe.services.session_service import SessionService

DbSession = Annotated[AsyncSession, Depends(get_session)]
SessionCookie = Annotated[str | None, Cookie(alias="session")]


def _session_key(_db: AsyncSession, session_cookie: str | None) -> str | None:
    return session_cookie


@cached(cache=session_cache, key=_session_key)
async def get_user_id_from_session(
    db: AsyncSession, session_cookie: str | None
) -> str:
    """Get user ID from session cookie. Raises UnauthorizedError if invalid."""
    if session_cookie is None:
        raise UnauthorizedError()

    session = await SessionService.get_valid(db, session_cookie)
    if session is None:
        raise UnauthorizedError()

    return session.user_id


async def get_current_user(db: DbSession, session: SessionCookie = None) -> User:
    user_id = await get_user_id_from_session(db, session)
    user = await db.get(User, user_id)
    if user is None:
        raise UnauthorizedError()

    set_user_id(user.id)
    return user


async def get_optional_user(db: DbSession, session: SessionCookie = None) -> User | None:
    """Like get_current_user, but anonymous (or stale cookie) yields None."""
    if session is None:
        return None
    try:
        return await get_current_user(db, session)
    except UnauthorizedError:
        return None


async def get_admin_user(user: Annotated[User, Depends(get_current_user)]) -> User:
    if not user.is_admin:
        raise ForbiddenError("Admin access required")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
AdminUser = Annotated[User, Depends(get_admin_user)]


def get_notification_publisher() -> ChannelPublisher | None:
    """Publisher for realtime delivery, or None when Redis is off."""
    if not is_redis_available():
        return None
    return ChannelPublisher(get_redis())


def get_recaptcha_verifier() -> RecaptchaVerifier:
    return RecaptchaVerifier()


def get_vibe_evaluator() -> VibeEvaluator:
    return get_evaluator()


Publisher = Annotated[ChannelPublisher | None, Depends(get_notification_publisher)]
Verifier = Annotated[RecaptchaVerifier, Depends(get_recaptcha_verifier)]
Evaluator = Annotated[VibeEvaluator, Depends(get_vibe_evaluator)]
