"""User accounts: registration, password login with lockout, profile and skills."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col

from ctrlaltvibe.app.config import get_settings
from ctrlaltvibe.core.domain import UserRole
from ctrlaltvibe.core.errors import (
    ConflictError,
    NotFoundError,
    TooManyRequestsError,
    UnauthorizedError,
    UserNotFoundError,
)
from ctrlaltvibe.core.logging_schema import LogEvent
from ctrlaltvibe.core.models import Project, User, UserSkill, utc_now
from ctrlaltvibe.core.security import (
    calculate_lockout_duration,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)


async def get_user(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFoundError()
    return user


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(col(User.username) == username))
    return result.scalar_one_or_none()


async def register_user(
    db: AsyncSession, username: str, email: str, password: str
) -> User:
    """Create a user account.

    Raises:
        ConflictError: Username or email already taken.
    """
    result = await db.execute(
        select(User).where(
            or_(col(User.username) == username, func.lower(User.email) == email.lower())
        )
    )
    existing = result.scalars().first()
    if existing is not None:
        if existing.username == username:
            raise ConflictError("Username already exists")
        raise ConflictError("Email already exists")

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info(
        "User registered",
        extra={"event": LogEvent.USER_REGISTERED, "user_id": user.id},
    )
    return user


async def authenticate(db: AsyncSession, username: str, password: str) -> User:
    """Check credentials, applying the exponential lockout policy.

    Raises:
        UnauthorizedError: Unknown user or wrong password.
        TooManyRequestsError: Account locked from earlier failures.
    """
    user = await get_user_by_username(db, username)
    if user is None:
        raise UnauthorizedError("Invalid username or password")

    now = datetime.now(UTC)
    if user.locked_until:
        locked_until = (
            user.locked_until.replace(tzinfo=UTC)
            if user.locked_until.tzinfo is None
            else user.locked_until
        )
        if locked_until > now:
            retry_after = int((locked_until - now).total_seconds())
            raise TooManyRequestsError(
                retry_after=retry_after,
                message=f"Too many failed attempts. Try again in {retry_after} seconds.",
            )

    if not verify_password(password, user.password_hash):
        user.failed_login_attempts += 1
        user.last_failed_at = now

        lockout_seconds = calculate_lockout_duration(user.failed_login_attempts)
        if lockout_seconds > 0:
            user.locked_until = now + timedelta(seconds=lockout_seconds)
            logger.warning(
                "Account locked",
                extra={
                    "event": LogEvent.ACCOUNT_LOCKED,
                    "user_id": user.id,
                    "lockout_seconds": lockout_seconds,
                },
            )

        await db.commit()
        logger.info(
            "Login failed",
            extra={"event": LogEvent.LOGIN_FAILED, "user_id": user.id},
        )
        raise UnauthorizedError("Invalid username or password")

    user.failed_login_attempts = 0
    user.locked_until = None
    user.last_failed_at = None
    await db.commit()

    logger.info("Login succeeded", extra={"event": LogEvent.LOGIN_SUCCESS, "user_id": user.id})
    return user


async def ensure_admin_user(db: AsyncSession) -> User:
    """Create the bootstrap admin, or reset its password and role."""
    admin_config = get_settings().admin
    user = await get_user_by_username(db, admin_config.username)

    if user is None:
        user = User(
            username=admin_config.username,
            email=admin_config.email,
            password_hash=hash_password(admin_config.password),
            role=UserRole.ADMIN,
        )
        db.add(user)
    else:
        user.password_hash = hash_password(admin_config.password)
        user.role = UserRole.ADMIN
        user.updated_at = utc_now()

    await db.commit()
    await db.refresh(user)
    logger.info(
        "Ensured admin user",
        extra={"event": LogEvent.APP_STARTED, "username": user.username},
    )
    return user


async def update_profile(
    db: AsyncSession,
    user: User,
    email: str | None = None,
    bio: str | None = None,
    avatar_url: str | None = None,
) -> User:
    if email is not None and email.lower() != user.email.lower():
        result = await db.execute(
            select(User.id).where(
                func.lower(User.email) == email.lower(), col(User.id) != user.id
            )
        )
        if result.first() is not None:
            raise ConflictError("Email already exists")
        user.email = email
    if bio is not None:
        user.bio = bio
    if avatar_url is not None:
        user.avatar_url = avatar_url

    user.updated_at = utc_now()
    await db.commit()
    await db.refresh(user)
    return user


async def list_profiles(db: AsyncSession, limit: int) -> list[dict]:
    """Public user directory ordered by username, with public project counts."""
    project_count = (
        select(func.count(Project.id))
        .where(col(Project.author_id) == User.id, col(Project.is_private).is_(False))
        .correlate(User)
        .scalar_subquery()
    )
    result = await db.execute(
        select(User, project_count.label("projects_count"))
        .order_by(col(User.username))
        .limit(limit)
    )
    return [
        {
            "id": user.id,
            "username": user.username,
            "avatar_url": user.avatar_url,
            "bio": user.bio,
            "role": user.role,
            "projects_count": projects_count,
        }
        for user, projects_count in result.all()
    ]


# =============================================================================
# Skills
# =============================================================================


async def list_skills(db: AsyncSession, user_id: str) -> list[UserSkill]:
    result = await db.execute(
        select(UserSkill)
        .where(col(UserSkill.user_id) == user_id)
        .order_by(col(UserSkill.category), col(UserSkill.skill))
    )
    return list(result.scalars().all())


async def add_skill(
    db: AsyncSession, user_id: str, category: str, skill: str
) -> UserSkill:
    result = await db.execute(
        select(UserSkill.id).where(
            col(UserSkill.user_id) == user_id,
            col(UserSkill.category) == category,
            col(UserSkill.skill) == skill,
        )
    )
    if result.first() is not None:
        raise ConflictError("Skill already added")

    user_skill = UserSkill(user_id=user_id, category=category, skill=skill)
    db.add(user_skill)
    await db.commit()
    await db.refresh(user_skill)
    return user_skill


async def remove_skill(db: AsyncSession, skill_id: str, user_id: str) -> None:
    result = await db.execute(
        delete(UserSkill).where(
            col(UserSkill.id) == skill_id, col(UserSkill.user_id) == user_id
        )
    )
    if result.rowcount == 0:
        raise NotFoundError("Skill not found")
    await db.commit()


async def list_skill_categories(db: AsyncSession, user_id: str) -> list[str]:
    result = await db.execute(
        select(UserSkill.category)
        .where(col(UserSkill.user_id) == user_id)
        .distinct()
        .order_by(col(UserSkill.category))
    )
    return list(result.scalars().all())
