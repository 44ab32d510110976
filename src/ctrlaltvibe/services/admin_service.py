"""Moderation: user, project and comment management for admins."""

import logging
from typing import Any

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col

from ctrlaltvibe.core.domain import UserRole
from ctrlaltvibe.core.errors import BadRequestError
from ctrlaltvibe.core.logging_schema import LogEvent
from ctrlaltvibe.core.models import (
    BlogPost,
    BlogPostTag,
    Bookmark,
    Comment,
    CommentReply,
    Like,
    Notification,
    Project,
    Session,
    Share,
    User,
    UserActivity,
    UserSkill,
    VibeCheck,
    utc_now,
)
from ctrlaltvibe.core.schemas import AuthorSummary, UserResponse
from ctrlaltvibe.infra.cache import TAGS, clear_session_cache, invalidate, invalidate_projects
from ctrlaltvibe.services import comment_service, project_service, user_service

logger = logging.getLogger(__name__)

RECENT_COMMENTS_LIMIT = 20


async def list_users(db: AsyncSession) -> list[UserResponse]:
    result = await db.execute(select(User).order_by(col(User.created_at).desc()))
    return [UserResponse.model_validate(user) for user in result.scalars()]


async def list_projects(db: AsyncSession) -> list[dict[str, Any]]:
    """Every project (private ones included) with its author, newest first."""
    result = await db.execute(
        select(Project, User)
        .join(User, col(User.id) == col(Project.author_id))
        .order_by(col(Project.created_at).desc())
    )
    return [
        {
            "id": project.id,
            "title": project.title,
            "description": project.description,
            "project_url": project.project_url,
            "image_url": project.image_url,
            "featured": project.featured,
            "is_private": project.is_private,
            "views_count": project.views_count,
            "created_at": project.created_at,
            "author": AuthorSummary.model_validate(author).model_dump(),
        }
        for project, author in result.all()
    ]


async def list_recent_comments(
    db: AsyncSession, limit: int = RECENT_COMMENTS_LIMIT
) -> list[dict[str, Any]]:
    result = await db.execute(
        select(Comment, User, Project)
        .join(User, col(User.id) == col(Comment.author_id))
        .join(Project, col(Project.id) == col(Comment.project_id))
        .order_by(col(Comment.created_at).desc())
        .limit(limit)
    )
    return [
        {
            "id": comment.id,
            "content": comment.content,
            "created_at": comment.created_at,
            "author": AuthorSummary.model_validate(author).model_dump(),
            "project": {"id": project.id, "title": project.title},
        }
        for comment, author, project in result.all()
    ]


async def delete_user(db: AsyncSession, user_id: str, admin: User) -> None:
    """Delete a user and all content they own.

    Raises:
        BadRequestError: Admin tried to delete their own account.
        UserNotFoundError: Unknown user.
    """
    if user_id == admin.id:
        raise BadRequestError("Cannot delete your own account")
    await user_service.get_user(db, user_id)

    project_ids = (
        await db.execute(select(Project.id).where(col(Project.author_id) == user_id))
    ).scalars().all()
    for project_id in project_ids:
        await project_service.purge_project(db, project_id)

    comment_ids = (
        await db.execute(select(Comment.id).where(col(Comment.author_id) == user_id))
    ).scalars().all()
    for comment_id in comment_ids:
        await comment_service.purge_comment(db, comment_id)

    reply_ids = select(CommentReply.id).where(col(CommentReply.author_id) == user_id)
    await db.execute(delete(Like).where(col(Like.reply_id).in_(reply_ids)))
    await db.execute(delete(Notification).where(col(Notification.reply_id).in_(reply_ids)))
    await db.execute(delete(CommentReply).where(col(CommentReply.author_id) == user_id))

    await db.execute(
        delete(Notification).where(
            or_(col(Notification.user_id) == user_id, col(Notification.actor_id) == user_id)
        )
    )
    for model in (Like, Bookmark, UserActivity, UserSkill, Session):
        await db.execute(delete(model).where(col(model.user_id) == user_id))
    await db.execute(
        update(Share).where(col(Share.user_id) == user_id).values(user_id=None)
    )
    await db.execute(
        update(VibeCheck).where(col(VibeCheck.user_id) == user_id).values(user_id=None)
    )

    post_ids = select(BlogPost.id).where(col(BlogPost.author_id) == user_id)
    await db.execute(delete(BlogPostTag).where(col(BlogPostTag.post_id).in_(post_ids)))
    await db.execute(delete(BlogPost).where(col(BlogPost.author_id) == user_id))

    await db.execute(delete(User).where(col(User.id) == user_id))
    await db.commit()

    clear_session_cache()
    invalidate_projects()
    invalidate(TAGS)
    logger.info(
        "User deleted",
        extra={"event": LogEvent.USER_DELETED, "deleted_user_id": user_id},
    )


async def set_user_role(db: AsyncSession, user_id: str, role: str) -> User:
    try:
        new_role = UserRole(role)
    except ValueError:
        raise BadRequestError("Invalid role. Must be 'admin' or 'user'") from None

    user = await user_service.get_user(db, user_id)
    user.role = new_role
    user.updated_at = utc_now()
    await db.commit()
    await db.refresh(user)

    logger.info(
        "User role changed",
        extra={
            "event": LogEvent.USER_ROLE_CHANGED,
            "target_user_id": user_id,
            "role": new_role,
        },
    )
    return user
