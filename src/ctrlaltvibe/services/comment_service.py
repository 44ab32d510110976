"""Comments, replies and their likes."""

import logging
from collections import defaultdict
from typing import Any

from sqlalchemy import delete, exists, func, literal, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col

from ctrlaltvibe.core.domain import ActivityType, CommentSort, NotificationType
from ctrlaltvibe.core.errors import CommentNotFoundError, ReplyNotFoundError
from ctrlaltvibe.core.logging_schema import LogEvent
from ctrlaltvibe.core.models import (
    Comment,
    CommentReply,
    Like,
    Notification,
    User,
    UserActivity,
)
from ctrlaltvibe.core.schemas import AuthorSummary
from ctrlaltvibe.infra.cache import invalidate_projects
from ctrlaltvibe.infra.redis_pubsub import ChannelPublisher
from ctrlaltvibe.services import activity_service, notification_service
from ctrlaltvibe.services.project_feed import clamp_page
from ctrlaltvibe.services.project_service import get_visible_project

logger = logging.getLogger(__name__)


def _comment_likes_count():
    return (
        select(func.count(Like.id))
        .where(col(Like.comment_id) == Comment.id, col(Like.reply_id).is_(None))
        .correlate(Comment)
        .scalar_subquery()
    )


def _reply_likes_count():
    return (
        select(func.count(Like.id))
        .where(col(Like.reply_id) == CommentReply.id)
        .correlate(CommentReply)
        .scalar_subquery()
    )


def _comment_is_liked(user_id: str | None):
    if user_id is None:
        return literal(False)
    return exists().where(
        col(Like.comment_id) == Comment.id,
        col(Like.reply_id).is_(None),
        col(Like.user_id) == user_id,
    )


def _reply_is_liked(user_id: str | None):
    if user_id is None:
        return literal(False)
    return exists().where(
        col(Like.reply_id) == CommentReply.id, col(Like.user_id) == user_id
    )


def _serialize(
    item: Comment | CommentReply,
    author: User,
    likes: int,
    liked: bool,
    project_author_id: str,
) -> dict[str, Any]:
    return {
        "id": item.id,
        "content": item.content,
        "created_at": item.created_at,
        "updated_at": item.updated_at,
        "author": AuthorSummary.model_validate(author).model_dump(),
        "likes_count": likes or 0,
        "is_liked": bool(liked),
        "is_author": item.author_id == project_author_id,
    }


async def list_comments(
    db: AsyncSession,
    project_id: str,
    page: int = 1,
    limit: int = 10,
    sort: CommentSort = CommentSort.NEWEST,
    user: User | None = None,
) -> dict[str, Any]:
    """Paged comments with their replies (oldest first)."""
    project = await get_visible_project(db, project_id, user)
    user_id = user.id if user else None
    page, limit = clamp_page(page, limit)
    offset = (page - 1) * limit

    total = (
        await db.execute(
            select(func.count(Comment.id)).where(col(Comment.project_id) == project_id)
        )
    ).scalar_one()

    likes = _comment_likes_count()
    if sort == CommentSort.OLDEST:
        order = [col(Comment.created_at).asc()]
    elif sort == CommentSort.MOST_LIKED:
        order = [likes.desc(), col(Comment.created_at).desc()]
    else:
        order = [col(Comment.created_at).desc()]

    result = await db.execute(
        select(
            Comment,
            User,
            likes.label("likes_count"),
            _comment_is_liked(user_id).label("is_liked"),
        )
        .join(User, col(User.id) == col(Comment.author_id))
        .where(col(Comment.project_id) == project_id)
        .order_by(*order, col(Comment.id).desc())
        .offset(offset)
        .limit(limit)
    )
    comment_rows = result.all()
    comment_ids = [row[0].id for row in comment_rows]

    replies: dict[str, list[dict[str, Any]]] = defaultdict(list)
    if comment_ids:
        reply_result = await db.execute(
            select(
                CommentReply,
                User,
                _reply_likes_count().label("likes_count"),
                _reply_is_liked(user_id).label("is_liked"),
            )
            .join(User, col(User.id) == col(CommentReply.author_id))
            .where(col(CommentReply.comment_id).in_(comment_ids))
            .order_by(col(CommentReply.created_at).asc(), col(CommentReply.id).asc())
        )
        for reply, author, reply_likes, liked in reply_result.all():
            replies[reply.comment_id].append(
                _serialize(reply, author, reply_likes, liked, project.author_id)
            )

    comments = []
    for comment, author, comment_likes, liked in comment_rows:
        item = _serialize(comment, author, comment_likes, liked, project.author_id)
        item["replies"] = replies.get(comment.id, [])
        comments.append(item)

    return {
        "comments": comments,
        "has_more": offset + len(comments) < total,
        "total_comments": total,
    }


async def create_comment(
    db: AsyncSession,
    project_id: str,
    user: User,
    content: str,
    publisher: ChannelPublisher | None = None,
) -> dict[str, Any]:
    project = await get_visible_project(db, project_id, user)

    comment = Comment(project_id=project_id, author_id=user.id, content=content.strip())
    db.add(comment)
    await db.flush()
    activity_service.record_activity(db, user.id, ActivityType.COMMENT_ADDED, comment.id)
    await db.commit()
    await db.refresh(comment)
    invalidate_projects()

    logger.info(
        "Comment created",
        extra={
            "event": LogEvent.COMMENT_CREATED,
            "project_id": project_id,
            "comment_id": comment.id,
        },
    )

    await notification_service.create_notification(
        db,
        user_id=project.author_id,
        notification_type=NotificationType.COMMENT_PROJECT,
        actor_id=user.id,
        project_id=project_id,
        comment_id=comment.id,
        publisher=publisher,
    )

    item = _serialize(comment, user, 0, False, project.author_id)
    item["replies"] = []
    return item


async def _get_comment(db: AsyncSession, comment_id: str) -> Comment:
    comment = await db.get(Comment, comment_id)
    if comment is None:
        raise CommentNotFoundError()
    return comment


async def _get_reply(db: AsyncSession, reply_id: str) -> CommentReply:
    reply = await db.get(CommentReply, reply_id)
    if reply is None:
        raise ReplyNotFoundError()
    return reply


async def create_reply(
    db: AsyncSession,
    comment_id: str,
    user: User,
    content: str,
    publisher: ChannelPublisher | None = None,
) -> dict[str, Any]:
    comment = await _get_comment(db, comment_id)
    project = await get_visible_project(db, comment.project_id, user)

    reply = CommentReply(comment_id=comment_id, author_id=user.id, content=content.strip())
    db.add(reply)
    await db.flush()
    activity_service.record_activity(db, user.id, ActivityType.REPLY_ADDED, reply.id)
    await db.commit()
    await db.refresh(reply)

    logger.info(
        "Reply created",
        extra={
            "event": LogEvent.COMMENT_CREATED,
            "comment_id": comment_id,
            "reply_id": reply.id,
        },
    )

    await notification_service.create_notification(
        db,
        user_id=comment.author_id,
        notification_type=NotificationType.REPLY_COMMENT,
        actor_id=user.id,
        project_id=comment.project_id,
        comment_id=comment_id,
        reply_id=reply.id,
        publisher=publisher,
    )

    return _serialize(reply, user, 0, False, project.author_id)


async def _count_likes(db: AsyncSession, *filters) -> int:
    result = await db.execute(select(func.count(Like.id)).where(*filters))
    return result.scalar_one()


async def like_comment(
    db: AsyncSession,
    comment_id: str,
    user: User,
    publisher: ChannelPublisher | None = None,
) -> int:
    """Like a comment (idempotent). Returns the comment's like count."""
    comment = await _get_comment(db, comment_id)
    await get_visible_project(db, comment.project_id, user)
    filters = (col(Like.comment_id) == comment_id, col(Like.reply_id).is_(None))

    existing = await db.execute(
        select(Like.id).where(*filters, col(Like.user_id) == user.id)
    )
    if existing.first() is None:
        db.add(Like(user_id=user.id, comment_id=comment_id))
        await db.commit()
        await notification_service.create_notification(
            db,
            user_id=comment.author_id,
            notification_type=NotificationType.LIKE_COMMENT,
            actor_id=user.id,
            project_id=comment.project_id,
            comment_id=comment_id,
            publisher=publisher,
        )

    return await _count_likes(db, *filters)


async def unlike_comment(db: AsyncSession, comment_id: str, user: User) -> int:
    await _get_comment(db, comment_id)
    filters = (col(Like.comment_id) == comment_id, col(Like.reply_id).is_(None))

    result = await db.execute(select(Like).where(*filters, col(Like.user_id) == user.id))
    like = result.scalars().first()
    if like is not None:
        await db.delete(like)
        await db.commit()

    return await _count_likes(db, *filters)


async def like_reply(
    db: AsyncSession,
    reply_id: str,
    user: User,
    publisher: ChannelPublisher | None = None,
) -> int:
    """Like a reply (idempotent). Returns the reply's like count."""
    reply = await _get_reply(db, reply_id)
    comment = await _get_comment(db, reply.comment_id)
    await get_visible_project(db, comment.project_id, user)
    reply_filter = col(Like.reply_id) == reply_id

    existing = await db.execute(
        select(Like.id).where(reply_filter, col(Like.user_id) == user.id)
    )
    if existing.first() is None:
        db.add(Like(user_id=user.id, reply_id=reply_id))
        await db.commit()
        await notification_service.create_notification(
            db,
            user_id=reply.author_id,
            notification_type=NotificationType.LIKE_REPLY,
            actor_id=user.id,
            project_id=comment.project_id,
            comment_id=comment.id,
            reply_id=reply_id,
            publisher=publisher,
        )

    return await _count_likes(db, reply_filter)


async def unlike_reply(db: AsyncSession, reply_id: str, user: User) -> int:
    await _get_reply(db, reply_id)
    reply_filter = col(Like.reply_id) == reply_id

    result = await db.execute(select(Like).where(reply_filter, col(Like.user_id) == user.id))
    like = result.scalars().first()
    if like is not None:
        await db.delete(like)
        await db.commit()

    return await _count_likes(db, reply_filter)


async def purge_comment(db: AsyncSession, comment_id: str) -> None:
    """Delete a comment with its replies, likes, notifications and activity rows (no commit)."""
    reply_ids = select(CommentReply.id).where(col(CommentReply.comment_id) == comment_id)

    await db.execute(
        delete(Notification).where(
            or_(
                col(Notification.comment_id) == comment_id,
                col(Notification.reply_id).in_(reply_ids),
            )
        )
    )
    await db.execute(
        delete(Like).where(
            or_(col(Like.comment_id) == comment_id, col(Like.reply_id).in_(reply_ids))
        )
    )
    await db.execute(
        delete(UserActivity).where(
            or_(
                col(UserActivity.target_id) == comment_id,
                col(UserActivity.target_id).in_(reply_ids),
            )
        )
    )
    await db.execute(delete(CommentReply).where(col(CommentReply.comment_id) == comment_id))
    await db.execute(delete(Comment).where(col(Comment.id) == comment_id))


async def delete_comment(db: AsyncSession, comment_id: str) -> None:
    await _get_comment(db, comment_id)
    await purge_comment(db, comment_id)
    await db.commit()
    invalidate_projects()
