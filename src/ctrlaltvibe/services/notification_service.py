"""Notification service.

Creation persists the row and, when a publisher is available, pushes it
to the recipient's Redis channel for the SSE stream. Reads are enriched
with actor/project/comment/reply data through outer joins, so a
notification whose target is gone still lists with that part null.
"""

import json
import logging
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased
from sqlmodel import col

from ctrlaltvibe.app.metrics.collector import (
    NOTIFICATIONS_CREATED_TOTAL,
    NOTIFICATIONS_PUBLISHED_TOTAL,
)
from ctrlaltvibe.core.domain import NotificationType
from ctrlaltvibe.core.errors import BadRequestError, NotificationNotFoundError
from ctrlaltvibe.core.logging_schema import LogEvent
from ctrlaltvibe.core.models import (
    Comment,
    CommentReply,
    Notification,
    Project,
    User,
    utc_now,
)
from ctrlaltvibe.infra.redis_pubsub import ChannelPublisher, notification_channel

logger = logging.getLogger(__name__)


def _serialize(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "type": str(notification.type),
        "read": notification.read,
        "actor_id": notification.actor_id,
        "project_id": notification.project_id,
        "comment_id": notification.comment_id,
        "reply_id": notification.reply_id,
        "created_at": notification.created_at.isoformat(),
    }


async def create_notification(
    db: AsyncSession,
    user_id: str,
    notification_type: NotificationType | str,
    actor_id: str | None = None,
    project_id: str | None = None,
    comment_id: str | None = None,
    reply_id: str | None = None,
    publisher: ChannelPublisher | None = None,
) -> Notification | None:
    """Persist a notification and push it in realtime.

    Returns None without writing anything when the actor is the recipient.

    Raises:
        BadRequestError: Unknown notification type.
    """
    try:
        notification_type = NotificationType(notification_type)
    except ValueError:
        raise BadRequestError(f"Invalid notification type: {notification_type}") from None

    if actor_id is not None and actor_id == user_id:
        return None

    notification = Notification(
        user_id=user_id,
        type=notification_type,
        actor_id=actor_id,
        project_id=project_id,
        comment_id=comment_id,
        reply_id=reply_id,
    )
    db.add(notification)
    await db.commit()
    await db.refresh(notification)

    NOTIFICATIONS_CREATED_TOTAL.labels(type=str(notification_type)).inc()
    logger.info(
        "Notification created",
        extra={
            "event": LogEvent.NOTIFICATION_CREATED,
            "notification_id": notification.id,
            "type": str(notification_type),
        },
    )

    if publisher is not None:
        await publish_notification(publisher, notification)

    return notification


async def publish_notification(
    publisher: ChannelPublisher, notification: Notification
) -> None:
    """Push to the recipient's channel. Delivery failures are logged, not raised."""
    try:
        await publisher.publish(
            notification_channel(notification.user_id),
            json.dumps(_serialize(notification)),
        )
        NOTIFICATIONS_PUBLISHED_TOTAL.labels(result="success").inc()
    except Exception as e:
        NOTIFICATIONS_PUBLISHED_TOTAL.labels(result="error").inc()
        logger.warning(
            "Notification publish failed",
            extra={
                "event": LogEvent.NOTIFICATION_PUBLISHED,
                "notification_id": notification.id,
                "error": str(e),
            },
        )


async def get_user_notifications(
    db: AsyncSession,
    user_id: str,
    limit: int = 20,
    offset: int = 0,
    unread_only: bool = False,
) -> dict[str, Any]:
    """Newest-first notifications with actor/project/comment/reply attached."""
    Actor = aliased(User)

    filters = [col(Notification.user_id) == user_id]
    if unread_only:
        filters.append(col(Notification.read).is_(False))

    total = (
        await db.execute(select(func.count(Notification.id)).where(*filters))
    ).scalar_one()

    result = await db.execute(
        select(
            Notification,
            Actor.id,
            Actor.username,
            Actor.avatar_url,
            Project.id,
            Project.title,
            Comment.id,
            Comment.content,
            CommentReply.id,
            CommentReply.content,
        )
        .outerjoin(Actor, Actor.id == Notification.actor_id)
        .outerjoin(Project, col(Project.id) == Notification.project_id)
        .outerjoin(Comment, col(Comment.id) == Notification.comment_id)
        .outerjoin(CommentReply, col(CommentReply.id) == Notification.reply_id)
        .where(*filters)
        .order_by(col(Notification.created_at).desc(), col(Notification.id).desc())
        .offset(offset)
        .limit(limit)
    )

    notifications = []
    for row in result.all():
        (
            notification,
            actor_id,
            actor_username,
            actor_avatar,
            project_id,
            project_title,
            comment_id,
            comment_content,
            reply_id,
            reply_content,
        ) = row
        item = _serialize(notification)
        item["actor"] = (
            {"id": actor_id, "username": actor_username, "avatar_url": actor_avatar}
            if actor_id
            else None
        )
        item["project"] = (
            {"id": project_id, "title": project_title} if project_id else None
        )
        item["comment"] = (
            {"id": comment_id, "content": comment_content} if comment_id else None
        )
        item["reply"] = {"id": reply_id, "content": reply_content} if reply_id else None
        notifications.append(item)

    return {"notifications": notifications, "total": total}


async def get_unread_count(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(
        select(func.count(Notification.id)).where(
            col(Notification.user_id) == user_id, col(Notification.read).is_(False)
        )
    )
    return result.scalar_one()


async def mark_as_read(db: AsyncSession, notification_id: str, user_id: str) -> None:
    result = await db.execute(
        update(Notification)
        .where(col(Notification.id) == notification_id, col(Notification.user_id) == user_id)
        .values(read=True, updated_at=utc_now())
    )
    if result.rowcount == 0:
        raise NotificationNotFoundError()
    await db.commit()


async def mark_all_as_read(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(
        update(Notification)
        .where(col(Notification.user_id) == user_id, col(Notification.read).is_(False))
        .values(read=True, updated_at=utc_now())
    )
    await db.commit()
    return result.rowcount


async def delete_notification(
    db: AsyncSession, notification_id: str, user_id: str
) -> None:
    result = await db.execute(
        delete(Notification).where(
            col(Notification.id) == notification_id, col(Notification.user_id) == user_id
        )
    )
    if result.rowcount == 0:
        raise NotificationNotFoundError()
    await db.commit()
