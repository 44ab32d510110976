"""Project CRUD and interactions (like, bookmark, share)."""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col

from ctrlaltvibe.app.metrics.collector import PROJECT_VIEWS_TOTAL
from ctrlaltvibe.core.domain import (
    DEFAULT_PROJECT_IMAGE,
    ActivityType,
    NotificationType,
    proper_case_tag,
)
from ctrlaltvibe.core.errors import ForbiddenError, ProjectNotFoundError
from ctrlaltvibe.core.logging_schema import LogEvent
from ctrlaltvibe.core.models import (
    Bookmark,
    Comment,
    CommentReply,
    Like,
    Notification,
    Project,
    ProjectEvaluation,
    ProjectGalleryImage,
    ProjectTag,
    ProjectView,
    Share,
    Tag,
    User,
    UserActivity,
    VibeCheck,
    utc_now,
)
from ctrlaltvibe.core.schemas import GalleryImageResponse, ProjectDetail
from ctrlaltvibe.infra.cache import TAGS, invalidate, invalidate_projects
from ctrlaltvibe.infra.redis_pubsub import ChannelPublisher
from ctrlaltvibe.services import activity_service, notification_service, project_feed

logger = logging.getLogger(__name__)


def can_manage(project: Project, user: User | None) -> bool:
    """Author or admin."""
    return user is not None and (user.is_admin or project.author_id == user.id)


async def get_visible_project(
    db: AsyncSession, project_id: str, user: User | None
) -> Project:
    """Load a project the caller may see.

    Private projects are hidden (404) from everyone but the author and admins.
    """
    project = await db.get(Project, project_id)
    if project is None:
        raise ProjectNotFoundError()
    if project.is_private and not can_manage(project, user):
        raise ProjectNotFoundError()
    return project


async def _get_manageable_project(
    db: AsyncSession, project_id: str, user: User, action: str
) -> Project:
    project = await db.get(Project, project_id)
    if project is None:
        raise ProjectNotFoundError()
    if not can_manage(project, user):
        raise ForbiddenError(f"Not authorized to {action} this project")
    return project


# =============================================================================
# Reads
# =============================================================================


async def load_project_detail(
    db: AsyncSession, project_id: str, current_user_id: str | None
) -> ProjectDetail:
    summary = await project_feed.get_project_summary(db, project_id, current_user_id)
    if summary is None:
        raise ProjectNotFoundError()

    project = await db.get(Project, project_id)
    result = await db.execute(
        select(ProjectGalleryImage)
        .where(col(ProjectGalleryImage.project_id) == project_id)
        .order_by(col(ProjectGalleryImage.display_order), col(ProjectGalleryImage.id))
    )
    gallery = [GalleryImageResponse.model_validate(img) for img in result.scalars()]

    return ProjectDetail(
        **summary.model_dump(),
        long_description=project.long_description if project else None,
        gallery_images=gallery,
    )


async def record_view(db: AsyncSession, project_id: str) -> None:
    """Bump the lifetime counter and this month's project_views row."""
    now = datetime.now(UTC)
    await db.execute(
        update(Project)
        .where(col(Project.id) == project_id)
        .values(views_count=col(Project.views_count) + 1)
    )

    result = await db.execute(
        update(ProjectView)
        .where(
            col(ProjectView.project_id) == project_id,
            col(ProjectView.month) == now.month,
            col(ProjectView.year) == now.year,
        )
        .values(views_count=col(ProjectView.views_count) + 1)
    )
    if result.rowcount == 0:
        db.add(
            ProjectView(project_id=project_id, month=now.month, year=now.year, views_count=1)
        )
    await db.commit()
    PROJECT_VIEWS_TOTAL.inc()


async def get_project_detail(
    db: AsyncSession, project_id: str, user: User | None
) -> ProjectDetail:
    """Project detail for GET /projects/{id}. Counts as a view."""
    user_id = user.id if user else None
    await get_visible_project(db, project_id, user)
    await record_view(db, project_id)
    db.expire_all()
    return await load_project_detail(db, project_id, user_id)


# =============================================================================
# Writes
# =============================================================================


async def resolve_tags(db: AsyncSession, names: list[str]) -> list[Tag]:
    """Find-or-create tags by case-insensitive name.

    Input names are trimmed, proper-cased and de-duplicated; blanks dropped.
    """
    seen: set[str] = set()
    tags: list[Tag] = []
    for raw in names:
        name = proper_case_tag(raw)
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())

        result = await db.execute(select(Tag).where(func.lower(Tag.name) == name.lower()))
        tag = result.scalars().first()
        if tag is None:
            tag = Tag(name=name)
            db.add(tag)
            await db.flush()
        tags.append(tag)
    return tags


async def replace_tags(db: AsyncSession, project_id: str, names: list[str]) -> None:
    await db.execute(delete(ProjectTag).where(col(ProjectTag.project_id) == project_id))
    for tag in await resolve_tags(db, names):
        db.add(ProjectTag(project_id=project_id, tag_id=tag.id))


async def _replace_gallery(
    db: AsyncSession, project_id: str, images: list[dict[str, Any]]
) -> None:
    await db.execute(
        delete(ProjectGalleryImage).where(col(ProjectGalleryImage.project_id) == project_id)
    )
    for index, image in enumerate(images):
        db.add(
            ProjectGalleryImage(
                project_id=project_id,
                image_url=image["image_url"],
                caption=image.get("caption"),
                display_order=(
                    image["display_order"]
                    if image.get("display_order") is not None
                    else index
                ),
            )
        )


async def create_project(
    db: AsyncSession,
    author: User,
    title: str,
    description: str,
    project_url: str,
    long_description: str | None = None,
    image_url: str | None = None,
    vibe_coding_tool: str | None = None,
    is_private: bool = False,
    tags: list[str] | None = None,
    gallery_images: list[dict[str, Any]] | None = None,
) -> ProjectDetail:
    """Create a project. New projects are never featured."""
    project = Project(
        title=title,
        description=description,
        long_description=long_description,
        project_url=project_url,
        image_url=image_url or DEFAULT_PROJECT_IMAGE,
        vibe_coding_tool=vibe_coding_tool,
        author_id=author.id,
        is_private=is_private,
        featured=False,
    )
    db.add(project)
    await db.flush()

    if tags:
        await replace_tags(db, project.id, tags)
    if gallery_images:
        await _replace_gallery(db, project.id, gallery_images)

    activity_service.record_activity(
        db, author.id, ActivityType.PROJECT_CREATED, project.id
    )
    await db.commit()
    invalidate_projects()
    if tags:
        invalidate(TAGS)

    logger.info(
        "Project created",
        extra={"event": LogEvent.PROJECT_CREATED, "project_id": project.id},
    )
    return await load_project_detail(db, project.id, author.id)


async def update_project(
    db: AsyncSession, project_id: str, user: User, changes: dict[str, Any]
) -> ProjectDetail:
    """Apply a partial update.

    `tags` / `gallery_images` replace the whole set when present.
    `featured` is admin-controlled and ignored here.
    """
    project = await _get_manageable_project(db, project_id, user, "update")

    tags = changes.pop("tags", None)
    gallery_images = changes.pop("gallery_images", None)
    changes.pop("featured", None)

    for field, value in changes.items():
        if field == "image_url" and not value:
            value = DEFAULT_PROJECT_IMAGE
        setattr(project, field, value)
    project.updated_at = utc_now()

    if tags is not None:
        await replace_tags(db, project.id, tags)
    if gallery_images is not None:
        await _replace_gallery(db, project.id, gallery_images)

    await db.commit()
    invalidate_projects()
    if tags is not None:
        invalidate(TAGS)

    logger.info(
        "Project updated",
        extra={"event": LogEvent.PROJECT_UPDATED, "project_id": project.id},
    )
    return await load_project_detail(db, project.id, user.id)


async def purge_project(db: AsyncSession, project_id: str) -> None:
    """Delete a project and everything that hangs off it (no commit)."""
    comment_ids = select(Comment.id).where(col(Comment.project_id) == project_id)
    reply_ids = select(CommentReply.id).where(col(CommentReply.comment_id).in_(comment_ids))

    await db.execute(
        delete(Notification).where(
            or_(
                col(Notification.project_id) == project_id,
                col(Notification.comment_id).in_(comment_ids),
                col(Notification.reply_id).in_(reply_ids),
            )
        )
    )
    await db.execute(
        delete(Like).where(
            or_(
                col(Like.project_id) == project_id,
                col(Like.comment_id).in_(comment_ids),
                col(Like.reply_id).in_(reply_ids),
            )
        )
    )
    await db.execute(
        delete(UserActivity).where(
            or_(
                col(UserActivity.target_id) == project_id,
                col(UserActivity.target_id).in_(comment_ids),
                col(UserActivity.target_id).in_(reply_ids),
            )
        )
    )
    await db.execute(delete(CommentReply).where(col(CommentReply.id).in_(reply_ids)))
    await db.execute(delete(Comment).where(col(Comment.project_id) == project_id))
    for model in (Bookmark, Share, ProjectGalleryImage, ProjectView, ProjectTag, ProjectEvaluation):
        await db.execute(delete(model).where(col(model.project_id) == project_id))
    await db.execute(
        update(VibeCheck)
        .where(col(VibeCheck.converted_project_id) == project_id)
        .values(converted_project_id=None)
    )
    await db.execute(delete(Project).where(col(Project.id) == project_id))


async def delete_project(db: AsyncSession, project_id: str, user: User) -> None:
    await _get_manageable_project(db, project_id, user, "delete")
    await purge_project(db, project_id)
    await db.commit()
    invalidate_projects()
    invalidate(TAGS)

    logger.info(
        "Project deleted",
        extra={"event": LogEvent.PROJECT_DELETED, "project_id": project_id},
    )


# =============================================================================
# Interactions
# =============================================================================


async def count_project_likes(db: AsyncSession, project_id: str) -> int:
    result = await db.execute(
        select(func.count(Like.id)).where(
            col(Like.project_id) == project_id,
            col(Like.comment_id).is_(None),
            col(Like.reply_id).is_(None),
        )
    )
    return result.scalar_one()


async def _find_project_like(db: AsyncSession, project_id: str, user_id: str) -> Like | None:
    result = await db.execute(
        select(Like).where(
            col(Like.project_id) == project_id,
            col(Like.user_id) == user_id,
            col(Like.comment_id).is_(None),
            col(Like.reply_id).is_(None),
        )
    )
    return result.scalars().first()


async def like_project(
    db: AsyncSession,
    project_id: str,
    user: User,
    publisher: ChannelPublisher | None = None,
) -> int:
    """Like a project (idempotent). Returns the new like count."""
    project = await get_visible_project(db, project_id, user)

    if await _find_project_like(db, project_id, user.id) is None:
        db.add(Like(user_id=user.id, project_id=project_id))
        activity_service.record_activity(
            db, user.id, ActivityType.PROJECT_LIKED, project_id
        )
        await db.commit()
        invalidate_projects()

        await notification_service.create_notification(
            db,
            user_id=project.author_id,
            notification_type=NotificationType.LIKE_PROJECT,
            actor_id=user.id,
            project_id=project_id,
            publisher=publisher,
        )

    return await count_project_likes(db, project_id)


async def unlike_project(db: AsyncSession, project_id: str, user: User) -> int:
    await get_visible_project(db, project_id, user)

    like = await _find_project_like(db, project_id, user.id)
    if like is not None:
        await db.delete(like)
        await db.commit()
        invalidate_projects()

    return await count_project_likes(db, project_id)


async def bookmark_project(db: AsyncSession, project_id: str, user: User) -> None:
    await get_visible_project(db, project_id, user)

    result = await db.execute(
        select(Bookmark.id).where(
            col(Bookmark.project_id) == project_id, col(Bookmark.user_id) == user.id
        )
    )
    if result.first() is None:
        db.add(Bookmark(project_id=project_id, user_id=user.id))
        await db.commit()
        invalidate_projects()


async def unbookmark_project(db: AsyncSession, project_id: str, user: User) -> None:
    await get_visible_project(db, project_id, user)

    result = await db.execute(
        delete(Bookmark).where(
            col(Bookmark.project_id) == project_id, col(Bookmark.user_id) == user.id
        )
    )
    await db.commit()
    if result.rowcount:
        invalidate_projects()


async def share_project(
    db: AsyncSession, project_id: str, platform: str, user: User | None
) -> int:
    """Record a share. Returns the project's new shares_count."""
    await get_visible_project(db, project_id, user)

    db.add(Share(project_id=project_id, user_id=user.id if user else None, platform=platform))
    await db.execute(
        update(Project)
        .where(col(Project.id) == project_id)
        .values(shares_count=col(Project.shares_count) + 1)
    )
    await db.commit()
    invalidate_projects()

    result = await db.execute(
        select(Project.shares_count).where(col(Project.id) == project_id)
    )
    return result.scalar_one()


async def feature_project(db: AsyncSession, project_id: str) -> Project:
    """Make this the only featured project."""
    project = await db.get(Project, project_id)
    if project is None:
        raise ProjectNotFoundError()

    await db.execute(
        update(Project).where(col(Project.featured).is_(True)).values(featured=False)
    )
    project.featured = True
    project.updated_at = utc_now()
    await db.commit()
    await db.refresh(project)
    invalidate_projects()

    logger.info(
        "Project featured",
        extra={"event": LogEvent.PROJECT_FEATURED, "project_id": project_id},
    )
    return project
