"""User activity log.

Rows are added inside the caller's transaction; the caller commits.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col

from ctrlaltvibe.core.domain import ActivityType
from ctrlaltvibe.core.models import Comment, CommentReply, Project, UserActivity
from ctrlaltvibe.core.schemas import ActivityResponse


def record_activity(
    db: AsyncSession, user_id: str, activity_type: ActivityType, target_id: str
) -> UserActivity:
    activity = UserActivity(user_id=user_id, type=activity_type, target_id=target_id)
    db.add(activity)
    return activity


def _project_brief(project: Project | None) -> dict | None:
    if project is None:
        return None
    return {"id": project.id, "title": project.title, "image_url": project.image_url}


async def list_activities(
    db: AsyncSession, user_id: str, limit: int = 10
) -> list[ActivityResponse]:
    """Latest activities with their target data attached.

    Targets that were deleted since the activity was recorded come back
    as `target: None`.
    """
    result = await db.execute(
        select(UserActivity)
        .where(col(UserActivity.user_id) == user_id)
        .order_by(col(UserActivity.created_at).desc(), col(UserActivity.id).desc())
        .limit(limit)
    )
    activities = list(result.scalars().all())

    responses = []
    for activity in activities:
        target: dict | None = None
        if activity.type in (ActivityType.PROJECT_CREATED, ActivityType.PROJECT_LIKED):
            target = _project_brief(await db.get(Project, activity.target_id))
        elif activity.type == ActivityType.COMMENT_ADDED:
            comment = await db.get(Comment, activity.target_id)
            if comment is not None:
                target = {
                    "comment": {"id": comment.id, "content": comment.content},
                    "project": _project_brief(await db.get(Project, comment.project_id)),
                }
        elif activity.type == ActivityType.REPLY_ADDED:
            reply = await db.get(CommentReply, activity.target_id)
            if reply is not None:
                comment = await db.get(Comment, reply.comment_id)
                project = (
                    await db.get(Project, comment.project_id) if comment else None
                )
                target = {
                    "reply": {"id": reply.id, "content": reply.content},
                    "comment": (
                        {"id": comment.id, "content": comment.content}
                        if comment
                        else None
                    ),
                    "project": _project_brief(project),
                }

        responses.append(
            ActivityResponse(
                id=activity.id,
                type=activity.type,
                target_id=activity.target_id,
                created_at=activity.created_at,
                target=target,
            )
        )
    return responses
