"""Comment and reply API endpoints.

Endpoints:
- GET/POST /api/projects/{id}/comments
- POST /api/comments/{id}/replies
- POST/DELETE /api/comments/{id}/like
- POST/DELETE /api/replies/{id}/like
"""

from typing import Annotated, Any

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field, field_validator

from ctrlaltvibe.app.api.v1.dependencies import CurrentUser, DbSession, OptionalUser, Publisher
from ctrlaltvibe.app.config import get_settings
from ctrlaltvibe.core.domain import CommentSort
from ctrlaltvibe.services import comment_service

router = APIRouter(tags=["comments"])

_default_limit = get_settings().pagination.default_limit


class CommentRequest(BaseModel):
    content: str = Field(min_length=1, max_length=1000)

    @field_validator("content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Comment cannot be empty")
        return value


class LikeResponse(BaseModel):
    success: bool = True
    likes_count: int


@router.get("/projects/{project_id}/comments")
async def list_comments(
    project_id: str,
    db: DbSession,
    user: OptionalUser,
    page: Annotated[int, Query()] = 1,
    limit: Annotated[int, Query()] = _default_limit,
    sort: str | None = None,
) -> dict[str, Any]:
    """Comments with nested replies: {comments, has_more, total_comments}.

    Unknown `sort` values fall back to newest first.
    """
    return await comment_service.list_comments(
        db, project_id, page=page, limit=limit, sort=CommentSort.parse(sort), user=user
    )


@router.post("/projects/{project_id}/comments", status_code=201)
async def create_comment(
    project_id: str,
    body: CommentRequest,
    db: DbSession,
    user: CurrentUser,
    publisher: Publisher,
) -> dict[str, Any]:
    comment = await comment_service.create_comment(
        db, project_id, user, body.content, publisher
    )
    return {"comment": comment}


@router.post("/comments/{comment_id}/replies", status_code=201)
async def create_reply(
    comment_id: str,
    body: CommentRequest,
    db: DbSession,
    user: CurrentUser,
    publisher: Publisher,
) -> dict[str, Any]:
    reply = await comment_service.create_reply(db, comment_id, user, body.content, publisher)
    return {"reply": reply}


@router.post("/comments/{comment_id}/like", response_model=LikeResponse)
async def like_comment(
    comment_id: str, db: DbSession, user: CurrentUser, publisher: Publisher
) -> LikeResponse:
    count = await comment_service.like_comment(db, comment_id, user, publisher)
    return LikeResponse(likes_count=count)


@router.delete("/comments/{comment_id}/like", response_model=LikeResponse)
async def unlike_comment(comment_id: str, db: DbSession, user: CurrentUser) -> LikeResponse:
    count = await comment_service.unlike_comment(db, comment_id, user)
    return LikeResponse(likes_count=count)


@router.post("/replies/{reply_id}/like", response_model=LikeResponse)
async def like_reply(
    reply_id: str, db: DbSession, user: CurrentUser, publisher: Publisher
) -> LikeResponse:
    count = await comment_service.like_reply(db, reply_id, user, publisher)
    return LikeResponse(likes_count=count)


@router.delete("/replies/{reply_id}/like", response_model=LikeResponse)
async def unlike_reply(reply_id: str, db: DbSession, user: CurrentUser) -> LikeResponse:
    count = await comment_service.unlike_reply(db, reply_id, user)
    return LikeResponse(likes_count=count)
