"""Notification model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, String
from sqlmodel import Field, SQLModel

from ctrlaltvibe.core.domain import NotificationType
from ctrlaltvibe.core.models.auth import generate_ulid, utc_now


class Notification(SQLModel, table=True):
    """In-app notification addressed to `user_id`, caused by `actor_id`."""

    __tablename__ = "notifications"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    type: NotificationType = Field(sa_type=String)
    read: bool = Field(default=False)
    actor_id: str | None = Field(default=None, foreign_key="users.id")
    project_id: str | None = Field(default=None, foreign_key="projects.id")
    comment_id: str | None = Field(default=None, foreign_key="comments.id")
    reply_id: str | None = Field(default=None, foreign_key="comment_replies.id")
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True), index=True)
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
