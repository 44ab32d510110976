"""Comments, replies and likes.

A Like row targets exactly one of project_id / comment_id / reply_id;
the other two stay NULL.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel

from ctrlaltvibe.core.models.auth import generate_ulid, utc_now


class Comment(SQLModel, table=True):
    __tablename__ = "comments"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    project_id: str = Field(foreign_key="projects.id", index=True)
    author_id: str = Field(foreign_key="users.id", index=True)
    content: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )


class CommentReply(SQLModel, table=True):
    __tablename__ = "comment_replies"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    comment_id: str = Field(foreign_key="comments.id", index=True)
    author_id: str = Field(foreign_key="users.id", index=True)
    content: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )


class Like(SQLModel, table=True):
    __tablename__ = "likes"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    project_id: str | None = Field(default=None, foreign_key="projects.id", index=True)
    comment_id: str | None = Field(default=None, foreign_key="comments.id", index=True)
    reply_id: str | None = Field(
        default=None, foreign_key="comment_replies.id", index=True
    )
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
