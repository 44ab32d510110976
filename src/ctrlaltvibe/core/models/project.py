"""Project showcase models.

A project owns its tag links, gallery images, monthly view rows,
bookmarks and shares. Likes and comments live in models.interaction.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Text, UniqueConstraint
from sqlmodel import Field, SQLModel

from ctrlaltvibe.core.models.auth import generate_ulid, utc_now


class Project(SQLModel, table=True):
    __tablename__ = "projects"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    title: str = Field(max_length=100)
    description: str = Field(max_length=500)
    long_description: str | None = Field(default=None, sa_column=Column(Text))
    project_url: str = Field(max_length=2048)
    image_url: str = Field(max_length=2048)
    vibe_coding_tool: str | None = Field(default=None, max_length=50)
    author_id: str = Field(foreign_key="users.id", index=True)
    views_count: int = Field(default=0)
    shares_count: int = Field(default=0)
    featured: bool = Field(default=False, index=True)
    is_private: bool = Field(default=False)
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True), index=True)
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )


class Tag(SQLModel, table=True):
    __tablename__ = "tags"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    name: str = Field(unique=True, max_length=50)
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )


class ProjectTag(SQLModel, table=True):
    __tablename__ = "project_tags"

    project_id: str = Field(foreign_key="projects.id", primary_key=True)
    tag_id: str = Field(foreign_key="tags.id", primary_key=True, index=True)


class CodingTool(SQLModel, table=True):
    """AI coding tool a project was built with (Cursor, Replit, ...)."""

    __tablename__ = "coding_tools"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    name: str = Field(unique=True, max_length=50)
    category: str = Field(default="Other", max_length=50)
    is_popular: bool = Field(default=False)
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )


class ProjectGalleryImage(SQLModel, table=True):
    __tablename__ = "project_gallery"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    project_id: str = Field(foreign_key="projects.id", index=True)
    image_url: str = Field(max_length=2048)
    caption: str | None = Field(default=None, max_length=255)
    display_order: int = Field(default=0)
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )


class ProjectView(SQLModel, table=True):
    """Per-month view counter (one row per project/month/year)."""

    __tablename__ = "project_views"
    __table_args__ = (UniqueConstraint("project_id", "month", "year"),)

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    project_id: str = Field(foreign_key="projects.id", index=True)
    month: int
    year: int
    views_count: int = Field(default=0)


class Bookmark(SQLModel, table=True):
    __tablename__ = "bookmarks"
    __table_args__ = (UniqueConstraint("project_id", "user_id"),)

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    project_id: str = Field(foreign_key="projects.id", index=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )


class Share(SQLModel, table=True):
    __tablename__ = "shares"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    project_id: str = Field(foreign_key="projects.id", index=True)
    user_id: str | None = Field(default=None, foreign_key="users.id")
    platform: str = Field(max_length=50)
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
