"""Blog CMS models (categories, tags, posts)."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel

from ctrlaltvibe.core.models.auth import generate_ulid, utc_now


class BlogCategory(SQLModel, table=True):
    __tablename__ = "blog_categories"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    name: str = Field(max_length=100)
    slug: str = Field(unique=True, index=True, max_length=100)
    description: str | None = Field(default=None, sa_column=Column(Text))
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )


class BlogTag(SQLModel, table=True):
    __tablename__ = "blog_tags"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    name: str = Field(max_length=50)
    slug: str = Field(unique=True, index=True, max_length=50)
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )


class BlogPostTag(SQLModel, table=True):
    __tablename__ = "blog_post_tags"

    post_id: str = Field(foreign_key="blog_posts.id", primary_key=True)
    tag_id: str = Field(foreign_key="blog_tags.id", primary_key=True, index=True)


class BlogPost(SQLModel, table=True):
    __tablename__ = "blog_posts"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    title: str = Field(max_length=200)
    slug: str = Field(unique=True, index=True, max_length=200)
    content: str = Field(sa_column=Column(Text, nullable=False))
    excerpt: str | None = Field(default=None, sa_column=Column(Text))
    summary: str | None = Field(default=None, sa_column=Column(Text))
    tldr: str | None = Field(default=None, sa_column=Column(Text))
    author_id: str = Field(foreign_key="users.id", index=True)
    category_id: str | None = Field(
        default=None, foreign_key="blog_categories.id", index=True
    )
    featured_image: str | None = Field(default=None, max_length=2048)
    view_count: int = Field(default=0)
    published: bool = Field(default=False)
    published_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True), index=True)
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
