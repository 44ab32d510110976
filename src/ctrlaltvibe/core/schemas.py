"""Read models shared by services and API routers.

Request bodies live next to the routes that accept them.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class AuthorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    avatar_url: str | None = None


class UserResponse(BaseModel):
    """The logged-in user's own view of their account (never the hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    bio: str | None
    avatar_url: str | None
    role: str
    created_at: datetime


class PublicUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    bio: str | None
    avatar_url: str | None
    created_at: datetime


class ProjectSummary(BaseModel):
    """Project card as shown in feeds, with aggregate counts and caller flags."""

    id: str
    title: str
    description: str
    project_url: str
    image_url: str
    vibe_coding_tool: str | None
    featured: bool
    is_private: bool
    created_at: datetime
    updated_at: datetime
    author: AuthorSummary
    tags: list[str]
    likes_count: int
    comments_count: int
    bookmarks_count: int
    shares_count: int
    views_count: int
    is_liked: bool
    is_bookmarked: bool


class GalleryImageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    image_url: str
    caption: str | None
    display_order: int


class ProjectDetail(ProjectSummary):
    long_description: str | None
    gallery_images: list[GalleryImageResponse]


class ProjectListResponse(BaseModel):
    projects: list[ProjectSummary]
    total: int
    has_more: bool


class SkillResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    category: str
    skill: str
    created_at: datetime


class ActivityResponse(BaseModel):
    id: str
    type: str
    target_id: str
    created_at: datetime
    # Shape depends on type: project / comment+project / reply+comment+project
    target: dict[str, Any] | None = None
