"""Database models for ctrlaltvibe.

Models are defined using SQLModel (SQLAlchemy + Pydantic).
"""

from ctrlaltvibe.core.models.auth import Session, User, generate_ulid, utc_now
from ctrlaltvibe.core.models.blog import BlogCategory, BlogPost, BlogPostTag, BlogTag
from ctrlaltvibe.core.models.interaction import Comment, CommentReply, Like
from ctrlaltvibe.core.models.notification import Notification
from ctrlaltvibe.core.models.profile import UserActivity, UserSkill
from ctrlaltvibe.core.models.project import (
    Bookmark,
    CodingTool,
    Project,
    ProjectGalleryImage,
    ProjectTag,
    ProjectView,
    Share,
    Tag,
)
from ctrlaltvibe.core.models.vibe_check import ProjectEvaluation, VibeCheck

__all__ = [
    "User",
    "Session",
    "Project",
    "Tag",
    "ProjectTag",
    "CodingTool",
    "ProjectGalleryImage",
    "ProjectView",
    "Bookmark",
    "Share",
    "Comment",
    "CommentReply",
    "Like",
    "Notification",
    "UserActivity",
    "UserSkill",
    "BlogCategory",
    "BlogTag",
    "BlogPostTag",
    "BlogPost",
    "VibeCheck",
    "ProjectEvaluation",
    "generate_ulid",
    "utc_now",
]
