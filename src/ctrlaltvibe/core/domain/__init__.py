"""Domain enums and constants."""

from ctrlaltvibe.core.domain.community import (
    DEFAULT_BLOG_IMAGE,
    DEFAULT_PROJECT_IMAGE,
    PROPER_CASED_TAGS,
    TRENDING_LIKE_WEIGHT,
    TRENDING_SHARE_WEIGHT,
    TRENDING_VIEW_WEIGHT,
    VIBE_CHECK_COVER_IMAGE,
    ActivityType,
    CommentSort,
    NotificationType,
    ProjectSort,
    UserRole,
    proper_case_tag,
    slugify,
)

__all__ = [
    "ActivityType",
    "CommentSort",
    "NotificationType",
    "ProjectSort",
    "UserRole",
    "proper_case_tag",
    "slugify",
    "PROPER_CASED_TAGS",
    "DEFAULT_BLOG_IMAGE",
    "DEFAULT_PROJECT_IMAGE",
    "VIBE_CHECK_COVER_IMAGE",
    "TRENDING_LIKE_WEIGHT",
    "TRENDING_SHARE_WEIGHT",
    "TRENDING_VIEW_WEIGHT",
]
