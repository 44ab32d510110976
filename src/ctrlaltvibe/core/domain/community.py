"""Community domain enums, tag casing and slug rules."""

import re
import unicodedata
from enum import StrEnum


class UserRole(StrEnum):
    USER = "user"
    ADMIN = "admin"


class NotificationType(StrEnum):
    """notifications.type values."""

    LIKE_PROJECT = "like_project"
    COMMENT_PROJECT = "comment_project"
    REPLY_COMMENT = "reply_comment"
    LIKE_COMMENT = "like_comment"
    LIKE_REPLY = "like_reply"


class ActivityType(StrEnum):
    """user_activity.type values."""

    PROJECT_CREATED = "project_created"
    PROJECT_LIKED = "project_liked"
    COMMENT_ADDED = "comment_added"
    REPLY_ADDED = "reply_added"


class ProjectSort(StrEnum):
    """Feed sort keys accepted by GET /api/projects."""

    TRENDING = "trending"
    NEWEST = "newest"
    OLDEST = "oldest"
    MOST_LIKED = "mostLiked"
    MOST_VIEWED = "mostViewed"

    @classmethod
    def parse(cls, value: str | None) -> "ProjectSort | None":
        """Known sort key, or None (featured first, then newest) for anything else."""
        try:
            return cls(value) if value else None
        except ValueError:
            return None


class CommentSort(StrEnum):
    NEWEST = "newest"
    OLDEST = "oldest"
    MOST_LIKED = "mostLiked"

    @classmethod
    def parse(cls, value: str | None) -> "CommentSort":
        try:
            return cls(value) if value else cls.NEWEST
        except ValueError:
            return cls.NEWEST


# Trending score weights: likes*3 + views*2 + shares*5
TRENDING_LIKE_WEIGHT = 3
TRENDING_VIEW_WEIGHT = 2
TRENDING_SHARE_WEIGHT = 5

DEFAULT_PROJECT_IMAGE = "/images/default-project.jpg"
DEFAULT_BLOG_IMAGE = "/images/default-blog.jpg"
VIBE_CHECK_COVER_IMAGE = "/vibe-check-cover.png"

PROPER_CASED_TAGS: tuple[str, ...] = (
    "AI Tools",
    "Analytics",
    "Art",
    "Business",
    "Chatbots",
    "Code",
    "Creative",
    "Data Visualization",
    "Development",
    "Education",
    "GPT Models",
    "Image Generation",
    "Machine Learning",
    "Natural Language Processing",
    "Productivity",
    "Tools",
    "Collaboration",
    "Content Creation",
    "Developer Tools",
    "Finance",
    "Gaming",
    "Health",
    "Lifestyle",
    "Social",
    "Utilities",
    "Web Development",
    "Mobile",
    "Design",
    "Communication",
)

_TAG_CASING = {tag.lower(): tag for tag in PROPER_CASED_TAGS}


def proper_case_tag(name: str) -> str:
    """Return the canonical casing for a known tag, else the trimmed input."""
    trimmed = name.strip()
    return _TAG_CASING.get(trimmed.lower(), trimmed)


_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase ASCII slug: 'Hello, World!' -> 'hello-world'."""
    ascii_text = (
        unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    )
    return _NON_SLUG.sub("-", ascii_text.lower()).strip("-")
