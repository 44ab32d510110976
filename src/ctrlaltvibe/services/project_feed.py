"""Project feed query builder.

Every feed (paged list, featured, trending, liked, per-author) is built
from the same select: the project row, its author, five aggregate counts
as correlated subqueries and the caller's like/bookmark flags. Tags for a
page are batch-loaded in one extra query.

Visibility: public projects plus the caller's own private ones.
"""

from collections import defaultdict
from typing import Any

from cachetools_async import cached
from sqlalchemy import ColumnElement, Select, and_, exists, func, literal, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col

from ctrlaltvibe.app.config import get_settings
from ctrlaltvibe.app.metrics.collector import CACHE_REQUESTS_TOTAL
from ctrlaltvibe.core.domain import (
    TRENDING_LIKE_WEIGHT,
    TRENDING_SHARE_WEIGHT,
    TRENDING_VIEW_WEIGHT,
    ProjectSort,
    proper_case_tag,
)
from ctrlaltvibe.core.models import (
    Bookmark,
    Comment,
    Like,
    Project,
    ProjectTag,
    Share,
    Tag,
    User,
)
from ctrlaltvibe.core.schemas import AuthorSummary, ProjectListResponse, ProjectSummary
from ctrlaltvibe.infra.cache import featured_cache, project_list_cache, trending_cache

_pagination = get_settings().pagination


def clamp_limit(limit: int) -> int:
    """Clamp a requested page size to 1..PAGINATION_MAX_LIMIT."""
    return min(max(limit, 1), _pagination.max_limit)


def clamp_page(page: int, limit: int) -> tuple[int, int]:
    return max(page, 1), clamp_limit(limit)


# =============================================================================
# Column builders
# =============================================================================


def _project_like_filter() -> ColumnElement[bool]:
    """Likes that target the project itself, not one of its comments/replies."""
    return and_(col(Like.comment_id).is_(None), col(Like.reply_id).is_(None))


def likes_count_expr():
    return (
        select(func.count(Like.id))
        .where(col(Like.project_id) == Project.id, _project_like_filter())
        .correlate(Project)
        .scalar_subquery()
    )


def _comments_count_expr():
    return (
        select(func.count(Comment.id))
        .where(col(Comment.project_id) == Project.id)
        .correlate(Project)
        .scalar_subquery()
    )


def _bookmarks_count_expr():
    return (
        select(func.count(Bookmark.id))
        .where(col(Bookmark.project_id) == Project.id)
        .correlate(Project)
        .scalar_subquery()
    )


def _shares_count_expr():
    return (
        select(func.count(Share.id))
        .where(col(Share.project_id) == Project.id)
        .correlate(Project)
        .scalar_subquery()
    )


def _is_liked_expr(current_user_id: str | None):
    if current_user_id is None:
        return literal(False)
    return exists().where(
        col(Like.project_id) == Project.id,
        col(Like.user_id) == current_user_id,
        _project_like_filter(),
    )


def _is_bookmarked_expr(current_user_id: str | None):
    if current_user_id is None:
        return literal(False)
    return exists().where(
        col(Bookmark.project_id) == Project.id,
        col(Bookmark.user_id) == current_user_id,
    )


def trending_score_expr():
    return (
        likes_count_expr() * TRENDING_LIKE_WEIGHT
        + col(Project.views_count) * TRENDING_VIEW_WEIGHT
        + _shares_count_expr() * TRENDING_SHARE_WEIGHT
    )


def visibility_filter(current_user_id: str | None) -> ColumnElement[bool]:
    public = col(Project.is_private).is_(False)
    if current_user_id is None:
        return public
    return or_(public, col(Project.author_id) == current_user_id)


def base_select(current_user_id: str | None) -> Select:
    """Project + author + aggregates + caller flags, before filters/ordering."""
    return select(
        Project,
        User,
        likes_count_expr().label("likes_count"),
        _comments_count_expr().label("comments_count"),
        _bookmarks_count_expr().label("bookmarks_count"),
        _shares_count_expr().label("shares_count"),
        _is_liked_expr(current_user_id).label("is_liked"),
        _is_bookmarked_expr(current_user_id).label("is_bookmarked"),
    ).join(User, col(User.id) == col(Project.author_id))


def _order_by(sort: ProjectSort | None) -> list[Any]:
    created = col(Project.created_at)
    if sort == ProjectSort.TRENDING:
        return [trending_score_expr().desc(), created.desc()]
    if sort == ProjectSort.NEWEST:
        return [created.desc()]
    if sort == ProjectSort.OLDEST:
        return [created.asc()]
    if sort == ProjectSort.MOST_LIKED:
        return [likes_count_expr().desc(), created.desc()]
    if sort == ProjectSort.MOST_VIEWED:
        return [col(Project.views_count).desc(), created.desc()]
    return [col(Project.featured).desc(), created.desc()]


# =============================================================================
# Row mapping
# =============================================================================


async def load_tag_names(db: AsyncSession, project_ids: list[str]) -> dict[str, list[str]]:
    """Batch-load proper-cased tag names for a set of projects."""
    tags: dict[str, list[str]] = defaultdict(list)
    if not project_ids:
        return tags

    result = await db.execute(
        select(ProjectTag.project_id, Tag.name)
        .join(Tag, col(Tag.id) == col(ProjectTag.tag_id))
        .where(col(ProjectTag.project_id).in_(project_ids))
        .order_by(col(Tag.name))
    )
    for project_id, name in result.all():
        tags[project_id].append(proper_case_tag(name))
    return tags


def _to_summary(row: Any, tags: list[str]) -> ProjectSummary:
    project: Project = row[0]
    author: User = row[1]
    return ProjectSummary(
        id=project.id,
        title=project.title,
        description=project.description,
        project_url=project.project_url,
        image_url=project.image_url,
        vibe_coding_tool=project.vibe_coding_tool,
        featured=project.featured,
        is_private=project.is_private,
        created_at=project.created_at,
        updated_at=project.updated_at,
        author=AuthorSummary.model_validate(author),
        tags=tags,
        likes_count=row.likes_count or 0,
        comments_count=row.comments_count or 0,
        bookmarks_count=row.bookmarks_count or 0,
        shares_count=row.shares_count or 0,
        views_count=project.views_count,
        is_liked=bool(row.is_liked),
        is_bookmarked=bool(row.is_bookmarked),
    )


async def fetch_summaries(db: AsyncSession, stmt: Select) -> list[ProjectSummary]:
    rows = (await db.execute(stmt)).all()
    tags = await load_tag_names(db, [row[0].id for row in rows])
    return [_to_summary(row, tags.get(row[0].id, [])) for row in rows]


# =============================================================================
# Feeds
# =============================================================================


async def list_projects(
    db: AsyncSession,
    page: int = 1,
    limit: int = 6,
    tag: str | None = None,
    search: str | None = None,
    sort: ProjectSort | None = None,
    user: str | None = None,
    current_user_id: str | None = None,
) -> ProjectListResponse:
    """Paged project feed.

    Args:
        user: Author username filter. Unknown usernames yield an empty page.
        tag: Case-insensitive tag name filter.
        search: Case-insensitive substring of title, description or
            author username.
    """
    page, limit = clamp_page(page, limit)
    offset = (page - 1) * limit

    filters: list[ColumnElement[bool]] = [visibility_filter(current_user_id)]
    if user:
        filters.append(col(User.username) == user)
    if tag:
        filters.append(
            col(Project.id).in_(
                select(ProjectTag.project_id)
                .join(Tag, col(Tag.id) == col(ProjectTag.tag_id))
                .where(func.lower(Tag.name) == tag.strip().lower())
            )
        )
    if search:
        pattern = f"%{search.strip().lower()}%"
        filters.append(
            or_(
                func.lower(Project.title).like(pattern),
                func.lower(Project.description).like(pattern),
                func.lower(User.username).like(pattern),
            )
        )

    total = (
        await db.execute(
            select(func.count(Project.id))
            .select_from(Project)
            .join(User, col(User.id) == col(Project.author_id))
            .where(*filters)
        )
    ).scalar_one()

    stmt = (
        base_select(current_user_id)
        .where(*filters)
        .order_by(*_order_by(sort), col(Project.id).desc())
        .offset(offset)
        .limit(limit)
    )
    projects = await fetch_summaries(db, stmt)

    return ProjectListResponse(
        projects=projects,
        total=total,
        has_more=offset + len(projects) < total,
    )


async def get_featured_project(
    db: AsyncSession, current_user_id: str | None = None
) -> ProjectSummary | None:
    """A random featured public project, or None."""
    stmt = (
        base_select(current_user_id)
        .where(col(Project.featured).is_(True), col(Project.is_private).is_(False))
        .order_by(func.random())
        .limit(1)
    )
    projects = await fetch_summaries(db, stmt)
    return projects[0] if projects else None


async def get_trending_projects(
    db: AsyncSession, limit: int = 4, current_user_id: str | None = None
) -> list[ProjectSummary]:
    _, limit = clamp_page(1, limit)
    stmt = (
        base_select(current_user_id)
        .where(col(Project.is_private).is_(False))
        .order_by(trending_score_expr().desc(), col(Project.created_at).desc())
        .limit(limit)
    )
    return await fetch_summaries(db, stmt)


async def get_user_liked_projects(
    db: AsyncSession, user_id: str, current_user_id: str | None = None
) -> list[ProjectSummary]:
    liked_ids = select(Like.project_id).where(
        col(Like.user_id) == user_id,
        col(Like.project_id).is_not(None),
        _project_like_filter(),
    )
    stmt = (
        base_select(current_user_id)
        .where(col(Project.id).in_(liked_ids), visibility_filter(current_user_id))
        .order_by(col(Project.created_at).desc())
    )
    return await fetch_summaries(db, stmt)


async def get_projects_by_author(
    db: AsyncSession, author_id: str, current_user_id: str | None = None
) -> list[ProjectSummary]:
    """All of an author's projects the caller may see, newest first."""
    stmt = (
        base_select(current_user_id)
        .where(col(Project.author_id) == author_id, visibility_filter(current_user_id))
        .order_by(col(Project.created_at).desc())
    )
    return await fetch_summaries(db, stmt)


async def get_project_summary(
    db: AsyncSession, project_id: str, current_user_id: str | None = None
) -> ProjectSummary | None:
    """Single project card without visibility filtering (caller checks access)."""
    stmt = base_select(current_user_id).where(col(Project.id) == project_id)
    projects = await fetch_summaries(db, stmt)
    return projects[0] if projects else None


# =============================================================================
# Cached getters (key excludes the db session)
# =============================================================================


def _counted(name: str, cache, key: tuple) -> tuple:
    CACHE_REQUESTS_TOTAL.labels(cache=name, result="hit" if key in cache else "miss").inc()
    return key


def _list_key(
    _db: AsyncSession,
    page: int = 1,
    limit: int = 6,
    tag: str | None = None,
    search: str | None = None,
    sort: ProjectSort | None = None,
    user: str | None = None,
    current_user_id: str | None = None,
) -> tuple:
    return _counted(
        "projects:list",
        project_list_cache,
        (page, limit, tag, search, sort, user, current_user_id),
    )


def _featured_key(_db: AsyncSession, current_user_id: str | None = None) -> tuple:
    return _counted("projects:featured", featured_cache, (current_user_id,))


def _trending_key(
    _db: AsyncSession, limit: int = 4, current_user_id: str | None = None
) -> tuple:
    return _counted("projects:trending", trending_cache, (limit, current_user_id))


cached_list_projects = cached(cache=project_list_cache, key=_list_key)(list_projects)
cached_featured_project = cached(cache=featured_cache, key=_featured_key)(
    get_featured_project
)
cached_trending_projects = cached(cache=trending_cache, key=_trending_key)(
    get_trending_projects
)

__all__ = [
    "clamp_page",
    "list_projects",
    "get_featured_project",
    "get_trending_projects",
    "get_user_liked_projects",
    "get_projects_by_author",
    "get_project_summary",
    "cached_list_projects",
    "cached_featured_project",
    "cached_trending_projects",
]
