"""Blog CMS: categories, tags and posts.

Slugs are derived from names/titles when not supplied. Posts get a
numeric suffix (-2, -3, ...) on collision; categories and tags reject
duplicates with 409.
"""

import logging
from collections import defaultdict
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col

from ctrlaltvibe.core.domain import DEFAULT_BLOG_IMAGE, slugify
from ctrlaltvibe.core.errors import (
    BadRequestError,
    BlogPostNotFoundError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from ctrlaltvibe.core.logging_schema import LogEvent
from ctrlaltvibe.core.models import (
    BlogCategory,
    BlogPost,
    BlogPostTag,
    BlogTag,
    User,
    utc_now,
)
from ctrlaltvibe.core.schemas import AuthorSummary
from ctrlaltvibe.services.project_feed import clamp_page

logger = logging.getLogger(__name__)


# =============================================================================
# Categories
# =============================================================================


async def list_categories(db: AsyncSession) -> list[BlogCategory]:
    result = await db.execute(select(BlogCategory).order_by(col(BlogCategory.name)))
    return list(result.scalars().all())


async def get_category(db: AsyncSession, category_id: str) -> BlogCategory:
    category = await db.get(BlogCategory, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


async def get_category_by_slug(db: AsyncSession, slug: str) -> BlogCategory:
    result = await db.execute(select(BlogCategory).where(col(BlogCategory.slug) == slug))
    category = result.scalar_one_or_none()
    if category is None:
        raise NotFoundError("Category not found")
    return category


async def _ensure_unique_slug(
    db: AsyncSession,
    model: type[BlogCategory] | type[BlogTag],
    slug: str,
    exclude_id: str | None = None,
) -> None:
    stmt = select(model.id).where(col(model.slug) == slug)
    if exclude_id is not None:
        stmt = stmt.where(col(model.id) != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise ConflictError(f"Slug '{slug}' already exists")


def _resolve_slug(name: str, slug: str | None) -> str:
    resolved = slugify(slug or name)
    if not resolved:
        raise BadRequestError("Could not derive a slug")
    return resolved


async def create_category(
    db: AsyncSession, name: str, slug: str | None = None, description: str | None = None
) -> BlogCategory:
    slug = _resolve_slug(name, slug)
    await _ensure_unique_slug(db, BlogCategory, slug)

    category = BlogCategory(name=name, slug=slug, description=description)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


async def update_category(
    db: AsyncSession, category_id: str, changes: dict[str, Any]
) -> BlogCategory:
    category = await get_category(db, category_id)

    if changes.get("slug") is not None:
        slug = _resolve_slug(category.name, changes["slug"])
        await _ensure_unique_slug(db, BlogCategory, slug, exclude_id=category_id)
        category.slug = slug
    if changes.get("name") is not None:
        category.name = changes["name"]
    if "description" in changes:
        category.description = changes["description"]
    category.updated_at = utc_now()

    await db.commit()
    await db.refresh(category)
    return category


async def delete_category(db: AsyncSession, category_id: str) -> None:
    """Delete a category; its posts become uncategorized."""
    await get_category(db, category_id)
    await db.execute(
        update(BlogPost)
        .where(col(BlogPost.category_id) == category_id)
        .values(category_id=None)
    )
    await db.execute(delete(BlogCategory).where(col(BlogCategory.id) == category_id))
    await db.commit()


# =============================================================================
# Tags
# =============================================================================


async def list_tags(db: AsyncSession) -> list[BlogTag]:
    result = await db.execute(select(BlogTag).order_by(col(BlogTag.name)))
    return list(result.scalars().all())


async def _get_tag(db: AsyncSession, tag_id: str) -> BlogTag:
    tag = await db.get(BlogTag, tag_id)
    if tag is None:
        raise NotFoundError("Tag not found")
    return tag


async def create_tag(db: AsyncSession, name: str, slug: str | None = None) -> BlogTag:
    slug = _resolve_slug(name, slug)
    await _ensure_unique_slug(db, BlogTag, slug)

    tag = BlogTag(name=name, slug=slug)
    db.add(tag)
    await db.commit()
    await db.refresh(tag)
    return tag


async def update_tag(db: AsyncSession, tag_id: str, changes: dict[str, Any]) -> BlogTag:
    tag = await _get_tag(db, tag_id)

    if changes.get("slug") is not None:
        slug = _resolve_slug(tag.name, changes["slug"])
        await _ensure_unique_slug(db, BlogTag, slug, exclude_id=tag_id)
        tag.slug = slug
    if changes.get("name") is not None:
        tag.name = changes["name"]

    await db.commit()
    await db.refresh(tag)
    return tag


async def delete_tag(db: AsyncSession, tag_id: str) -> None:
    await _get_tag(db, tag_id)
    await db.execute(delete(BlogPostTag).where(col(BlogPostTag.tag_id) == tag_id))
    await db.execute(delete(BlogTag).where(col(BlogTag.id) == tag_id))
    await db.commit()


# =============================================================================
# Posts
# =============================================================================


async def _load_post_tags(db: AsyncSession, post_ids: list[str]) -> dict[str, list[str]]:
    tags: dict[str, list[str]] = defaultdict(list)
    if not post_ids:
        return tags
    result = await db.execute(
        select(BlogPostTag.post_id, BlogTag.name)
        .join(BlogTag, col(BlogTag.id) == col(BlogPostTag.tag_id))
        .where(col(BlogPostTag.post_id).in_(post_ids))
        .order_by(col(BlogTag.name))
    )
    for post_id, name in result.all():
        tags[post_id].append(name)
    return tags


def _serialize_post(
    post: BlogPost,
    author: User | None,
    category: BlogCategory | None,
    tags: list[str],
) -> dict[str, Any]:
    return {
        "id": post.id,
        "title": post.title,
        "slug": post.slug,
        "content": post.content,
        "excerpt": post.excerpt,
        "summary": post.summary,
        "tldr": post.tldr,
        "featured_image": post.featured_image,
        "view_count": post.view_count,
        "published": post.published,
        "published_at": post.published_at,
        "created_at": post.created_at,
        "updated_at": post.updated_at,
        "author": AuthorSummary.model_validate(author).model_dump() if author else None,
        "category": (
            {"id": category.id, "name": category.name, "slug": category.slug}
            if category
            else None
        ),
        "tags": tags,
    }


def _post_select():
    return (
        select(BlogPost, User, BlogCategory)
        .outerjoin(User, col(User.id) == col(BlogPost.author_id))
        .outerjoin(BlogCategory, col(BlogCategory.id) == col(BlogPost.category_id))
    )


async def list_posts(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    category_id: str | None = None,
    tag_id: str | None = None,
    author_id: str | None = None,
    search: str | None = None,
    published_only: bool = True,
) -> dict[str, Any]:
    page, limit = clamp_page(page, limit)

    filters = []
    if published_only:
        filters.append(col(BlogPost.published).is_(True))
    if category_id:
        filters.append(col(BlogPost.category_id) == category_id)
    if author_id:
        filters.append(col(BlogPost.author_id) == author_id)
    if tag_id:
        filters.append(
            col(BlogPost.id).in_(
                select(BlogPostTag.post_id).where(col(BlogPostTag.tag_id) == tag_id)
            )
        )
    if search:
        pattern = f"%{search.lower()}%"
        filters.append(
            or_(
                func.lower(BlogPost.title).like(pattern),
                func.lower(BlogPost.content).like(pattern),
            )
        )

    total = (
        await db.execute(select(func.count(BlogPost.id)).where(*filters))
    ).scalar_one()

    result = await db.execute(
        _post_select()
        .where(*filters)
        .order_by(col(BlogPost.created_at).desc(), col(BlogPost.id).desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    rows = result.all()
    tags = await _load_post_tags(db, [row[0].id for row in rows])

    return {
        "posts": [
            _serialize_post(post, author, category, tags.get(post.id, []))
            for post, author, category in rows
        ],
        "total": total,
    }


def _can_manage(post: BlogPost, user: User | None) -> bool:
    return user is not None and (user.is_admin or post.author_id == user.id)


async def _read_post(db: AsyncSession, where, user: User | None) -> dict[str, Any]:
    row = (await db.execute(_post_select().where(where))).first()
    if row is None:
        raise BlogPostNotFoundError()
    post, author, category = row
    if not post.published and not _can_manage(post, user):
        raise BlogPostNotFoundError()

    await db.execute(
        update(BlogPost)
        .where(col(BlogPost.id) == post.id)
        .values(view_count=col(BlogPost.view_count) + 1)
    )
    await db.commit()
    await db.refresh(post)

    tags = await _load_post_tags(db, [post.id])
    return _serialize_post(post, author, category, tags.get(post.id, []))


async def get_post(db: AsyncSession, post_id: str, user: User | None) -> dict[str, Any]:
    """Read a post by id. Counts as a view."""
    return await _read_post(db, col(BlogPost.id) == post_id, user)


async def get_post_by_slug(db: AsyncSession, slug: str, user: User | None) -> dict[str, Any]:
    return await _read_post(db, col(BlogPost.slug) == slug, user)


async def _unique_post_slug(
    db: AsyncSession, base: str, exclude_id: str | None = None
) -> str:
    """base, base-2, base-3, ... whichever is free first."""
    stmt = select(BlogPost.slug).where(
        or_(col(BlogPost.slug) == base, col(BlogPost.slug).like(f"{base}-%"))
    )
    if exclude_id is not None:
        stmt = stmt.where(col(BlogPost.id) != exclude_id)
    taken = set((await db.execute(stmt)).scalars().all())

    if base not in taken:
        return base
    suffix = 2
    while f"{base}-{suffix}" in taken:
        suffix += 1
    return f"{base}-{suffix}"


async def _replace_post_tags(db: AsyncSession, post_id: str, tag_ids: list[str]) -> None:
    await db.execute(delete(BlogPostTag).where(col(BlogPostTag.post_id) == post_id))
    if not tag_ids:
        return
    result = await db.execute(select(BlogTag.id).where(col(BlogTag.id).in_(tag_ids)))
    for tag_id in dict.fromkeys(result.scalars().all()):
        db.add(BlogPostTag(post_id=post_id, tag_id=tag_id))


async def _post_detail(db: AsyncSession, post_id: str) -> dict[str, Any]:
    post, author, category = (
        await db.execute(_post_select().where(col(BlogPost.id) == post_id))
    ).one()
    tags = await _load_post_tags(db, [post_id])
    return _serialize_post(post, author, category, tags.get(post_id, []))


async def create_post(
    db: AsyncSession,
    author: User,
    title: str,
    content: str,
    slug: str | None = None,
    excerpt: str | None = None,
    summary: str | None = None,
    tldr: str | None = None,
    category_id: str | None = None,
    featured_image: str | None = None,
    published: bool = False,
    tag_ids: list[str] | None = None,
) -> dict[str, Any]:
    if category_id is not None:
        await get_category(db, category_id)

    post = BlogPost(
        title=title,
        slug=await _unique_post_slug(db, _resolve_slug(title, slug)),
        content=content,
        excerpt=excerpt,
        summary=summary,
        tldr=tldr,
        author_id=author.id,
        category_id=category_id,
        featured_image=featured_image or DEFAULT_BLOG_IMAGE,
        published=published,
        published_at=utc_now() if published else None,
    )
    db.add(post)
    await db.flush()
    if tag_ids:
        await _replace_post_tags(db, post.id, tag_ids)
    await db.commit()

    logger.info(
        "Blog post created",
        extra={"event": LogEvent.BLOG_POST_CREATED, "post_id": post.id},
    )
    return await _post_detail(db, post.id)


async def _get_manageable_post(
    db: AsyncSession, post_id: str, user: User, action: str
) -> BlogPost:
    post = await db.get(BlogPost, post_id)
    if post is None:
        raise BlogPostNotFoundError()
    if not _can_manage(post, user):
        raise ForbiddenError(f"Not authorized to {action} this post")
    return post


async def update_post(
    db: AsyncSession, post_id: str, user: User, changes: dict[str, Any]
) -> dict[str, Any]:
    post = await _get_manageable_post(db, post_id, user, "update")

    tag_ids = changes.pop("tag_ids", None)
    slug = changes.pop("slug", None)
    if slug is not None:
        post.slug = await _unique_post_slug(
            db, _resolve_slug(post.title, slug), exclude_id=post.id
        )
    if changes.get("category_id") is not None:
        await get_category(db, changes["category_id"])

    for field, value in changes.items():
        setattr(post, field, value)

    # published_at records the first publish only
    if post.published and post.published_at is None:
        post.published_at = utc_now()
    post.updated_at = utc_now()

    if tag_ids is not None:
        await _replace_post_tags(db, post.id, tag_ids)

    await db.commit()
    return await _post_detail(db, post.id)


async def delete_post(db: AsyncSession, post_id: str, user: User) -> None:
    await _get_manageable_post(db, post_id, user, "delete")
    await db.execute(delete(BlogPostTag).where(col(BlogPostTag.post_id) == post_id))
    await db.execute(delete(BlogPost).where(col(BlogPost.id) == post_id))
    await db.commit()
