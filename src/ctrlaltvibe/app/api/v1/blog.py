"""Blog CMS API endpoints.

Reads are public (drafts only for their author or admins). Category and
tag management is admin only; any logged-in user may write posts.
"""

from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from ctrlaltvibe.app.api.v1.dependencies import AdminUser, CurrentUser, DbSession, OptionalUser
from ctrlaltvibe.app.config import get_settings
from ctrlaltvibe.services import blog_service

router = APIRouter(prefix="/blog", tags=["blog"])

_default_limit = get_settings().pagination.default_limit


# =============================================================================
# Request/Response Models
# =============================================================================


class CategoryResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: str
    name: str
    slug: str
    description: str | None
    created_at: datetime
    updated_at: datetime


class CreateCategoryRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    slug: str | None = Field(default=None, max_length=100)
    description: str | None = None


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    slug: str | None = Field(default=None, max_length=100)
    description: str | None = None


class BlogTagResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: str
    name: str
    slug: str


class TagRequest(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    slug: str | None = Field(default=None, max_length=50)


class UpdateTagRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    slug: str | None = Field(default=None, max_length=50)


class CreatePostRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    slug: str | None = Field(default=None, max_length=200)
    content: str = Field(min_length=1)
    excerpt: str | None = None
    summary: str | None = None
    tldr: str | None = None
    category_id: str | None = None
    featured_image: str | None = Field(default=None, max_length=2048)
    published: bool = False
    tag_ids: list[str] = Field(default_factory=list)


class UpdatePostRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    slug: str | None = Field(default=None, max_length=200)
    content: str | None = Field(default=None, min_length=1)
    excerpt: str | None = None
    summary: str | None = None
    tldr: str | None = None
    category_id: str | None = None
    featured_image: str | None = Field(default=None, max_length=2048)
    published: bool | None = None
    tag_ids: list[str] | None = None


# =============================================================================
# Categories
# =============================================================================


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(db: DbSession) -> list[CategoryResponse]:
    categories = await blog_service.list_categories(db)
    return [CategoryResponse.model_validate(c) for c in categories]


@router.get("/categories/slug/{slug}", response_model=CategoryResponse)
async def get_category_by_slug(slug: str, db: DbSession) -> CategoryResponse:
    return CategoryResponse.model_validate(await blog_service.get_category_by_slug(db, slug))


@router.get("/categories/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: str, db: DbSession) -> CategoryResponse:
    return CategoryResponse.model_validate(await blog_service.get_category(db, category_id))


@router.post("/categories", response_model=CategoryResponse, status_code=201)
async def create_category(
    body: CreateCategoryRequest, db: DbSession, _admin: AdminUser
) -> CategoryResponse:
    category = await blog_service.create_category(
        db, body.name, slug=body.slug, description=body.description
    )
    return CategoryResponse.model_validate(category)


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str, body: UpdateCategoryRequest, db: DbSession, _admin: AdminUser
) -> CategoryResponse:
    category = await blog_service.update_category(
        db, category_id, body.model_dump(exclude_unset=True)
    )
    return CategoryResponse.model_validate(category)


@router.delete("/categories/{category_id}")
async def delete_category(category_id: str, db: DbSession, _admin: AdminUser) -> dict[str, bool]:
    await blog_service.delete_category(db, category_id)
    return {"success": True}


# =============================================================================
# Tags
# =============================================================================


@router.get("/tags", response_model=list[BlogTagResponse])
async def list_tags(db: DbSession) -> list[BlogTagResponse]:
    return [BlogTagResponse.model_validate(t) for t in await blog_service.list_tags(db)]


@router.post("/tags", response_model=BlogTagResponse, status_code=201)
async def create_tag(body: TagRequest, db: DbSession, _admin: AdminUser) -> BlogTagResponse:
    tag = await blog_service.create_tag(db, body.name, slug=body.slug)
    return BlogTagResponse.model_validate(tag)


@router.patch("/tags/{tag_id}", response_model=BlogTagResponse)
async def update_tag(
    tag_id: str, body: UpdateTagRequest, db: DbSession, _admin: AdminUser
) -> BlogTagResponse:
    tag = await blog_service.update_tag(db, tag_id, body.model_dump(exclude_unset=True))
    return BlogTagResponse.model_validate(tag)


@router.delete("/tags/{tag_id}")
async def delete_tag(tag_id: str, db: DbSession, _admin: AdminUser) -> dict[str, bool]:
    await blog_service.delete_tag(db, tag_id)
    return {"success": True}


# =============================================================================
# Posts
# =============================================================================


@router.get("/posts")
async def list_posts(
    db: DbSession,
    user: OptionalUser,
    page: Annotated[int, Query()] = 1,
    limit: Annotated[int, Query()] = _default_limit,
    category: str | None = None,
    tag: str | None = None,
    author: str | None = None,
    search: str | None = None,
    include_drafts: bool = False,
) -> dict[str, Any]:
    """Published posts, newest first: {posts, total}.

    `category`, `tag` and `author` are ids. Drafts are included only for
    admins who ask for them.
    """
    return await blog_service.list_posts(
        db,
        page=page,
        limit=limit,
        category_id=category or None,
        tag_id=tag or None,
        author_id=author or None,
        search=search or None,
        published_only=not (include_drafts and user is not None and user.is_admin),
    )


@router.get("/posts/slug/{slug}")
async def get_post_by_slug(slug: str, db: DbSession, user: OptionalUser) -> dict[str, Any]:
    return {"post": await blog_service.get_post_by_slug(db, slug, user)}


@router.get("/posts/{post_id}")
async def get_post(post_id: str, db: DbSession, user: OptionalUser) -> dict[str, Any]:
    return {"post": await blog_service.get_post(db, post_id, user)}


@router.post("/posts", status_code=201)
async def create_post(body: CreatePostRequest, db: DbSession, user: CurrentUser) -> dict[str, Any]:
    post = await blog_service.create_post(
        db,
        author=user,
        title=body.title,
        content=body.content,
        slug=body.slug,
        excerpt=body.excerpt,
        summary=body.summary,
        tldr=body.tldr,
        category_id=body.category_id,
        featured_image=body.featured_image,
        published=body.published,
        tag_ids=body.tag_ids,
    )
    return {"post": post}


@router.patch("/posts/{post_id}")
async def update_post(
    post_id: str, body: UpdatePostRequest, db: DbSession, user: CurrentUser
) -> dict[str, Any]:
    changes = body.model_dump(exclude_unset=True)
    for field in ("title", "content", "published"):
        if changes.get(field, "") is None:
            changes.pop(field)
    return {"post": await blog_service.update_post(db, post_id, user, changes)}


@router.delete("/posts/{post_id}")
async def delete_post(post_id: str, db: DbSession, user: CurrentUser) -> dict[str, bool]:
    await blog_service.delete_post(db, post_id, user)
    return {"success": True}
