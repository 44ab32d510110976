"""Project API endpoints.

Endpoints:
- GET /api/projects - Paged feed (filter, search, sort)
- GET /api/projects/featured, /api/projects/trending
- GET/PATCH/DELETE /api/projects/{id}
- POST /api/projects
- POST/DELETE /api/projects/{id}/like, /api/projects/{id}/bookmark
- POST /api/projects/{id}/share
- GET /api/projects/{id}/evaluation
"""

from typing import Annotated, Any
from urllib.parse import urlparse

from fastapi import APIRouter, Query
from pydantic import AfterValidator, BaseModel, Field

from ctrlaltvibe.app.api.v1.dependencies import CurrentUser, DbSession, OptionalUser, Publisher
from ctrlaltvibe.core.domain import ProjectSort
from ctrlaltvibe.core.schemas import ProjectDetail, ProjectListResponse, ProjectSummary
from ctrlaltvibe.services import project_feed, project_service, vibe_check_service

router = APIRouter(prefix="/projects", tags=["projects"])


# =============================================================================
# Request/Response Models
# =============================================================================


def _require_http_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be a valid URL")
    return value


def _require_image_url(value: str | None) -> str | None:
    """Absolute http(s) URL or a site-relative path like /images/x.png."""
    if not value:
        return value
    if value.startswith("/") and not value.startswith("//"):
        return value
    return _require_http_url(value)


ProjectUrl = Annotated[str, Field(max_length=512), AfterValidator(_require_http_url)]
ImageUrl = Annotated[str, Field(max_length=512), AfterValidator(_require_image_url)]


class GalleryImageInput(BaseModel):
    image_url: ImageUrl
    caption: str | None = Field(default=None, max_length=255)
    display_order: int | None = None


class CreateProjectRequest(BaseModel):
    title: str = Field(min_length=3, max_length=100)
    description: str = Field(min_length=20, max_length=500)
    long_description: str | None = None
    project_url: ProjectUrl
    image_url: ImageUrl | None = None
    vibe_coding_tool: str | None = Field(default=None, max_length=100)
    is_private: bool = False
    tags: list[str] = Field(default_factory=list)
    gallery_images: list[GalleryImageInput] = Field(default_factory=list)


class UpdateProjectRequest(BaseModel):
    """Partial update: only fields present in the body are applied."""

    title: str | None = Field(default=None, min_length=3, max_length=100)
    description: str | None = Field(default=None, min_length=20, max_length=500)
    long_description: str | None = None
    project_url: ProjectUrl | None = None
    image_url: ImageUrl | None = None
    vibe_coding_tool: str | None = Field(default=None, max_length=100)
    is_private: bool | None = None
    tags: list[str] | None = None
    gallery_images: list[GalleryImageInput] | None = None


class ShareRequest(BaseModel):
    platform: str = Field(min_length=2, max_length=50)


class ProjectEnvelope(BaseModel):
    project: ProjectDetail


class FeaturedResponse(BaseModel):
    project: ProjectSummary | None


class TrendingResponse(BaseModel):
    projects: list[ProjectSummary]


class LikeResponse(BaseModel):
    success: bool = True
    likes_count: int


class ShareResponse(BaseModel):
    success: bool = True
    shares_count: int


_REQUIRED_FIELDS = ("title", "description", "project_url", "is_private")


def _uid(user) -> str | None:
    return user.id if user else None


# =============================================================================
# Feeds
# =============================================================================


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    db: DbSession,
    user: OptionalUser,
    page: Annotated[int, Query()] = 1,
    limit: Annotated[int, Query()] = 6,
    tag: str | None = None,
    search: str | None = None,
    sort: str | None = None,
    author: Annotated[str | None, Query(alias="user")] = None,
) -> ProjectListResponse:
    """Paged project feed. `user` filters by author username.

    Unknown `sort` values (the client sends `featured`, `latest`, ...) get the
    default order: featured first, then newest.
    """
    page, limit = project_feed.clamp_page(page, limit)
    return await project_feed.cached_list_projects(
        db,
        page=page,
        limit=limit,
        tag=tag or None,
        search=search or None,
        sort=ProjectSort.parse(sort),
        user=author or None,
        current_user_id=_uid(user),
    )


@router.get("/featured", response_model=FeaturedResponse)
async def featured_project(db: DbSession, user: OptionalUser) -> FeaturedResponse:
    project = await project_feed.cached_featured_project(db, current_user_id=_uid(user))
    return FeaturedResponse(project=project)


@router.get("/trending", response_model=TrendingResponse)
async def trending_projects(
    db: DbSession,
    user: OptionalUser,
    limit: Annotated[int, Query()] = 4,
) -> TrendingResponse:
    projects = await project_feed.cached_trending_projects(
        db, limit=project_feed.clamp_limit(limit), current_user_id=_uid(user)
    )
    return TrendingResponse(projects=projects)


# =============================================================================
# CRUD
# =============================================================================


@router.post("", response_model=ProjectEnvelope, status_code=201)
async def create_project(
    body: CreateProjectRequest, db: DbSession, user: CurrentUser
) -> ProjectEnvelope:
    project = await project_service.create_project(
        db,
        author=user,
        title=body.title,
        description=body.description,
        project_url=body.project_url,
        long_description=body.long_description,
        image_url=body.image_url,
        vibe_coding_tool=body.vibe_coding_tool,
        is_private=body.is_private,
        tags=body.tags,
        gallery_images=[image.model_dump() for image in body.gallery_images],
    )
    return ProjectEnvelope(project=project)


@router.get("/{project_id}", response_model=ProjectEnvelope)
async def get_project(project_id: str, db: DbSession, user: OptionalUser) -> ProjectEnvelope:
    """Project detail. Counts as a view; private projects 404 for non-owners."""
    project = await project_service.get_project_detail(db, project_id, user)
    return ProjectEnvelope(project=project)


@router.patch("/{project_id}", response_model=ProjectEnvelope)
async def update_project(
    project_id: str, body: UpdateProjectRequest, db: DbSession, user: CurrentUser
) -> ProjectEnvelope:
    changes: dict[str, Any] = body.model_dump(exclude_unset=True)
    for field in _REQUIRED_FIELDS:
        if changes.get(field, "") is None:
            changes.pop(field)
    if body.gallery_images is not None:
        changes["gallery_images"] = [image.model_dump() for image in body.gallery_images]

    project = await project_service.update_project(db, project_id, user, changes)
    return ProjectEnvelope(project=project)


@router.delete("/{project_id}")
async def delete_project(project_id: str, db: DbSession, user: CurrentUser) -> dict[str, bool]:
    await project_service.delete_project(db, project_id, user)
    return {"success": True}


# =============================================================================
# Interactions
# =============================================================================


@router.post("/{project_id}/like", response_model=LikeResponse)
async def like_project(
    project_id: str, db: DbSession, user: CurrentUser, publisher: Publisher
) -> LikeResponse:
    count = await project_service.like_project(db, project_id, user, publisher)
    return LikeResponse(likes_count=count)


@router.delete("/{project_id}/like", response_model=LikeResponse)
async def unlike_project(project_id: str, db: DbSession, user: CurrentUser) -> LikeResponse:
    count = await project_service.unlike_project(db, project_id, user)
    return LikeResponse(likes_count=count)


@router.post("/{project_id}/bookmark")
async def bookmark_project(
    project_id: str, db: DbSession, user: CurrentUser
) -> dict[str, bool]:
    await project_service.bookmark_project(db, project_id, user)
    return {"success": True}


@router.delete("/{project_id}/bookmark")
async def unbookmark_project(
    project_id: str, db: DbSession, user: CurrentUser
) -> dict[str, bool]:
    await project_service.unbookmark_project(db, project_id, user)
    return {"success": True}


@router.post("/{project_id}/share", response_model=ShareResponse)
async def share_project(
    project_id: str, body: ShareRequest, db: DbSession, user: OptionalUser
) -> ShareResponse:
    count = await project_service.share_project(db, project_id, body.platform, user)
    return ShareResponse(shares_count=count)


@router.get("/{project_id}/evaluation")
async def project_evaluation(
    project_id: str, db: DbSession, user: OptionalUser
) -> dict[str, Any]:
    """Stored vibe-check evaluation for a project, or 404."""
    return await vibe_check_service.get_project_evaluation(db, project_id, user)
