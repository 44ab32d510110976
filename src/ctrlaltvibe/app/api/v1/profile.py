"""Profile and user directory API endpoints.

Endpoints:
- GET/PATCH /api/profile
- GET/POST /api/profile/skills, DELETE /api/profile/skills/{id}
- GET /api/profile/skill-categories
- GET /api/profile/activity, /api/profile/liked
- GET /api/users/{username}
- GET /api/profiles
"""

from typing import Annotated, Any

from fastapi import APIRouter, Query
from pydantic import BaseModel, EmailStr, Field

from ctrlaltvibe.app.api.v1.dependencies import CurrentUser, DbSession, OptionalUser
from ctrlaltvibe.app.config import get_settings
from ctrlaltvibe.core.errors import UserNotFoundError
from ctrlaltvibe.core.schemas import (
    ActivityResponse,
    ProjectSummary,
    PublicUserResponse,
    SkillResponse,
    UserResponse,
)
from ctrlaltvibe.services import activity_service, project_feed, user_service

router = APIRouter(tags=["profile"])

_default_limit = get_settings().pagination.default_limit

PUBLIC_PROFILE_ACTIVITY_LIMIT = 5


class ProfileResponse(BaseModel):
    user: UserResponse | None
    projects: list[ProjectSummary]


class UpdateProfileRequest(BaseModel):
    email: EmailStr | None = None
    bio: str | None = Field(default=None, max_length=300)
    avatar_url: str | None = Field(default=None, max_length=512)


class AddSkillRequest(BaseModel):
    category: str = Field(min_length=1, max_length=50)
    skill: str = Field(min_length=1, max_length=50)


class PublicProfileResponse(BaseModel):
    user: PublicUserResponse
    projects: list[ProjectSummary]
    skills: list[SkillResponse]
    activities: list[ActivityResponse]


# =============================================================================
# Current user
# =============================================================================


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(db: DbSession, user: OptionalUser) -> ProfileResponse:
    """Own profile with all own projects (private included)."""
    if user is None:
        return ProfileResponse(user=None, projects=[])

    projects = await project_feed.get_projects_by_author(db, user.id, user.id)
    return ProfileResponse(user=UserResponse.model_validate(user), projects=projects)


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    body: UpdateProfileRequest, db: DbSession, user: CurrentUser
) -> UserResponse:
    updated = await user_service.update_profile(
        db,
        user,
        email=str(body.email) if body.email else None,
        bio=body.bio,
        avatar_url=body.avatar_url,
    )
    return UserResponse.model_validate(updated)


@router.get("/profile/skills", response_model=list[SkillResponse])
async def list_skills(db: DbSession, user: OptionalUser) -> list[SkillResponse]:
    if user is None:
        return []
    skills = await user_service.list_skills(db, user.id)
    return [SkillResponse.model_validate(skill) for skill in skills]


@router.post("/profile/skills", response_model=SkillResponse, status_code=201)
async def add_skill(body: AddSkillRequest, db: DbSession, user: CurrentUser) -> SkillResponse:
    skill = await user_service.add_skill(db, user.id, body.category, body.skill)
    return SkillResponse.model_validate(skill)


@router.delete("/profile/skills/{skill_id}")
async def remove_skill(skill_id: str, db: DbSession, user: CurrentUser) -> dict[str, bool]:
    await user_service.remove_skill(db, skill_id, user.id)
    return {"success": True}


@router.get("/profile/skill-categories")
async def skill_categories(db: DbSession, user: CurrentUser) -> list[str]:
    return await user_service.list_skill_categories(db, user.id)


@router.get("/profile/activity", response_model=list[ActivityResponse])
async def activity(
    db: DbSession,
    user: OptionalUser,
    limit: Annotated[int, Query()] = _default_limit,
) -> list[ActivityResponse]:
    if user is None:
        return []
    return await activity_service.list_activities(
        db, user.id, limit=project_feed.clamp_limit(limit)
    )


@router.get("/profile/liked", response_model=list[ProjectSummary])
async def liked_projects(db: DbSession, user: OptionalUser) -> list[ProjectSummary]:
    if user is None:
        return []
    return await project_feed.get_user_liked_projects(db, user.id, user.id)


# =============================================================================
# Other users
# =============================================================================


@router.get("/users/{username}", response_model=PublicProfileResponse)
async def public_profile(
    username: str, db: DbSession, viewer: OptionalUser
) -> PublicProfileResponse:
    user = await user_service.get_user_by_username(db, username)
    if user is None:
        raise UserNotFoundError()

    viewer_id = viewer.id if viewer else None
    projects = await project_feed.get_projects_by_author(db, user.id, viewer_id)
    skills = await user_service.list_skills(db, user.id)
    activities = await activity_service.list_activities(
        db, user.id, limit=PUBLIC_PROFILE_ACTIVITY_LIMIT
    )
    return PublicProfileResponse(
        user=PublicUserResponse.model_validate(user),
        projects=projects,
        skills=[SkillResponse.model_validate(skill) for skill in skills],
        activities=activities,
    )


@router.get("/profiles")
async def list_profiles(
    db: DbSession, limit: Annotated[int, Query()] = 20
) -> list[dict[str, Any]]:
    return await user_service.list_profiles(db, project_feed.clamp_limit(limit))
