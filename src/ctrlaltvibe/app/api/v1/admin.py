"""Admin API endpoints. Every route requires the admin role."""

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from ctrlaltvibe.app.api.v1.dependencies import AdminUser, DbSession
from ctrlaltvibe.core.schemas import UserResponse
from ctrlaltvibe.services import admin_service, comment_service, project_service

router = APIRouter(prefix="/admin", tags=["admin"])


class RoleRequest(BaseModel):
    role: str


@router.get("/users", response_model=list[UserResponse])
async def list_users(db: DbSession, _admin: AdminUser) -> list[UserResponse]:
    return await admin_service.list_users(db)


@router.get("/projects")
async def list_projects(db: DbSession, _admin: AdminUser) -> list[dict[str, Any]]:
    return await admin_service.list_projects(db)


@router.get("/comments")
async def list_comments(db: DbSession, _admin: AdminUser) -> list[dict[str, Any]]:
    """Latest 20 comments with author and project."""
    return await admin_service.list_recent_comments(db)


@router.delete("/users/{user_id}")
async def delete_user(user_id: str, db: DbSession, admin: AdminUser) -> dict[str, bool]:
    await admin_service.delete_user(db, user_id, admin)
    return {"success": True}


@router.delete("/projects/{project_id}")
async def delete_project(project_id: str, db: DbSession, admin: AdminUser) -> dict[str, bool]:
    await project_service.delete_project(db, project_id, admin)
    return {"success": True}


@router.delete("/comments/{comment_id}")
async def delete_comment(comment_id: str, db: DbSession, _admin: AdminUser) -> dict[str, bool]:
    await comment_service.delete_comment(db, comment_id)
    return {"success": True}


@router.put("/projects/{project_id}/feature")
async def feature_project(project_id: str, db: DbSession, _admin: AdminUser) -> dict[str, Any]:
    project = await project_service.feature_project(db, project_id)
    return {"success": True, "project_id": project.id, "featured": project.featured}


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def set_role(
    user_id: str, body: RoleRequest, db: DbSession, _admin: AdminUser
) -> UserResponse:
    user = await admin_service.set_user_role(db, user_id, body.role)
    return UserResponse.model_validate(user)
