"""API v1 module."""

from ctrlaltvibe.app.api.v1.admin import router as admin_router
from ctrlaltvibe.app.api.v1.auth import router as auth_router
from ctrlaltvibe.app.api.v1.blog import router as blog_router
from ctrlaltvibe.app.api.v1.comments import router as comments_router
from ctrlaltvibe.app.api.v1.notifications import router as notifications_router
from ctrlaltvibe.app.api.v1.profile import router as profile_router
from ctrlaltvibe.app.api.v1.projects import router as projects_router
from ctrlaltvibe.app.api.v1.tags import router as tags_router
from ctrlaltvibe.app.api.v1.vibe_check import router as vibe_check_router

__all__ = [
    "admin_router",
    "auth_router",
    "blog_router",
    "comments_router",
    "notifications_router",
    "profile_router",
    "projects_router",
    "tags_router",
    "vibe_check_router",
]
