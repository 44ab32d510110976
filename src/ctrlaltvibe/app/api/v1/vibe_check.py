"""Vibe check API endpoints.

Endpoints:
- POST /api/vibe-check - Evaluate an idea (reCAPTCHA protected)
- GET /api/vibe-check/{id}
- POST /api/vibe-check/{id}/share - Get or create the public share link
- GET /api/vibe-check/share/{share_id} - Public view
- POST /api/vibe-check/{id}/convert-to-project
- POST /api/vibe-check/{id}/convert-to-project-evaluation
- GET /api/vibe-check-count
"""

from typing import Annotated, Any

from fastapi import APIRouter, Request
from pydantic import BaseModel, BeforeValidator, EmailStr, Field

from ctrlaltvibe.app.api.v1.dependencies import (
    CurrentUser,
    DbSession,
    Evaluator,
    OptionalUser,
    Verifier,
)
from ctrlaltvibe.services import vibe_check_service

router = APIRouter(tags=["vibe-check"])


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class VibeCheckRequest(BaseModel):
    email: Annotated[EmailStr | None, BeforeValidator(_blank_to_none)] = None
    website_url: Annotated[str | None, BeforeValidator(_blank_to_none)] = Field(
        default=None, max_length=2048
    )
    project_description: str = Field(min_length=10)
    recaptcha_token: str = Field(min_length=1)


class ConvertToProjectRequest(BaseModel):
    is_private: bool = False


class ConvertToEvaluationRequest(BaseModel):
    project_id: str = Field(min_length=1)


def _share_url(request: Request, share_id: str) -> str:
    return f"{request.base_url}vibe-check/share/{share_id}"


@router.post("/vibe-check", status_code=201)
async def create_vibe_check(
    body: VibeCheckRequest,
    request: Request,
    db: DbSession,
    user: OptionalUser,
    verifier: Verifier,
    evaluator: Evaluator,
) -> dict[str, Any]:
    """Run the AI evaluation. 400 on failed reCAPTCHA, 503 if the AI call fails."""
    vibe_check = await vibe_check_service.create_vibe_check(
        db,
        verifier,
        evaluator,
        project_description=body.project_description,
        recaptcha_token=body.recaptcha_token,
        email=str(body.email) if body.email else None,
        website_url=body.website_url,
        user=user,
    )
    return {
        "vibe_check_id": vibe_check.id,
        "evaluation": vibe_check.evaluation,
        "share_id": vibe_check.share_id,
        "share_url": _share_url(request, vibe_check.share_id),
    }


@router.get("/vibe-check-count")
async def vibe_check_count(db: DbSession) -> dict[str, int]:
    return {"count": await vibe_check_service.count_vibe_checks(db)}


@router.get("/vibe-check/share/{share_id}")
async def shared_vibe_check(share_id: str, db: DbSession) -> dict[str, Any]:
    return await vibe_check_service.get_shared_vibe_check(db, share_id)


@router.get("/vibe-check/{vibe_check_id}")
async def get_vibe_check(vibe_check_id: str, db: DbSession) -> dict[str, Any]:
    vibe_check = await vibe_check_service.get_vibe_check(db, vibe_check_id)
    return vibe_check_service.serialize_vibe_check(vibe_check)


@router.post("/vibe-check/{vibe_check_id}/share")
async def share_vibe_check(
    vibe_check_id: str, request: Request, db: DbSession
) -> dict[str, str]:
    share_id = await vibe_check_service.ensure_share_id(db, vibe_check_id)
    return {"share_id": share_id, "share_url": _share_url(request, share_id)}


@router.post("/vibe-check/{vibe_check_id}/convert-to-project", status_code=201)
async def convert_to_project(
    vibe_check_id: str,
    db: DbSession,
    user: CurrentUser,
    body: ConvertToProjectRequest | None = None,
) -> dict[str, str]:
    project_id = await vibe_check_service.convert_to_project(
        db, vibe_check_id, user, is_private=body.is_private if body else False
    )
    return {"message": "Vibe check converted to project", "project_id": project_id}


@router.post("/vibe-check/{vibe_check_id}/convert-to-project-evaluation", status_code=201)
async def convert_to_project_evaluation(
    vibe_check_id: str,
    body: ConvertToEvaluationRequest,
    db: DbSession,
    user: CurrentUser,
) -> dict[str, str]:
    await vibe_check_service.convert_to_project_evaluation(
        db, vibe_check_id, body.project_id, user
    )
    return {
        "message": "Vibe check attached to project",
        "project_id": body.project_id,
    }
