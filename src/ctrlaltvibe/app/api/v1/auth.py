"""Authentication API endpoints.

Endpoints:
- POST /api/register - Create account and log in
- POST /api/login - Login with username/password
- POST /api/logout - Logout (revoke session)
- GET /api/user - Current user
"""

from fastapi import APIRouter, Response
from pydantic import BaseModel, EmailStr, Field

from ctrlaltvibe.app.api.v1.dependencies import CurrentUser, DbSession, SessionCookie
from ctrlaltvibe.app.config import get_settings
from ctrlaltvibe.core.schemas import UserResponse
from ctrlaltvibe.infra import clear_session_cache
from ctrlaltvibe.services import user_service
from ctrlaltvibe.services.session_service import SessionService

router = APIRouter(tags=["auth"])

SESSION_COOKIE = "session"


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    """Request schema for login."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


def _set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session_id,
        httponly=True,
        samesite="lax",
        secure=get_settings().cookie.secure,
        path="/",
        max_age=SessionService.DEFAULT_SESSION_TTL_SECONDS,
    )


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest, response: Response, db: DbSession
) -> UserResponse:
    """Create an account and start a session. 409 on taken username/email."""
    user = await user_service.register_user(
        db, body.username, str(body.email), body.password
    )
    session = await SessionService.create(db, user.id)
    _set_session_cookie(response, session.id)
    return UserResponse.model_validate(user)


@router.post("/login")
async def login(body: LoginRequest, response: Response, db: DbSession) -> UserResponse:
    """Login with username and password.

    On failure, returns 401 Unauthorized.
    On too many failures, returns 429 Too Many Requests.
    """
    user = await user_service.authenticate(db, body.username, body.password)
    session = await SessionService.create(db, user.id)
    _set_session_cookie(response, session.id)
    return UserResponse.model_validate(user)


@router.post("/logout")
async def logout(
    response: Response, db: DbSession, session: SessionCookie = None
) -> dict[str, str]:
    """Logout by revoking session and clearing cookie.

    Always succeeds (even if no session cookie present).
    """
    if session:
        await SessionService.revoke(db, session)
        clear_session_cache(session)

    response.delete_cookie(key=SESSION_COOKIE, path="/")
    return {"message": "Logged out"}


@router.get("/user")
async def current_user(user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(user)
