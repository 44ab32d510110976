"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from ctrlaltvibe import __version__
from ctrlaltvibe.app.api.v1 import (
    admin_router,
    auth_router,
    blog_router,
    comments_router,
    notifications_router,
    profile_router,
    projects_router,
    tags_router,
    vibe_check_router,
)
from ctrlaltvibe.app.config import get_settings
from ctrlaltvibe.app.logging import setup_logging
from ctrlaltvibe.app.metrics import get_metrics_response, setup_metrics
from ctrlaltvibe.app.middleware import LoggingMiddleware
from ctrlaltvibe.core.errors import (
    ErrorCode,
    ErrorDetail,
    ErrorResponse,
    TooManyRequestsError,
    VibeError,
)
from ctrlaltvibe.core.logging_schema import LogEvent
from ctrlaltvibe.infra import (
    close_db,
    close_redis,
    get_engine,
    get_redis,
    get_session_factory,
    init_db,
    init_redis,
)
from ctrlaltvibe.infra.evaluator import close_evaluator
from ctrlaltvibe.services import user_service

setup_logging()
logger = logging.getLogger(__name__)


async def _ensure_admin_user() -> None:
    """Create or reset the bootstrap admin from ADMIN_ settings."""
    async with get_session_factory()() as session:
        await user_service.ensure_admin_user(session)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    if settings.metrics.enabled:
        setup_metrics(settings.metrics.multiproc_dir)

    await init_db()
    await init_redis()
    await _ensure_admin_user()

    logger.info("Starting application", extra={"event": LogEvent.APP_STARTED})

    yield

    logger.info("Shutting down application", extra={"event": LogEvent.APP_STOPPED})
    await close_evaluator()
    await close_redis()
    await close_db()


app = FastAPI(title="Ctrl Alt Vibe", version=__version__, lifespan=lifespan)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(VibeError)
async def vibe_error_handler(request: Request, exc: VibeError) -> JSONResponse:
    """Handle VibeError exceptions."""
    headers = None
    if isinstance(exc, TooManyRequestsError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
        headers=headers,
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error",
        extra={"event": LogEvent.UNHANDLED_ERROR, "path": request.url.path},
    )
    body = ErrorResponse(
        error=ErrorDetail(code=ErrorCode.INTERNAL_ERROR.value, message="Internal server error")
    )
    return JSONResponse(status_code=500, content=body.model_dump())


for _router in (
    auth_router,
    projects_router,
    comments_router,
    notifications_router,
    tags_router,
    blog_router,
    vibe_check_router,
    profile_router,
    admin_router,
):
    app.include_router(_router, prefix="/api")


async def _ping_postgres() -> None:
    async with get_engine().connect() as conn:
        await conn.execute(text("SELECT 1"))


async def _ping_redis() -> None:
    await get_redis().ping()


async def _probe(ping) -> str:
    try:
        await ping()
    except RuntimeError:
        # Raised by get_engine()/get_redis() before init
        return "not initialized"
    except Exception as exc:
        return f"error: {exc}"
    return "connected"


@app.get("/health")
async def health() -> dict:
    """Liveness plus dependency status; "degraded" when a configured service is down."""
    postgres = await _probe(_ping_postgres)
    redis = await _probe(_ping_redis) if get_settings().redis.enabled else "disabled"

    services = {"postgres": postgres, "redis": redis}
    healthy = all(state in ("connected", "disabled") for state in services.values())
    return {
        "status": "ok" if healthy else "degraded",
        "version": __version__,
        "services": services,
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return get_metrics_response()
