"""Notification API endpoints.

Endpoints:
- GET /api/notifications - List (newest first, enriched)
- GET /api/notifications/count - Unread count (0 when anonymous)
- PATCH /api/notifications - Mark all as read
- PATCH /api/notifications/{id} - Mark one as read
- DELETE /api/notifications/{id}
- GET /api/notifications/stream - SSE relay of the user's Redis channel

Configuration via SSEConfig (SSE_ env prefix).
"""

import asyncio
import logging
from typing import Annotated, Any, AsyncGenerator

from fastapi import APIRouter, Query, Request
from fastapi.responses import StreamingResponse

from ctrlaltvibe.app.api.v1.dependencies import CurrentUser, DbSession, OptionalUser
from ctrlaltvibe.app.config import get_settings
from ctrlaltvibe.app.metrics.collector import SSE_ACTIVE_CONNECTIONS, SSE_MESSAGES_TOTAL
from ctrlaltvibe.core.errors import ServiceUnavailableError
from ctrlaltvibe.core.logging_schema import LogEvent
from ctrlaltvibe.infra import ChannelSubscriber, get_redis, is_redis_available, notification_channel
from ctrlaltvibe.services import notification_service, project_feed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

_settings = get_settings()
_sse_config = _settings.sse


@router.get("")
async def list_notifications(
    db: DbSession,
    user: CurrentUser,
    limit: Annotated[int, Query()] = 20,
    offset: Annotated[int, Query()] = 0,
    unread_only: bool = False,
) -> dict[str, Any]:
    return await notification_service.get_user_notifications(
        db,
        user.id,
        limit=project_feed.clamp_limit(limit),
        offset=max(offset, 0),
        unread_only=unread_only,
    )


@router.get("/count")
async def unread_count(db: DbSession, user: OptionalUser) -> dict[str, int]:
    if user is None:
        return {"count": 0}
    return {"count": await notification_service.get_unread_count(db, user.id)}


@router.patch("")
async def mark_all_read(db: DbSession, user: CurrentUser) -> dict[str, Any]:
    updated = await notification_service.mark_all_as_read(db, user.id)
    return {"success": True, "updated": updated}


@router.patch("/{notification_id}")
async def mark_read(notification_id: str, db: DbSession, user: CurrentUser) -> dict[str, bool]:
    await notification_service.mark_as_read(db, notification_id, user.id)
    return {"success": True}


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str, db: DbSession, user: CurrentUser
) -> dict[str, bool]:
    await notification_service.delete_notification(db, notification_id, user.id)
    return {"success": True}


async def _event_generator(request: Request, user_id: str) -> AsyncGenerator[str, None]:
    """Relay '{notify_prefix}:{user_id}' as SSE.

    Yields:
    - connected: once, on subscribe
    - notification: JSON payload published by notification_service
    - heartbeat: every SSE_HEARTBEAT_INTERVAL seconds
    """
    subscriber = ChannelSubscriber(get_redis())
    channel = notification_channel(user_id)

    logger.info(
        "User connected",
        extra={"event": LogEvent.SSE_CONNECTED, "user_id": user_id, "channel": channel},
    )

    SSE_ACTIVE_CONNECTIONS.inc()
    try:
        await subscriber.subscribe(channel)

        loop = asyncio.get_running_loop()
        last_heartbeat = loop.time()

        yield "event: connected\ndata: {}\n\n"
        SSE_MESSAGES_TOTAL.labels(event_type="connected").inc()

        while True:
            if await request.is_disconnected():
                break

            try:
                payload = await subscriber.get_message(timeout=1.0)
            except Exception as e:
                logger.warning(
                    "Redis read error",
                    extra={"event": LogEvent.REDIS_ERROR, "user_id": user_id, "error": str(e)},
                )
                await asyncio.sleep(1)
                continue

            if payload is not None:
                yield f"event: notification\ndata: {payload}\n\n"
                SSE_MESSAGES_TOTAL.labels(event_type="notification").inc()

            now = loop.time()
            if now - last_heartbeat >= _sse_config.heartbeat_interval:
                yield "event: heartbeat\ndata: {}\n\n"
                SSE_MESSAGES_TOTAL.labels(event_type="heartbeat").inc()
                last_heartbeat = now

    except asyncio.CancelledError:
        pass
    finally:
        SSE_ACTIVE_CONNECTIONS.dec()
        await subscriber.unsubscribe()
        logger.info(
            "User disconnected",
            extra={"event": LogEvent.SSE_DISCONNECTED, "user_id": user_id},
        )


@router.get("/stream")
async def notification_stream(request: Request, user: CurrentUser) -> StreamingResponse:
    """SSE stream of new notifications. 503 when Redis is disabled."""
    if not is_redis_available():
        raise ServiceUnavailableError("Realtime notifications are unavailable")

    return StreamingResponse(
        _event_generator(request, user.id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
