"""Tests for notification service and endpoints."""

from unittest.mock import AsyncMock

import pytest

from ctrlaltvibe.core.errors import BadRequestError
from ctrlaltvibe.core.models import Notification
from ctrlaltvibe.services import notification_service


@pytest.fixture
async def liked_project(user, other_client, create_project) -> dict:
    """Project by `user`, liked and commented by `other_user`."""
    project = await create_project(user)
    await other_client.post(f"/api/projects/{project['id']}/like")
    await other_client.post(f"/api/projects/{project['id']}/comments", json={"content": "Neat"})
    return project


class TestCreateNotification:
    """notification_service.create_notification() tests."""

    async def test_self_action_skipped(self, db, user) -> None:
        result = await notification_service.create_notification(
            db, user_id=user.id, notification_type="like_project", actor_id=user.id
        )
        assert result is None
        assert await notification_service.get_unread_count(db, user.id) == 0

    async def test_invalid_type(self, db, user, other_user) -> None:
        with pytest.raises(BadRequestError, match="Invalid notification type"):
            await notification_service.create_notification(
                db, user_id=user.id, notification_type="poke", actor_id=other_user.id
            )

    async def test_publish_failure_swallowed(self, db, user, other_user) -> None:
        """Realtime delivery errors never fail the write."""
        publisher = AsyncMock()
        publisher.publish = AsyncMock(side_effect=ConnectionError("redis down"))

        notification = await notification_service.create_notification(
            db,
            user_id=user.id,
            notification_type="like_project",
            actor_id=other_user.id,
            publisher=publisher,
        )

        assert isinstance(notification, Notification)
        publisher.publish.assert_awaited_once()


class TestListNotifications:
    """GET /api/notifications"""

    async def test_enriched_newest_first(
        self, user_client, other_user, liked_project
    ) -> None:
        resp = await user_client.get("/api/notifications")

        body = resp.json()
        assert body["total"] == 2
        newest, oldest = body["notifications"]
        assert newest["type"] == "comment_project"
        assert newest["comment"]["content"] == "Neat"
        assert oldest["type"] == "like_project"
        assert oldest["actor"] == {
            "id": other_user.id,
            "username": other_user.username,
            "avatar_url": None,
        }
        assert oldest["project"] == {"id": liked_project["id"], "title": "Vibe Board"}
        assert oldest["reply"] is None

    async def test_unread_only(self, user_client, liked_project) -> None:
        notifications = (await user_client.get("/api/notifications")).json()["notifications"]
        await user_client.patch(f"/api/notifications/{notifications[0]['id']}")

        resp = await user_client.get("/api/notifications?unread_only=true")
        assert resp.json()["total"] == 1

    async def test_requires_login(self, client) -> None:
        assert (await client.get("/api/notifications")).status_code == 401


class TestUnreadCount:
    async def test_anonymous_zero(self, client) -> None:
        resp = await client.get("/api/notifications/count")
        assert resp.json() == {"count": 0}

    async def test_counts_and_mark_all(self, user_client, liked_project) -> None:
        assert (await user_client.get("/api/notifications/count")).json() == {"count": 2}

        resp = await user_client.patch("/api/notifications")
        assert resp.json() == {"success": True, "updated": 2}
        assert (await user_client.get("/api/notifications/count")).json() == {"count": 0}


class TestOwnership:
    """Notifications of other users are invisible (404)."""

    async def test_mark_other_users_notification(
        self, user_client, other_client, liked_project
    ) -> None:
        notification = (await user_client.get("/api/notifications")).json()["notifications"][0]

        resp = await other_client.patch(f"/api/notifications/{notification['id']}")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOTIFICATION_NOT_FOUND"

        resp = await other_client.delete(f"/api/notifications/{notification['id']}")
        assert resp.status_code == 404

    async def test_delete_own(self, user_client, liked_project) -> None:
        notification = (await user_client.get("/api/notifications")).json()["notifications"][0]

        resp = await user_client.delete(f"/api/notifications/{notification['id']}")

        assert resp.json() == {"success": True}
        assert (await user_client.get("/api/notifications")).json()["total"] == 1


class TestStream:
    async def test_unavailable_without_redis(self, user_client) -> None:
        resp = await user_client.get("/api/notifications/stream")
        assert resp.status_code == 503
        assert resp.json()["error"]["code"] == "SERVICE_UNAVAILABLE"

    async def test_requires_login(self, client) -> None:
        assert (await client.get("/api/notifications/stream")).status_code == 401
