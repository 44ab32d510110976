"""Tests for comment, reply and comment-like endpoints."""

import pytest
from sqlalchemy import select

from ctrlaltvibe.core.models import Notification


@pytest.fixture
async def project(user, create_project) -> dict:
    return await create_project(user)


async def _comment(client, project_id: str, content: str = "Great vibes") -> dict:
    resp = await client.post(f"/api/projects/{project_id}/comments", json={"content": content})
    assert resp.status_code == 201, resp.text
    return resp.json()["comment"]


class TestCreateComment:
    """POST /api/projects/{id}/comments"""

    async def test_create(self, other_client, other_user, project) -> None:
        comment = await _comment(other_client, project["id"], "  Great vibes  ")

        assert comment["content"] == "Great vibes"
        assert comment["author"]["id"] == other_user.id
        assert comment["is_author"] is False
        assert comment["replies"] == []
        assert comment["likes_count"] == 0

    async def test_blank_rejected(self, other_client, project) -> None:
        resp = await other_client.post(
            f"/api/projects/{project['id']}/comments", json={"content": "   "}
        )
        assert resp.status_code == 422

    async def test_too_long(self, other_client, project) -> None:
        resp = await other_client.post(
            f"/api/projects/{project['id']}/comments", json={"content": "x" * 1001}
        )
        assert resp.status_code == 422

    async def test_requires_login(self, client, project) -> None:
        resp = await client.post(
            f"/api/projects/{project['id']}/comments", json={"content": "hi"}
        )
        assert resp.status_code == 401

    async def test_notifies_project_author(
        self, other_client, user, project, session_factory
    ) -> None:
        comment = await _comment(other_client, project["id"])

        async with session_factory() as session:
            notification = (await session.execute(select(Notification))).scalar_one()
        assert notification.user_id == user.id
        assert notification.type == "comment_project"
        assert notification.comment_id == comment["id"]

    async def test_private_project_hidden(self, other_client, user, create_project) -> None:
        private = await create_project(user, is_private=True)
        resp = await other_client.post(
            f"/api/projects/{private['id']}/comments", json={"content": "hi"}
        )
        assert resp.status_code == 404


class TestListComments:
    """GET /api/projects/{id}/comments"""

    async def test_nested_replies(self, client, user_client, other_client, project) -> None:
        comment = await _comment(other_client, project["id"])
        first = await user_client.post(
            f"/api/comments/{comment['id']}/replies", json={"content": "Thanks!"}
        )
        await other_client.post(
            f"/api/comments/{comment['id']}/replies", json={"content": "Welcome"}
        )
        assert first.status_code == 201
        assert first.json()["reply"]["is_author"] is True

        resp = await client.get(f"/api/projects/{project['id']}/comments")

        body = resp.json()
        assert body["total_comments"] == 1
        assert body["has_more"] is False
        replies = body["comments"][0]["replies"]
        assert [r["content"] for r in replies] == ["Thanks!", "Welcome"]

    async def test_pagination(self, client, other_client, project) -> None:
        for i in range(3):
            await _comment(other_client, project["id"], f"c{i}")

        resp = await client.get(f"/api/projects/{project['id']}/comments?limit=2")
        body = resp.json()
        assert len(body["comments"]) == 2
        assert body["has_more"] is True
        assert body["total_comments"] == 3

    async def test_most_liked_sort(self, client, user_client, other_client, project) -> None:
        await _comment(other_client, project["id"], "meh")
        liked = await _comment(other_client, project["id"], "liked")
        await user_client.post(f"/api/comments/{liked['id']}/like")

        resp = await client.get(f"/api/projects/{project['id']}/comments?sort=mostLiked")
        first = resp.json()["comments"][0]
        assert first["content"] == "liked"
        assert first["likes_count"] == 1

    @pytest.mark.parametrize("sort", ["bogus", "popular", ""])
    async def test_unknown_sort_falls_back_to_newest(
        self, client, other_client, project, sort
    ) -> None:
        await _comment(other_client, project["id"], "first")
        await _comment(other_client, project["id"], "second")

        resp = await client.get(
            f"/api/projects/{project['id']}/comments", params={"sort": sort}
        )

        assert resp.status_code == 200
        assert [c["content"] for c in resp.json()["comments"]] == ["second", "first"]

    async def test_default_page_size(self, client, other_client, project) -> None:
        for i in range(12):
            await _comment(other_client, project["id"], f"c{i}")

        body = (await client.get(f"/api/projects/{project['id']}/comments")).json()
        assert len(body["comments"]) == 10
        assert body["has_more"] is True

    async def test_unknown_project(self, client) -> None:
        resp = await client.get("/api/projects/01HZZZZZZZZZZZZZZZZZZZZZZZ/comments")
        assert resp.status_code == 404


class TestReplies:
    async def test_unknown_comment(self, user_client) -> None:
        resp = await user_client.post(
            "/api/comments/01HZZZZZZZZZZZZZZZZZZZZZZZ/replies", json={"content": "hi"}
        )
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "COMMENT_NOT_FOUND"

    async def test_notifies_comment_author(
        self, user_client, other_client, other_user, project, session_factory
    ) -> None:
        comment = await _comment(other_client, project["id"])
        reply = (
            await user_client.post(
                f"/api/comments/{comment['id']}/replies", json={"content": "Thanks!"}
            )
        ).json()["reply"]

        async with session_factory() as session:
            result = await session.execute(
                select(Notification).where(Notification.type == "reply_comment")
            )
            notification = result.scalar_one()
        assert notification.user_id == other_user.id
        assert notification.reply_id == reply["id"]


class TestCommentLikes:
    async def test_like_unlike_comment(self, user_client, other_client, project) -> None:
        comment = await _comment(other_client, project["id"])

        liked = await user_client.post(f"/api/comments/{comment['id']}/like")
        again = await user_client.post(f"/api/comments/{comment['id']}/like")
        unliked = await user_client.delete(f"/api/comments/{comment['id']}/like")

        assert liked.json() == {"success": True, "likes_count": 1}
        assert again.json()["likes_count"] == 1
        assert unliked.json()["likes_count"] == 0

    async def test_like_reply(self, user_client, other_client, project) -> None:
        comment = await _comment(other_client, project["id"])
        reply = (
            await other_client.post(
                f"/api/comments/{comment['id']}/replies", json={"content": "self reply"}
            )
        ).json()["reply"]

        liked = await user_client.post(f"/api/replies/{reply['id']}/like")
        assert liked.json()["likes_count"] == 1

        listing = await user_client.get(f"/api/projects/{project['id']}/comments")
        listed_reply = listing.json()["comments"][0]["replies"][0]
        assert listed_reply["is_liked"] is True

        unliked = await user_client.delete(f"/api/replies/{reply['id']}/like")
        assert unliked.json()["likes_count"] == 0

    async def test_unknown_reply(self, user_client) -> None:
        resp = await user_client.post("/api/replies/01HZZZZZZZZZZZZZZZZZZZZZZZ/like")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "REPLY_NOT_FOUND"
