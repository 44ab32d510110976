"""Tests for project CRUD and interaction endpoints."""

from sqlalchemy import func, select

from ctrlaltvibe.core.domain import DEFAULT_PROJECT_IMAGE
from ctrlaltvibe.core.models import Comment, Like, Notification, Project, ProjectView


class TestCreateProject:
    """POST /api/projects"""

    async def test_requires_login(self, client, project_payload) -> None:
        resp = await client.post("/api/projects", json=project_payload())
        assert resp.status_code == 401

    async def test_defaults(self, user_client, user, project_payload) -> None:
        resp = await user_client.post("/api/projects", json=project_payload())

        assert resp.status_code == 201
        project = resp.json()["project"]
        assert project["author"]["id"] == user.id
        assert project["image_url"] == DEFAULT_PROJECT_IMAGE
        assert project["featured"] is False
        assert project["tags"] == ["AI Tools", "Productivity"]
        assert project["likes_count"] == 0
        assert project["gallery_images"] == []

    async def test_dedupes_tags(self, user_client, project_payload) -> None:
        resp = await user_client.post(
            "/api/projects",
            json=project_payload(tags=["AI TOOLS", "ai tools", " ", "rust"]),
        )
        assert resp.json()["project"]["tags"] == ["AI Tools", "rust"]

    async def test_gallery_order(self, user_client, project_payload) -> None:
        resp = await user_client.post(
            "/api/projects",
            json=project_payload(
                gallery_images=[
                    {"image_url": "https://img.example.com/b.png", "display_order": 1},
                    {"image_url": "/images/a.png", "caption": "A", "display_order": 0},
                ]
            ),
        )
        gallery = resp.json()["project"]["gallery_images"]
        assert [img["image_url"] for img in gallery] == [
            "/images/a.png",
            "https://img.example.com/b.png",
        ]

    async def test_validation(self, user_client, project_payload) -> None:
        for bad in (
            {"title": "ab"},
            {"description": "too short"},
            {"project_url": "ftp://example.com"},
            {"image_url": "javascript:alert(1)"},
        ):
            resp = await user_client.post("/api/projects", json=project_payload(**bad))
            assert resp.status_code == 422, bad


class TestGetProject:
    """GET /api/projects/{id}"""

    async def test_counts_view(self, client, user, create_project, session_factory) -> None:
        project = await create_project(user)

        first = await client.get(f"/api/projects/{project['id']}")
        second = await client.get(f"/api/projects/{project['id']}")

        assert first.json()["project"]["views_count"] == 1
        assert second.json()["project"]["views_count"] == 2
        async with session_factory() as session:
            view = (await session.execute(select(ProjectView))).scalar_one()
            assert view.views_count == 2

    async def test_unknown(self, client) -> None:
        resp = await client.get("/api/projects/01HZZZZZZZZZZZZZZZZZZZZZZZ")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "PROJECT_NOT_FOUND"

    async def test_private_hidden_from_others(
        self, client, other_client, user_client, user, create_project
    ) -> None:
        project = await create_project(user, is_private=True)

        assert (await client.get(f"/api/projects/{project['id']}")).status_code == 404
        assert (await other_client.get(f"/api/projects/{project['id']}")).status_code == 404
        assert (await user_client.get(f"/api/projects/{project['id']}")).status_code == 200

    async def test_private_visible_to_admin(self, admin_client, user, create_project) -> None:
        project = await create_project(user, is_private=True)
        assert (await admin_client.get(f"/api/projects/{project['id']}")).status_code == 200


class TestUpdateProject:
    """PATCH /api/projects/{id}"""

    async def test_author_updates(self, user_client, user, create_project) -> None:
        project = await create_project(user)

        resp = await user_client.patch(
            f"/api/projects/{project['id']}",
            json={"title": "Vibe Board 2", "tags": ["gaming"], "image_url": None},
        )

        assert resp.status_code == 200
        updated = resp.json()["project"]
        assert updated["title"] == "Vibe Board 2"
        assert updated["tags"] == ["Gaming"]
        assert updated["image_url"] == DEFAULT_PROJECT_IMAGE
        assert updated["description"] == project["description"]

    async def test_other_user_forbidden(self, other_client, user, create_project) -> None:
        project = await create_project(user)
        resp = await other_client.patch(
            f"/api/projects/{project['id']}", json={"title": "Hijacked"}
        )
        assert resp.status_code == 403

    async def test_null_required_field_ignored(self, user_client, user, create_project) -> None:
        project = await create_project(user)
        resp = await user_client.patch(f"/api/projects/{project['id']}", json={"title": None})
        assert resp.json()["project"]["title"] == project["title"]

    async def test_featured_not_settable(self, user_client, user, create_project) -> None:
        project = await create_project(user)
        resp = await user_client.patch(
            f"/api/projects/{project['id']}", json={"featured": True}
        )
        assert resp.json()["project"]["featured"] is False


class TestDeleteProject:
    """DELETE /api/projects/{id}"""

    async def test_cascades(
        self, user_client, other_client, user, create_project, session_factory
    ) -> None:
        project = await create_project(user)
        pid = project["id"]
        await other_client.post(f"/api/projects/{pid}/like")
        comment = (
            await other_client.post(f"/api/projects/{pid}/comments", json={"content": "Nice"})
        ).json()["comment"]
        await user_client.post(f"/api/comments/{comment['id']}/replies", json={"content": "Ty"})

        resp = await user_client.delete(f"/api/projects/{pid}")

        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        async with session_factory() as session:
            for model in (Project, Like, Comment, Notification):
                count = (await session.execute(select(func.count()).select_from(model))).scalar_one()
                assert count == 0, model.__name__

    async def test_other_user_forbidden(self, other_client, user, create_project) -> None:
        project = await create_project(user)
        resp = await other_client.delete(f"/api/projects/{project['id']}")
        assert resp.status_code == 403


class TestLikes:
    """POST/DELETE /api/projects/{id}/like"""

    async def test_like_is_idempotent(
        self, other_client, user, create_project, session_factory
    ) -> None:
        project = await create_project(user)

        first = await other_client.post(f"/api/projects/{project['id']}/like")
        second = await other_client.post(f"/api/projects/{project['id']}/like")

        assert first.json() == {"success": True, "likes_count": 1}
        assert second.json()["likes_count"] == 1
        async with session_factory() as session:
            notifications = (await session.execute(select(Notification))).scalars().all()
        assert len(notifications) == 1
        assert notifications[0].user_id == user.id
        assert notifications[0].type == "like_project"

    async def test_like_publishes(self, other_client, user, create_project, publisher) -> None:
        project = await create_project(user)
        await other_client.post(f"/api/projects/{project['id']}/like")

        publisher.publish.assert_awaited_once()
        channel, _ = publisher.publish.await_args.args
        assert channel == f"cav:notify:{user.id}"

    async def test_self_like_no_notification(
        self, user_client, user, create_project, session_factory
    ) -> None:
        project = await create_project(user)
        resp = await user_client.post(f"/api/projects/{project['id']}/like")

        assert resp.json()["likes_count"] == 1
        async with session_factory() as session:
            count = (
                await session.execute(select(func.count()).select_from(Notification))
            ).scalar_one()
        assert count == 0

    async def test_unlike(self, other_client, user, create_project) -> None:
        project = await create_project(user)
        await other_client.post(f"/api/projects/{project['id']}/like")

        resp = await other_client.delete(f"/api/projects/{project['id']}/like")
        assert resp.json()["likes_count"] == 0

        again = await other_client.delete(f"/api/projects/{project['id']}/like")
        assert again.status_code == 200

    async def test_is_liked_flag(self, other_client, user, create_project) -> None:
        project = await create_project(user)
        await other_client.post(f"/api/projects/{project['id']}/like")

        resp = await other_client.get(f"/api/projects/{project['id']}")
        assert resp.json()["project"]["is_liked"] is True


class TestBookmarks:
    async def test_bookmark_and_remove(self, other_client, user, create_project) -> None:
        project = await create_project(user)
        pid = project["id"]

        assert (await other_client.post(f"/api/projects/{pid}/bookmark")).json() == {
            "success": True
        }
        await other_client.post(f"/api/projects/{pid}/bookmark")
        detail = (await other_client.get(f"/api/projects/{pid}")).json()["project"]
        assert detail["is_bookmarked"] is True
        assert detail["bookmarks_count"] == 1

        await other_client.delete(f"/api/projects/{pid}/bookmark")
        detail = (await other_client.get(f"/api/projects/{pid}")).json()["project"]
        assert detail["is_bookmarked"] is False
        assert detail["bookmarks_count"] == 0


class TestShare:
    async def test_anonymous_share(self, client, user, create_project) -> None:
        project = await create_project(user)

        resp = await client.post(
            f"/api/projects/{project['id']}/share", json={"platform": "twitter"}
        )
        again = await client.post(
            f"/api/projects/{project['id']}/share", json={"platform": "linkedin"}
        )

        assert resp.json() == {"success": True, "shares_count": 1}
        assert again.json()["shares_count"] == 2

    async def test_platform_required(self, client, user, create_project) -> None:
        project = await create_project(user)
        resp = await client.post(f"/api/projects/{project['id']}/share", json={"platform": "x"})
        assert resp.status_code == 422
