"""Tests for the cached project feeds: query parameters and invalidation."""

import pytest

from ctrlaltvibe.core.models import Project


@pytest.fixture
async def two_projects(user, create_project, session_factory) -> tuple[dict, dict]:
    """An older featured project and a newer regular one."""
    older = await create_project(user, title="Older featured")
    newer = await create_project(user, title="Newer plain")
    async with session_factory() as session:
        stored = await session.get(Project, older["id"])
        stored.featured = True
        await session.commit()
    return older, newer


def _titles(body: dict) -> list[str]:
    return [p["title"] for p in body["projects"]]


class TestSortParameter:
    """GET /api/projects?sort="""

    @pytest.mark.parametrize("sort", ["featured", "popular", "latest", "default", ""])
    async def test_unknown_sort_uses_default_order(self, client, two_projects, sort) -> None:
        resp = await client.get("/api/projects", params={"sort": sort})

        assert resp.status_code == 200
        assert _titles(resp.json()) == ["Older featured", "Newer plain"]

    async def test_known_sort_still_applies(self, client, two_projects) -> None:
        resp = await client.get("/api/projects", params={"sort": "newest"})
        assert _titles(resp.json()) == ["Newer plain", "Older featured"]


class TestLimitClamping:
    """Out-of-range `limit` values are clamped instead of rejected."""

    @pytest.mark.parametrize(
        "path",
        [
            "/api/projects",
            "/api/projects/trending",
            "/api/tags/popular",
            "/api/coding-tools/popular",
            "/api/profiles",
            "/api/profile/activity",
            "/api/blog/posts",
        ],
    )
    @pytest.mark.parametrize("limit", [0, -5, 500])
    async def test_public_lists(self, client, path, limit) -> None:
        resp = await client.get(path, params={"limit": limit})
        assert resp.status_code == 200

    @pytest.mark.parametrize(("limit", "offset"), [(0, 0), (500, 0), (20, -3)])
    async def test_notifications(self, user_client, limit, offset) -> None:
        resp = await user_client.get(
            "/api/notifications", params={"limit": limit, "offset": offset}
        )
        assert resp.status_code == 200

    async def test_zero_means_one(self, client, two_projects) -> None:
        trending = await client.get("/api/projects/trending", params={"limit": 0})
        feed = await client.get("/api/projects", params={"limit": 0})

        assert len(trending.json()["projects"]) == 1
        assert len(feed.json()["projects"]) == 1
        assert feed.json()["has_more"] is True

    async def test_large_limit_capped(self, client, user, create_project) -> None:
        for i in range(3):
            await create_project(user, title=f"Project {i}")

        resp = await client.get("/api/projects/trending", params={"limit": 500})
        assert len(resp.json()["projects"]) == 3


class TestFeedInvalidation:
    """Cached feed reads reflect project mutations immediately."""

    async def test_create_shows_in_list_and_trending(self, client, user, create_project) -> None:
        assert (await client.get("/api/projects")).json()["total"] == 0
        assert (await client.get("/api/projects/trending")).json()["projects"] == []

        project = await create_project(user)

        listed = (await client.get("/api/projects")).json()
        trending = (await client.get("/api/projects/trending")).json()
        assert listed["total"] == 1
        assert [p["id"] for p in trending["projects"]] == [project["id"]]

    async def test_like_updates_counts(self, client, other_client, user, create_project) -> None:
        project = await create_project(user)
        before = (await client.get("/api/projects")).json()["projects"][0]
        assert before["likes_count"] == 0

        await other_client.post(f"/api/projects/{project['id']}/like")

        after = (await client.get("/api/projects")).json()["projects"][0]
        assert after["likes_count"] == 1

    async def test_like_reorders_trending(self, client, other_client, user, create_project) -> None:
        first = await create_project(user, title="First")
        await create_project(user, title="Second")
        before = (await client.get("/api/projects/trending")).json()
        assert _titles(before) == ["Second", "First"]

        await other_client.post(f"/api/projects/{first['id']}/like")

        after = (await client.get("/api/projects/trending")).json()
        assert _titles(after) == ["First", "Second"]

    async def test_delete_removes_from_feeds(self, client, user_client, user, create_project) -> None:
        project = await create_project(user)
        assert (await client.get("/api/projects")).json()["total"] == 1
        assert len((await client.get("/api/projects/trending")).json()["projects"]) == 1

        await user_client.delete(f"/api/projects/{project['id']}")

        assert (await client.get("/api/projects")).json()["total"] == 0
        assert (await client.get("/api/projects/trending")).json()["projects"] == []

    async def test_feature_updates_featured(self, client, admin_client, user, create_project) -> None:
        project = await create_project(user)
        assert (await client.get("/api/projects/featured")).json()["project"] is None

        await admin_client.put(f"/api/admin/projects/{project['id']}/feature")

        featured = (await client.get("/api/projects/featured")).json()["project"]
        assert featured["id"] == project["id"]
