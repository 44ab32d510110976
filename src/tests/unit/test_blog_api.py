"""Tests for blog categories, tags and posts."""

import pytest

from ctrlaltvibe.core.domain import DEFAULT_BLOG_IMAGE


@pytest.fixture
async def category(admin_client) -> dict:
    resp = await admin_client.post("/api/blog/categories", json={"name": "Release Notes"})
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture
async def blog_tag(admin_client) -> dict:
    resp = await admin_client.post("/api/blog/tags", json={"name": "Python Tips"})
    assert resp.status_code == 201
    return resp.json()


async def _post(client, **fields) -> dict:
    body = {"title": "Hello World", "content": "First post body", "published": True}
    body.update(fields)
    resp = await client.post("/api/blog/posts", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()["post"]


class TestCategories:
    async def test_slug_derived(self, category) -> None:
        assert category["slug"] == "release-notes"

    async def test_duplicate_slug(self, admin_client, category) -> None:
        resp = await admin_client.post(
            "/api/blog/categories", json={"name": "Other", "slug": "Release Notes"}
        )
        assert resp.status_code == 409

    async def test_admin_only(self, user_client) -> None:
        resp = await user_client.post("/api/blog/categories", json={"name": "Nope"})
        assert resp.status_code == 403

    async def test_get_by_slug(self, client, category) -> None:
        resp = await client.get("/api/blog/categories/slug/release-notes")
        assert resp.json()["id"] == category["id"]

    async def test_update(self, admin_client, category) -> None:
        resp = await admin_client.patch(
            f"/api/blog/categories/{category['id']}", json={"description": "Changelog"}
        )
        assert resp.json()["description"] == "Changelog"
        assert resp.json()["name"] == "Release Notes"

    async def test_delete_uncategorizes_posts(self, admin_client, category) -> None:
        post = await _post(admin_client, category_id=category["id"])

        resp = await admin_client.delete(f"/api/blog/categories/{category['id']}")
        assert resp.json() == {"success": True}

        reread = await admin_client.get(f"/api/blog/posts/{post['id']}")
        assert reread.json()["post"]["category"] is None


class TestTags:
    async def test_create_and_list(self, client, blog_tag) -> None:
        assert blog_tag["slug"] == "python-tips"
        resp = await client.get("/api/blog/tags")
        assert [t["name"] for t in resp.json()] == ["Python Tips"]

    async def test_delete_unlinks_posts(self, admin_client, blog_tag) -> None:
        post = await _post(admin_client, tag_ids=[blog_tag["id"]])
        assert post["tags"] == ["Python Tips"]

        await admin_client.delete(f"/api/blog/tags/{blog_tag['id']}")

        reread = await admin_client.get(f"/api/blog/posts/{post['id']}")
        assert reread.json()["post"]["tags"] == []


class TestPosts:
    async def test_create_defaults(self, user_client, user) -> None:
        post = await _post(user_client)

        assert post["slug"] == "hello-world"
        assert post["featured_image"] == DEFAULT_BLOG_IMAGE
        assert post["author"]["id"] == user.id
        assert post["published_at"] is not None

    async def test_slug_suffix(self, user_client) -> None:
        first = await _post(user_client)
        second = await _post(user_client)
        third = await _post(user_client, slug="hello world")

        assert first["slug"] == "hello-world"
        assert second["slug"] == "hello-world-2"
        assert third["slug"] == "hello-world-3"

    async def test_draft_visibility(self, client, user_client, admin_client) -> None:
        draft = await _post(user_client, published=False)
        assert draft["published_at"] is None

        assert (await client.get(f"/api/blog/posts/{draft['id']}")).status_code == 404
        assert (await user_client.get(f"/api/blog/posts/{draft['id']}")).status_code == 200
        assert (await admin_client.get(f"/api/blog/posts/{draft['id']}")).status_code == 200

    async def test_list_hides_drafts(self, client, user_client, admin_client) -> None:
        await _post(user_client, title="Live")
        await _post(user_client, title="Draft", published=False)

        public = (await client.get("/api/blog/posts")).json()
        sneaky = (await user_client.get("/api/blog/posts?include_drafts=true")).json()
        admin = (await admin_client.get("/api/blog/posts?include_drafts=true")).json()

        assert [p["title"] for p in public["posts"]] == ["Live"]
        assert sneaky["total"] == 1
        assert admin["total"] == 2

    async def test_list_filters(self, client, admin_client, category, blog_tag) -> None:
        await _post(admin_client, title="In category", category_id=category["id"])
        await _post(admin_client, title="Tagged", tag_ids=[blog_tag["id"]])
        await _post(admin_client, title="Searchable", content="talks about sqlalchemy")

        by_category = (await client.get(f"/api/blog/posts?category={category['id']}")).json()
        by_tag = (await client.get(f"/api/blog/posts?tag={blog_tag['id']}")).json()
        by_search = (await client.get("/api/blog/posts?search=SQLAlchemy")).json()

        assert [p["title"] for p in by_category["posts"]] == ["In category"]
        assert [p["title"] for p in by_tag["posts"]] == ["Tagged"]
        assert [p["title"] for p in by_search["posts"]] == ["Searchable"]

    async def test_read_counts_views(self, client, user_client) -> None:
        post = await _post(user_client)

        await client.get(f"/api/blog/posts/{post['id']}")
        resp = await client.get(f"/api/blog/posts/slug/{post['slug']}")

        assert resp.json()["post"]["view_count"] == 2

    async def test_unknown_category(self, user_client) -> None:
        resp = await user_client.post(
            "/api/blog/posts",
            json={"title": "X post", "content": "body", "category_id": "missing"},
        )
        assert resp.status_code == 404

    async def test_publish_later_sets_published_at(self, user_client) -> None:
        draft = await _post(user_client, published=False)

        resp = await user_client.patch(f"/api/blog/posts/{draft['id']}", json={"published": True})

        assert resp.json()["post"]["published"] is True
        assert resp.json()["post"]["published_at"] is not None

    async def test_update_forbidden_for_others(self, user_client, other_client) -> None:
        post = await _post(user_client)
        resp = await other_client.patch(f"/api/blog/posts/{post['id']}", json={"title": "Mine"})
        assert resp.status_code == 403

    async def test_admin_can_delete(self, user_client, admin_client, client) -> None:
        post = await _post(user_client)

        resp = await admin_client.delete(f"/api/blog/posts/{post['id']}")

        assert resp.json() == {"success": True}
        assert (await client.get(f"/api/blog/posts/{post['id']}")).status_code == 404
