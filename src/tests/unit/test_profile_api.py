"""Tests for profile, skills, activity and user directory endpoints."""


class TestOwnProfile:
    """GET/PATCH /api/profile"""

    async def test_anonymous(self, client) -> None:
        resp = await client.get("/api/profile")
        assert resp.json() == {"user": None, "projects": []}

    async def test_includes_private_projects(self, user_client, user, create_project) -> None:
        await create_project(user, title="Public one")
        await create_project(user, title="Private one", is_private=True)

        body = (await user_client.get("/api/profile")).json()

        assert body["user"]["id"] == user.id
        assert sorted(p["title"] for p in body["projects"]) == ["Private one", "Public one"]

    async def test_update(self, user_client) -> None:
        resp = await user_client.patch(
            "/api/profile",
            json={"bio": "I vibe code", "avatar_url": "https://img.example.com/me.png"},
        )

        assert resp.status_code == 200
        assert resp.json()["bio"] == "I vibe code"
        assert resp.json()["avatar_url"] == "https://img.example.com/me.png"

    async def test_update_email_conflict(self, user_client, other_user) -> None:
        resp = await user_client.patch("/api/profile", json={"email": "BOB@example.com"})
        assert resp.status_code == 409

    async def test_bio_too_long(self, user_client) -> None:
        resp = await user_client.patch("/api/profile", json={"bio": "x" * 301})
        assert resp.status_code == 422


class TestSkills:
    async def test_add_list_remove(self, user_client) -> None:
        created = await user_client.post(
            "/api/profile/skills", json={"category": "Languages", "skill": "Python"}
        )
        await user_client.post(
            "/api/profile/skills", json={"category": "Frameworks", "skill": "FastAPI"}
        )
        assert created.status_code == 201

        skills = (await user_client.get("/api/profile/skills")).json()
        categories = (await user_client.get("/api/profile/skill-categories")).json()
        assert [s["skill"] for s in skills] == ["FastAPI", "Python"]
        assert categories == ["Frameworks", "Languages"]

        resp = await user_client.delete(f"/api/profile/skills/{created.json()['id']}")
        assert resp.json() == {"success": True}
        assert len((await user_client.get("/api/profile/skills")).json()) == 1

    async def test_duplicate(self, user_client) -> None:
        body = {"category": "Languages", "skill": "Python"}
        await user_client.post("/api/profile/skills", json=body)
        resp = await user_client.post("/api/profile/skills", json=body)
        assert resp.status_code == 409

    async def test_cannot_remove_others(self, user_client, other_client) -> None:
        created = await user_client.post(
            "/api/profile/skills", json={"category": "Languages", "skill": "Python"}
        )
        resp = await other_client.delete(f"/api/profile/skills/{created.json()['id']}")
        assert resp.status_code == 404

    async def test_anonymous(self, client) -> None:
        assert (await client.get("/api/profile/skills")).json() == []
        assert (await client.get("/api/profile/skill-categories")).status_code == 401


class TestActivity:
    async def test_activity_targets(self, user_client, user, create_project) -> None:
        project = await create_project(user)
        await user_client.post(
            f"/api/projects/{project['id']}/comments", json={"content": "Own comment"}
        )

        activities = (await user_client.get("/api/profile/activity")).json()

        assert [a["type"] for a in activities] == ["comment_added", "project_created"]
        assert activities[0]["target"]["comment"]["content"] == "Own comment"
        assert activities[0]["target"]["project"]["id"] == project["id"]
        assert activities[1]["target"]["title"] == "Vibe Board"

    async def test_deleted_target(self, user_client, user, create_project) -> None:
        project = await create_project(user)
        await user_client.delete(f"/api/projects/{project['id']}")

        assert (await user_client.get("/api/profile/activity")).json() == []

    async def test_liked(self, other_client, user, create_project) -> None:
        project = await create_project(user)
        await other_client.post(f"/api/projects/{project['id']}/like")

        liked = (await other_client.get("/api/profile/liked")).json()
        assert [p["id"] for p in liked] == [project["id"]]

    async def test_anonymous(self, client) -> None:
        assert (await client.get("/api/profile/activity")).json() == []
        assert (await client.get("/api/profile/liked")).json() == []


class TestPublicProfiles:
    async def test_public_profile(self, client, user, create_project) -> None:
        await create_project(user, title="Shown")
        await create_project(user, title="Hidden", is_private=True)

        resp = await client.get("/api/users/alice")

        body = resp.json()
        assert body["user"]["username"] == "alice"
        assert "email" not in body["user"]
        assert [p["title"] for p in body["projects"]] == ["Shown"]
        assert len(body["activities"]) == 2

    async def test_unknown_user(self, client) -> None:
        resp = await client.get("/api/users/ghost")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "USER_NOT_FOUND"

    async def test_directory(self, client, user, other_user, create_project) -> None:
        await create_project(user)
        await create_project(user, is_private=True)

        profiles = (await client.get("/api/profiles")).json()

        assert [p["username"] for p in profiles] == ["alice", "bob"]
        assert profiles[0]["projects_count"] == 1
        assert profiles[1]["projects_count"] == 0
