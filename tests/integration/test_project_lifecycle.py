"""Integration tests: project lifecycle via API."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


async def _create_project(client: AsyncClient, headers: dict, difficulty: str = "Beginner") -> dict:
    response = await client.post(
        "/api/v1/projects",
        json={"title": "Retro Game Jam", "description": "Build a tiny platformer", "difficulty": difficulty},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


class TestProjectLifecycle:
    """Integration: create → join → complete → leave."""

    @pytest.mark.asyncio
    async def test_create_project(self, client: AsyncClient, make_user):
        lead_id, lead = await make_user("ada")

        project = await _create_project(client, lead, "Advanced")
        assert project["title"] == "Retro Game Jam"
        assert project["status"] == "ongoing"
        assert project["difficulty"] == "Advanced"
        assert project["reward"] == {"xp": 1000, "bits": 700, "bytes": 12}
        assert project["owner_user_id"] == str(lead_id)
        assert len(project["members"]) == 1
        assert project["members"][0]["role"] == "Project Lead"
        assert project["members"][0]["username"] == "ada"

    @pytest.mark.asyncio
    async def test_create_requires_auth(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/projects", json={"title": "No Auth", "difficulty": "Beginner"}
        )
        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_difficulty(self, client: AsyncClient, make_user):
        _, lead = await make_user("ada")
        response = await client.post(
            "/api/v1/projects",
            json={"title": "Too Hard", "difficulty": "Legendary"},
            headers=lead,
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "Validation error"

    @pytest.mark.asyncio
    async def test_join_with_default_role(self, client: AsyncClient, make_user):
        _, lead = await make_user("ada")
        dev_id, dev = await make_user("grace")
        project = await _create_project(client, lead)

        response = await client.post(f"/api/v1/projects/{project['id']}/join", headers=dev)
        assert response.status_code == 201
        body = response.json()
        assert body["role"] == "Developer"
        assert body["user_id"] == str(dev_id)

    @pytest.mark.asyncio
    async def test_double_join_returns_conflict(self, client: AsyncClient, make_user):
        _, lead = await make_user("ada")
        _, dev = await make_user("grace")
        project = await _create_project(client, lead)
        url = f"/api/v1/projects/{project['id']}/join"

        first = await client.post(url, json={"role": "Dev"}, headers=dev)
        assert first.status_code == 201

        second = await client.post(url, json={"role": "QA"}, headers=dev)
        assert second.status_code == 409
        assert second.json()["detail"]["code"] == "already_member"

        detail = await client.get(f"/api/v1/projects/{project['id']}")
        roles = {m["username"]: m["role"] for m in detail.json()["members"]}
        assert roles["grace"] == "Dev"

    @pytest.mark.asyncio
    async def test_blank_role_rejected(self, client: AsyncClient, make_user):
        _, lead = await make_user("ada")
        _, dev = await make_user("grace")
        project = await _create_project(client, lead)

        response = await client.post(
            f"/api/v1/projects/{project['id']}/join", json={"role": "  "}, headers=dev
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_join_leave_rejoin(self, client: AsyncClient, make_user):
        _, lead = await make_user("ada")
        _, dev = await make_user("grace")
        project = await _create_project(client, lead)
        base = f"/api/v1/projects/{project['id']}"

        assert (await client.post(f"{base}/join", json={"role": "Dev"}, headers=dev)).status_code == 201
        assert (await client.post(f"{base}/leave", headers=dev)).status_code == 204
        assert (await client.post(f"{base}/join", json={"role": "Dev"}, headers=dev)).status_code == 201

    @pytest.mark.asyncio
    async def test_leave_when_not_member(self, client: AsyncClient, make_user):
        _, lead = await make_user("ada")
        _, stranger = await make_user("linus")
        project = await _create_project(client, lead)

        response = await client.post(f"/api/v1/projects/{project['id']}/leave", headers=stranger)
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "not_member"

    @pytest.mark.asyncio
    async def test_join_unknown_project(self, client: AsyncClient, make_user):
        _, dev = await make_user("grace")
        response = await client.post("/api/v1/projects/999/join", headers=dev)
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "not_found"

    @pytest.mark.asyncio
    async def test_complete_rewards_all_members(self, client: AsyncClient, make_user):
        """Three members, Beginner reward, paid once."""
        _, lead = await make_user("ada")
        _, dev = await make_user("grace")
        _, qa = await make_user("linus")
        project = await _create_project(client, lead)
        base = f"/api/v1/projects/{project['id']}"
        await client.post(f"{base}/join", json={"role": "Dev"}, headers=dev)
        await client.post(f"{base}/join", json={"role": "QA"}, headers=qa)

        response = await client.post(f"{base}/complete", headers=lead)
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "completed"
        assert body["reward"] == {"xp": 300, "bits": 200, "bytes": 3}
        assert len(body["members"]) == 3
        assert all(m["experience_points"] == 300 for m in body["members"])
        assert all(m["new_level"] == 3 and m["leveled_up"] for m in body["members"])

        again = await client.post(f"{base}/complete", headers=lead)
        assert again.status_code == 409
        assert again.json()["detail"]["code"] == "already_completed"

        for headers in (lead, dev, qa):
            me = (await client.get("/api/v1/profiles/me", headers=headers)).json()
            assert me["experience_points"] == 300
            assert me["bits_currency"] == 200
            assert me["bytes_currency"] == 3
            assert me["level"]["current_level"] == 3

    @pytest.mark.asyncio
    async def test_only_lead_can_complete(self, client: AsyncClient, make_user):
        _, lead = await make_user("ada")
        _, dev = await make_user("grace")
        project = await _create_project(client, lead)
        base = f"/api/v1/projects/{project['id']}"
        await client.post(f"{base}/join", headers=dev)

        response = await client.post(f"{base}/complete", headers=dev)
        assert response.status_code == 403

        detail = (await client.get(base)).json()
        assert detail["status"] == "ongoing"

    @pytest.mark.asyncio
    async def test_join_after_completion_rejected(self, client: AsyncClient, make_user):
        _, lead = await make_user("ada")
        _, late = await make_user("grace")
        project = await _create_project(client, lead)
        base = f"/api/v1/projects/{project['id']}"
        await client.post(f"{base}/complete", headers=lead)

        response = await client.post(f"{base}/join", headers=late)
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "already_completed"

    @pytest.mark.asyncio
    async def test_leave_after_completion_keeps_rewards(self, client: AsyncClient, make_user):
        _, lead = await make_user("ada")
        _, dev = await make_user("grace")
        project = await _create_project(client, lead, "Expert")
        base = f"/api/v1/projects/{project['id']}"
        await client.post(f"{base}/join", headers=dev)
        await client.post(f"{base}/complete", headers=lead)

        assert (await client.post(f"{base}/leave", headers=dev)).status_code == 204

        me = (await client.get("/api/v1/profiles/me", headers=dev)).json()
        assert me["experience_points"] == 1500
        assert me["bits_currency"] == 1200
        assert me["bytes_currency"] == 20

    @pytest.mark.asyncio
    async def test_delete_project(self, client: AsyncClient, make_user):
        _, lead = await make_user("ada")
        _, dev = await make_user("grace")
        project = await _create_project(client, lead)
        base = f"/api/v1/projects/{project['id']}"
        await client.post(f"{base}/join", headers=dev)

        assert (await client.delete(base, headers=dev)).status_code == 403
        assert (await client.delete(base, headers=lead)).status_code == 204
        assert (await client.get(base)).status_code == 404

        mine = (await client.get("/api/v1/users/me/projects", headers=dev)).json()
        assert mine["projects"] == []

    @pytest.mark.asyncio
    async def test_list_and_filter_projects(self, client: AsyncClient, make_user):
        _, lead = await make_user("ada")
        first = await _create_project(client, lead)
        await _create_project(client, lead, "Intermediate")
        await client.post(f"/api/v1/projects/{first['id']}/complete", headers=lead)

        everything = (await client.get("/api/v1/projects")).json()
        assert everything["total"] == 2

        completed = (await client.get("/api/v1/projects", params={"status": "completed"})).json()
        assert completed["total"] == 1
        assert completed["projects"][0]["id"] == first["id"]

    @pytest.mark.asyncio
    async def test_my_projects(self, client: AsyncClient, make_user):
        _, lead = await make_user("ada")
        _, dev = await make_user("grace")
        project = await _create_project(client, lead)
        await client.post(f"/api/v1/projects/{project['id']}/join", json={"role": "Designer"}, headers=dev)

        mine = (await client.get("/api/v1/users/me/projects", headers=dev)).json()
        assert len(mine["projects"]) == 1
        assert mine["projects"][0]["role"] == "Designer"
        assert mine["projects"][0]["project"]["id"] == project["id"]
