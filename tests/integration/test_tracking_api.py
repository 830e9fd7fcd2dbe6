"""Habit and goal API tests: create, list, deactivate and ownership."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from habitladder.progress.store import find_progress


class TestHabits:
    @pytest.mark.asyncio
    async def test_create_derives_points_from_intensity(self, authed_client: AsyncClient, user):
        response = await authed_client.post(
            "/api/habits",
            json={"title": "  Read  ", "intensity": "hard", "category": "learning", "points": 100},
        )
        assert response.status_code == 201
        habit = response.json()["habit"]
        assert habit["title"] == "Read"
        assert habit["point_value"] == 20
        assert habit["user_id"] == user.id
        assert habit["target_frequency"] == "daily"
        assert habit["is_active"] is True

    @pytest.mark.asyncio
    async def test_blank_title_is_400(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/habits", json={"title": "   "})
        assert response.status_code == 400
        assert response.json()["field"] == "title"

    @pytest.mark.asyncio
    async def test_unknown_intensity_is_422(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/habits", json={"title": "Read", "intensity": "brutal"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_is_per_user_and_active_only(self, authed_client: AsyncClient, client_for, user_factory):
        keep = (await authed_client.post("/api/habits", json={"title": "Keep"})).json()["habit"]["id"]
        drop = (await authed_client.post("/api/habits", json={"title": "Drop"})).json()["habit"]["id"]
        other = await user_factory("Other", "other@example.com")
        async with client_for(other) as other_client:
            await other_client.post("/api/habits", json={"title": "Theirs"})

        deactivated = await authed_client.delete(f"/api/habits/{drop}")
        assert deactivated.status_code == 200
        assert deactivated.json() == {"message": "Habit deactivated"}

        habits = (await authed_client.get("/api/habits")).json()["habits"]
        assert [h["id"] for h in habits] == [keep]

    @pytest.mark.asyncio
    async def test_deactivated_habit_cannot_be_completed(self, authed_client: AsyncClient):
        habit_id = (await authed_client.post("/api/habits", json={"title": "Old"})).json()["habit"]["id"]
        await authed_client.delete(f"/api/habits/{habit_id}")
        response = await authed_client.post("/api/habits/completions", json={"habit_id": habit_id})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_cannot_deactivate_someone_elses_habit(
        self, authed_client: AsyncClient, client_for, user_factory
    ):
        other = await user_factory("Other", "other@example.com")
        async with client_for(other) as other_client:
            habit_id = (await other_client.post("/api/habits", json={"title": "Theirs"})).json()["habit"]["id"]
        response = await authed_client.delete(f"/api/habits/{habit_id}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_anonymous_is_401(self, client: AsyncClient):
        assert (await client.get("/api/habits")).status_code == 401
        assert (await client.post("/api/habits", json={"title": "Read"})).status_code == 401


class TestGoals:
    @pytest.mark.asyncio
    async def test_create_and_list(self, authed_client: AsyncClient):
        created = await authed_client.post(
            "/api/goals", json={"title": "Marathon", "intensity": "easy", "category": "fitness"}
        )
        assert created.status_code == 201
        goal = created.json()["goal"]
        assert goal["point_value"] == 5
        assert goal["category"] == "fitness"

        goals = (await authed_client.get("/api/goals")).json()["goals"]
        assert [g["id"] for g in goals] == [goal["id"]]

    @pytest.mark.asyncio
    async def test_deactivate(self, authed_client: AsyncClient):
        goal_id = (await authed_client.post("/api/goals", json={"title": "Ship"})).json()["goal"]["id"]
        response = await authed_client.delete(f"/api/goals/{goal_id}")
        assert response.json() == {"message": "Goal deactivated"}
        assert (await authed_client.get("/api/goals")).json()["goals"] == []

    @pytest.mark.asyncio
    async def test_deactivate_missing_goal_is_404(self, authed_client: AsyncClient):
        assert (await authed_client.delete("/api/goals/4242")).status_code == 404

    @pytest.mark.asyncio
    async def test_first_goal_opens_progress(self, authed_client: AsyncClient, db_session, user):
        await authed_client.post("/api/goals", json={"title": "Ship"})
        assert await find_progress(db_session, user.id) is not None

    @pytest.mark.asyncio
    async def test_deactivated_goal_cannot_be_completed(self, authed_client: AsyncClient):
        goal_id = (await authed_client.post("/api/goals", json={"title": "Old"})).json()["goal"]["id"]
        await authed_client.delete(f"/api/goals/{goal_id}")
        response = await authed_client.post("/api/goals/completions", json={"goal_id": goal_id})
        assert response.status_code == 404
