"""Completion API tests: habit and goal completions and their effect on progress."""

from __future__ import annotations

from datetime import timedelta

import pytest
from httpx import AsyncClient

from habitladder.db.models import Goal, GoalCompletion, HabitCompletion, Todo, utcnow
from habitladder.progress.store import get_or_create_progress, save_progress


async def _habit(client: AsyncClient, title: str = "Read", intensity: str = "medium") -> int:
    response = await client.post("/api/habits", json={"title": title, "intensity": intensity, "category": "learning"})
    assert response.status_code == 201
    return response.json()["habit"]["id"]


async def _goal(client: AsyncClient, title: str = "Run 5k", intensity: str = "medium") -> int:
    response = await client.post("/api/goals", json={"title": title, "intensity": intensity, "category": "fitness"})
    assert response.status_code == 201
    return response.json()["goal"]["id"]


async def _past_habit(db, user_id: int, habit_id: int, days_ago: int, points: int = 10) -> None:
    db.add(
        HabitCompletion(
            habit_id=habit_id,
            user_id=user_id,
            completed_at=utcnow() - timedelta(days=days_ago),
            points=points,
            streak=1,
        )
    )
    await db.commit()


class TestHabitCompletions:
    @pytest.mark.asyncio
    async def test_complete_credits_habit_points(self, authed_client: AsyncClient):
        habit_id = await _habit(authed_client, intensity="hard")
        response = await authed_client.post("/api/habits/completions", json={"habit_id": habit_id})
        assert response.status_code == 201
        body = response.json()
        assert body["completion"]["habit_id"] == habit_id
        assert body["completion"]["points"] == 20
        assert body["completion"]["streak"] == 1
        assert body["progress"]["total_points"] == 20
        assert body["progress"]["weekly_points"] == 20
        assert body["progress"]["current_streak"] == 1

    @pytest.mark.asyncio
    async def test_client_points_are_ignored(self, authed_client: AsyncClient):
        habit_id = await _habit(authed_client, intensity="easy")
        response = await authed_client.post(
            "/api/habits/completions", json={"habit_id": habit_id, "points": 100000}
        )
        assert response.status_code == 201
        assert response.json()["completion"]["points"] == 5
        assert response.json()["progress"]["total_points"] == 5

    @pytest.mark.asyncio
    async def test_unknown_habit_is_404(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/habits/completions", json={"habit_id": 9999})
        assert response.status_code == 404
        assert response.json() == {"detail": "Habit not found"}

    @pytest.mark.asyncio
    async def test_someone_elses_habit_is_404(self, authed_client: AsyncClient, client_for, user_factory):
        other = await user_factory("Other", "other@example.com")
        async with client_for(other) as other_client:
            habit_id = await _habit(other_client)

        response = await authed_client.post("/api/habits/completions", json={"habit_id": habit_id})
        assert response.status_code == 404
        progress = (await authed_client.get("/api/habits/progress")).json()["progress"]
        assert progress["total_points"] == 0

    @pytest.mark.asyncio
    async def test_once_per_day(self, authed_client: AsyncClient):
        read = await _habit(authed_client, "Read")
        run = await _habit(authed_client, "Run")
        await authed_client.post("/api/habits/completions", json={"habit_id": read})
        response = await authed_client.post("/api/habits/completions", json={"habit_id": read})
        assert response.status_code == 400
        assert response.json() == {"detail": "Habit already completed today"}

        other = await authed_client.post("/api/habits/completions", json={"habit_id": run})
        assert other.status_code == 201

    @pytest.mark.asyncio
    async def test_backdated_completion(self, authed_client: AsyncClient):
        habit_id = await _habit(authed_client)
        yesterday = (utcnow() - timedelta(days=1)).isoformat()
        response = await authed_client.post(
            "/api/habits/completions", json={"habit_id": habit_id, "completed_at": yesterday}
        )
        assert response.status_code == 201

        today = await authed_client.post("/api/habits/completions", json={"habit_id": habit_id})
        assert today.json()["completion"]["streak"] == 2

    @pytest.mark.asyncio
    async def test_future_completion_rejected(self, authed_client: AsyncClient):
        habit_id = await _habit(authed_client)
        tomorrow = (utcnow() + timedelta(days=1)).isoformat()
        response = await authed_client.post(
            "/api/habits/completions", json={"habit_id": habit_id, "completed_at": tomorrow}
        )
        assert response.status_code == 400
        assert response.json()["field"] == "completed_at"

    @pytest.mark.asyncio
    async def test_streak_counts_consecutive_days(self, authed_client: AsyncClient, db_session, user):
        habit_id = await _habit(authed_client)
        await _past_habit(db_session, user.id, habit_id, 1)
        await _past_habit(db_session, user.id, habit_id, 2)
        await _past_habit(db_session, user.id, habit_id, 4)  # gap on day 3

        response = await authed_client.post("/api/habits/completions", json={"habit_id": habit_id})
        assert response.json()["completion"]["streak"] == 3
        assert response.json()["progress"]["longest_streak"] == 3

    @pytest.mark.asyncio
    async def test_seven_day_streak_unlocks_week_warrior(self, authed_client: AsyncClient, db_session, user):
        habit_id = await _habit(authed_client, "Meditate")
        for days_ago in range(1, 7):
            await _past_habit(db_session, user.id, habit_id, days_ago)

        response = await authed_client.post("/api/habits/completions", json={"habit_id": habit_id})
        achievements = response.json()["progress"]["achievements"]
        assert [a["id"] for a in achievements] == ["week_warrior"]

    @pytest.mark.asyncio
    async def test_level_rises_per_hundred_points(self, authed_client: AsyncClient):
        for n in range(5):
            habit_id = await _habit(authed_client, f"Hard {n}", intensity="hard")
            response = await authed_client.post("/api/habits/completions", json={"habit_id": habit_id})
        assert response.json()["progress"]["total_points"] == 100
        assert response.json()["progress"]["current_level"] == 1

    @pytest.mark.asyncio
    async def test_undo_reverts_points(self, authed_client: AsyncClient):
        habit_id = await _habit(authed_client, intensity="hard")
        await authed_client.post("/api/habits/completions", json={"habit_id": habit_id})
        response = await authed_client.delete("/api/habits/completions", params={"habit_id": habit_id})
        assert response.status_code == 200
        assert response.json() == {"success": True}

        progress = (await authed_client.get("/api/habits/progress")).json()["progress"]
        assert progress["total_points"] == 0
        assert progress["current_streak"] == 1

        listed = (await authed_client.get("/api/habits/completions")).json()["completions"]
        assert listed == []

    @pytest.mark.asyncio
    async def test_undo_without_completion_is_404(self, authed_client: AsyncClient):
        habit_id = await _habit(authed_client)
        response = await authed_client.delete("/api/habits/completions", params={"habit_id": habit_id})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_newest_first_and_range(self, authed_client: AsyncClient, db_session, user):
        habit_id = await _habit(authed_client)
        await _past_habit(db_session, user.id, habit_id, 5)
        await _past_habit(db_session, user.id, habit_id, 2)
        await authed_client.post("/api/habits/completions", json={"habit_id": habit_id})

        everything = (await authed_client.get("/api/habits/completions")).json()["completions"]
        assert len(everything) == 3
        stamps = [c["completed_at"] for c in everything]
        assert stamps == sorted(stamps, reverse=True)

        start = (utcnow() - timedelta(days=3)).isoformat()
        end = utcnow().isoformat()
        ranged = await authed_client.get("/api/habits/completions", params={"start_date": start, "end_date": end})
        assert len(ranged.json()["completions"]) == 2

    @pytest.mark.asyncio
    async def test_habit_id_required(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/habits/completions", json={"notes": "no id"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_anonymous_is_401(self, client: AsyncClient):
        response = await client.post("/api/habits/completions", json={"habit_id": 1})
        assert response.status_code == 401


class TestGoalCompletions:
    @pytest.mark.asyncio
    async def test_points_follow_goal_intensity(self, authed_client: AsyncClient):
        goal_id = await _goal(authed_client)
        response = await authed_client.post("/api/goals/completions", json={"goal_id": goal_id, "points": 999})
        assert response.status_code == 201
        body = response.json()
        assert body["completion"]["points"] == 10
        assert body["completion"]["streak"] == 1
        assert body["progress"]["total_points"] == 10

    @pytest.mark.asyncio
    async def test_unknown_goal_is_404(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/goals/completions", json={"goal_id": 9999})
        assert response.status_code == 404
        assert response.json() == {"detail": "Goal not found"}

    @pytest.mark.asyncio
    async def test_someone_elses_goal_is_403(self, authed_client: AsyncClient, client_for, user_factory):
        other = await user_factory("Other", "other@example.com")
        async with client_for(other) as other_client:
            goal_id = await _goal(other_client)

        response = await authed_client.post("/api/goals/completions", json={"goal_id": goal_id})
        assert response.status_code == 403
        assert response.json() == {"detail": "Not authorized to complete this goal"}

    @pytest.mark.asyncio
    async def test_once_per_goal_per_day(self, authed_client: AsyncClient):
        goal_id = await _goal(authed_client)
        await authed_client.post("/api/goals/completions", json={"goal_id": goal_id})
        response = await authed_client.post("/api/goals/completions", json={"goal_id": goal_id})
        assert response.status_code == 400
        assert response.json() == {"detail": "Goal already completed today"}

    @pytest.mark.asyncio
    async def test_streak_bonus_after_yesterday(self, authed_client: AsyncClient, db_session, user):
        earlier = await _goal(authed_client, "Earlier")
        goal_id = await _goal(authed_client, "Today")
        progress = await get_or_create_progress(db_session, user.id)
        progress.current_streak = 2
        progress.longest_streak = 2
        await save_progress(db_session, progress)
        db_session.add(
            GoalCompletion(
                goal_id=earlier,
                user_id=user.id,
                completed_at=utcnow() - timedelta(days=1),
                points=10,
                streak=2,
            )
        )
        await db_session.commit()

        response = await authed_client.post("/api/goals/completions", json={"goal_id": goal_id})
        body = response.json()
        assert body["completion"]["streak"] == 3
        assert body["completion"]["points"] == 12
        assert body["progress"]["current_streak"] == 3

    @pytest.mark.asyncio
    async def test_goal_level_thresholds(self, authed_client: AsyncClient):
        for n in range(3):
            goal_id = await _goal(authed_client, f"Big {n}", intensity="hard")
            response = await authed_client.post("/api/goals/completions", json={"goal_id": goal_id})
        assert response.json()["progress"]["total_points"] == 60
        assert response.json()["progress"]["current_level"] == 1

    @pytest.mark.asyncio
    async def test_reopens_repetitive_todos(self, authed_client: AsyncClient, db_session, user):
        goal_id = await _goal(authed_client)
        repeat = Todo(user_id=user.id, goal_id=goal_id, title="Stretch", is_completed=True, is_repetitive=True)
        once = Todo(user_id=user.id, goal_id=goal_id, title="Buy shoes", is_completed=True)
        db_session.add_all([repeat, once])
        await db_session.commit()

        response = await authed_client.post("/api/goals/completions", json={"goal_id": goal_id})
        assert response.status_code == 201

        todos = {t["title"]: t for t in (await authed_client.get("/api/todos")).json()["todos"]}
        assert todos["Stretch"]["is_completed"] is False
        assert todos["Buy shoes"]["is_completed"] is True

    @pytest.mark.asyncio
    async def test_list(self, authed_client: AsyncClient):
        first = await _goal(authed_client, "One")
        second = await _goal(authed_client, "Two")
        await authed_client.post("/api/goals/completions", json={"goal_id": first})
        await authed_client.post("/api/goals/completions", json={"goal_id": second})
        response = await authed_client.get("/api/goals/completions")
        assert response.status_code == 200
        assert {c["goal_id"] for c in response.json()["completions"]} == {first, second}

    @pytest.mark.asyncio
    async def test_goal_row_stores_point_value(self, authed_client: AsyncClient, db_session):
        goal_id = await _goal(authed_client, intensity="easy")
        goal = await db_session.get(Goal, goal_id)
        assert goal.point_value == 5
