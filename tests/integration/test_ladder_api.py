"""Ladder API tests: current question, submissions, and admin management."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

FIELDS = [
    {"id": "goal", "type": "textarea", "label": "Your goal", "required": True},
    {
        "id": "focus",
        "type": "select",
        "label": "Focus area",
        "options": [{"value": "health", "label": "Health"}, {"value": "work", "label": "Work"}],
    },
]


async def _create_question(admin_client: AsyncClient, week: str = "week1", title: str = "Kickoff", fields=None):
    response = await admin_client.post(
        "/api/admin/ladder/questions",
        json={"week": week, "title": title, "description": "Set the scene", "fields": fields or FIELDS},
    )
    assert response.status_code == 201, response.text
    return response.json()["question"]


class TestCurrentQuestion:
    @pytest.mark.asyncio
    async def test_anonymous_is_401(self, client: AsyncClient):
        response = await client.get("/api/ladder/questions", params={"week": "week1"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_week_is_400(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/ladder/questions")
        assert response.status_code == 400
        assert response.json()["detail"] == "Week parameter is required"

    @pytest.mark.asyncio
    async def test_bogus_week_is_400(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/ladder/questions", params={"week": "week9"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid week value"

    @pytest.mark.asyncio
    async def test_no_question_is_null(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/ladder/questions", params={"week": "week2"})
        assert response.status_code == 200
        assert response.json() == {"question": None}

    @pytest.mark.asyncio
    async def test_latest_question_returned(self, authed_client: AsyncClient, admin_client: AsyncClient):
        await _create_question(admin_client, title="First", fields=[FIELDS[0]])
        second = await _create_question(admin_client, title="Second", fields=[FIELDS[1]])

        response = await authed_client.get("/api/ladder/questions", params={"week": "week1"})
        question = response.json()["question"]
        assert question["id"] == second["id"]
        assert question["title"] == "Second"
        assert question["fields"][0]["options"][0]["value"] == "health"


class TestSubmissions:
    @pytest.mark.asyncio
    async def test_draft_then_submit(self, authed_client: AsyncClient, admin_client: AsyncClient, user):
        question = await _create_question(admin_client)
        payload = {
            "week": "week1",
            "question_id": question["id"],
            "responses": [{"field_id": "goal", "value": "Read daily"}],
        }

        created = await authed_client.post("/api/ladder/submissions", json=payload)
        assert created.status_code == 201
        submission = created.json()["submission"]
        assert submission["status"] == "draft"
        assert submission["user_email"] == user.email
        assert submission["submitted_at"] is None

        submitted = await authed_client.post("/api/ladder/submissions", json={**payload, "status": "submitted"})
        assert submitted.status_code == 200
        assert submitted.json()["submission"]["id"] == submission["id"]
        assert submitted.json()["submission"]["submitted_at"] is not None

        again = await authed_client.post("/api/ladder/submissions", json={**payload, "status": "submitted"})
        assert again.status_code == 400

        mine = await authed_client.get("/api/ladder/submissions")
        assert [s["id"] for s in mine.json()["submissions"]] == [submission["id"]]

    @pytest.mark.asyncio
    async def test_unknown_question_is_404(self, authed_client: AsyncClient):
        response = await authed_client.post(
            "/api/ladder/submissions", json={"week": "week1", "question_id": 999, "responses": []}
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_week_must_match_question(self, authed_client: AsyncClient, admin_client: AsyncClient):
        question = await _create_question(admin_client, week="week2")
        response = await authed_client.post(
            "/api/ladder/submissions", json={"week": "week1", "question_id": question["id"], "responses": []}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_inactive_question_rejected(self, authed_client: AsyncClient, admin_client: AsyncClient):
        question = await _create_question(admin_client)
        await admin_client.put(f"/api/admin/ladder/questions/{question['id']}", json={"is_active": False})
        response = await authed_client.post(
            "/api/ladder/submissions", json={"week": "week1", "question_id": question["id"], "responses": []}
        )
        assert response.status_code == 404


class TestAdminQuestions:
    @pytest.mark.asyncio
    async def test_non_admin_is_401(self, authed_client: AsyncClient):
        assert (await authed_client.get("/api/admin/ladder/questions")).status_code == 401
        response = await authed_client.post(
            "/api/admin/ladder/questions", json={"week": "week1", "title": "x", "fields": FIELDS}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_created_by_is_admin_email(self, admin_client: AsyncClient, admin_user):
        question = await _create_question(admin_client)
        assert question["created_by"] == admin_user.email
        assert question["is_active"] is True

    @pytest.mark.asyncio
    async def test_field_conflict_is_400(self, admin_client: AsyncClient):
        await _create_question(admin_client)
        response = await admin_client.post(
            "/api/admin/ladder/questions", json={"week": "week1", "title": "Again", "fields": [FIELDS[0]]}
        )
        assert response.status_code == 400
        assert "goal" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_invalid_week_is_400(self, admin_client: AsyncClient):
        response = await admin_client.post(
            "/api/admin/ladder/questions", json={"week": "week7", "title": "x", "fields": FIELDS}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_get_update_delete(self, admin_client: AsyncClient):
        question = await _create_question(admin_client)
        qid = question["id"]

        fetched = await admin_client.get(f"/api/admin/ladder/questions/{qid}")
        assert fetched.status_code == 200
        assert fetched.json()["title"] == "Kickoff"

        updated = await admin_client.put(f"/api/admin/ladder/questions/{qid}", json={"title": "Renamed"})
        assert updated.status_code == 200
        assert updated.json()["question"]["title"] == "Renamed"

        listed = await admin_client.get("/api/admin/ladder/questions")
        assert [q["id"] for q in listed.json()["questions"]] == [qid]

        nulled = await admin_client.put(f"/api/admin/ladder/questions/{qid}", json={"is_active": None})
        assert nulled.status_code == 400
        assert nulled.json() == {"detail": "is_active cannot be null", "field": "is_active"}

        deleted = await admin_client.delete(f"/api/admin/ladder/questions/{qid}")
        assert deleted.status_code == 200
        assert (await admin_client.get(f"/api/admin/ladder/questions/{qid}")).status_code == 404


class TestAdminSubmissions:
    @pytest.mark.asyncio
    async def test_review_flow(self, authed_client: AsyncClient, admin_client: AsyncClient, admin_user):
        question = await _create_question(admin_client)
        created = await authed_client.post(
            "/api/ladder/submissions",
            json={"week": "week1", "question_id": question["id"], "responses": [], "status": "submitted"},
        )
        sid = created.json()["submission"]["id"]

        listed = await admin_client.get("/api/admin/ladder/submissions", params={"status": "submitted"})
        assert [s["id"] for s in listed.json()["submissions"]] == [sid]

        reviewed = await admin_client.put(
            f"/api/admin/ladder/submissions/{sid}",
            json={"status": "approved", "review_comments": "Great start", "score": 90},
        )
        assert reviewed.status_code == 200
        submission = reviewed.json()["submission"]
        assert submission["status"] == "approved"
        assert submission["score"] == 90
        assert submission["reviewed_by"] == admin_user.email
        assert submission["reviewed_at"] is not None

        fetched = await admin_client.get(f"/api/admin/ladder/submissions/{sid}")
        assert fetched.json()["submission"]["review_comments"] == "Great start"

    @pytest.mark.asyncio
    async def test_score_out_of_range(self, authed_client: AsyncClient, admin_client: AsyncClient):
        question = await _create_question(admin_client)
        created = await authed_client.post(
            "/api/ladder/submissions", json={"week": "week1", "question_id": question["id"], "responses": []}
        )
        sid = created.json()["submission"]["id"]
        response = await admin_client.put(f"/api/admin/ladder/submissions/{sid}", json={"score": 101})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_submission_is_404(self, admin_client: AsyncClient):
        assert (await admin_client.get("/api/admin/ladder/submissions/42")).status_code == 404

    @pytest.mark.asyncio
    async def test_non_admin_is_401(self, authed_client: AsyncClient):
        assert (await authed_client.get("/api/admin/ladder/submissions")).status_code == 401
