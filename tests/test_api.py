"""API endpoint tests.

To run:
    pytest tests/test_api.py -v

Requests go through the ASGI app in-process, against the per-test
in-memory database of the `db` fixture.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from linguaquest.database.models import Exercise, ProgressRecord, User
from linguaquest.interfaces.api.main import app
from linguaquest.services.ai import AIServiceError, get_ai_service


@pytest_asyncio.fixture
async def client(db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


class StubAIService:
    def __init__(self, payload=None, error: Exception | None = None):
        self.payload = payload
        self.error = error

    async def generate_exercise_content(self, **kwargs):
        if self.error:
            raise self.error
        return self.payload

    async def generate_coach_analysis(self, context):
        if self.error:
            raise self.error
        return self.payload


def _submission(exercise: Exercise, **overrides) -> dict:
    body = {
        "exercise_id": exercise.id,
        "exercise_type": exercise.type,
        "accuracy": 90,
        "time_spent_seconds": 120,
        "questions_total": 5,
        "questions_correct": 4,
    }
    body.update(overrides)
    return body


# ============ Health / auth ============


@pytest.mark.asyncio
async def test_health_endpoint(client):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "linguaquest-api"}


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/api/me", "/api/me/stats", "/api/exercises", "/api/ai/coach"])
async def test_endpoints_require_auth(client, path):
    response = await client.get(path)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_tampered_session_is_rejected(client, user, auth_header):
    header = auth_header(user.id)
    header["Authorization"] = header["Authorization"].replace("Learner", "Admin")

    response = await client.get("/api/me", headers=header)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_wrong_scheme_is_rejected(client):
    response = await client.get("/api/me", headers={"Authorization": "Bearer abc"})
    assert response.status_code == 401


# ============ Profile ============


@pytest.mark.asyncio
async def test_me_creates_user_on_first_request(client, auth_header, db):
    response = await client.get("/api/me", headers=auth_header(501, email="new@example.com"))

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == 501
    assert data["email"] == "new@example.com"
    assert data["total_xp"] == 0
    assert data["overall_level"] == 1
    assert await User.filter(id=501).exists()


# ============ Progress ============


@pytest.mark.asyncio
async def test_record_progress(client, user, grammar_exercise, auth_header):
    response = await client.post(
        "/api/progress/record",
        json=_submission(grammar_exercise),
        headers=auth_header(user.id),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["xp_earned"] == 24
    assert data["xp_breakdown"] == {
        "base_xp": 10,
        "accuracy_bonus": 9,
        "speed_bonus": 5,
        "streak_bonus": 0,
        "total_xp": 24,
    }
    assert data["current_streak"] == 1
    assert data["leveled_up"] is False
    assert await ProgressRecord.filter(user_id=user.id).count() == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("accuracy", [-1, 101])
async def test_record_progress_invalid_accuracy(
    client, user, grammar_exercise, auth_header, accuracy
):
    response = await client.post(
        "/api/progress/record",
        json=_submission(grammar_exercise, accuracy=accuracy),
        headers=auth_header(user.id),
    )

    assert response.status_code == 400
    assert (await User.get(id=user.id)).total_xp == 0
    assert await ProgressRecord.all().count() == 0


@pytest.mark.asyncio
async def test_record_progress_unknown_exercise(client, user, grammar_exercise, auth_header):
    body = _submission(grammar_exercise, exercise_id=grammar_exercise.id + 100)

    response = await client.post("/api/progress/record", json=body, headers=auth_header(user.id))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_record_progress_unknown_type_is_unprocessable(
    client, user, grammar_exercise, auth_header
):
    response = await client.post(
        "/api/progress/record",
        json=_submission(grammar_exercise, exercise_type="karaoke"),
        headers=auth_header(user.id),
    )
    assert response.status_code == 422


# ============ Stats ============


@pytest.mark.asyncio
async def test_stats_after_progress(client, user, grammar_exercise, auth_header):
    headers = auth_header(user.id)
    await client.post("/api/progress/record", json=_submission(grammar_exercise), headers=headers)

    response = await client.get("/api/me/stats", headers=headers)

    assert response.status_code == 200
    data = response.json()
    assert data["xp"]["total"] == 24
    assert data["level"]["overall"] == 1
    assert data["skills"]["xp"]["grammar"] == 24
    assert data["skills"]["levels"]["writing"] == 1
    assert data["streaks"] == {"current": 1, "longest": 1}
    assert data["totals"]["exercises_completed"] == 1
    assert data["totals"]["average_accuracy"] == 90.0
    assert len(data["recent_activity"]) == 1
    assert data["recent_activity"][0]["total_xp"] == 24


@pytest.mark.asyncio
async def test_stats_unknown_user(client, auth_header):
    response = await client.get("/api/me/stats", headers=auth_header(404404))
    assert response.status_code == 404


# ============ Exercises ============


@pytest.mark.asyncio
async def test_exercise_catalogue_marks_locked(client, user, auth_header):
    await Exercise.create(type="reading", title="Annual report", content={}, required_overall_level=1)
    locked = await Exercise.create(
        type="reading", title="Merger memo", content={}, required_overall_level=4
    )
    await Exercise.create(type="grammar", title="Articles", content={})

    response = await client.get(
        "/api/exercises", params={"type": "reading"}, headers=auth_header(user.id)
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert {e["title"]: e["locked"] for e in data["exercises"]} == {
        "Annual report": False,
        "Merger memo": True,
    }

    response = await client.get(f"/api/exercises/{locked.id}", headers=auth_header(user.id))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_get_exercise(client, user, grammar_exercise, auth_header):
    response = await client.get(
        f"/api/exercises/{grammar_exercise.id}", headers=auth_header(user.id)
    )

    assert response.status_code == 200
    assert response.json()["title"] == grammar_exercise.title


# ============ AI ============


@pytest.mark.asyncio
async def test_generate_exercise(client, user, auth_header):
    payload = {
        "cards": [
            {"id": "1", "word": "Leverage", "definition": "Advantage used to achieve a goal"}
        ]
    }
    app.dependency_overrides[get_ai_service] = lambda: StubAIService(payload=payload)

    response = await client.post(
        "/api/ai/generate-exercise", json={"type": "vocabulary"}, headers=auth_header(user.id)
    )

    assert response.status_code == 200
    data = response.json()
    assert data["type"] == "vocabulary"
    assert data["is_ai_generated"] is True
    assert data["content"]["cards"][0]["word"] == "Leverage"


@pytest.mark.asyncio
async def test_generate_exercise_provider_down(client, user, auth_header):
    app.dependency_overrides[get_ai_service] = lambda: StubAIService(
        error=AIServiceError("timeout")
    )

    response = await client.post(
        "/api/ai/generate-exercise", json={"type": "grammar"}, headers=auth_header(user.id)
    )

    assert response.status_code == 502


@pytest.mark.asyncio
async def test_generate_listening_is_rejected(client, user, auth_header):
    app.dependency_overrides[get_ai_service] = lambda: StubAIService()

    response = await client.post(
        "/api/ai/generate-exercise", json={"type": "listening"}, headers=auth_header(user.id)
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_coach(client, user, auth_header):
    analysis = {"overallAssessment": "Welcome aboard.", "motivationalNote": "Start small."}
    app.dependency_overrides[get_ai_service] = lambda: StubAIService(payload=analysis)

    response = await client.get("/api/ai/coach", headers=auth_header(user.id))

    assert response.status_code == 200
    data = response.json()
    assert data["analysis"] == analysis
    assert data["data_points"]["recent_exercises_analysed"] == 0
