"""
Exercise generation and coach analysis with fake generators.
No real provider is called.
"""

from datetime import date, datetime

import pytest

from linguaquest.core.errors import ErrorKind
from linguaquest.core.use_cases.coach_analysis import CoachAnalysisUseCase
from linguaquest.core.use_cases.generate_exercise import GenerateExerciseUseCase
from linguaquest.core.use_cases.record_progress import RecordProgressUseCase
from linguaquest.database.models import Exercise, ProgressRecord, User
from linguaquest.services.ai import AIServiceError, parse_json_response
from linguaquest.storage import progress_repo

TODAY = date(2026, 3, 10)

GRAMMAR_PAYLOAD = {
    "questions": [
        {
            "id": "1",
            "sentence": "The client ___ the contract yesterday.",
            "options": ["sign", "signed", "has signed", "was signing"],
            "correctAnswer": "signed",
            "explanation": "Finished action at a specific time.",
        }
    ]
}


class FakeGenerator:
    def __init__(self, payload=None, error: Exception | None = None):
        self.payload = payload
        self.error = error
        self.calls: list[dict] = []

    async def generate_exercise_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.payload

    async def generate_coach_analysis(self, context):
        self.calls.append(context)
        if self.error:
            raise self.error
        return self.payload


async def _complete(user: User, exercise, accuracy: float) -> None:
    result = await RecordProgressUseCase().execute(
        user_id=user.id,
        exercise_id=exercise.id,
        exercise_type=exercise.type,
        accuracy=accuracy,
        time_spent_seconds=60,
        questions_total=4,
        questions_correct=int(accuracy // 25),
        now=datetime(2026, 3, 9, 12),
    )
    assert result.success


# ============ Exercise generation ============


@pytest.mark.asyncio
async def test_generated_exercise_is_stored(user: User) -> None:
    generator = FakeGenerator(payload=GRAMMAR_PAYLOAD)

    result = await GenerateExerciseUseCase(generator).execute(user.id, "grammar", today=TODAY)

    assert result.success
    exercise = await Exercise.get(id=result.exercise.id)
    assert exercise.type == "grammar"
    assert exercise.is_ai_generated is True
    assert exercise.required_overall_level == 1
    assert exercise.created_by_id == user.id
    assert exercise.title == "AI Grammar Practice - 10/03/2026"
    assert exercise.content["questions"][0]["correctAnswer"] == "signed"
    assert "type" not in exercise.content

    call = generator.calls[0]
    assert call["difficulty"] == "medium"  # no history yet
    assert call["avoid_titles"] == []


@pytest.mark.asyncio
async def test_difficulty_follows_type_accuracy(user: User, grammar_exercise) -> None:
    await _complete(user, grammar_exercise, 100)
    await _complete(user, grammar_exercise, 90)
    generator = FakeGenerator(payload=GRAMMAR_PAYLOAD)

    await GenerateExerciseUseCase(generator).execute(user.id, "grammar", today=TODAY)

    call = generator.calls[0]
    assert call["difficulty"] == "hard"
    assert call["avg_accuracy"] == 95.0
    assert call["avoid_titles"] == [grammar_exercise.title, grammar_exercise.title]


@pytest.mark.asyncio
async def test_low_accuracy_gets_easy_exercises(user: User, exercises) -> None:
    await _complete(user, exercises["writing"], 25)
    payload = {
        "prompt": {
            "id": "1",
            "title": "Chasing a late invoice",
            "scenario": "A supplier has not paid for two months.",
            "wordCountMin": 80,
            "wordCountMax": 150,
        }
    }
    generator = FakeGenerator(payload=payload)

    result = await GenerateExerciseUseCase(generator).execute(user.id, "writing", today=TODAY)

    assert result.success
    assert result.exercise.difficulty == "easy"
    assert result.exercise.title == "Chasing a late invoice"


@pytest.mark.asyncio
async def test_difficulty_ignores_other_types(
    user: User, exercises, monkeypatch: pytest.MonkeyPatch
) -> None:
    await _complete(user, exercises["grammar"], 100)
    await _complete(user, exercises["grammar"], 100)
    await _complete(user, exercises["writing"], 10)
    queried_types = []
    original_summarize = progress_repo.summarize_by_exercise_type

    async def spy_summarize(user_id, exercise_type=None):
        queried_types.append(exercise_type)
        return await original_summarize(user_id, exercise_type)

    monkeypatch.setattr(progress_repo, "summarize_by_exercise_type", spy_summarize)
    generator = FakeGenerator(payload=GRAMMAR_PAYLOAD)

    await GenerateExerciseUseCase(generator).execute(user.id, "grammar", today=TODAY)

    assert queried_types == ["grammar"]
    assert generator.calls[0]["avg_accuracy"] == 100.0
    assert generator.calls[0]["difficulty"] == "hard"


@pytest.mark.asyncio
@pytest.mark.parametrize("exercise_type", ["listening", "pronunciation"])
async def test_type_cannot_be_generated(user: User, exercise_type: str) -> None:
    generator = FakeGenerator(payload=GRAMMAR_PAYLOAD)

    result = await GenerateExerciseUseCase(generator).execute(user.id, exercise_type)

    assert result.error_kind is ErrorKind.VALIDATION
    assert generator.calls == []


@pytest.mark.asyncio
async def test_generation_for_unknown_user(db) -> None:
    result = await GenerateExerciseUseCase(FakeGenerator(GRAMMAR_PAYLOAD)).execute(99, "grammar")
    assert result.error_kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_provider_failure_stores_nothing(user: User) -> None:
    generator = FakeGenerator(error=AIServiceError("provider down"))

    result = await GenerateExerciseUseCase(generator).execute(user.id, "grammar")

    assert result.error_kind is ErrorKind.GENERATOR
    assert await Exercise.all().count() == 0


@pytest.mark.asyncio
async def test_malformed_content_is_rejected(user: User) -> None:
    bad_payload = {
        "questions": [
            {
                "id": "1",
                "sentence": "We ___ the budget.",
                "options": ["approve", "approved"],
                "correctAnswer": "approving",
            }
        ]
    }

    result = await GenerateExerciseUseCase(FakeGenerator(bad_payload)).execute(
        user.id, "grammar"
    )

    assert result.error_kind is ErrorKind.GENERATOR
    assert await Exercise.all().count() == 0


@pytest.mark.asyncio
async def test_generation_does_not_touch_progress(user: User) -> None:
    await GenerateExerciseUseCase(FakeGenerator(GRAMMAR_PAYLOAD)).execute(user.id, "grammar")

    user = await User.get(id=user.id)
    assert user.total_xp == 0
    assert user.current_streak == 0
    assert await ProgressRecord.all().count() == 0


# ============ Coach ============


@pytest.mark.asyncio
async def test_coach_context_for_new_student(user: User) -> None:
    context = await CoachAnalysisUseCase(FakeGenerator()).build_context(user.id, today=TODAY)

    assert context["overall_level"] == 1
    assert context["total_xp"] == 0
    assert context["history"] == []
    assert context["recent"] == []
    assert context["skills"]["grammar"] == {"level": 1, "xp": 0}


@pytest.mark.asyncio
async def test_coach_analysis(user: User, grammar_exercise) -> None:
    await _complete(user, grammar_exercise, 75)
    analysis = {"overallAssessment": "Solid start.", "strengths": [], "weaknesses": []}
    generator = FakeGenerator(payload=analysis)

    result = await CoachAnalysisUseCase(generator).execute(user.id, today=TODAY)

    assert result.success
    assert result.analysis == analysis
    assert result.data_points["recent_exercises_analysed"] == 1
    assert result.data_points["progress_by_type"][0]["exercise_type"] == "grammar"

    context = generator.calls[0]
    assert context["recent"][0]["title"] == grammar_exercise.title
    assert context["recent"][0]["accuracy"] == 75


@pytest.mark.asyncio
async def test_coach_failure(user: User) -> None:
    result = await CoachAnalysisUseCase(FakeGenerator(error=AIServiceError("boom"))).execute(
        user.id
    )
    assert result.error_kind is ErrorKind.GENERATOR


@pytest.mark.asyncio
async def test_coach_unknown_user(db) -> None:
    result = await CoachAnalysisUseCase(FakeGenerator()).execute(5)
    assert result.error_kind is ErrorKind.NOT_FOUND


# ============ Response parsing ============


def test_parse_json_response_strips_fences() -> None:
    assert parse_json_response('```json\n{"a": 1}\n```') == {"a": 1}
    assert parse_json_response('  {"b": [1, 2]} ') == {"b": [1, 2]}
