import asyncio
from datetime import datetime

import pytest

from linguaquest.core.use_cases.record_progress import RecordProgressUseCase
from linguaquest.database.models import User
from linguaquest.scripts.recalc_levels import recalculate_levels
from linguaquest.storage import user_repo


@pytest.mark.asyncio
async def test_levels_are_raised_to_match_xp(db):
    """Stored levels lag behind XP (e.g. after lowering thresholds)."""
    user = await User.create(
        email="lagging@example.com",
        total_xp=1000,
        overall_level=1,
        grammar_xp=1000,
        grammar_level=1,
    )

    updated = await recalculate_levels()

    assert updated == 1
    user = await User.get(id=user.id)
    assert user.grammar_level == 6
    # (3 * 6 * 6 + 2 * (6 + 5)) // 30
    assert user.overall_level == 4
    assert user.total_xp == 1000
    assert user.grammar_xp == 1000


@pytest.mark.asyncio
async def test_levels_are_never_lowered(db):
    user = await User.create(
        email="veteran@example.com", total_xp=120, overall_level=5, writing_level=7
    )

    updated = await recalculate_levels()

    assert updated == 0
    user = await User.get(id=user.id)
    assert user.overall_level == 5
    assert user.writing_level == 7


@pytest.mark.asyncio
async def test_rerun_changes_nothing(db):
    await User.create(email="a@example.com", total_xp=500, reading_xp=500)
    await User.create(email="b@example.com")

    assert await recalculate_levels() == 1
    assert await recalculate_levels() == 0


async def _complete_grammar(user_id: int, exercise) -> None:
    result = await RecordProgressUseCase().execute(
        user_id=user_id,
        exercise_id=exercise.id,
        exercise_type="grammar",
        accuracy=100,
        time_spent_seconds=60,
        questions_total=4,
        questions_correct=4,
        now=datetime(2026, 3, 10, 12),
    )
    assert result.success


@pytest.mark.asyncio
async def test_submission_during_job_keeps_its_levels(
    grammar_exercise, monkeypatch: pytest.MonkeyPatch
):
    """A level earned after the job listed users survives the job."""
    user = await User.create(
        email="busy@example.com",
        total_xp=740,
        overall_level=2,
        grammar_xp=440,
        grammar_level=3,
        vocabulary_xp=300,
        vocabulary_level=1,
    )
    original_list_user_ids = user_repo.list_user_ids

    async def list_then_submit():
        user_ids = await original_list_user_ids()
        await _complete_grammar(user.id, grammar_exercise)
        return user_ids

    monkeypatch.setattr(user_repo, "list_user_ids", list_then_submit)

    await recalculate_levels()

    user = await User.get(id=user.id)
    assert user.grammar_xp == 465
    assert user.grammar_level == 4
    assert user.vocabulary_level == 3
    assert user.overall_level == 3
    assert user.total_xp == 765


@pytest.mark.asyncio
async def test_job_and_submissions_interleaved(grammar_exercise):
    user = await User.create(
        email="racer@example.com", total_xp=440, overall_level=1, grammar_xp=440, grammar_level=1
    )

    await asyncio.gather(
        recalculate_levels(),
        _complete_grammar(user.id, grammar_exercise),
        recalculate_levels(),
        _complete_grammar(user.id, grammar_exercise),
    )

    user = await User.get(id=user.id)
    assert user.total_xp == 440 + 25 + 27
    assert user.grammar_level == 4
    assert user.overall_level >= 3
