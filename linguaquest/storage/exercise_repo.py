"""
Exercise Repository - plain CRUD for the Exercise model.
"""

from typing import Any, Optional

from linguaquest.database.models import Exercise, ProgressRecord


async def get_exercise(exercise_id: int) -> Optional[Exercise]:
    """Get an exercise by id."""
    return await Exercise.get_or_none(id=exercise_id)


async def list_exercises(exercise_type: str | None = None) -> list[Exercise]:
    """Catalogue ordered by type, then required level."""
    query = Exercise.all()
    if exercise_type:
        query = query.filter(type=exercise_type)
    return await query.order_by("type", "required_overall_level", "id")


async def create_exercise(
    *,
    exercise_type: str,
    difficulty: str,
    title: str,
    content: dict[str, Any],
    required_overall_level: int = 1,
    is_ai_generated: bool = False,
    created_by_id: int | None = None,
) -> Exercise:
    """Store a new exercise."""
    return await Exercise.create(
        type=exercise_type,
        difficulty=difficulty,
        title=title,
        content=content,
        required_overall_level=required_overall_level,
        is_ai_generated=is_ai_generated,
        created_by_id=created_by_id,
    )


async def get_recent_titles(user_id: int, limit: int = 30) -> list[str]:
    """Titles of the exercises a user completed most recently."""
    records = (
        await ProgressRecord.filter(user_id=user_id)
        .prefetch_related("exercise")
        .order_by("-completed_at", "-id")
        .limit(limit)
    )
    return [record.exercise.title for record in records]
