"""
Exercise API router.

Endpoints:
- GET /api/exercises - Catalogue with lock state for the current user
- GET /api/exercises/{id} - Exercise with its content
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from linguaquest.core.domain.exercise_rules import is_exercise_unlocked
from linguaquest.core.domain.skills import ExerciseType
from linguaquest.interfaces.api.auth import SessionUser, get_current_user
from linguaquest.interfaces.api.schemas import (
    ExerciseListItem,
    ExerciseResponse,
    ExercisesListResponse,
)
from linguaquest.storage import exercise_repo, user_repo

router = APIRouter(prefix="/api", tags=["exercises"])


@router.get("/exercises", response_model=ExercisesListResponse)
async def list_exercises(
    session_user: SessionUser = Depends(get_current_user),
    type: ExerciseType | None = Query(default=None, description="Filter by type"),
) -> ExercisesListResponse:
    """List exercises; those above the user's overall level are locked."""
    user = await user_repo.get_user(session_user.id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    exercises = await exercise_repo.list_exercises(type.value if type else None)

    return ExercisesListResponse(
        exercises=[
            ExerciseListItem(
                id=exercise.id,
                type=exercise.type,
                difficulty=exercise.difficulty,
                title=exercise.title,
                required_overall_level=exercise.required_overall_level,
                is_ai_generated=exercise.is_ai_generated,
                locked=not is_exercise_unlocked(user.overall_level, exercise),
            )
            for exercise in exercises
        ],
        overall_level=user.overall_level,
        total=len(exercises),
    )


@router.get("/exercises/{exercise_id}", response_model=ExerciseResponse)
async def get_exercise(
    exercise_id: int,
    session_user: SessionUser = Depends(get_current_user),
) -> ExerciseResponse:
    """Get an exercise. Locked exercises are refused with 403."""
    user = await user_repo.get_user(session_user.id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    exercise = await exercise_repo.get_exercise(exercise_id)
    if not exercise:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Exercise not found",
        )

    if not is_exercise_unlocked(user.overall_level, exercise):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Requires level {exercise.required_overall_level}",
        )

    return ExerciseResponse.model_validate(exercise)
