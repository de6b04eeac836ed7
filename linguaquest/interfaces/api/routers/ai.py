"""
AI API router.

Endpoints:
- POST /api/ai/generate-exercise - Generate a new exercise for the user
- GET /api/ai/coach - AI coaching analysis of the user's progress
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from linguaquest.core.use_cases.coach_analysis import CoachAnalysisUseCase
from linguaquest.core.use_cases.generate_exercise import GenerateExerciseUseCase
from linguaquest.interfaces.api.auth import SessionUser, get_current_user
from linguaquest.interfaces.api.errors import raise_for_error
from linguaquest.interfaces.api.schemas import (
    CoachResponse,
    ExerciseResponse,
    GenerateExerciseRequest,
)
from linguaquest.services.ai import AIService, get_ai_service

router = APIRouter(prefix="/api/ai", tags=["ai"])
logger = logging.getLogger(__name__)


@router.post("/generate-exercise", response_model=ExerciseResponse)
async def generate_exercise(
    request: GenerateExerciseRequest,
    session_user: SessionUser = Depends(get_current_user),
    ai_service: AIService = Depends(get_ai_service),
) -> ExerciseResponse:
    """Generate and store an exercise adapted to the user's accuracy."""
    result = await GenerateExerciseUseCase(ai_service).execute(
        user_id=session_user.id, exercise_type=request.type
    )
    if not result.success:
        raise_for_error(result.error_kind, result.error_message)

    return ExerciseResponse.model_validate(result.exercise)


@router.get("/coach", response_model=CoachResponse)
async def get_coach_analysis(
    session_user: SessionUser = Depends(get_current_user),
    ai_service: AIService = Depends(get_ai_service),
) -> CoachResponse:
    """Coaching feedback built from skill levels and exercise history."""
    result = await CoachAnalysisUseCase(ai_service).execute(session_user.id)
    if not result.success:
        raise_for_error(result.error_kind, result.error_message)

    return CoachResponse(
        analysis=result.analysis,
        generated_at=datetime.now(timezone.utc),
        data_points=result.data_points,
    )
