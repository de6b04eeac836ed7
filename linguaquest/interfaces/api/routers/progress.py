"""
Progress API router.

Endpoints:
- POST /api/progress/record - Record a completed exercise
"""

import logging

from fastapi import APIRouter, Depends

from linguaquest.core.use_cases.record_progress import RecordProgressUseCase
from linguaquest.interfaces.api.auth import SessionUser, get_current_user
from linguaquest.interfaces.api.errors import raise_for_error
from linguaquest.interfaces.api.schemas import (
    RecordProgressRequest,
    RecordProgressResponse,
    XPBreakdownResponse,
)

router = APIRouter(prefix="/api", tags=["progress"])
logger = logging.getLogger(__name__)


@router.post("/progress/record", response_model=RecordProgressResponse)
async def record_progress(
    request: RecordProgressRequest,
    session_user: SessionUser = Depends(get_current_user),
) -> RecordProgressResponse:
    """
    Record a completed exercise.

    Awards XP, updates skill/overall levels and the streak, and appends a
    progress record, all in one transaction.
    """
    use_case = RecordProgressUseCase()
    result = await use_case.execute(
        user_id=session_user.id,
        exercise_id=request.exercise_id,
        exercise_type=request.exercise_type,
        accuracy=request.accuracy,
        time_spent_seconds=request.time_spent_seconds,
        questions_total=request.questions_total,
        questions_correct=request.questions_correct,
    )

    if not result.success:
        raise_for_error(result.error_kind, result.error_message)

    logger.info(
        f"Exercise {request.exercise_id} recorded via API by user {session_user.id}: "
        f"+{result.xp_earned} XP"
    )

    return RecordProgressResponse(
        success=True,
        xp_earned=result.xp_earned,
        xp_breakdown=XPBreakdownResponse(**result.xp_breakdown.to_dict()),
        leveled_up=result.leveled_up,
        new_level=result.new_level,
        old_level=result.old_level,
        new_total_xp=result.new_total_xp,
        current_streak=result.current_streak,
        longest_streak=result.longest_streak,
    )
