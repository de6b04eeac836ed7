"""
Record Progress Use Case - completion of an exercise.

AICODE-NOTE: Use-case combines repositories + domain rules.
Routers call the use-case and translate the result.

The read-modify-write on the user row is serialised per user: an
in-process lock per user id plus a transaction with a row lock. The user
update and the progress record are committed together or not at all.
"""

import asyncio
import logging
import weakref
from dataclasses import dataclass
from datetime import datetime

from tortoise.exceptions import BaseORMException
from tortoise.transactions import in_transaction

from linguaquest.config import config
from linguaquest.core.domain.level_rules import (
    calculate_overall_level,
    calculate_skill_levels,
)
from linguaquest.core.domain.progress_rules import validate_submission
from linguaquest.core.domain.skills import SKILLS, ExerciseType
from linguaquest.core.domain.streak_rules import compute_streak
from linguaquest.core.domain.xp_rules import XPBreakdown, calculate_skill_xp, calculate_xp
from linguaquest.core.errors import ErrorKind
from linguaquest.storage import exercise_repo, progress_repo, user_repo

logger = logging.getLogger(__name__)


@dataclass
class ProgressRecordingResult:
    """Result of recording an exercise completion."""

    success: bool
    xp_earned: int = 0
    xp_breakdown: XPBreakdown | None = None
    leveled_up: bool = False
    old_level: int = 0
    new_level: int = 0
    new_total_xp: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    record_id: int | None = None
    error_kind: ErrorKind | None = None
    error_message: str = ""


class UserLockRegistry:
    """
    One asyncio.Lock per user id.

    AICODE-NOTE: Weak values, so a lock lives only while some request holds
    it and never outlives the event loop it was used on.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def get(self, user_id: int) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock


user_locks = UserLockRegistry()


def _failure(kind: ErrorKind, message: str) -> ProgressRecordingResult:
    return ProgressRecordingResult(success=False, error_kind=kind, error_message=message)


class RecordProgressUseCase:
    """Use-case for recording a completed exercise."""

    async def execute(
        self,
        user_id: int,
        exercise_id: int,
        exercise_type: ExerciseType | str,
        accuracy: float,
        time_spent_seconds: int,
        questions_total: int,
        questions_correct: int,
        now: datetime | None = None,
    ) -> ProgressRecordingResult:
        """
        Record a completed exercise.

        Args:
            user_id: User ID
            exercise_id: Exercise ID
            exercise_type: Type submitted by the client
            accuracy: 0-100, passed explicitly (not derived from questions)
            time_spent_seconds: Time spent, >= 0
            questions_total: Number of questions
            questions_correct: Correct answers, 0..questions_total
            now: Completion time (for tests, default datetime.now())

        Returns:
            ProgressRecordingResult with the award or the error kind
        """
        if now is None:
            now = datetime.now()

        # 1. Validate (domain)
        reason = validate_submission(
            accuracy, time_spent_seconds, questions_total, questions_correct
        )
        if reason:
            logger.warning(f"Rejected progress for user {user_id}: {reason}")
            return _failure(ErrorKind.VALIDATION, reason)

        try:
            exercise_type = ExerciseType(exercise_type)
        except ValueError:
            return _failure(
                ErrorKind.VALIDATION, f"Unknown exercise type: {exercise_type}"
            )

        # 2. Exercise must exist and match the submitted type
        exercise = await exercise_repo.get_exercise(exercise_id)
        if not exercise:
            return _failure(ErrorKind.NOT_FOUND, "Exercise not found")
        if exercise.type != exercise_type.value:
            return _failure(
                ErrorKind.VALIDATION,
                f"Exercise {exercise_id} is {exercise.type}, not {exercise_type.value}",
            )

        # 3. Load -> compute -> persist, serialised per user
        async with user_locks.get(user_id):
            try:
                result = await asyncio.wait_for(
                    self._apply(
                        user_id=user_id,
                        exercise_id=exercise_id,
                        exercise_type=exercise_type,
                        accuracy=accuracy,
                        time_spent_seconds=time_spent_seconds,
                        questions_total=questions_total,
                        questions_correct=questions_correct,
                        now=now,
                    ),
                    timeout=config.DB_TIMEOUT_SECONDS,
                )
            except (BaseORMException, asyncio.TimeoutError) as e:
                logger.exception(
                    f"Failed to record progress for user {user_id}, "
                    f"exercise {exercise_id}: {e!r}"
                )
                return _failure(
                    ErrorKind.PERSISTENCE, "Progress could not be saved, try again"
                )

        if result is None:
            return _failure(ErrorKind.NOT_FOUND, "User not found")

        logger.info(
            f"Exercise {exercise_id} completed by user {user_id}: "
            f"+{result.xp_earned} XP, level {result.old_level} -> {result.new_level}, "
            f"streak {result.current_streak}"
        )
        return result

    async def _apply(
        self,
        *,
        user_id: int,
        exercise_id: int,
        exercise_type: ExerciseType,
        accuracy: float,
        time_spent_seconds: int,
        questions_total: int,
        questions_correct: int,
        now: datetime,
    ) -> ProgressRecordingResult | None:
        async with in_transaction() as connection:
            user = await user_repo.get_user_for_update(user_id, connection)
            if not user:
                return None

            old_level = user.overall_level

            # XP (domain), from the streak as it stood before this completion
            breakdown = calculate_xp(
                exercise_type, accuracy, time_spent_seconds, user.current_streak
            )
            delta = calculate_skill_xp(exercise_type, breakdown.total_xp)

            old_skill_xp = user_repo.get_skill_xp(user)
            new_skill_xp = {skill: old_skill_xp[skill] + delta[skill] for skill in SKILLS}
            new_total_xp = user.total_xp + breakdown.total_xp

            # Levels (domain); stored levels are a floor
            old_skill_levels = user_repo.get_skill_levels(user)
            computed_levels = calculate_skill_levels(new_skill_xp)
            new_skill_levels = {
                skill: max(old_skill_levels[skill], computed_levels[skill])
                for skill in SKILLS
            }
            new_level = max(
                old_level, calculate_overall_level(new_total_xp, new_skill_levels)
            )

            # Streak (domain)
            streak = compute_streak(
                user.last_active_date, user.current_streak, user.longest_streak, now
            )

            # Persist (repositories), same transaction
            await user_repo.apply_progress(
                user,
                total_xp=new_total_xp,
                overall_level=new_level,
                skill_xp=new_skill_xp,
                skill_levels=new_skill_levels,
                current_streak=streak.streak,
                longest_streak=streak.longest_streak,
                last_active_date=now.date(),
                connection=connection,
            )
            record = await progress_repo.create_record(
                user_id=user_id,
                exercise_id=exercise_id,
                exercise_type=exercise_type.value,
                accuracy=accuracy,
                time_spent_seconds=time_spent_seconds,
                questions_total=questions_total,
                questions_correct=questions_correct,
                xp_earned=breakdown.total_xp,
                completed_at=now,
                connection=connection,
            )

        return ProgressRecordingResult(
            success=True,
            xp_earned=breakdown.total_xp,
            xp_breakdown=breakdown,
            leveled_up=new_level > old_level,
            old_level=old_level,
            new_level=new_level,
            new_total_xp=new_total_xp,
            current_streak=streak.streak,
            longest_streak=streak.longest_streak,
            record_id=record.id,
        )
