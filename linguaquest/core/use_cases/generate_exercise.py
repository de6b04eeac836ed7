"""
Generate Exercise Use Case - new AI exercise adapted to the learner.

AICODE-NOTE: The generator is a collaborator; its failures end up as
ErrorKind.GENERATOR and never touch user progress.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol

from pydantic import ValidationError

from linguaquest.core.domain.exercise_rules import (
    DEFAULT_ACCURACY,
    can_generate,
    choose_difficulty,
)
from linguaquest.core.domain.skills import ExerciseType, skill_for_exercise_type
from linguaquest.core.domain.stats_rules import summaries_from_rows
from linguaquest.core.errors import ErrorKind
from linguaquest.database.models import Exercise
from linguaquest.services.ai import AIServiceError
from linguaquest.services.exercise_content import dump_content, parse_content, title_for
from linguaquest.storage import exercise_repo, progress_repo, user_repo

logger = logging.getLogger(__name__)

RECENT_TITLES_LIMIT = 30


class ContentGenerator(Protocol):
    async def generate_exercise_content(
        self,
        exercise_type: str,
        difficulty: str,
        overall_level: int,
        skill_level: int,
        avg_accuracy: float,
        avoid_titles: list[str],
    ) -> dict[str, Any]: ...


@dataclass
class ExerciseGenerationResult:
    success: bool
    exercise: Exercise | None = None
    error_kind: ErrorKind | None = None
    error_message: str = ""


class GenerateExerciseUseCase:
    """Use-case for generating an exercise with the content generator."""

    def __init__(self, generator: ContentGenerator):
        self.generator = generator

    async def execute(
        self,
        user_id: int,
        exercise_type: ExerciseType | str,
        today: date | None = None,
    ) -> ExerciseGenerationResult:
        if today is None:
            today = date.today()

        try:
            exercise_type = ExerciseType(exercise_type)
        except ValueError:
            return ExerciseGenerationResult(
                success=False,
                error_kind=ErrorKind.VALIDATION,
                error_message=f"Unknown exercise type: {exercise_type}",
            )
        if not can_generate(exercise_type):
            return ExerciseGenerationResult(
                success=False,
                error_kind=ErrorKind.VALIDATION,
                error_message=f"{exercise_type.value} exercises cannot be generated",
            )

        user = await user_repo.get_user(user_id)
        if not user:
            return ExerciseGenerationResult(
                success=False,
                error_kind=ErrorKind.NOT_FOUND,
                error_message="User not found",
            )

        # Adaptive difficulty from this type's history
        rows = await progress_repo.summarize_by_exercise_type(user_id, exercise_type.value)
        summaries = summaries_from_rows(rows)
        avg_accuracy = summaries[0].avg_accuracy if summaries else None
        difficulty = choose_difficulty(avg_accuracy)
        skill = skill_for_exercise_type(exercise_type)
        skill_level = user_repo.get_skill_levels(user)[skill]
        avoid_titles = await exercise_repo.get_recent_titles(user_id, RECENT_TITLES_LIMIT)

        try:
            payload = await self.generator.generate_exercise_content(
                exercise_type=exercise_type.value,
                difficulty=difficulty.value,
                overall_level=user.overall_level,
                skill_level=skill_level,
                avg_accuracy=avg_accuracy if avg_accuracy is not None else DEFAULT_ACCURACY,
                avoid_titles=avoid_titles,
            )
            content = parse_content(exercise_type.value, payload)
        except AIServiceError as e:
            logger.error(f"Exercise generation failed for user {user_id}: {e}")
            return ExerciseGenerationResult(
                success=False,
                error_kind=ErrorKind.GENERATOR,
                error_message="Exercise generation failed, try again later",
            )
        except ValidationError as e:
            logger.error(
                f"Generated {exercise_type.value} content rejected for user {user_id}: {e}"
            )
            return ExerciseGenerationResult(
                success=False,
                error_kind=ErrorKind.GENERATOR,
                error_message="Generated exercise was malformed, try again",
            )

        exercise = await exercise_repo.create_exercise(
            exercise_type=exercise_type.value,
            difficulty=difficulty.value,
            title=title_for(content, today),
            content=dump_content(content),
            required_overall_level=1,
            is_ai_generated=True,
            created_by_id=user.id,
        )

        logger.info(
            f"Generated {difficulty.value} {exercise_type.value} exercise "
            f"{exercise.id} for user {user_id}"
        )
        return ExerciseGenerationResult(success=True, exercise=exercise)
