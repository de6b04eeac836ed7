"""
Coach Analysis Use Case - AI coaching text from the learner's stats.

AICODE-NOTE: Only reads. The context is built from the same data the
stats dashboard exposes; the analysis generator turns it into text.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Protocol

from linguaquest.core.errors import ErrorKind
from linguaquest.core.use_cases.get_stats import GetStatsUseCase
from linguaquest.services.ai import AIServiceError
from linguaquest.storage import progress_repo

logger = logging.getLogger(__name__)

RECENT_EXERCISES_LIMIT = 10


class AnalysisGenerator(Protocol):
    async def generate_coach_analysis(self, context: dict[str, Any]) -> dict[str, Any]: ...


@dataclass
class CoachAnalysisResult:
    success: bool
    analysis: dict[str, Any] = field(default_factory=dict)
    data_points: dict[str, Any] = field(default_factory=dict)
    error_kind: ErrorKind | None = None
    error_message: str = ""


class CoachAnalysisUseCase:
    """Use-case for the AI coach card."""

    def __init__(self, generator: AnalysisGenerator):
        self.generator = generator

    async def build_context(
        self, user_id: int, today: date | None = None
    ) -> dict[str, Any] | None:
        """Coach input for a user, None if the user does not exist."""
        stats_result = await GetStatsUseCase().execute(user_id, today=today)
        if not stats_result.success:
            return None
        stats = stats_result.stats

        recent = await progress_repo.list_recent_records(user_id, RECENT_EXERCISES_LIMIT)

        return {
            "overall_level": stats.overall_level,
            "total_xp": stats.total_xp,
            "current_streak": stats.current_streak,
            "skills": {
                skill.value: {"level": stats.skill_levels[skill], "xp": stats.skill_xp[skill]}
                for skill in stats.skill_levels
            },
            "history": [asdict(summary) for summary in stats.by_exercise_type],
            "recent": [
                {
                    "type": record.exercise_type,
                    "title": record.exercise.title,
                    "difficulty": record.exercise.difficulty,
                    "accuracy": record.accuracy,
                    "completed_at": record.completed_at.isoformat(),
                }
                for record in recent
            ],
        }

    async def execute(self, user_id: int, today: date | None = None) -> CoachAnalysisResult:
        context = await self.build_context(user_id, today=today)
        if context is None:
            return CoachAnalysisResult(
                success=False,
                error_kind=ErrorKind.NOT_FOUND,
                error_message="User not found",
            )

        try:
            analysis = await self.generator.generate_coach_analysis(context)
        except AIServiceError as e:
            logger.error(f"Coach analysis failed for user {user_id}: {e}")
            return CoachAnalysisResult(
                success=False,
                error_kind=ErrorKind.GENERATOR,
                error_message="Failed to generate analysis",
            )

        return CoachAnalysisResult(
            success=True,
            analysis=analysis,
            data_points={
                "skill_levels": context["skills"],
                "progress_by_type": context["history"],
                "recent_exercises_analysed": len(context["recent"]),
            },
        )
