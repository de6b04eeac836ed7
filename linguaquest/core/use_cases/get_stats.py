"""
Get Stats Use Case - read-only dashboard rollups.

AICODE-NOTE: Never writes. Everything returned is derived; the user row
and the progress log stay the only authoritative state.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from linguaquest.config import config
from linguaquest.core.domain.skills import Skill
from linguaquest.core.domain.stats_rules import (
    ActivityTotals,
    DailyActivity,
    ExerciseTypeSummary,
    aggregate_daily_activity,
    summaries_from_rows,
    totals_from_row,
    window_start,
)
from linguaquest.core.domain.xp_rules import LevelProgress, get_level_progress
from linguaquest.core.errors import ErrorKind
from linguaquest.database.models import User
from linguaquest.storage import progress_repo, user_repo

logger = logging.getLogger(__name__)


@dataclass
class UserStats:
    user: User
    overall_level: int
    level_progress: LevelProgress
    total_xp: int
    skill_levels: dict[Skill, int]
    skill_xp: dict[Skill, int]
    current_streak: int
    longest_streak: int
    recent_activity: list[DailyActivity]
    totals: ActivityTotals
    by_exercise_type: list[ExerciseTypeSummary] = field(default_factory=list)


@dataclass
class StatsResult:
    success: bool
    stats: UserStats | None = None
    error_kind: ErrorKind | None = None
    error_message: str = ""


class GetStatsUseCase:
    """Use-case for the stats dashboard."""

    async def execute(
        self,
        user_id: int,
        today: date | None = None,
        window_days: int | None = None,
    ) -> StatsResult:
        """
        Build the stats of a user.

        Args:
            user_id: User ID
            today: Date (for tests, default date.today())
            window_days: Trailing window, default config.STATS_WINDOW_DAYS

        Returns:
            StatsResult; zero records give empty/zero aggregates
        """
        if today is None:
            today = date.today()
        if window_days is None:
            window_days = config.STATS_WINDOW_DAYS

        user = await user_repo.get_user(user_id)
        if not user:
            return StatsResult(
                success=False,
                error_kind=ErrorKind.NOT_FOUND,
                error_message="User not found",
            )

        # Only the window is loaded; all-time rollups are aggregated by the database
        window_records = await progress_repo.list_records_since(
            user_id, window_start(today, window_days)
        )
        totals = totals_from_row(await progress_repo.get_totals(user_id))
        by_exercise_type = summaries_from_rows(
            await progress_repo.summarize_by_exercise_type(user_id)
        )

        stats = UserStats(
            user=user,
            overall_level=user.overall_level,
            level_progress=get_level_progress(user.total_xp),
            total_xp=user.total_xp,
            skill_levels=user_repo.get_skill_levels(user),
            skill_xp=user_repo.get_skill_xp(user),
            current_streak=user.current_streak,
            longest_streak=user.longest_streak,
            recent_activity=aggregate_daily_activity(window_records, today, window_days),
            totals=totals,
            by_exercise_type=by_exercise_type,
        )

        logger.debug(
            f"Stats built for user {user_id}: {totals.exercises_completed} records, "
            f"{len(window_records)} in the last {window_days} days"
        )
        return StatsResult(success=True, stats=stats)
