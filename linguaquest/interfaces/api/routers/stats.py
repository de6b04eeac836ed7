"""
Stats API router.

Endpoints:
- GET /api/me/stats - Get user statistics
"""

from fastapi import APIRouter, Depends

from linguaquest.core.use_cases.get_stats import GetStatsUseCase
from linguaquest.interfaces.api.auth import SessionUser, get_current_user
from linguaquest.interfaces.api.errors import raise_for_error
from linguaquest.interfaces.api.schemas import (
    DailyActivityItem,
    LevelProgressResponse,
    LevelStats,
    SkillStats,
    StatsResponse,
    StreakStats,
    TotalsStats,
    UserResponse,
    XPStats,
)

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/me/stats", response_model=StatsResponse)
async def get_stats(
    session_user: SessionUser = Depends(get_current_user),
) -> StatsResponse:
    """
    Get user statistics.

    Includes:
    - Gamification (levels, XP, level progress, streaks)
    - Skill levels and XP
    - Daily activity over the trailing window
    - All-time totals
    """
    result = await GetStatsUseCase().execute(session_user.id)
    if not result.success:
        raise_for_error(result.error_kind, result.error_message)

    stats = result.stats
    progress = stats.level_progress

    return StatsResponse(
        user=UserResponse.model_validate(stats.user),
        level=LevelStats(
            overall=stats.overall_level,
            progress=LevelProgressResponse(
                level=progress.level,
                current_xp=progress.current_xp,
                required_xp=progress.required_xp,
                percentage=progress.percentage,
            ),
        ),
        xp=XPStats(
            total=stats.total_xp,
            current_level_xp=progress.current_xp,
            required_for_next_level=progress.required_xp,
            percentage=progress.percentage,
        ),
        skills=SkillStats(
            levels={skill.value: level for skill, level in stats.skill_levels.items()},
            xp={skill.value: xp for skill, xp in stats.skill_xp.items()},
        ),
        streaks=StreakStats(current=stats.current_streak, longest=stats.longest_streak),
        totals=TotalsStats(
            exercises_completed=stats.totals.exercises_completed,
            total_time_seconds=stats.totals.total_time_seconds,
            average_accuracy=stats.totals.avg_accuracy,
        ),
        recent_activity=[
            DailyActivityItem(
                date=day.date,
                exercises_completed=day.exercises_completed,
                total_xp=day.total_xp,
                avg_accuracy=day.avg_accuracy,
            )
            for day in stats.recent_activity
        ],
    )
