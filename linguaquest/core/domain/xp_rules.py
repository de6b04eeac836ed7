"""
XP Rules - pure functions for the XP award of a completed exercise.

AICODE-NOTE: Pure functions WITHOUT DB access, WITHOUT side-effects.
Integer arithmetic only, so identical inputs always give identical awards.
"""

from dataclasses import asdict, dataclass

from linguaquest.core.domain.level_rules import (
    MAX_LEVEL,
    calculate_level,
    xp_for_level,
)
from linguaquest.core.domain.skills import SKILLS, ExerciseType, Skill, skill_for_exercise_type

# Base XP per exercise type (productive skills are worth more)
BASE_XP: dict[ExerciseType, int] = {
    ExerciseType.GRAMMAR: 10,
    ExerciseType.VOCABULARY: 10,
    ExerciseType.LISTENING: 12,
    ExerciseType.READING: 12,
    ExerciseType.SPEAKING: 15,
    ExerciseType.WRITING: 15,
}

# Speed bonus: only for accurate work done in a credible amount of time
SPEED_BONUS = 5
SPEED_BONUS_MIN_ACCURACY = 70
MIN_CREDIBLE_SECONDS = 30
FAST_COMPLETION_SECONDS = 180

# Streak bonus: per streak day, capped
STREAK_BONUS_PER_DAY = 2
STREAK_BONUS_CAP_DAYS = 7


@dataclass(frozen=True)
class XPBreakdown:
    """XP award split by source."""

    base_xp: int
    accuracy_bonus: int
    speed_bonus: int
    streak_bonus: int
    total_xp: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class LevelProgress:
    """Position of a total XP amount inside its level."""

    level: int
    current_xp: int
    required_xp: int
    percentage: int


def calculate_speed_bonus(accuracy: float, time_spent_seconds: int) -> int:
    """
    Speed bonus.

    Awarded only when accuracy >= 70 and the exercise took between 30 and
    180 seconds. At 70% accuracy the accuracy bonus of the cheapest
    exercise is already 7, so speed never outweighs correctness.
    """
    if accuracy < SPEED_BONUS_MIN_ACCURACY:
        return 0
    if MIN_CREDIBLE_SECONDS <= time_spent_seconds <= FAST_COMPLETION_SECONDS:
        return SPEED_BONUS
    return 0


def calculate_streak_bonus(streak_days: int) -> int:
    """+2 XP per streak day, capped at 7 days (+14)."""
    return STREAK_BONUS_PER_DAY * min(max(streak_days, 0), STREAK_BONUS_CAP_DAYS)


def calculate_xp(
    exercise_type: ExerciseType | str,
    accuracy: float,
    time_spent_seconds: int,
    streak_days: int,
) -> XPBreakdown:
    """
    XP award for one completed exercise.

    - base: BASE_XP by exercise type
    - accuracy bonus: floor(base * accuracy / 100)
    - speed bonus: see calculate_speed_bonus()
    - streak bonus: see calculate_streak_bonus()

    Accuracy must already be validated to [0, 100] by the caller.
    """
    base_xp = BASE_XP[ExerciseType(exercise_type)]
    accuracy_bonus = int(base_xp * accuracy // 100)
    speed_bonus = calculate_speed_bonus(accuracy, time_spent_seconds)
    streak_bonus = calculate_streak_bonus(streak_days)

    return XPBreakdown(
        base_xp=base_xp,
        accuracy_bonus=accuracy_bonus,
        speed_bonus=speed_bonus,
        streak_bonus=streak_bonus,
        total_xp=base_xp + accuracy_bonus + speed_bonus + streak_bonus,
    )


def calculate_skill_xp(exercise_type: ExerciseType | str, total_xp: int) -> dict[Skill, int]:
    """Per-skill XP delta: the whole award goes to the exercise's skill."""
    target = skill_for_exercise_type(exercise_type)
    return {skill: (total_xp if skill is target else 0) for skill in SKILLS}


def get_level_progress(total_xp: int) -> LevelProgress:
    """Progress bar data for the overall XP bar."""
    level = calculate_level(total_xp)
    floor_xp = xp_for_level(level)

    if level >= MAX_LEVEL:
        return LevelProgress(
            level=level,
            current_xp=total_xp - floor_xp,
            required_xp=0,
            percentage=100,
        )

    span = xp_for_level(level + 1) - floor_xp
    current = total_xp - floor_xp
    return LevelProgress(
        level=level,
        current_xp=current,
        required_xp=span,
        percentage=int(current * 100 // span),
    )
