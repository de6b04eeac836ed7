"""
Level Rules - pure functions turning XP into skill and overall levels.

AICODE-NOTE: Pure functions WITHOUT DB access, WITHOUT side-effects.
Called from use-cases after the new XP totals are known.
"""

from collections.abc import Mapping

from linguaquest.core.domain.skills import SKILLS, Skill

# XP thresholds per level (level -> XP needed), inclusive
LEVEL_XP_THRESHOLDS: dict[int, int] = {
    1: 0,
    2: 100,
    3: 250,
    4: 450,
    5: 700,
    6: 1000,
    7: 1400,
    8: 1900,
    9: 2500,
    10: 3200,
}

MAX_LEVEL = max(LEVEL_XP_THRESHOLDS)

# Overall level = weighted mean of the total-XP level and the mean skill level
XP_LEVEL_WEIGHT = 3
SKILL_LEVEL_WEIGHT = 2


def calculate_level(xp: int) -> int:
    """
    Level for an XP amount.

    Step function over LEVEL_XP_THRESHOLDS. Reaching a threshold exactly
    grants that level:
    - 0-99 XP = Level 1
    - 100-249 XP = Level 2
    - 3200+ XP = Level 10 (max)
    """
    if xp < 0:
        raise ValueError(f"XP cannot be negative: {xp}")

    level = 1
    for candidate, threshold in sorted(LEVEL_XP_THRESHOLDS.items()):
        if xp >= threshold:
            level = candidate
        else:
            break
    return level


def xp_for_level(level: int) -> int:
    """XP required to reach a level (clamped to 1..MAX_LEVEL)."""
    level = min(max(level, 1), MAX_LEVEL)
    return LEVEL_XP_THRESHOLDS[level]


def xp_to_next_level(xp: int) -> int:
    """XP still missing for the next level, 0 at max level."""
    level = calculate_level(xp)
    if level >= MAX_LEVEL:
        return 0
    return xp_for_level(level + 1) - xp


def calculate_skill_levels(skill_xp_totals: Mapping[Skill, int]) -> dict[Skill, int]:
    """Level of every skill. Skills missing from the mapping count as 0 XP."""
    return {skill: calculate_level(skill_xp_totals.get(skill, 0)) for skill in SKILLS}


def calculate_overall_level(total_xp: int, skill_levels: Mapping[Skill, int]) -> int:
    """
    Overall level from total XP and the full set of skill levels.

    Formula (integer, floor):
        (3 * level(total_xp) + 2 * mean(skill_levels)) / 5

    Non-decreasing in total_xp and in every skill level. Skill thresholds
    widen as levels grow, so XP spread over several skills produces a
    larger level sum than the same XP poured into one skill.
    """
    xp_level = calculate_level(total_xp)
    levels = [skill_levels.get(skill, 1) for skill in SKILLS]
    if any(level < 1 for level in levels):
        raise ValueError(f"Skill levels must be positive: {dict(skill_levels)}")

    n = len(levels)
    weighted = XP_LEVEL_WEIGHT * xp_level * n + SKILL_LEVEL_WEIGHT * sum(levels)
    overall = weighted // ((XP_LEVEL_WEIGHT + SKILL_LEVEL_WEIGHT) * n)
    return min(max(overall, 1), MAX_LEVEL)
