"""
Streak Rules - pure day-granularity streak state machine.

AICODE-NOTE: Pure functions WITHOUT DB access, WITHOUT side-effects.
Evaluated once per completed exercise, so several completions on the
same calendar day never double-increment the streak.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class StreakStatus(str, Enum):
    HOLD = "hold"
    EXTEND = "extend"
    RESET = "reset"


@dataclass(frozen=True)
class StreakUpdate:
    streak: int
    longest_streak: int
    status: StreakStatus


def to_day(moment: date | datetime) -> date:
    """Truncate a timestamp to its calendar day."""
    if isinstance(moment, datetime):
        return moment.date()
    return moment


def compute_streak(
    last_active_date: date | datetime | None,
    current_streak: int,
    longest_streak: int,
    now: date | datetime,
) -> StreakUpdate:
    """
    Streak after a completion at `now`.

    Logic:
    - Already active today -> streak unchanged (hold)
    - Active yesterday -> streak += 1 (extend)
    - Gap of 2+ days, or first activity ever -> streak = 1 (reset)

    longest_streak is always max(longest_streak, new streak).
    """
    today = to_day(now)

    if last_active_date is None:
        status = StreakStatus.RESET
    else:
        gap = (today - to_day(last_active_date)).days
        if gap == 0:
            status = StreakStatus.HOLD
        elif gap == 1:
            status = StreakStatus.EXTEND
        else:
            # Includes last_active_date in the future (clock skew)
            status = StreakStatus.RESET

    if status is StreakStatus.HOLD:
        new_streak = current_streak
    elif status is StreakStatus.EXTEND:
        new_streak = current_streak + 1
    else:
        new_streak = 1

    return StreakUpdate(
        streak=new_streak,
        longest_streak=max(longest_streak, new_streak),
        status=status,
    )
