"""
Stats Rules - pure rollups over progress records.

AICODE-NOTE: Pure functions WITHOUT DB access. Daily buckets are built
from the records of the trailing window (anything with completed_at /
xp_earned / accuracy attributes). All-time totals and per-type rollups
are summed by the database; these functions only shape its aggregate
rows. Output depends only on the inputs and `today`, so repeated runs
over an unchanged set give identical results.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Protocol

from linguaquest.core.domain.streak_rules import to_day


class ProgressLike(Protocol):
    completed_at: Any
    xp_earned: int
    accuracy: float


@dataclass(frozen=True)
class DailyActivity:
    date: date
    exercises_completed: int
    total_xp: int
    avg_accuracy: float


@dataclass(frozen=True)
class ActivityTotals:
    exercises_completed: int
    total_time_seconds: int
    avg_accuracy: float


@dataclass(frozen=True)
class ExerciseTypeSummary:
    exercise_type: str
    count: int
    avg_accuracy: float
    min_accuracy: float
    total_xp: int


def _average(values: list[float]) -> float:
    if not values:
        return 0.0
    return round(sum(values) / len(values), 1)


def window_start(today: date, window_days: int) -> date:
    """First day of a trailing window that ends today (inclusive)."""
    return today - timedelta(days=window_days - 1)


def aggregate_daily_activity(
    records: Iterable[ProgressLike], today: date, window_days: int
) -> list[DailyActivity]:
    """
    Daily buckets for the trailing window.

    Only days with at least one record are returned, oldest first.
    Records dated after `today` are ignored.
    """
    start = window_start(today, window_days)
    buckets: dict[date, list[ProgressLike]] = defaultdict(list)

    for record in records:
        day = to_day(record.completed_at)
        if start <= day <= today:
            buckets[day].append(record)

    return [
        DailyActivity(
            date=day,
            exercises_completed=len(day_records),
            total_xp=sum(r.xp_earned for r in day_records),
            avg_accuracy=_average([r.accuracy for r in day_records]),
        )
        for day, day_records in sorted(buckets.items())
    ]


def round_accuracy(value: float | None) -> float:
    """Average accuracy as shown on the dashboard: one decimal, 0.0 when unknown."""
    if value is None:
        return 0.0
    return round(float(value), 1)


def totals_from_row(row: Mapping[str, Any]) -> ActivityTotals:
    """
    All-time totals from an aggregate row.

    Row keys: records_count, total_time, avg_accuracy. SQL aggregates over
    zero rows give NULL sums and averages; those become zeros.
    """
    return ActivityTotals(
        exercises_completed=row.get("records_count") or 0,
        total_time_seconds=row.get("total_time") or 0,
        avg_accuracy=round_accuracy(row.get("avg_accuracy")),
    )


def summaries_from_rows(rows: Iterable[Mapping[str, Any]]) -> list[ExerciseTypeSummary]:
    """
    Per exercise type rollup from grouped aggregate rows, sorted by type name.

    Row keys: exercise_type, records_count, avg_accuracy, min_accuracy, total_xp.
    """
    summaries = [
        ExerciseTypeSummary(
            exercise_type=row["exercise_type"],
            count=row["records_count"],
            avg_accuracy=round_accuracy(row["avg_accuracy"]),
            min_accuracy=float(row["min_accuracy"]),
            total_xp=row["total_xp"] or 0,
        )
        for row in rows
    ]
    return sorted(summaries, key=lambda s: s.exercise_type)
