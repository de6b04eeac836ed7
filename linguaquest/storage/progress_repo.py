"""
ProgressRecord Repository - append-only access to the progress log.

AICODE-NOTE: Records are created once and never updated or deleted here.
"""

from datetime import date, datetime, time
from typing import Any

from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.functions import Avg, Count, Min, Sum

from linguaquest.database.models import ProgressRecord


async def create_record(
    *,
    user_id: int,
    exercise_id: int,
    exercise_type: str,
    accuracy: float,
    time_spent_seconds: int,
    questions_total: int,
    questions_correct: int,
    xp_earned: int,
    completed_at: datetime,
    connection: BaseDBAsyncClient,
) -> ProgressRecord:
    """Append a progress record."""
    return await ProgressRecord.create(
        user_id=user_id,
        exercise_id=exercise_id,
        exercise_type=exercise_type,
        accuracy=accuracy,
        time_spent_seconds=time_spent_seconds,
        questions_total=questions_total,
        questions_correct=questions_correct,
        xp_earned=xp_earned,
        completed_at=completed_at,
        using_db=connection,
    )


async def list_records_since(user_id: int, since: date) -> list[ProgressRecord]:
    """Records completed on or after the start of `since`, oldest first."""
    return await ProgressRecord.filter(
        user_id=user_id, completed_at__gte=datetime.combine(since, time.min)
    ).order_by("completed_at", "id")


async def get_totals(user_id: int) -> dict[str, Any]:
    """
    All-time count, time spent and average accuracy, summed by the database.

    Returns:
        {"records_count", "total_time", "avg_accuracy"}; sums and averages
        are None when the user has no records
    """
    row = (
        await ProgressRecord.filter(user_id=user_id)
        .annotate(
            records_count=Count("id"),
            total_time=Sum("time_spent_seconds"),
            avg_accuracy=Avg("accuracy"),
        )
        .first()
        .values("records_count", "total_time", "avg_accuracy")
    )
    return row or {}


async def summarize_by_exercise_type(
    user_id: int, exercise_type: str | None = None
) -> list[dict[str, Any]]:
    """Per-type count, accuracy and XP, grouped by the database."""
    query = ProgressRecord.filter(user_id=user_id)
    if exercise_type:
        query = query.filter(exercise_type=exercise_type)
    return (
        await query.annotate(
            records_count=Count("id"),
            avg_accuracy=Avg("accuracy"),
            min_accuracy=Min("accuracy"),
            total_xp=Sum("xp_earned"),
        )
        .group_by("exercise_type")
        .order_by("exercise_type")
        .values("exercise_type", "records_count", "avg_accuracy", "min_accuracy", "total_xp")
    )


async def list_recent_records(user_id: int, limit: int = 10) -> list[ProgressRecord]:
    """Most recent records with their exercises, newest first."""
    return (
        await ProgressRecord.filter(user_id=user_id)
        .prefetch_related("exercise")
        .order_by("-completed_at", "-id")
        .limit(limit)
    )


async def count_records(user_id: int) -> int:
    return await ProgressRecord.filter(user_id=user_id).count()
