"""
Database models for LinguaQuest.

Structure:
- User: learner with cumulative XP, per-skill levels and streaks
- Exercise: content descriptor (payload is opaque JSON tagged by type)
- ProgressRecord: immutable log entry, one per completed exercise
"""

from tortoise import fields, models


class User(models.Model):
    """Learner aggregate. Mutated only by the progress recorder."""

    id = fields.IntField(primary_key=True)
    email = fields.CharField(max_length=255, unique=True, db_index=True)
    name = fields.CharField(max_length=255, null=True)

    # Totals
    total_xp = fields.IntField(default=0)
    overall_level = fields.IntField(default=1)

    # Per-skill XP and levels
    grammar_xp = fields.IntField(default=0)
    grammar_level = fields.IntField(default=1)
    vocabulary_xp = fields.IntField(default=0)
    vocabulary_level = fields.IntField(default=1)
    listening_xp = fields.IntField(default=0)
    listening_level = fields.IntField(default=1)
    speaking_xp = fields.IntField(default=0)
    speaking_level = fields.IntField(default=1)
    reading_xp = fields.IntField(default=0)
    reading_level = fields.IntField(default=1)
    writing_xp = fields.IntField(default=0)
    writing_level = fields.IntField(default=1)

    # Streaks
    current_streak = fields.IntField(default=0)
    longest_streak = fields.IntField(default=0)
    last_active_date = fields.DateField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    progress_records: fields.ReverseRelation["ProgressRecord"]

    class Meta:
        table = "users"


class Exercise(models.Model):
    """Exercise descriptor supplied by the content subsystem."""

    id = fields.IntField(primary_key=True)

    # grammar | vocabulary | listening | speaking | reading | writing
    type = fields.CharField(max_length=20, db_index=True)
    # easy | medium | hard
    difficulty = fields.CharField(max_length=10, default="medium")
    title = fields.CharField(max_length=255)

    # AICODE-NOTE: Shape depends on type; the core never looks inside.
    content: dict = fields.JSONField(default={})

    required_overall_level = fields.IntField(default=1)
    is_ai_generated = fields.BooleanField(default=False)
    created_by: fields.ForeignKeyNullableRelation[User] = fields.ForeignKeyField(
        "models.User",
        related_name="generated_exercises",
        null=True,
        on_delete=fields.SET_NULL,
    )

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "exercises"


class ProgressRecord(models.Model):
    """
    Completed exercise event.
    Append-only: created once per submission, never updated.
    """

    id = fields.IntField(primary_key=True)
    user: fields.ForeignKeyRelation[User] = fields.ForeignKeyField(
        "models.User", related_name="progress_records", on_delete=fields.CASCADE
    )
    user_id: int  # AICODE-NOTE: MyPy hint for FK (Tortoise auto-creates this)
    exercise: fields.ForeignKeyRelation[Exercise] = fields.ForeignKeyField(
        "models.Exercise", related_name="progress_records", on_delete=fields.CASCADE
    )
    exercise_id: int

    # Snapshot of exercise.type at submission time
    exercise_type = fields.CharField(max_length=20)

    accuracy = fields.FloatField()  # 0-100
    time_spent_seconds = fields.IntField(default=0)
    questions_total = fields.IntField(default=0)
    questions_correct = fields.IntField(default=0)
    xp_earned = fields.IntField(default=0)

    completed_at = fields.DatetimeField(db_index=True)

    class Meta:
        table = "progress_records"
