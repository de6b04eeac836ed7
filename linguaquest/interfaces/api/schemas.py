"""
Pydantic schemas for API requests and responses.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from linguaquest.core.domain.skills import ExerciseType

# ============ User Schemas ============


class UserResponse(BaseModel):
    """User profile response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None = None

    # Gamification
    total_xp: int
    overall_level: int
    current_streak: int
    longest_streak: int
    last_active_date: date | None = None


# ============ Progress Schemas ============


class RecordProgressRequest(BaseModel):
    """Completed exercise submitted by the client."""

    exercise_id: int
    exercise_type: ExerciseType
    # AICODE-NOTE: Accuracy range is checked by the use-case (400), not here
    accuracy: float
    time_spent_seconds: int = Field(ge=0)
    questions_total: int = Field(default=0, ge=0)
    questions_correct: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_questions(self) -> "RecordProgressRequest":
        if self.questions_correct > self.questions_total:
            raise ValueError("questions_correct cannot exceed questions_total")
        return self


class XPBreakdownResponse(BaseModel):
    base_xp: int
    accuracy_bonus: int
    speed_bonus: int
    streak_bonus: int
    total_xp: int


class RecordProgressResponse(BaseModel):
    """Response after recording a completion."""

    success: bool
    xp_earned: int
    xp_breakdown: XPBreakdownResponse
    leveled_up: bool
    new_level: int
    old_level: int
    new_total_xp: int
    current_streak: int
    longest_streak: int


# ============ Stats Schemas ============


class LevelProgressResponse(BaseModel):
    level: int
    current_xp: int
    required_xp: int
    percentage: int


class LevelStats(BaseModel):
    overall: int
    progress: LevelProgressResponse


class XPStats(BaseModel):
    total: int
    current_level_xp: int
    required_for_next_level: int
    percentage: int


class SkillStats(BaseModel):
    levels: dict[str, int]
    xp: dict[str, int]


class StreakStats(BaseModel):
    current: int
    longest: int


class TotalsStats(BaseModel):
    exercises_completed: int
    total_time_seconds: int
    average_accuracy: float


class DailyActivityItem(BaseModel):
    date: date
    exercises_completed: int
    total_xp: int
    avg_accuracy: float


class StatsResponse(BaseModel):
    """User statistics response (all fields derived)."""

    user: UserResponse
    level: LevelStats
    xp: XPStats
    skills: SkillStats
    streaks: StreakStats
    totals: TotalsStats
    recent_activity: list[DailyActivityItem]


# ============ Exercise Schemas ============


class ExerciseListItem(BaseModel):
    id: int
    type: str
    difficulty: str
    title: str
    required_overall_level: int
    is_ai_generated: bool
    locked: bool


class ExercisesListResponse(BaseModel):
    exercises: list[ExerciseListItem]
    overall_level: int
    total: int


class ExerciseResponse(BaseModel):
    """Exercise with its content payload."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    difficulty: str
    title: str
    content: dict[str, Any]
    required_overall_level: int
    is_ai_generated: bool
    created_at: datetime


# ============ AI Schemas ============


class GenerateExerciseRequest(BaseModel):
    type: ExerciseType


class CoachResponse(BaseModel):
    analysis: dict[str, Any]
    generated_at: datetime
    data_points: dict[str, Any]
