"""
Exercise Rules - level gating and adaptive difficulty.

AICODE-NOTE: Pure functions WITHOUT DB access, WITHOUT side-effects.
"""

from linguaquest.core.domain.skills import Difficulty, ExerciseType
from linguaquest.database.models import Exercise

# Assumed accuracy when the user has no history for a type yet
DEFAULT_ACCURACY = 70.0

EASY_BELOW_ACCURACY = 60
MEDIUM_BELOW_ACCURACY = 80

# Listening needs audio assets, there is no text template for it
GENERATABLE_TYPES: frozenset[ExerciseType] = frozenset(
    {
        ExerciseType.GRAMMAR,
        ExerciseType.VOCABULARY,
        ExerciseType.READING,
        ExerciseType.WRITING,
        ExerciseType.SPEAKING,
    }
)


def is_exercise_unlocked(overall_level: int, exercise: Exercise) -> bool:
    """An exercise is available once the overall level reaches its requirement."""
    return overall_level >= exercise.required_overall_level


def choose_difficulty(avg_accuracy: float | None) -> Difficulty:
    """
    Difficulty for the next generated exercise.

    - accuracy < 60 -> easy
    - 60 <= accuracy < 80 -> medium
    - 80+ -> hard
    """
    if avg_accuracy is None:
        avg_accuracy = DEFAULT_ACCURACY
    if avg_accuracy < EASY_BELOW_ACCURACY:
        return Difficulty.EASY
    if avg_accuracy < MEDIUM_BELOW_ACCURACY:
        return Difficulty.MEDIUM
    return Difficulty.HARD


def can_generate(exercise_type: ExerciseType) -> bool:
    return exercise_type in GENERATABLE_TYPES
