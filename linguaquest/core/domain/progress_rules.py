"""
Progress Rules - validation of an exercise-completion submission.

AICODE-NOTE: Pure functions WITHOUT DB access, WITHOUT side-effects.
Checked before anything is loaded or written.
"""

import math

MIN_ACCURACY = 0
MAX_ACCURACY = 100


def is_valid_accuracy(accuracy: float) -> bool:
    """Accuracy must be a finite number within [0, 100]."""
    return math.isfinite(accuracy) and MIN_ACCURACY <= accuracy <= MAX_ACCURACY


def validate_submission(
    accuracy: float,
    time_spent_seconds: int,
    questions_total: int,
    questions_correct: int,
) -> str | None:
    """
    Validate a submission.

    Returns:
        None if valid, otherwise the reason it was rejected
    """
    if not is_valid_accuracy(accuracy):
        return f"Invalid accuracy: {accuracy} (expected 0-100)"
    if time_spent_seconds < 0:
        return f"Invalid time spent: {time_spent_seconds} (expected >= 0)"
    if questions_total < 0:
        return f"Invalid questions total: {questions_total} (expected >= 0)"
    if not 0 <= questions_correct <= questions_total:
        return (
            f"Invalid questions correct: {questions_correct} "
            f"(expected 0-{questions_total})"
        )
    return None
