"""
Skills and exercise types.

AICODE-NOTE: Every exercise type maps onto exactly one skill bucket.
The mapping is explicit and total over ExerciseType.
"""

from enum import Enum


class Skill(str, Enum):
    GRAMMAR = "grammar"
    VOCABULARY = "vocabulary"
    LISTENING = "listening"
    SPEAKING = "speaking"
    READING = "reading"
    WRITING = "writing"


class ExerciseType(str, Enum):
    GRAMMAR = "grammar"
    VOCABULARY = "vocabulary"
    LISTENING = "listening"
    SPEAKING = "speaking"
    READING = "reading"
    WRITING = "writing"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


SKILLS: tuple[Skill, ...] = tuple(Skill)

SKILL_BY_EXERCISE_TYPE: dict[ExerciseType, Skill] = {
    ExerciseType.GRAMMAR: Skill.GRAMMAR,
    ExerciseType.VOCABULARY: Skill.VOCABULARY,
    ExerciseType.LISTENING: Skill.LISTENING,
    ExerciseType.SPEAKING: Skill.SPEAKING,
    ExerciseType.READING: Skill.READING,
    ExerciseType.WRITING: Skill.WRITING,
}


def skill_for_exercise_type(exercise_type: ExerciseType | str) -> Skill:
    """Resolve the skill bucket credited by an exercise type.

    Raises ValueError for strings that are not an exercise type.
    """
    return SKILL_BY_EXERCISE_TYPE[ExerciseType(exercise_type)]
