"""
Exercise content payloads - one schema per exercise type.

AICODE-NOTE: The core stores Exercise.content as opaque JSON. These models
are only used at the generator boundary, to reject malformed AI output
before anything is saved. Keys are camelCase on the wire (UI format).
"""

from datetime import date
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel


class _ContentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============ Grammar ============


class GrammarQuestion(_ContentModel):
    id: str
    sentence: str
    options: list[str] = Field(min_length=2)
    correct_answer: str
    explanation: str = ""

    @model_validator(mode="after")
    def answer_is_an_option(self) -> "GrammarQuestion":
        if self.correct_answer not in self.options:
            raise ValueError(f"correctAnswer {self.correct_answer!r} is not an option")
        return self


class GrammarContent(_ContentModel):
    type: Literal["grammar"]
    questions: list[GrammarQuestion] = Field(min_length=1)


# ============ Vocabulary ============


class VocabularyCard(_ContentModel):
    id: str
    word: str
    definition: str
    example: str = ""
    business_context: str = ""


class VocabularyContent(_ContentModel):
    type: Literal["vocabulary"]
    cards: list[VocabularyCard] = Field(min_length=1)


# ============ Reading / Listening ============


class ComprehensionQuestion(_ContentModel):
    id: str
    question: str
    type: str = "multiple-choice"  # multiple-choice | true-false
    options: list[str] = []
    correct_answer: str
    explanation: str = ""


class ReadingPassage(_ContentModel):
    title: str
    type: str = "article"  # email | article | report | memo
    content: str
    word_count: int = 0


class ReadingContent(_ContentModel):
    type: Literal["reading"]
    passage: ReadingPassage
    questions: list[ComprehensionQuestion] = Field(min_length=1)


class ListeningContent(_ContentModel):
    type: Literal["listening"]
    audio_url: str
    transcript: str = ""
    questions: list[ComprehensionQuestion] = Field(min_length=1)


# ============ Writing ============


class WritingPrompt(_ContentModel):
    id: str
    title: str
    scenario: str
    context: str = "email"  # email | presentation | report | meeting
    target_audience: str = "colleague"
    desired_tone: str = "professional"
    word_count_min: int = 50
    word_count_max: int = 200

    @model_validator(mode="after")
    def check_word_range(self) -> "WritingPrompt":
        if self.word_count_min > self.word_count_max:
            raise ValueError("wordCountMin is greater than wordCountMax")
        return self


class WritingContent(_ContentModel):
    type: Literal["writing"]
    prompt: WritingPrompt


# ============ Speaking ============


class SpeakingPrompt(_ContentModel):
    id: str
    question: str
    sample_answer: str = ""
    tips: list[str] = []
    max_duration_seconds: int = 60


class SpeakingContent(_ContentModel):
    type: Literal["speaking"]
    prompt: SpeakingPrompt


ExerciseContent = Annotated[
    Union[
        GrammarContent,
        VocabularyContent,
        ReadingContent,
        ListeningContent,
        WritingContent,
        SpeakingContent,
    ],
    Field(discriminator="type"),
]

_content_adapter: TypeAdapter[ExerciseContent] = TypeAdapter(ExerciseContent)


def parse_content(exercise_type: str, payload: dict[str, Any]) -> ExerciseContent:
    """
    Validate a raw payload against the schema of its exercise type.

    Raises:
        pydantic.ValidationError if the payload does not fit
    """
    return _content_adapter.validate_python({**payload, "type": exercise_type})


def dump_content(content: ExerciseContent) -> dict[str, Any]:
    """Wire form for storage (camelCase, without the type tag)."""
    data = content.model_dump(by_alias=True)
    data.pop("type", None)
    return data


def title_for(content: ExerciseContent, today: date) -> str:
    """Display title of a generated exercise."""
    stamp = today.strftime("%d/%m/%Y")
    if isinstance(content, ReadingContent):
        return content.passage.title
    if isinstance(content, WritingContent):
        return content.prompt.title
    return f"AI {content.type.capitalize()} Practice - {stamp}"
