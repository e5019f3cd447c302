"""Pydantic models for AI flashcard and study module generation.

Field names are snake_case in Python and camelCase on the wire, matching the
JSON shape the prompts ask the model to return.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"
    FILL_IN_BLANK = "fill_in_blank"


class EducationLevel(str, Enum):
    ELEMENTARY = "elementary"
    MIDDLE = "middle"
    HIGH_SCHOOL = "high_school"
    COLLEGE = "college"
    COMPETITIVE = "competitive"


DEFAULT_QUESTION_TYPES: list[str] = [
    QuestionType.MULTIPLE_CHOICE.value,
    QuestionType.TRUE_FALSE.value,
    QuestionType.SHORT_ANSWER.value,
]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerationOptionsBase(CamelModel):
    subject: str = "General"
    education_level: str = EducationLevel.HIGH_SCHOOL.value
    difficulty_level: str = "intermediate"


class GenerateFlashcardsOptions(GenerationOptionsBase):
    content: str
    number_of_cards: int = Field(default=5, ge=1)
    question_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_QUESTION_TYPES)
    )


class GenerateFlashcardsFromTopicOptions(GenerationOptionsBase):
    topic: str
    number_of_cards: int = Field(default=10, ge=1)
    question_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_QUESTION_TYPES)
    )


class GenerateStudyModuleOptions(GenerationOptionsBase):
    topic: str
    number_of_cards: int = Field(default=20, ge=1)
    estimated_hours: Optional[int] = None


class Flashcard(CamelModel):
    """A generated card before it is persisted."""

    question: str
    answer: str
    question_type: QuestionType = QuestionType.SHORT_ANSWER
    difficulty_level: str
    options: Optional[list[str]] = None


class LearningPlanEntry(CamelModel):
    week: int = 0
    topic: str = ""
    description: str = ""
    flashcards_count: int = 0


class StudyModulePlan(CamelModel):
    title: str
    description: str = ""
    topics: list[str]
    learning_plan: list[LearningPlanEntry]
    estimated_hours: int = 0


class StudyModuleWithFlashcards(CamelModel):
    module: StudyModulePlan
    flashcards: list[Flashcard] = Field(default_factory=list)
    failed_topics: list[str] = Field(default_factory=list)
