from __future__ import annotations

from typing import Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.apis.flashcards.schemas import FlashcardRead
from app.modules.ai.models import (
    DEFAULT_QUESTION_TYPES,
    CamelModel,
    EducationLevel,
    Flashcard,
    GenerateFlashcardsFromTopicOptions,
    GenerateFlashcardsOptions,
    QuestionType,
)


MAX_CONTENT_LENGTH = 50_000
MAX_TOPIC_LENGTH = 200
MAX_CARDS_PER_REQUEST = 50


class _GenerationRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )

    subject: Optional[str] = None
    education_level: Optional[EducationLevel] = None
    difficulty_level: Optional[str] = None
    question_types: Optional[list[QuestionType]] = None

    def _common_options(self) -> dict:
        options = {
            "subject": self.subject,
            "education_level": self.education_level,
            "difficulty_level": self.difficulty_level,
            "question_types": self.question_types or list(DEFAULT_QUESTION_TYPES),
        }
        return {k: v for k, v in options.items() if v}


class GenerateFromContentRequest(_GenerationRequest):
    content: str = Field(min_length=1, max_length=MAX_CONTENT_LENGTH)
    number_of_cards: int = Field(default=5, ge=1, le=MAX_CARDS_PER_REQUEST)

    def to_options(self) -> GenerateFlashcardsOptions:
        return GenerateFlashcardsOptions(
            content=self.content,
            number_of_cards=self.number_of_cards,
            **self._common_options(),
        )


class GenerateFromTopicRequest(_GenerationRequest):
    topic: str = Field(min_length=1, max_length=MAX_TOPIC_LENGTH)
    number_of_cards: int = Field(default=10, ge=1, le=MAX_CARDS_PER_REQUEST)

    def to_options(self) -> GenerateFlashcardsFromTopicOptions:
        return GenerateFlashcardsFromTopicOptions(
            topic=self.topic,
            number_of_cards=self.number_of_cards,
            **self._common_options(),
        )


class GeneratedFlashcardsResponse(CamelModel):
    message: str
    count: int
    flashcards: list[FlashcardRead]


class PreviewFlashcardsResponse(CamelModel):
    message: str
    count: int
    flashcards: list[Flashcard]
