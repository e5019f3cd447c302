from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.apis.common import ORMModel
from app.modules.ai.models import CamelModel, QuestionType


class FlashcardRead(ORMModel):
    id: uuid.UUID
    question: str
    answer: str
    subject: Optional[str] = None
    difficulty_level: Optional[str] = None
    education_level: Optional[str] = None
    module_id: Optional[uuid.UUID] = None
    question_type: Optional[str] = None
    options: Optional[list[str]] = None
    is_ai_generated: bool = False
    created_at: datetime
    updated_at: datetime


class FlashcardCreate(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )

    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)
    subject: Optional[str] = None
    difficulty_level: Optional[str] = None
    education_level: Optional[str] = None
    question_type: Optional[QuestionType] = None
    options: Optional[list[str]] = None


class FlashcardUpdate(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )

    question: Optional[str] = Field(default=None, min_length=1)
    answer: Optional[str] = Field(default=None, min_length=1)
    subject: Optional[str] = None
    difficulty_level: Optional[str] = None
    education_level: Optional[str] = None
    question_type: Optional[QuestionType] = None
    options: Optional[list[str]] = None


class FlashcardResponse(CamelModel):
    flashcard: FlashcardRead


class FlashcardListResponse(CamelModel):
    flashcards: list[FlashcardRead] = Field(default_factory=list)
