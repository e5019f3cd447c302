from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.apis.common import ORMModel
from app.apis.flashcards.schemas import FlashcardRead
from app.core.db.schemas import ModuleProgress, StudyModule
from app.modules.ai.models import (
    CamelModel,
    EducationLevel,
    Flashcard,
    GenerateStudyModuleOptions,
    StudyModulePlan,
)


class GenerateStudyModuleRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )

    topic: str = Field(min_length=1, max_length=200)
    subject: Optional[str] = None
    education_level: Optional[EducationLevel] = None
    difficulty_level: Optional[str] = None
    number_of_cards: int = Field(default=20, ge=5, le=100)
    estimated_hours: Optional[int] = Field(default=None, ge=1)

    def to_options(self) -> GenerateStudyModuleOptions:
        optional = {
            "subject": self.subject,
            "education_level": self.education_level,
            "difficulty_level": self.difficulty_level,
        }
        return GenerateStudyModuleOptions(
            topic=self.topic,
            number_of_cards=self.number_of_cards,
            estimated_hours=self.estimated_hours,
            **{k: v for k, v in optional.items() if v},
        )


class StudyModuleRead(ORMModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    subject: Optional[str] = None
    education_level: Optional[str] = None
    difficulty_level: Optional[str] = None
    estimated_hours: Optional[int] = None
    topics: list[str] = Field(default_factory=list)
    learning_plan: list[dict[str, Any]] = Field(default_factory=list)
    is_ai_generated: bool = False
    created_at: datetime
    updated_at: datetime


class ModuleProgressRead(CamelModel):
    current_card_index: int
    cards_studied: int
    total_correct: int
    accuracy: int
    completed_at: Optional[datetime] = None
    last_studied_at: Optional[datetime] = None
    progress_percent: int
    is_completed: bool

    @classmethod
    def from_progress(
        cls, progress: Optional[ModuleProgress], total_cards: int
    ) -> Optional["ModuleProgressRead"]:
        """Accuracy and progress are reported as whole percentages."""
        if progress is None:
            return None
        percent = (
            round((progress.current_card_index + 1) / total_cards * 100)
            if total_cards > 0
            else 0
        )
        return cls(
            current_card_index=progress.current_card_index,
            cards_studied=progress.cards_studied,
            total_correct=progress.total_correct,
            accuracy=round((progress.accuracy or 0) * 100),
            completed_at=progress.completed_at,
            last_studied_at=progress.last_studied_at,
            progress_percent=percent,
            is_completed=progress.completed_at is not None,
        )


class StudyModuleSummary(StudyModuleRead):
    flashcard_count: int = 0
    progress: Optional[ModuleProgressRead] = None

    @classmethod
    def build(
        cls, module: StudyModule, total_cards: int, progress: Optional[ModuleProgress]
    ) -> "StudyModuleSummary":
        base = StudyModuleRead.model_validate(module)
        return cls(
            **base.model_dump(),
            flashcard_count=total_cards,
            progress=ModuleProgressRead.from_progress(progress, total_cards),
        )


class StudyModuleListResponse(CamelModel):
    modules: list[StudyModuleSummary] = Field(default_factory=list)


class StudyModuleDetailResponse(CamelModel):
    module: StudyModuleSummary
    flashcards: list[FlashcardRead] = Field(default_factory=list)


class GenerationStats(CamelModel):
    total_flashcards: int
    estimated_hours: Optional[int] = None
    topics_count: int = 0
    failed_topics: list[str] = Field(default_factory=list)


class GeneratedStudyModuleResponse(CamelModel):
    message: str
    module: StudyModuleRead
    flashcards: list[FlashcardRead]
    stats: GenerationStats


class StudyModulePreviewResponse(CamelModel):
    message: str
    module: StudyModulePlan
    flashcards: list[Flashcard]
    stats: GenerationStats
