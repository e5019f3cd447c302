from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from app.apis.common import ORMModel
from app.apis.flashcards.schemas import FlashcardRead
from app.modules.ai.models import CamelModel


class StartSessionRequest(CamelModel):
    session_type: str = "review"
    module_id: Optional[uuid.UUID] = None


class StudySessionRead(ORMModel):
    id: uuid.UUID
    session_type: str
    cards_studied: int
    correct_answers: int
    session_duration: Optional[int] = None
    started_at: datetime
    completed_at: Optional[datetime] = None


class SessionProgressRead(ORMModel):
    current_card_index: int
    cards_studied: int
    total_correct: int
    accuracy: Optional[float] = None
    completed_at: Optional[datetime] = None


class StartSessionResponse(CamelModel):
    session: StudySessionRead
    flashcards: list[FlashcardRead] = Field(default_factory=list)
    start_index: int = 0
    progress: Optional[SessionProgressRead] = None


class PerformanceRequest(CamelModel):
    correct: Optional[bool] = None
    response_time: Optional[int] = Field(default=None, ge=0)


class CardPerformanceRead(ORMModel):
    id: uuid.UUID
    is_correct: Optional[bool] = None
    response_time: Optional[int] = None
    review_count: int
    created_at: datetime


class PerformanceResponse(CamelModel):
    performance: CardPerformanceRead


class SessionResponse(CamelModel):
    session: StudySessionRead
    progress: Optional[SessionProgressRead] = None


class CompleteSessionRequest(CamelModel):
    cards_studied: int = Field(default=0, ge=0)
    correct_answers: int = Field(default=0, ge=0)
    session_duration: Optional[int] = Field(default=None, ge=0)
    module_id: Optional[uuid.UUID] = None
    current_card_index: Optional[int] = Field(default=None, ge=0)


class StudyHistoryResponse(CamelModel):
    sessions: list[StudySessionRead] = Field(default_factory=list)
    studied_today: int = 0
