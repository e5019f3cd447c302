from __future__ import annotations

import uuid

from fastapi import APIRouter, HTTPException, status

from app.apis.deps import CurrentUser, Session
from app.apis.flashcards.schemas import FlashcardRead
from app.core.config import settings
from app.core.db_services import (
    FlashcardService,
    StudyModuleService,
    StudySessionService,
)
from .schemas import (
    CardPerformanceRead,
    CompleteSessionRequest,
    PerformanceRequest,
    PerformanceResponse,
    SessionProgressRead,
    SessionResponse,
    StartSessionRequest,
    StartSessionResponse,
    StudyHistoryResponse,
    StudySessionRead,
)


router = APIRouter()


@router.post(
    f"/{settings.app.version}/study/session",
    response_model=StartSessionResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["study"],
)
async def start_session(
    req: StartSessionRequest, user: CurrentUser, session: Session
) -> StartSessionResponse:
    study_session, cards, start_index, progress = await StudySessionService(
        session
    ).start(user.id, req.session_type, req.module_id)
    return StartSessionResponse(
        session=StudySessionRead.model_validate(study_session),
        flashcards=[FlashcardRead.model_validate(c) for c in cards],
        start_index=start_index,
        progress=SessionProgressRead.model_validate(progress) if progress else None,
    )


@router.post(
    f"/{settings.app.version}/study/performance/{{card_id}}",
    response_model=PerformanceResponse,
    tags=["study"],
)
async def record_performance(
    card_id: uuid.UUID, req: PerformanceRequest, user: CurrentUser, session: Session
) -> PerformanceResponse:
    card = await FlashcardService(session).get_for_user(user.id, card_id)
    if not card:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Card not found")
    performance = await StudySessionService(session).record_performance(
        user.id, card.id, req.correct, req.response_time
    )
    return PerformanceResponse(performance=CardPerformanceRead.model_validate(performance))


@router.get(
    f"/{settings.app.version}/study/session/{{session_id}}",
    response_model=SessionResponse,
    tags=["study"],
)
async def get_session_detail(
    session_id: uuid.UUID, user: CurrentUser, session: Session
) -> SessionResponse:
    study_session = await StudySessionService(session).get_for_user(user.id, session_id)
    if not study_session:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return SessionResponse(session=StudySessionRead.model_validate(study_session))


@router.put(
    f"/{settings.app.version}/study/session/{{session_id}}",
    response_model=SessionResponse,
    tags=["study"],
)
async def complete_session(
    session_id: uuid.UUID, req: CompleteSessionRequest, user: CurrentUser, session: Session
) -> SessionResponse:
    service = StudySessionService(session)
    study_session = await service.get_for_user(user.id, session_id)
    if not study_session:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    if req.module_id and not await StudyModuleService(session).owns(
        user.id, req.module_id
    ):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Study module not found")

    study_session, progress = await service.complete(
        study_session,
        cards_studied=req.cards_studied,
        correct_answers=req.correct_answers,
        session_duration=req.session_duration,
        module_id=req.module_id,
        current_card_index=req.current_card_index,
    )
    return SessionResponse(
        session=StudySessionRead.model_validate(study_session),
        progress=SessionProgressRead.model_validate(progress) if progress else None,
    )


@router.get(
    f"/{settings.app.version}/study/history",
    response_model=StudyHistoryResponse,
    tags=["study"],
)
async def study_history(user: CurrentUser, session: Session) -> StudyHistoryResponse:
    service = StudySessionService(session)
    sessions = await service.recent(user.id)
    return StudyHistoryResponse(
        sessions=[StudySessionRead.model_validate(s) for s in sessions],
        studied_today=await service.cards_studied_today(user.id),
    )
