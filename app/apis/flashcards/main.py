from __future__ import annotations

import uuid

from fastapi import APIRouter, HTTPException, status

from app.apis.common import MessageResponse
from app.apis.deps import CurrentUser, RateLimiter, Session
from app.core.config import settings
from app.core.db_services import FlashcardService
from .schemas import (
    FlashcardCreate,
    FlashcardListResponse,
    FlashcardRead,
    FlashcardResponse,
    FlashcardUpdate,
)


router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Flashcard not found")


@router.get(
    f"/{settings.app.version}/flashcards",
    response_model=FlashcardListResponse,
    tags=["flashcards"],
)
async def list_flashcards(user: CurrentUser, session: Session) -> FlashcardListResponse:
    cards = await FlashcardService(session).list_for_user(user.id)
    return FlashcardListResponse(
        flashcards=[FlashcardRead.model_validate(c) for c in cards]
    )


@router.post(
    f"/{settings.app.version}/flashcards",
    response_model=FlashcardResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["flashcards"],
)
async def create_flashcard(
    req: FlashcardCreate, user: CurrentUser, session: Session
) -> FlashcardResponse:
    card = await FlashcardService(session).create(user.id, **req.model_dump())
    return FlashcardResponse(flashcard=FlashcardRead.model_validate(card))


@router.get(
    f"/{settings.app.version}/flashcards/{{card_id}}",
    response_model=FlashcardResponse,
    tags=["flashcards"],
)
async def get_flashcard(
    card_id: uuid.UUID, user: CurrentUser, session: Session
) -> FlashcardResponse:
    card = await FlashcardService(session).get_for_user(user.id, card_id)
    if not card:
        raise _not_found()
    return FlashcardResponse(flashcard=FlashcardRead.model_validate(card))


@router.put(
    f"/{settings.app.version}/flashcards/{{card_id}}",
    response_model=FlashcardResponse,
    tags=["flashcards"],
)
async def update_flashcard(
    card_id: uuid.UUID, req: FlashcardUpdate, user: CurrentUser, session: Session
) -> FlashcardResponse:
    service = FlashcardService(session)
    card = await service.get_for_user(user.id, card_id)
    if not card:
        raise _not_found()
    card = await service.update(card, **req.model_dump(exclude_unset=True, exclude_none=True))
    return FlashcardResponse(flashcard=FlashcardRead.model_validate(card))


@router.delete(
    f"/{settings.app.version}/flashcards/{{card_id}}",
    response_model=MessageResponse,
    tags=["flashcards"],
)
async def delete_flashcard(
    card_id: uuid.UUID, user: CurrentUser, session: Session, limiter: RateLimiter
) -> MessageResponse:
    service = FlashcardService(session)
    card = await service.get_for_user(user.id, card_id)
    if not card:
        raise _not_found()
    before = await limiter.usage_snapshot(user.id)
    await service.delete(card)
    await limiter.release_deleted(user.id, before)
    return MessageResponse(message="Flashcard deleted successfully")
