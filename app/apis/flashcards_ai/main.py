from __future__ import annotations

from typing import Awaitable, Callable, Union

from fastapi import APIRouter, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.apis.common import ai_cards_quota_exceeded, raise_generation_failed
from app.apis.deps import AI, CurrentUser, RateLimiter, Session
from app.apis.flashcards.schemas import FlashcardRead
from app.core.config import settings
from app.core.db.schemas import Flashcard as StoredFlashcard, UsageKind
from app.core.db.schemas.auth import User
from app.core.db_services import FlashcardService
from app.core.logging import get_logger
from app.modules.ai import GenerationError
from app.modules.ai.models import (
    Flashcard,
    GenerateFlashcardsFromTopicOptions,
    GenerateFlashcardsOptions,
)
from app.modules.rate_limit import DailyRateLimiter
from .schemas import (
    GenerateFromContentRequest,
    GenerateFromTopicRequest,
    GeneratedFlashcardsResponse,
    PreviewFlashcardsResponse,
)


router = APIRouter()

logger = get_logger(__name__)

GenerationOptions = Union[GenerateFlashcardsOptions, GenerateFlashcardsFromTopicOptions]


async def _generate_and_save(
    *,
    user: User,
    session: AsyncSession,
    limiter: DailyRateLimiter,
    requested: int,
    generate: Callable[..., Awaitable[list[Flashcard]]],
    options: GenerationOptions,
) -> list[StoredFlashcard]:
    """Reserve quota, call the model, persist, and hand back unused quota."""
    reservation = await limiter.reserve_ai_cards(user.id, requested)
    if not reservation.allowed:
        raise ai_cards_quota_exceeded(reservation)

    try:
        cards = await generate(options)
    except GenerationError as exc:
        await limiter.release(user.id, UsageKind.AI_CARDS, requested)
        raise_generation_failed("Failed to generate flashcards", exc)

    saved = await FlashcardService(session).save_generated(
        user.id,
        cards[:requested],
        subject=options.subject,
        education_level=options.education_level,
        difficulty_level=options.difficulty_level,
    )
    await limiter.release(user.id, UsageKind.AI_CARDS, requested - len(saved))
    logger.info(
        "Saved %d AI flashcards", len(saved), extra={"user_id": str(user.id)}
    )
    return saved


@router.post(
    f"/{settings.app.version}/flashcards-ai/generate",
    response_model=GeneratedFlashcardsResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["flashcards-ai"],
)
async def generate_flashcards(
    req: GenerateFromContentRequest,
    user: CurrentUser,
    session: Session,
    limiter: RateLimiter,
    ai: AI,
) -> GeneratedFlashcardsResponse:
    saved = await _generate_and_save(
        user=user,
        session=session,
        limiter=limiter,
        requested=req.number_of_cards,
        generate=ai.generate_flashcards,
        options=req.to_options(),
    )
    return GeneratedFlashcardsResponse(
        message="Flashcards generated successfully",
        count=len(saved),
        flashcards=[FlashcardRead.model_validate(c) for c in saved],
    )


@router.post(
    f"/{settings.app.version}/flashcards-ai/preview",
    response_model=PreviewFlashcardsResponse,
    tags=["flashcards-ai"],
)
async def preview_flashcards(
    req: GenerateFromContentRequest, ai: AI
) -> PreviewFlashcardsResponse:
    try:
        cards = await ai.generate_flashcards(req.to_options())
    except GenerationError as exc:
        raise_generation_failed("Failed to generate flashcards preview", exc)
    return PreviewFlashcardsResponse(
        message="Flashcards preview generated successfully",
        count=len(cards),
        flashcards=cards,
    )


@router.post(
    f"/{settings.app.version}/flashcards-ai/generate-from-topic",
    response_model=GeneratedFlashcardsResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["flashcards-ai"],
)
async def generate_flashcards_from_topic(
    req: GenerateFromTopicRequest,
    user: CurrentUser,
    session: Session,
    limiter: RateLimiter,
    ai: AI,
) -> GeneratedFlashcardsResponse:
    saved = await _generate_and_save(
        user=user,
        session=session,
        limiter=limiter,
        requested=req.number_of_cards,
        generate=ai.generate_flashcards_from_topic,
        options=req.to_options(),
    )
    return GeneratedFlashcardsResponse(
        message="Flashcards generated from topic successfully",
        count=len(saved),
        flashcards=[FlashcardRead.model_validate(c) for c in saved],
    )


@router.post(
    f"/{settings.app.version}/flashcards-ai/preview-from-topic",
    response_model=PreviewFlashcardsResponse,
    tags=["flashcards-ai"],
)
async def preview_flashcards_from_topic(
    req: GenerateFromTopicRequest, ai: AI
) -> PreviewFlashcardsResponse:
    try:
        cards = await ai.generate_flashcards_from_topic(req.to_options())
    except GenerationError as exc:
        raise_generation_failed("Failed to generate flashcards preview", exc)
    return PreviewFlashcardsResponse(
        message="Flashcards preview generated successfully",
        count=len(cards),
        flashcards=cards,
    )
