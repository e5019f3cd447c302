from __future__ import annotations

import asyncio
import time
import uuid

from fastapi import APIRouter, HTTPException, status

from app.apis.common import (
    MessageResponse,
    ai_cards_quota_exceeded,
    raise_generation_failed,
    study_module_quota_exceeded,
)
from app.apis.deps import AI, CurrentUser, RateLimiter, Session
from app.apis.flashcards.schemas import FlashcardRead
from app.core.config import settings
from app.core.db.schemas import UsageKind
from app.core.db_services import StudyModuleService
from app.core.logging import get_logger
from app.modules.ai import GenerationError
from app.modules.rate_limit import DailyUsageSummary
from .schemas import (
    GenerateStudyModuleRequest,
    GeneratedStudyModuleResponse,
    GenerationStats,
    StudyModuleDetailResponse,
    StudyModuleListResponse,
    StudyModulePreviewResponse,
    StudyModuleRead,
    StudyModuleSummary,
)


router = APIRouter()

logger = get_logger(__name__)


@router.post(
    f"/{settings.app.version}/study-modules/ai/generate",
    response_model=GeneratedStudyModuleResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["study-modules"],
)
async def generate_study_module(
    req: GenerateStudyModuleRequest,
    user: CurrentUser,
    session: Session,
    limiter: RateLimiter,
    ai: AI,
) -> GeneratedStudyModuleResponse:
    started = time.monotonic()
    requested = req.number_of_cards

    module_slot = await limiter.reserve_study_module(user.id)
    if not module_slot.allowed:
        raise study_module_quota_exceeded(module_slot)
    card_slots = await limiter.reserve_ai_cards(user.id, requested)
    if not card_slots.allowed:
        await limiter.release(user.id, UsageKind.STUDY_MODULES, 1)
        raise ai_cards_quota_exceeded(card_slots)

    options = req.to_options()
    timeout = settings.ai.module_timeout_seconds
    try:
        result = await asyncio.wait_for(ai.generate_study_module(options), timeout=timeout)
    except asyncio.TimeoutError:
        await limiter.release(user.id, UsageKind.STUDY_MODULES, 1)
        await limiter.release(user.id, UsageKind.AI_CARDS, requested)
        logger.error(
            "Study module generation timed out after %.0fs",
            timeout,
            extra={"user_id": str(user.id)},
        )
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail={
                "error": "Failed to generate study module",
                "details": f"AI generation timeout after {timeout:.0f} seconds",
            },
        )
    except GenerationError as exc:
        await limiter.release(user.id, UsageKind.STUDY_MODULES, 1)
        await limiter.release(user.id, UsageKind.AI_CARDS, requested)
        raise_generation_failed("Failed to generate study module", exc)

    module, saved = await StudyModuleService(session).create_from_plan(
        user.id, result.module, result.flashcards, options
    )
    await limiter.release(user.id, UsageKind.AI_CARDS, requested - len(saved))

    logger.info(
        "Study module generated with %d/%d cards in %.1fs",
        len(saved),
        requested,
        time.monotonic() - started,
        extra={"user_id": str(user.id)},
    )
    return GeneratedStudyModuleResponse(
        message="Study module generated successfully",
        module=StudyModuleRead.model_validate(module),
        flashcards=[FlashcardRead.model_validate(c) for c in saved],
        stats=GenerationStats(
            total_flashcards=len(saved),
            estimated_hours=module.estimated_hours,
            topics_count=len(module.topics or []),
            failed_topics=result.failed_topics,
        ),
    )


@router.post(
    f"/{settings.app.version}/study-modules/ai/preview",
    response_model=StudyModulePreviewResponse,
    tags=["study-modules"],
)
async def preview_study_module(
    req: GenerateStudyModuleRequest, ai: AI
) -> StudyModulePreviewResponse:
    try:
        result = await ai.generate_study_module(req.to_options())
    except GenerationError as exc:
        raise_generation_failed("Failed to generate study module preview", exc)
    return StudyModulePreviewResponse(
        message="Study module preview generated successfully",
        module=result.module,
        flashcards=result.flashcards,
        stats=GenerationStats(
            total_flashcards=len(result.flashcards),
            estimated_hours=result.module.estimated_hours,
            topics_count=len(result.module.topics),
            failed_topics=result.failed_topics,
        ),
    )


@router.get(
    f"/{settings.app.version}/study-modules/usage",
    response_model=DailyUsageSummary,
    tags=["study-modules"],
)
async def get_daily_usage(user: CurrentUser, limiter: RateLimiter) -> DailyUsageSummary:
    return await limiter.get_daily_usage_summary(user.id)


@router.get(
    f"/{settings.app.version}/study-modules",
    response_model=StudyModuleListResponse,
    tags=["study-modules"],
)
async def list_study_modules(user: CurrentUser, session: Session) -> StudyModuleListResponse:
    rows = await StudyModuleService(session).list_with_progress(user.id)
    modules = []
    for module, count, progress in rows:
        modules.append(StudyModuleSummary.build(module, count, progress))
    return StudyModuleListResponse(modules=modules)


@router.get(
    f"/{settings.app.version}/study-modules/{{module_id}}",
    response_model=StudyModuleDetailResponse,
    tags=["study-modules"],
)
async def get_study_module(
    module_id: uuid.UUID, user: CurrentUser, session: Session
) -> StudyModuleDetailResponse:
    service = StudyModuleService(session)
    module = await service.get_for_user(user.id, module_id)
    if not module:
        raise HTTPException(status_code=404, detail="Study module not found")
    progress = await service.get_progress(user.id, module_id)

    return StudyModuleDetailResponse(
        module=StudyModuleSummary.build(module, len(module.flashcards), progress),
        flashcards=[FlashcardRead.model_validate(c) for c in module.flashcards],
    )


@router.delete(
    f"/{settings.app.version}/study-modules/{{module_id}}",
    response_model=MessageResponse,
    tags=["study-modules"],
)
async def delete_study_module(
    module_id: uuid.UUID, user: CurrentUser, session: Session, limiter: RateLimiter
) -> MessageResponse:
    service = StudyModuleService(session)
    module = await service.get_for_user(user.id, module_id)
    if not module:
        raise HTTPException(status_code=404, detail="Study module not found")
    before = await limiter.usage_snapshot(user.id)
    await service.delete(module)
    await limiter.release_deleted(user.id, before)
    return MessageResponse(message="Study module deleted successfully")
