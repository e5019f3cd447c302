from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.base import get_session
from app.core.db.schemas.auth import User
from app.core.logging import get_logger
from app.modules.ai import AIService, AIServiceFactory, ConfigurationError
from app.modules.auth import current_active_user
from app.modules.rate_limit import DailyRateLimiter


logger = get_logger(__name__)


CurrentUser = Annotated[User, Depends(current_active_user)]
Session = Annotated[AsyncSession, Depends(get_session)]


def get_ai_factory(request: Request) -> AIServiceFactory:
    return request.app.state.ai_services


def get_ai_service(
    factory: AIServiceFactory = Depends(get_ai_factory),
) -> AIService:
    """Resolve the active adapter; a misconfigured provider answers 503."""
    try:
        return factory.get_service()
    except ConfigurationError as exc:
        logger.error("AI service unavailable: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "AI service is not configured", "details": str(exc)},
        ) from exc


def get_rate_limiter(session: AsyncSession = Depends(get_session)) -> DailyRateLimiter:
    return DailyRateLimiter(session)


AI = Annotated[AIService, Depends(get_ai_service)]
RateLimiter = Annotated[DailyRateLimiter, Depends(get_rate_limiter)]
