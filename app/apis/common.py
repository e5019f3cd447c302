"""Response helpers shared by the routers."""

from __future__ import annotations

from typing import Any, NoReturn, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from app.core.clock import iso_utc
from app.modules.ai import AIServiceError
from app.modules.ai.models import CamelModel
from app.modules.rate_limit import LimitCheck


class ORMModel(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class MessageResponse(CamelModel):
    message: str


class QuotaExceededError(Exception):
    """A daily quota denied the request; rendered as a 429 body."""

    def __init__(self, kind: str, check: LimitCheck, message: str) -> None:
        self.kind = kind
        self.check = check
        self.message = message
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        limit: dict[str, Any] = {
            "type": self.kind,
            "current": self.check.current_count,
            "limit": self.check.limit,
            "remaining": self.check.remaining,
            "resetTime": iso_utc(self.check.reset_time),
        }
        if self.check.requested_count is not None:
            limit["requested"] = self.check.requested_count
        return {
            "error": "Daily rate limit exceeded",
            "message": self.message,
            "limit": limit,
        }


async def quota_exceeded_handler(request: Request, exc: QuotaExceededError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS, content=exc.to_payload()
    )


def study_module_quota_exceeded(check: LimitCheck) -> QuotaExceededError:
    return QuotaExceededError(
        "study_modules",
        check,
        f"You have reached your daily limit of {check.limit} study modules. "
        "Please try again tomorrow.",
    )


def ai_cards_quota_exceeded(check: LimitCheck) -> QuotaExceededError:
    return QuotaExceededError(
        "ai_cards",
        check,
        f"You have reached your daily limit of {check.limit} AI-generated cards. "
        f"You currently have {check.current_count} cards today, and this request "
        f"would create {check.requested_count} more. Please try again tomorrow "
        "or reduce the number of cards.",
    )


def raise_generation_failed(
    error: str, exc: AIServiceError, status_code: Optional[int] = None
) -> NoReturn:
    raise HTTPException(
        status_code=status_code or status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": error, "details": str(exc)},
    ) from exc
