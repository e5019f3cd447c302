from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import field_serializer

from app.core.clock import iso_utc
from app.modules.ai.models import CamelModel


class LimitCheck(CamelModel):
    allowed: bool
    current_count: int
    limit: int
    remaining: int
    requested_count: Optional[int] = None
    reset_time: datetime

    @field_serializer("reset_time")
    def _serialize_reset_time(self, value: datetime) -> str:
        return iso_utc(value)


class UsageCounter(CamelModel):
    current: int
    limit: int
    remaining: int


class DailyUsageSummary(CamelModel):
    study_modules: UsageCounter
    ai_cards: UsageCounter
    reset_time: datetime

    @field_serializer("reset_time")
    def _serialize_reset_time(self, value: datetime) -> str:
        return iso_utc(value)
