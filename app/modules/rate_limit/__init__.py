from app.modules.rate_limit.limiter import (
    AI_CARDS_DAILY_LIMIT,
    STUDY_MODULES_DAILY_LIMIT,
    DailyRateLimiter,
)
from app.modules.rate_limit.models import DailyUsageSummary, LimitCheck, UsageCounter

__all__ = [
    "AI_CARDS_DAILY_LIMIT",
    "STUDY_MODULES_DAILY_LIMIT",
    "DailyRateLimiter",
    "DailyUsageSummary",
    "LimitCheck",
    "UsageCounter",
]
