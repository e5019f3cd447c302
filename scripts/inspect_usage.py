"""Quick DB inspector for today's quota usage.

Prints, per user with activity today, the study modules and AI cards counted
against the daily limits alongside the reservation ledger.

Usage:
  uv run scripts/inspect_usage.py
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Ensure project root is on sys.path so `app` package imports resolve
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sqlalchemy import select

from app.core.clock import iso_utc, utcnow
from app.core.db.base import get_session
from app.core.db.schemas import DailyUsage, User
from app.modules.rate_limit import DailyRateLimiter


async def main() -> int:
    async for session in get_session():  # get_session is an async generator
        limiter = DailyRateLimiter(session)
        today = utcnow().date()

        ledger = (
            await session.execute(
                select(DailyUsage, User.email)
                .join(User, User.id == DailyUsage.user_id)
                .where(DailyUsage.usage_date == today)
                .order_by(User.email)
            )
        ).all()

        print(f"Daily usage for {today} (resets {iso_utc(limiter.next_reset_time())}):")
        if not ledger:
            print("- No reservations today.")
            return 0

        seen = set()
        for row, email in ledger:
            print(f"  • {email} | ledger {row.kind}={row.used}")
            if row.user_id in seen:
                continue
            seen.add(row.user_id)
            summary = await limiter.get_daily_usage_summary(row.user_id)
            print(
                f"    counted: modules {summary.study_modules.current}/{summary.study_modules.limit}, "
                f"ai cards {summary.ai_cards.current}/{summary.ai_cards.limit}"
            )
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
