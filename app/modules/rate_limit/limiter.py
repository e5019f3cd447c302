"""Per-user daily quotas for study modules and AI-generated flashcards.

Counts are taken over rows created during the current UTC day, so the quota
resets at UTC midnight whatever the caller's timezone.

Admission goes through the ``daily_usage`` ledger: a reservation is a single
conditional ``UPDATE ... SET used = used + n WHERE used + n <= limit`` and is
granted only if it touched the row. Two concurrent requests can therefore never
both take the last slot. Deleting counted rows hands their units back through
``release_deleted``, so the ledger follows the row count.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import next_utc_midnight, start_of_utc_day, utcnow
from app.core.db.schemas import DailyUsage, Flashcard, StudyModule, UsageKind
from app.core.logging import get_logger
from app.modules.rate_limit.models import DailyUsageSummary, LimitCheck, UsageCounter


logger = get_logger(__name__)

STUDY_MODULES_DAILY_LIMIT = 3
AI_CARDS_DAILY_LIMIT = 30

DAILY_LIMITS: dict[UsageKind, int] = {
    UsageKind.STUDY_MODULES: STUDY_MODULES_DAILY_LIMIT,
    UsageKind.AI_CARDS: AI_CARDS_DAILY_LIMIT,
}


class DailyRateLimiter:
    def __init__(
        self,
        session: AsyncSession,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.session = session
        self.clock = clock or utcnow

    def _window(self) -> tuple[datetime, datetime]:
        start = start_of_utc_day(self.clock())
        return start, start + timedelta(days=1)

    def next_reset_time(self) -> datetime:
        return next_utc_midnight(self.clock())

    async def count_study_modules_today(self, user_id: uuid.UUID) -> int:
        start, end = self._window()
        stmt = (
            select(func.count())
            .select_from(StudyModule)
            .where(
                StudyModule.user_id == user_id,
                StudyModule.created_at >= start,
                StudyModule.created_at < end,
            )
        )
        return int((await self.session.execute(stmt)).scalar_one())

    async def count_ai_cards_today(self, user_id: uuid.UUID) -> int:
        """AI cards are cards flagged directly or living in an AI-generated module."""
        start, end = self._window()
        stmt = (
            select(func.count(Flashcard.id))
            .select_from(Flashcard)
            .outerjoin(StudyModule, Flashcard.module_id == StudyModule.id)
            .where(
                Flashcard.user_id == user_id,
                Flashcard.created_at >= start,
                Flashcard.created_at < end,
                or_(
                    Flashcard.is_ai_generated.is_(True),
                    and_(
                        StudyModule.id.is_not(None),
                        StudyModule.is_ai_generated.is_(True),
                    ),
                ),
            )
        )
        return int((await self.session.execute(stmt)).scalar_one())

    async def check_study_module_daily_limit(self, user_id: uuid.UUID) -> LimitCheck:
        current = await self.count_study_modules_today(user_id)
        limit = STUDY_MODULES_DAILY_LIMIT
        return LimitCheck(
            allowed=current < limit,
            current_count=current,
            limit=limit,
            remaining=max(0, limit - current),
            reset_time=self.next_reset_time(),
        )

    async def check_ai_cards_daily_limit(
        self, user_id: uuid.UUID, requested_count: int
    ) -> LimitCheck:
        current = await self.count_ai_cards_today(user_id)
        limit = AI_CARDS_DAILY_LIMIT
        return LimitCheck(
            allowed=current + requested_count <= limit,
            current_count=current,
            limit=limit,
            remaining=max(0, limit - current),
            requested_count=requested_count,
            reset_time=self.next_reset_time(),
        )

    async def get_daily_usage_summary(self, user_id: uuid.UUID) -> DailyUsageSummary:
        modules = await self.count_study_modules_today(user_id)
        cards = await self.count_ai_cards_today(user_id)
        return DailyUsageSummary(
            study_modules=UsageCounter(
                current=modules,
                limit=STUDY_MODULES_DAILY_LIMIT,
                remaining=max(0, STUDY_MODULES_DAILY_LIMIT - modules),
            ),
            ai_cards=UsageCounter(
                current=cards,
                limit=AI_CARDS_DAILY_LIMIT,
                remaining=max(0, AI_CARDS_DAILY_LIMIT - cards),
            ),
            reset_time=self.next_reset_time(),
        )

    # Reservations

    def _today(self) -> date:
        return start_of_utc_day(self.clock()).date()

    def _insert(self):
        dialect = self.session.bind.dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            raise RuntimeError(f"Unsupported database dialect for quota ledger: {dialect}")
        return insert(DailyUsage)

    async def _count(self, user_id: uuid.UUID, kind: UsageKind) -> int:
        if kind is UsageKind.STUDY_MODULES:
            return await self.count_study_modules_today(user_id)
        return await self.count_ai_cards_today(user_id)

    async def _ensure_ledger_row(self, user_id: uuid.UUID, kind: UsageKind) -> None:
        stmt = (
            self._insert()
            .values(
                id=uuid.uuid4(),
                user_id=user_id,
                usage_date=self._today(),
                kind=kind.value,
                used=await self._count(user_id, kind),
            )
            .on_conflict_do_nothing(index_elements=["user_id", "usage_date", "kind"])
        )
        await self.session.execute(stmt)

    def _ledger_row(self, user_id: uuid.UUID, kind: UsageKind):
        return and_(
            DailyUsage.user_id == user_id,
            DailyUsage.usage_date == self._today(),
            DailyUsage.kind == kind.value,
        )

    async def _reserve(self, user_id: uuid.UUID, kind: UsageKind, amount: int) -> LimitCheck:
        """Take ``amount`` units of today's quota, or report why not.

        The returned check is built from the ledger value the decision was
        made against, so a denial and its payload always agree.
        """
        await self._ensure_ledger_row(user_id, kind)
        limit = DAILY_LIMITS[kind]
        stmt = (
            update(DailyUsage)
            .where(self._ledger_row(user_id, kind), DailyUsage.used + amount <= limit)
            .values(used=DailyUsage.used + amount)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        granted = result.rowcount == 1
        used = (
            await self.session.execute(
                select(DailyUsage.used).where(self._ledger_row(user_id, kind))
            )
        ).scalar_one()
        # Committed straight away so the row lock is not held across generation
        await self.session.commit()

        current = used - amount if granted else used
        if not granted:
            logger.info(
                "Daily %s quota denied (%d requested, %d used)",
                kind.value,
                amount,
                used,
                extra={"user_id": str(user_id)},
            )
        return LimitCheck(
            allowed=granted,
            current_count=current,
            limit=limit,
            remaining=max(0, limit - current),
            requested_count=amount if kind is UsageKind.AI_CARDS else None,
            reset_time=self.next_reset_time(),
        )

    async def reserve_study_module(self, user_id: uuid.UUID) -> LimitCheck:
        return await self._reserve(user_id, UsageKind.STUDY_MODULES, 1)

    async def reserve_ai_cards(self, user_id: uuid.UUID, count: int) -> LimitCheck:
        return await self._reserve(user_id, UsageKind.AI_CARDS, count)

    async def release(self, user_id: uuid.UUID, kind: UsageKind, amount: int) -> None:
        """Give back reservations that did not turn into stored rows."""
        if amount <= 0:
            return
        stmt = (
            update(DailyUsage)
            .where(self._ledger_row(user_id, kind), DailyUsage.used >= amount)
            .values(used=DailyUsage.used - amount)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.commit()

    async def usage_snapshot(self, user_id: uuid.UUID) -> dict[UsageKind, int]:
        return {kind: await self._count(user_id, kind) for kind in UsageKind}

    async def release_deleted(
        self, user_id: uuid.UUID, before: dict[UsageKind, int]
    ) -> None:
        """Return quota for today's counted rows that a delete removed.

        ``before`` is a ``usage_snapshot()`` taken ahead of the delete.
        """
        after = await self.usage_snapshot(user_id)
        for kind, counted in before.items():
            await self.release(user_id, kind, counted - after[kind])
