"""Database service classes for flashcards, study modules and study sessions."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.clock import start_of_utc_day, utcnow
from app.core.db.schemas import (
    CardPerformance,
    Flashcard,
    ModuleProgress,
    StudyModule,
    StudySession,
    User,
)
from app.modules.ai.models import Flashcard as GeneratedFlashcard
from app.modules.ai.models import GenerateStudyModuleOptions, StudyModulePlan


class FlashcardService:
    """Owner-scoped CRUD for flashcards."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_for_user(self, user_id: uuid.UUID) -> list[Flashcard]:
        result = await self.session.execute(
            select(Flashcard)
            .where(Flashcard.user_id == user_id)
            .order_by(Flashcard.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_for_user(
        self, user_id: uuid.UUID, card_id: uuid.UUID
    ) -> Optional[Flashcard]:
        result = await self.session.execute(
            select(Flashcard).where(Flashcard.id == card_id, Flashcard.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: uuid.UUID, **fields: Any) -> Flashcard:
        card = Flashcard(user_id=user_id, **fields)
        self.session.add(card)
        await self.session.commit()
        await self.session.refresh(card)
        return card

    async def update(self, card: Flashcard, **fields: Any) -> Flashcard:
        for key, value in fields.items():
            setattr(card, key, value)
        await self.session.commit()
        await self.session.refresh(card)
        return card

    async def delete(self, card: Flashcard) -> None:
        await self.session.delete(card)
        await self.session.commit()

    async def save_generated(
        self,
        user_id: uuid.UUID,
        cards: list[GeneratedFlashcard],
        *,
        subject: Optional[str] = None,
        education_level: Optional[str] = None,
        difficulty_level: Optional[str] = None,
        module_id: Optional[uuid.UUID] = None,
    ) -> list[Flashcard]:
        """Persist AI output; every row is flagged as AI-generated."""
        rows = [
            Flashcard(
                user_id=user_id,
                module_id=module_id,
                question=card.question,
                answer=card.answer,
                subject=subject,
                difficulty_level=card.difficulty_level or difficulty_level,
                education_level=education_level,
                question_type=card.question_type.value,
                options=card.options,
                is_ai_generated=True,
            )
            for card in cards
        ]
        self.session.add_all(rows)
        await self.session.commit()
        for row in rows:
            await self.session.refresh(row)
        return rows


class StudyModuleService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_from_plan(
        self,
        user_id: uuid.UUID,
        plan: StudyModulePlan,
        cards: list[GeneratedFlashcard],
        options: GenerateStudyModuleOptions,
    ) -> tuple[StudyModule, list[Flashcard]]:
        module = StudyModule(
            user_id=user_id,
            title=plan.title,
            description=plan.description,
            subject=options.subject,
            education_level=options.education_level,
            difficulty_level=options.difficulty_level,
            estimated_hours=plan.estimated_hours,
            topics=list(plan.topics),
            learning_plan=[
                entry.model_dump(by_alias=True) for entry in plan.learning_plan
            ],
            is_ai_generated=True,
        )
        self.session.add(module)
        await self.session.flush()

        saved = await FlashcardService(self.session).save_generated(
            user_id,
            cards,
            subject=options.subject,
            education_level=options.education_level,
            difficulty_level=options.difficulty_level,
            module_id=module.id,
        )
        await self.session.refresh(module)
        return module, saved

    async def list_with_progress(
        self, user_id: uuid.UUID
    ) -> list[tuple[StudyModule, int, Optional[ModuleProgress]]]:
        """Modules newest first, each with its flashcard count and the user's progress."""
        card_count = (
            select(func.count(Flashcard.id))
            .where(Flashcard.module_id == StudyModule.id)
            .correlate(StudyModule)
            .scalar_subquery()
        )
        result = await self.session.execute(
            select(StudyModule, card_count, ModuleProgress)
            .outerjoin(
                ModuleProgress,
                (ModuleProgress.module_id == StudyModule.id)
                & (ModuleProgress.user_id == user_id),
            )
            .where(StudyModule.user_id == user_id)
            .order_by(StudyModule.created_at.desc())
        )
        return [(module, int(count), progress) for module, count, progress in result.all()]

    async def get_for_user(
        self, user_id: uuid.UUID, module_id: uuid.UUID
    ) -> Optional[StudyModule]:
        result = await self.session.execute(
            select(StudyModule)
            .options(selectinload(StudyModule.flashcards))
            .where(StudyModule.id == module_id, StudyModule.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def owns(self, user_id: uuid.UUID, module_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            select(StudyModule.id).where(
                StudyModule.id == module_id, StudyModule.user_id == user_id
            )
        )
        return result.scalar_one_or_none() is not None

    async def get_progress(
        self, user_id: uuid.UUID, module_id: uuid.UUID
    ) -> Optional[ModuleProgress]:
        result = await self.session.execute(
            select(ModuleProgress).where(
                ModuleProgress.user_id == user_id,
                ModuleProgress.module_id == module_id,
            )
        )
        return result.scalar_one_or_none()

    async def delete(self, module: StudyModule) -> None:
        await self.session.delete(module)
        await self.session.commit()


class StudySessionService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def start(
        self,
        user_id: uuid.UUID,
        session_type: str = "review",
        module_id: Optional[uuid.UUID] = None,
    ) -> tuple[StudySession, list[Flashcard], int, Optional[ModuleProgress]]:
        """Open a session and pick its cards, resuming after the last studied card."""
        study_session = StudySession(user_id=user_id, session_type=session_type)
        self.session.add(study_session)
        await self.session.commit()
        await self.session.refresh(study_session)

        stmt = select(Flashcard).where(Flashcard.user_id == user_id)
        if module_id is not None:
            stmt = stmt.where(Flashcard.module_id == module_id)
        result = await self.session.execute(stmt.order_by(Flashcard.created_at.asc()))
        cards = list(result.scalars().all())

        start_index = 0
        progress = None
        if module_id is not None and cards:
            progress = await StudyModuleService(self.session).get_progress(
                user_id, module_id
            )
            if progress is not None:
                start_index = min(progress.current_card_index + 1, len(cards) - 1)
        return study_session, cards, start_index, progress

    async def get_for_user(
        self, user_id: uuid.UUID, session_id: uuid.UUID
    ) -> Optional[StudySession]:
        result = await self.session.execute(
            select(StudySession).where(
                StudySession.id == session_id, StudySession.user_id == user_id
            )
        )
        return result.scalar_one_or_none()

    async def record_performance(
        self,
        user_id: uuid.UUID,
        card_id: uuid.UUID,
        correct: Optional[bool],
        response_time: Optional[int],
    ) -> CardPerformance:
        performance = CardPerformance(
            user_id=user_id,
            card_id=card_id,
            is_correct=correct,
            response_time=response_time or None,
            review_count=1,
        )
        self.session.add(performance)
        await self.session.commit()
        await self.session.refresh(performance)
        return performance

    async def complete(
        self,
        study_session: StudySession,
        *,
        cards_studied: int = 0,
        correct_answers: int = 0,
        session_duration: Optional[int] = None,
        module_id: Optional[uuid.UUID] = None,
        current_card_index: Optional[int] = None,
    ) -> tuple[StudySession, Optional[ModuleProgress]]:
        now = utcnow()
        study_session.cards_studied = cards_studied
        study_session.correct_answers = correct_answers
        study_session.session_duration = session_duration or None
        study_session.completed_at = now

        progress = None
        if module_id is not None:
            progress = await self._accumulate_progress(
                study_session.user_id,
                module_id,
                cards_studied,
                correct_answers,
                current_card_index,
                now,
            )

        await self.session.commit()
        await self.session.refresh(study_session)
        if progress is not None:
            await self.session.refresh(progress)
        return study_session, progress

    async def _accumulate_progress(
        self,
        user_id: uuid.UUID,
        module_id: uuid.UUID,
        cards_studied: int,
        correct_answers: int,
        current_card_index: Optional[int],
        now: datetime,
    ) -> ModuleProgress:
        total_cards = (
            await self.session.execute(
                select(func.count(Flashcard.id)).where(
                    Flashcard.module_id == module_id, Flashcard.user_id == user_id
                )
            )
        ).scalar_one()

        progress = await StudyModuleService(self.session).get_progress(user_id, module_id)
        if progress is None:
            progress = ModuleProgress(user_id=user_id, module_id=module_id)
            self.session.add(progress)

        final_index = (
            current_card_index
            if current_card_index is not None
            else (progress.current_card_index or 0)
        )
        progress.current_card_index = final_index
        progress.cards_studied = (progress.cards_studied or 0) + cards_studied
        progress.total_correct = (progress.total_correct or 0) + correct_answers
        progress.accuracy = (
            progress.total_correct / progress.cards_studied
            if progress.cards_studied
            else 0.0
        )
        progress.last_studied_at = now
        if final_index >= total_cards - 1 and progress.completed_at is None:
            progress.completed_at = now
        return progress

    async def recent(self, user_id: uuid.UUID, limit: int = 10) -> list[StudySession]:
        result = await self.session.execute(
            select(StudySession)
            .where(StudySession.user_id == user_id)
            .order_by(StudySession.started_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def cards_studied_today(
        self, user_id: uuid.UUID, now: Optional[datetime] = None
    ) -> int:
        result = await self.session.execute(
            select(func.coalesce(func.sum(StudySession.cards_studied), 0)).where(
                StudySession.user_id == user_id,
                StudySession.started_at >= start_of_utc_day(now),
                StudySession.completed_at.is_not(None),
            )
        )
        return int(result.scalar_one())


def study_streak(session_days: list[date], today: date) -> int:
    """Consecutive UTC days ending today with at least one completed session."""
    days = set(session_days)
    streak = 0
    check = today
    while check in days:
        streak += 1
        check -= timedelta(days=1)
    return streak


class UserStatsService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def stats(
        self, user_id: uuid.UUID, now: Optional[datetime] = None
    ) -> dict[str, int]:
        now = now or utcnow()
        total_cards = (
            await self.session.execute(
                select(func.count(Flashcard.id)).where(Flashcard.user_id == user_id)
            )
        ).scalar_one()

        sessions = StudySessionService(self.session)
        studied_today = await sessions.cards_studied_today(user_id, now)

        completed = (
            await self.session.execute(
                select(StudySession)
                .where(
                    StudySession.user_id == user_id,
                    StudySession.completed_at.is_not(None),
                )
                .order_by(StudySession.started_at.desc())
            )
        ).scalars().all()

        recent = completed[:10]
        total_studied = sum(s.cards_studied for s in recent)
        total_correct = sum(s.correct_answers for s in recent)
        accuracy = round(total_correct / total_studied * 100) if total_studied else 0

        streak = study_streak(
            [s.started_at.date() for s in completed], start_of_utc_day(now).date()
        )
        return {
            "total_cards": int(total_cards),
            "studied_today": studied_today,
            "streak": streak,
            "accuracy": accuracy,
        }
