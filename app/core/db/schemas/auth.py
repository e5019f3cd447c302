from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fastapi_users_db_sqlalchemy import SQLAlchemyBaseUserTableUUID

from app.core.clock import utcnow
from app.core.db.base import Base

if TYPE_CHECKING:
    from .flashcards import Flashcard, StudyModule, ModuleProgress
    from .study import StudySession, CardPerformance
    from .usage import DailyUsage


class User(SQLAlchemyBaseUserTableUUID, Base):
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    education_level: Mapped[str] = mapped_column(
        String, nullable=False, default="high_school"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )

    # Relationships
    flashcards: Mapped[list["Flashcard"]] = relationship(
        "Flashcard", back_populates="user", cascade="all, delete-orphan"
    )
    study_modules: Mapped[list["StudyModule"]] = relationship(
        "StudyModule", back_populates="user", cascade="all, delete-orphan"
    )
    module_progress: Mapped[list["ModuleProgress"]] = relationship(
        "ModuleProgress", back_populates="user", cascade="all, delete-orphan"
    )
    study_sessions: Mapped[list["StudySession"]] = relationship(
        "StudySession", back_populates="user", cascade="all, delete-orphan"
    )
    card_performance: Mapped[list["CardPerformance"]] = relationship(
        "CardPerformance", back_populates="user", cascade="all, delete-orphan"
    )
    daily_usage: Mapped[list["DailyUsage"]] = relationship(
        "DailyUsage", back_populates="user", cascade="all, delete-orphan"
    )


__all__ = ["User"]
