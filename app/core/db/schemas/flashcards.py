from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fastapi_users_db_sqlalchemy.generics import GUID

from app.core.clock import utcnow
from app.core.db.base import Base

if TYPE_CHECKING:
    from .auth import User
    from .study import CardPerformance


class StudyModule(Base):
    __tablename__ = "study_modules"

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    subject: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    education_level: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    difficulty_level: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    estimated_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    topics: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    learning_plan: Mapped[list[dict]] = mapped_column(
        JSON, nullable=False, default=list
    )
    is_ai_generated: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )

    user: Mapped["User"] = relationship("User", back_populates="study_modules")
    flashcards: Mapped[list["Flashcard"]] = relationship(
        "Flashcard",
        back_populates="module",
        cascade="all, delete-orphan",
        order_by="Flashcard.created_at",
    )
    progress: Mapped[list["ModuleProgress"]] = relationship(
        "ModuleProgress", back_populates="module", cascade="all, delete-orphan"
    )


class Flashcard(Base):
    __tablename__ = "flashcards"

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    module_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID,
        ForeignKey("study_modules.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    subject: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    difficulty_level: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    education_level: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    question_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    options: Mapped[Optional[list[str]]] = mapped_column(JSON, nullable=True)
    is_ai_generated: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )

    user: Mapped["User"] = relationship("User", back_populates="flashcards")
    module: Mapped[Optional["StudyModule"]] = relationship(
        "StudyModule", back_populates="flashcards"
    )
    performance: Mapped[list["CardPerformance"]] = relationship(
        "CardPerformance", back_populates="card", cascade="all, delete-orphan"
    )


class ModuleProgress(Base):
    __tablename__ = "module_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "module_id", name="uq_module_progress_user_module"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    module_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("study_modules.id", ondelete="CASCADE"), nullable=False
    )
    current_card_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cards_studied: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_correct: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    accuracy: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    last_studied_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
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

    user: Mapped["User"] = relationship("User", back_populates="module_progress")
    module: Mapped["StudyModule"] = relationship(
        "StudyModule", back_populates="progress"
    )


__all__ = [
    "StudyModule",
    "Flashcard",
    "ModuleProgress",
]
