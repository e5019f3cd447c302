from __future__ import annotations

import enum
import uuid
from datetime import date
from typing import TYPE_CHECKING
from sqlalchemy import Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fastapi_users_db_sqlalchemy.generics import GUID

from app.core.db.base import Base

if TYPE_CHECKING:
    from .auth import User


class UsageKind(str, enum.Enum):
    STUDY_MODULES = "study_modules"
    AI_CARDS = "ai_cards"


class DailyUsage(Base):
    """Per-user, per-UTC-day reservation counter used for atomic quota admission."""

    __tablename__ = "daily_usage"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "usage_date", "kind", name="uq_daily_usage_user_date_kind"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    usage_date: Mapped[date] = mapped_column(Date, nullable=False)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    user: Mapped["User"] = relationship("User", back_populates="daily_usage")


__all__ = ["UsageKind", "DailyUsage"]
