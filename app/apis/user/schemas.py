from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from app.apis.common import ORMModel
from app.modules.ai.models import CamelModel, EducationLevel


class UserProfileRead(ORMModel):
    id: uuid.UUID
    name: str
    email: EmailStr
    age: Optional[int] = None
    education_level: str
    created_at: datetime
    updated_at: datetime


class UserProfileResponse(CamelModel):
    user: UserProfileRead


class UserProfileUpdate(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    age: Optional[int] = Field(default=None, ge=1, le=120)
    education_level: Optional[EducationLevel] = None


class UserStatsResponse(CamelModel):
    total_cards: int
    studied_today: int
    streak: int
    accuracy: int
