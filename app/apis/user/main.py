from fastapi import APIRouter

from app.apis.deps import CurrentUser, Session
from app.core.config import settings
from app.core.db_services import UserStatsService
from .schemas import UserProfileRead, UserProfileResponse, UserProfileUpdate, UserStatsResponse


router = APIRouter()


@router.get(
    f"/{settings.app.version}/user/profile",
    response_model=UserProfileResponse,
    tags=["user"],
)
async def get_profile(user: CurrentUser) -> UserProfileResponse:
    return UserProfileResponse(user=UserProfileRead.model_validate(user))


@router.put(
    f"/{settings.app.version}/user/profile",
    response_model=UserProfileResponse,
    tags=["user"],
)
async def update_profile(
    req: UserProfileUpdate, user: CurrentUser, session: Session
) -> UserProfileResponse:
    """Update name, age and education level; omitted fields are left alone"""
    db_user = await UserStatsService(session).get_user(user.id)
    for key, value in req.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(db_user, key, value)
    await session.commit()
    await session.refresh(db_user)
    return UserProfileResponse(user=UserProfileRead.model_validate(db_user))


@router.get(
    f"/{settings.app.version}/user/stats",
    response_model=UserStatsResponse,
    tags=["user"],
)
async def get_stats(user: CurrentUser, session: Session) -> UserStatsResponse:
    return UserStatsResponse(**await UserStatsService(session).stats(user.id))
