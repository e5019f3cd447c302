from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import EmailStr

from app.apis.common import MessageResponse
from app.apis.deps import CurrentUser
from app.core.config import settings
from app.core.db.schemas.auth import User
from app.core.logging import get_logger
from app.modules.ai.models import CamelModel
from app.modules.auth import (
    UserCreate,
    UserManager,
    UserRead,
    auth_backend,
    fastapi_users,
    get_jwt_strategy,
    get_user_manager,
)


router = APIRouter()

logger = get_logger(__name__)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class LoginResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


class ProfileResponse(CamelModel):
    user: UserRead


async def authenticate_user(
    email: str, password: str, user_manager: UserManager
) -> User | None:
    """Authenticate user with email and password"""
    credentials = OAuth2PasswordRequestForm(username=email, password=password)
    user = await user_manager.authenticate(credentials)
    if user is None or not user.is_active:
        return None
    return user


@router.post(
    f"/{settings.app.version}/auth/login",
    response_model=LoginResponse,
    tags=["auth"],
)
async def login(
    request: LoginRequest, user_manager: UserManager = Depends(get_user_manager)
) -> LoginResponse:
    """Login endpoint that returns an RS256 JWT in a JSON body"""
    user = await authenticate_user(request.email, request.password, user_manager)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )

    token = await get_jwt_strategy().write_token(user)
    logger.info("User logged in", extra={"user_id": str(user.id)})
    return LoginResponse(access_token=token, user=UserRead.model_validate(user))


@router.post(
    f"/{settings.app.version}/auth/logout",
    response_model=MessageResponse,
    tags=["auth"],
)
async def logout(user: CurrentUser) -> MessageResponse:
    # Stateless tokens: the client drops its copy
    return MessageResponse(message="Logged out successfully")


@router.get(
    f"/{settings.app.version}/auth/profile",
    response_model=ProfileResponse,
    tags=["auth"],
)
async def profile(user: CurrentUser) -> ProfileResponse:
    return ProfileResponse(user=UserRead.model_validate(user))


@router.get(f"/{settings.app.version}/auth/.well-known/jwks.json", tags=["auth"])
async def jwks():
    """JWKS endpoint for public key distribution"""
    return JSONResponse(content=get_jwt_strategy().get_jwks())


# fastapi-users routers: form login at /auth/jwt/login, register, password reset
router.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix=f"/{settings.app.version}/auth/jwt",
    tags=["auth"],
)

router.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix=f"/{settings.app.version}/auth",
    tags=["auth"],
)

router.include_router(
    fastapi_users.get_reset_password_router(),
    prefix=f"/{settings.app.version}/auth",
    tags=["auth"],
)
