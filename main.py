from typing import Optional

from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from app.core.config import settings
from app.core.logging import get_logger, setup_logging
from app.apis.auth.main import router as auth_router
from app.apis.user.main import router as user_router
from app.apis.flashcards.main import router as flashcards_router
from app.apis.flashcards_ai.main import router as flashcards_ai_router
from app.apis.study_modules.main import router as study_modules_router
from app.apis.study.main import router as study_router
from app.apis.common import QuotaExceededError, quota_exceeded_handler
from app.modules.ai import AIServiceFactory, ConfigurationError

import uvicorn
from fastapi.middleware.cors import CORSMiddleware


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    try:
        service = app.state.ai_services.get_service()
        logger.info("AI provider ready", extra={"provider": service.provider})
    except ConfigurationError as exc:
        # AI routes answer 503 until the provider is configured; the rest keep serving
        logger.error("AI provider not configured: %s", exc)
    yield


def create_app(ai_services: Optional[AIServiceFactory] = None) -> FastAPI:
    app = FastAPI(
        title=settings.app.name, version=settings.app.version, lifespan=lifespan
    )
    app.state.ai_services = ai_services or AIServiceFactory(settings.ai)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(QuotaExceededError, quota_exceeded_handler)

    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(flashcards_router)
    app.include_router(flashcards_ai_router)
    app.include_router(study_modules_router)
    app.include_router(study_router)

    @app.get("/")
    async def root():
        return {
            "status": "ok",
            "app": settings.app.name,
            "version": settings.app.version,
        }

    @app.get("/health")
    async def health(request: Request):
        factory: AIServiceFactory = request.app.state.ai_services
        provider = factory.get_service().provider if factory.is_initialised else None
        return {
            "status": "ok",
            "app": settings.app.name,
            "version": settings.app.version,
            "aiProvider": provider,
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.app.port,
        reload=not settings.app.is_production,
    )
