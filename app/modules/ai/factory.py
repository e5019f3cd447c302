"""Provider selection and the application-owned service holder."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

from app.core.config import AISettings, settings
from app.core.logging import get_logger
from app.modules.ai.base import AIService
from app.modules.ai.providers import (
    GoogleGeminiService,
    OpenAIService,
    OpenRouterService,
    VertexAIService,
)


logger = get_logger(__name__)


class AIProvider(str, Enum):
    VERTEX_AI = "vertex-ai"
    GOOGLE_API_KEY = "google-api-key"
    OPENAI = "openai"
    OPENROUTER = "openrouter"


DEFAULT_PROVIDER = AIProvider.GOOGLE_API_KEY

_BUILDERS: dict[AIProvider, Callable[[AISettings], AIService]] = {
    AIProvider.VERTEX_AI: lambda ai: VertexAIService(ai.vertex_ai),
    AIProvider.GOOGLE_API_KEY: lambda ai: GoogleGeminiService(ai.google_gemini),
    AIProvider.OPENAI: lambda ai: OpenAIService(ai.openai),
    AIProvider.OPENROUTER: lambda ai: OpenRouterService(ai.openrouter),
}


def resolve_provider(raw: Optional[str]) -> AIProvider:
    value = (raw or "").strip().lower()
    try:
        return AIProvider(value)
    except ValueError:
        valid = ", ".join(p.value for p in AIProvider)
        logger.warning(
            "Invalid or missing AI_PROVIDER %r. Valid options: %s. Defaulting to %s",
            raw,
            valid,
            DEFAULT_PROVIDER.value,
        )
        return DEFAULT_PROVIDER


def build_ai_service(ai_settings: AISettings) -> AIService:
    """Construct the adapter selected by ``AI_PROVIDER``; raises ConfigurationError."""
    provider = resolve_provider(ai_settings.provider)
    service = _BUILDERS[provider](ai_settings)
    logger.info("AI service initialised", extra={"provider": provider.value})
    return service


class AIServiceFactory:
    """Builds the active adapter once and hands out the same instance.

    Owned by the application (``app.state.ai_services``); ``reset()`` drops the
    cached adapter so the next ``get_service()`` re-reads its settings.
    """

    def __init__(
        self,
        ai_settings: Optional[AISettings] = None,
        builder: Callable[[AISettings], AIService] = build_ai_service,
    ) -> None:
        self.ai_settings = ai_settings or settings.ai
        self._builder = builder
        self._service: Optional[AIService] = None

    def get_service(self) -> AIService:
        if self._service is None:
            self._service = self._builder(self.ai_settings)
        return self._service

    def reset(self, ai_settings: Optional[AISettings] = None) -> None:
        if ai_settings is not None:
            self.ai_settings = ai_settings
        self._service = None

    @property
    def is_initialised(self) -> bool:
        return self._service is not None
