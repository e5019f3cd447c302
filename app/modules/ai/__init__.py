from app.modules.ai.base import AIService, TopicOutcome
from app.modules.ai.errors import (
    AIServiceError,
    ConfigurationError,
    GenerationError,
    PartialGenerationError,
)
from app.modules.ai.factory import AIProvider, AIServiceFactory, build_ai_service

__all__ = [
    "AIService",
    "TopicOutcome",
    "AIServiceError",
    "ConfigurationError",
    "GenerationError",
    "PartialGenerationError",
    "AIProvider",
    "AIServiceFactory",
    "build_ai_service",
]
