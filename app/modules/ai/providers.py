"""The four provider adapters.

Each constructor validates its settings block and raises ``ConfigurationError``
before any model is built, so a misconfigured provider fails at startup rather
than on the first request.
"""

from __future__ import annotations

from pydantic_ai.settings import ModelSettings

from app.core.config import (
    GoogleGeminiSettings,
    OpenAISettings,
    OpenRouterSettings,
    VertexAISettings,
)
from app.modules.ai.base import AIService
from app.modules.ai.credentials import load_service_account_credentials
from app.modules.ai.errors import ConfigurationError


CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def _build_vertex_model(config: VertexAISettings):
    """Build a Gemini model on Vertex AI from a service account (lazy import)."""
    from google.oauth2 import service_account
    from pydantic_ai.models.google import GoogleModel
    from pydantic_ai.providers.google import GoogleProvider

    info = load_service_account_credentials(config.credentials)
    try:
        credentials = service_account.Credentials.from_service_account_info(
            info.model_dump(), scopes=[CLOUD_PLATFORM_SCOPE]
        )
    except ValueError as exc:
        raise ConfigurationError(f"Invalid Vertex AI service account: {exc}") from exc

    provider = GoogleProvider(
        credentials=credentials,
        project=config.project_id or info.project_id,
        location=config.location,
    )
    return GoogleModel(config.model, provider=provider)


def _build_google_model(config: GoogleGeminiSettings):
    """Build Google Gemini model for pydantic-ai (lazy import)."""
    from pydantic_ai.models.google import GoogleModel
    from pydantic_ai.providers.google import GoogleProvider

    if not config.api_key:
        raise ConfigurationError(
            "Google Gemini API key not configured. Set GOOGLE_GEMINI_API_KEY in your environment."
        )
    return GoogleModel(config.model, provider=GoogleProvider(api_key=config.api_key))


def _build_openai_compatible_model(model_name: str, api_key: str, base_url: str | None = None):
    """Build an OpenAI chat model; OpenRouter rides the same client (lazy import)."""
    from pydantic_ai.models.openai import OpenAIChatModel
    from pydantic_ai.providers.openai import OpenAIProvider

    provider = OpenAIProvider(api_key=api_key, base_url=base_url)
    return OpenAIChatModel(model_name, provider=provider)


class VertexAIService(AIService):
    provider = "vertex-ai"

    def __init__(self, config: VertexAISettings) -> None:
        super().__init__(
            _build_vertex_model(config),
            ModelSettings(
                temperature=config.temperature, max_tokens=config.max_output_tokens
            ),
        )


class GoogleGeminiService(AIService):
    provider = "google-api-key"

    def __init__(self, config: GoogleGeminiSettings) -> None:
        super().__init__(
            _build_google_model(config),
            ModelSettings(
                temperature=config.temperature, max_tokens=config.max_output_tokens
            ),
        )


class OpenAIService(AIService):
    provider = "openai"

    def __init__(self, config: OpenAISettings) -> None:
        if not config.api_key:
            raise ConfigurationError(
                "OpenAI API key not configured. Set OPENAI_API_KEY in your environment."
            )
        super().__init__(
            _build_openai_compatible_model(config.model, config.api_key),
            ModelSettings(temperature=config.temperature, max_tokens=config.max_tokens),
        )


class OpenRouterService(AIService):
    provider = "openrouter"

    def __init__(self, config: OpenRouterSettings) -> None:
        if not config.api_key:
            raise ConfigurationError(
                "OpenRouter API key not configured. Set OPENROUTER_API_KEY in your environment."
            )
        super().__init__(
            _build_openai_compatible_model(config.model, config.api_key, config.base_url),
            ModelSettings(temperature=config.temperature, max_tokens=config.max_tokens),
        )
