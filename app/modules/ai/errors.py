"""Error taxonomy for the AI provider layer."""

from __future__ import annotations


class AIServiceError(Exception):
    """Base class for AI provider failures."""


class ConfigurationError(AIServiceError):
    """Provider credentials or settings are missing or invalid."""


class GenerationError(AIServiceError):
    """A provider call failed or returned something we could not use."""


class PartialGenerationError(GenerationError):
    """One topic of a study module failed; the module as a whole carries on."""

    def __init__(self, topic: str, cause: BaseException) -> None:
        self.topic = topic
        self.cause = cause
        super().__init__(f"Flashcard generation failed for topic '{topic}': {cause}")


__all__ = [
    "AIServiceError",
    "ConfigurationError",
    "GenerationError",
    "PartialGenerationError",
]
