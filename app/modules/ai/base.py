"""Provider-agnostic AI service.

Every provider adapter is an ``AIService`` over a different pydantic-ai model;
the prompts, parsing and study module orchestration live here once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Optional

from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.settings import ModelSettings

from app.core.logging import get_logger
from app.modules.ai.errors import GenerationError, PartialGenerationError
from app.modules.ai.models import (
    Flashcard,
    GenerateFlashcardsFromTopicOptions,
    GenerateFlashcardsOptions,
    GenerateStudyModuleOptions,
    StudyModulePlan,
    StudyModuleWithFlashcards,
)
from app.modules.ai.parsing import extract_json, normalize_flashcards, parse_module_plan
from app.modules.ai.prompts import build_flashcards_prompt, build_study_module_prompt


logger = get_logger(__name__)


@dataclass
class TopicOutcome:
    """Result of one card-fill call during module generation."""

    topic: str
    requested: int
    flashcards: list[Flashcard] = field(default_factory=list)
    error: Optional[PartialGenerationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AIService:
    provider: ClassVar[str] = "custom"

    def __init__(self, model: Model | str, model_settings: Optional[ModelSettings] = None) -> None:
        self.model = model
        self.model_settings = model_settings
        self._agent: Agent[None, str] = Agent(model, output_type=str)

    async def _complete(self, prompt: str) -> str:
        try:
            result = await self._agent.run(prompt, model_settings=self.model_settings)
        except Exception as exc:
            logger.error(
                "AI request failed: %s", exc, extra={"provider": self.provider}
            )
            raise GenerationError(f"AI request to {self.provider} failed: {exc}") from exc
        return result.output

    async def generate_flashcards(self, options: GenerateFlashcardsOptions) -> list[Flashcard]:
        text = await self._complete(build_flashcards_prompt(options))
        return normalize_flashcards(extract_json(text), options.difficulty_level)

    async def generate_flashcards_from_topic(
        self, options: GenerateFlashcardsFromTopicOptions
    ) -> list[Flashcard]:
        return await self.generate_flashcards(
            GenerateFlashcardsOptions(
                content=f"Create flashcards about the topic: {options.topic}",
                subject=options.subject,
                education_level=options.education_level,
                difficulty_level=options.difficulty_level,
                number_of_cards=options.number_of_cards,
                question_types=options.question_types,
            )
        )

    async def generate_module_plan(self, options: GenerateStudyModuleOptions) -> StudyModulePlan:
        text = await self._complete(build_study_module_prompt(options))
        return parse_module_plan(extract_json(text))

    async def _fill_topic(
        self, topic: str, content: str, count: int, options: GenerateStudyModuleOptions
    ) -> TopicOutcome:
        outcome = TopicOutcome(topic=topic, requested=count)
        try:
            outcome.flashcards = await self.generate_flashcards(
                GenerateFlashcardsOptions(
                    content=content,
                    subject=options.subject,
                    education_level=options.education_level,
                    difficulty_level=options.difficulty_level,
                    number_of_cards=count,
                )
            )
        except GenerationError as exc:
            outcome.error = PartialGenerationError(topic, exc)
            logger.warning("%s", outcome.error, extra={"provider": self.provider})
        return outcome

    async def fill_module_flashcards(
        self, plan: StudyModulePlan, options: GenerateStudyModuleOptions
    ) -> list[TopicOutcome]:
        """Generate cards topic by topic, then backfill any shortfall.

        A failing topic is recorded on its outcome and skipped; whatever the
        other calls produced is kept.
        """
        total = options.number_of_cards
        fallback = max(2, total // max(1, len(plan.topics)))
        outcomes: list[TopicOutcome] = []
        accumulated = 0

        for entry in plan.learning_plan:
            count = min(entry.flashcards_count or fallback, total - accumulated)
            if count <= 0:
                break
            outcome = await self._fill_topic(
                entry.topic, f"Topic: {entry.topic}. {entry.description}", count, options
            )
            outcomes.append(outcome)
            accumulated += len(outcome.flashcards)

        if accumulated < total:
            outcomes.append(
                await self._fill_topic(
                    options.topic,
                    f"General questions about {options.topic}",
                    total - accumulated,
                    options,
                )
            )
        return outcomes

    async def generate_study_module(
        self, options: GenerateStudyModuleOptions
    ) -> StudyModuleWithFlashcards:
        plan = await self.generate_module_plan(options)
        outcomes = await self.fill_module_flashcards(plan, options)

        flashcards = [card for outcome in outcomes for card in outcome.flashcards]
        failed = [outcome.topic for outcome in outcomes if not outcome.ok]
        if failed:
            logger.info(
                "Module '%s' generated with %d failed topic call(s)",
                plan.title,
                len(failed),
                extra={"provider": self.provider},
            )
        return StudyModuleWithFlashcards(
            module=plan,
            flashcards=flashcards[: options.number_of_cards],
            failed_topics=failed,
        )
