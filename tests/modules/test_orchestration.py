import pytest
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from conftest import cards_json, make_service, plan_json, prompt_text, requested_cards
from app.modules.ai import AIService, GenerationError
from app.modules.ai.models import (
    GenerateFlashcardsFromTopicOptions,
    GenerateFlashcardsOptions,
    GenerateStudyModuleOptions,
)


class ScriptedModel:
    """Routes prompts to canned answers and records every prompt it saw."""

    def __init__(self, plan: str, failing_topics: tuple[str, ...] = (), overshoot: int = 0):
        self.plan = plan
        self.failing_topics = failing_topics
        self.overshoot = overshoot
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if "Design a study module" in prompt:
            return self.plan
        for topic in self.failing_topics:
            if f"Topic: {topic}." in prompt:
                return "Sorry, I cannot help with that."
        label = "backfill" if "General questions about" in prompt else "topic"
        for line in prompt.splitlines():
            if line.startswith("Topic: "):
                label = line.split(".")[0][len("Topic: ") :]
        return cards_json(requested_cards(prompt) + self.overshoot, label=label)

    @property
    def card_prompts(self) -> list[str]:
        return [p for p in self.prompts if "Design a study module" not in p]


def module_options(**overrides) -> GenerateStudyModuleOptions:
    values = {"topic": "Photosynthesis", "number_of_cards": 10}
    values.update(overrides)
    return GenerateStudyModuleOptions(**values)


@pytest.mark.asyncio
async def test_module_with_two_topics_yields_requested_cards():
    model = ScriptedModel(plan_json(["Light reactions", "Calvin cycle"], [5, 5]))
    result = await make_service(model).generate_study_module(module_options())

    assert result.module.title == "Photosynthesis"
    assert len(result.flashcards) == 10
    assert result.failed_topics == []
    questions = [c.question for c in result.flashcards]
    assert sum(q.startswith("Light reactions") for q in questions) == 5
    assert sum(q.startswith("Calvin cycle") for q in questions) == 5
    # no backfill needed
    assert len(model.card_prompts) == 2
    assert "Topic: Light reactions. Light reactions in depth" in model.card_prompts[0]


@pytest.mark.asyncio
async def test_failed_topic_is_backfilled():
    model = ScriptedModel(
        plan_json(["Light reactions", "Calvin cycle"], [5, 5]),
        failing_topics=("Light reactions",),
    )
    result = await make_service(model).generate_study_module(module_options())

    assert len(result.flashcards) == 10
    assert result.failed_topics == ["Light reactions"]
    backfill = model.card_prompts[-1]
    assert "General questions about Photosynthesis" in backfill
    assert requested_cards(backfill) == 5
    assert sum(c.question.startswith("backfill") for c in result.flashcards) == 5


@pytest.mark.asyncio
async def test_every_card_call_failing_still_returns_the_module():
    model = ScriptedModel(
        plan_json(["Light reactions", "Calvin cycle"], [5, 5]),
        failing_topics=("Light reactions", "Calvin cycle"),
    )

    def respond(prompt: str) -> str:
        if "General questions about" in prompt:
            return "{not json"
        return model(prompt)

    result = await make_service(respond).generate_study_module(module_options())

    assert result.flashcards == []
    assert result.module.topics == ["Light reactions", "Calvin cycle"]
    assert result.failed_topics == ["Light reactions", "Calvin cycle", "Photosynthesis"]


@pytest.mark.asyncio
async def test_missing_counts_use_the_per_topic_fallback():
    model = ScriptedModel(plan_json(["A", "B", "C"], [0, 0, 0]))
    result = await make_service(model).generate_study_module(module_options(number_of_cards=9))

    # max(2, 9 // 3) per topic
    assert [requested_cards(p) for p in model.card_prompts] == [3, 3, 3]
    assert len(result.flashcards) == 9


@pytest.mark.asyncio
async def test_counts_are_clamped_to_the_remaining_total():
    model = ScriptedModel(plan_json(["A", "B", "C"], [8, 8, 8]))
    result = await make_service(model).generate_study_module(module_options())

    # 8, then min(8, 2); the third topic is never asked
    assert [requested_cards(p) for p in model.card_prompts] == [8, 2]
    assert len(result.flashcards) == 10


@pytest.mark.asyncio
async def test_overshooting_model_is_trimmed_to_the_request():
    model = ScriptedModel(plan_json(["A", "B"], [5, 5]), overshoot=3)
    result = await make_service(model).generate_study_module(module_options())

    # the first topic returns 8, so the second only needs 2 (and returns 5)
    assert [requested_cards(p) for p in model.card_prompts] == [5, 2]
    assert len(result.flashcards) == 10


@pytest.mark.asyncio
async def test_structure_phase_errors_propagate():
    service = make_service(lambda prompt: '{"title": "No topics"}')
    with pytest.raises(GenerationError, match="title, topics and learningPlan"):
        await service.generate_study_module(module_options())


@pytest.mark.asyncio
async def test_topic_requests_delegate_with_synthesised_content():
    seen = []

    def respond(prompt: str) -> str:
        seen.append(prompt)
        return cards_json(2)

    cards = await make_service(respond).generate_flashcards_from_topic(
        GenerateFlashcardsFromTopicOptions(topic="Volcanoes", number_of_cards=2)
    )
    assert len(cards) == 2
    assert "Create flashcards about the topic: Volcanoes" in seen[0]


@pytest.mark.asyncio
async def test_provider_failures_become_generation_errors():
    def explode(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        raise RuntimeError("upstream 500")

    service = AIService(FunctionModel(explode))
    with pytest.raises(GenerationError, match="upstream 500"):
        await service.generate_flashcards(GenerateFlashcardsOptions(content="x"))


@pytest.mark.asyncio
async def test_fenced_model_output_is_accepted():
    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        assert "Generate 1 flashcards" in prompt_text(messages)
        return ModelResponse(parts=[TextPart(f"```json\n{cards_json(1)}\n```")])

    cards = await AIService(FunctionModel(respond)).generate_flashcards(
        GenerateFlashcardsOptions(content="x", number_of_cards=1)
    )
    assert cards[0].question == "card question 1"
