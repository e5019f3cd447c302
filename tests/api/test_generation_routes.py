import asyncio

import pytest
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from sqlalchemy import func, select

from conftest import cards_json, default_responder, make_service, prompt_text
from app.core.clock import utcnow
from app.core.config import settings
from app.core.db.schemas import DailyUsage, Flashcard, StudyModule, UsageKind
from app.modules.ai import AIService, AIServiceFactory, ConfigurationError


async def count_cards(session_maker, **filters) -> int:
    async with session_maker() as session:
        stmt = select(func.count(Flashcard.id)).filter_by(**filters)
        return (await session.execute(stmt)).scalar_one()


async def ledger_used(session_maker, kind: UsageKind) -> int:
    async with session_maker() as session:
        stmt = select(DailyUsage.used).where(DailyUsage.kind == kind.value)
        return (await session.execute(stmt)).scalar_one()


@pytest.mark.asyncio
async def test_preview_needs_no_account_and_saves_nothing(anon_client, session_maker):
    resp = await anon_client.post(
        "/v1/flashcards-ai/preview", json={"content": "Mitochondria", "numberOfCards": 3}
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["count"] == 3
    assert body["flashcards"][0]["questionType"] == "short_answer"
    assert await count_cards(session_maker) == 0


@pytest.mark.asyncio
async def test_generate_persists_ai_flagged_cards(client, session_maker, user):
    resp = await client.post(
        "/v1/flashcards-ai/generate",
        json={"content": "The cell is the unit of life.", "numberOfCards": 4, "subject": "Biology"},
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["count"] == 4
    assert all(card["isAiGenerated"] for card in body["flashcards"])
    assert body["flashcards"][0]["subject"] == "Biology"
    assert await count_cards(session_maker, user_id=user.id, is_ai_generated=True) == 4

    resp = await client.get("/v1/study-modules/usage")
    assert resp.json()["aiCards"]["current"] == 4


@pytest.mark.asyncio
async def test_topic_generation_uses_the_topic(client, app):
    seen = []

    def respond(prompt: str) -> str:
        seen.append(prompt)
        return cards_json(2)

    app.state.ai_services = AIServiceFactory(builder=lambda _: make_service(respond))
    resp = await client.post(
        "/v1/flashcards-ai/generate-from-topic", json={"topic": "Tides", "numberOfCards": 2}
    )
    assert resp.status_code == 201
    assert "Create flashcards about the topic: Tides" in seen[0]


@pytest.mark.asyncio
async def test_card_quota_answers_429_with_details(client, db_session, user):
    for i in range(28):
        db_session.add(
            Flashcard(user_id=user.id, question=f"q{i}", answer="a", is_ai_generated=True)
        )
    await db_session.commit()

    resp = await client.post(
        "/v1/flashcards-ai/generate", json={"content": "more", "numberOfCards": 5}
    )
    assert resp.status_code == 429
    body = resp.json()
    assert body["error"] == "Daily rate limit exceeded"
    assert body["limit"]["type"] == "ai_cards"
    assert body["limit"]["current"] == 28
    assert body["limit"]["limit"] == 30
    assert body["limit"]["remaining"] == 2
    assert body["limit"]["requested"] == 5
    assert body["limit"]["resetTime"].endswith("T00:00:00.000Z")

    resp = await client.post(
        "/v1/flashcards-ai/generate", json={"content": "more", "numberOfCards": 2}
    )
    assert resp.status_code == 201


@pytest.mark.asyncio
async def test_failed_generation_releases_the_reservation(client, app, session_maker, user):
    app.state.ai_services = AIServiceFactory(builder=lambda _: make_service(lambda p: "nope"))
    resp = await client.post(
        "/v1/flashcards-ai/generate", json={"content": "x", "numberOfCards": 10}
    )
    assert resp.status_code == 500
    assert resp.json()["detail"]["error"] == "Failed to generate flashcards"

    assert await ledger_used(session_maker, UsageKind.AI_CARDS) == 0


@pytest.mark.asyncio
async def test_unconfigured_provider_answers_503(client, app):
    def broken(_settings):
        raise ConfigurationError("OPENAI_API_KEY environment variable is not set")

    app.state.ai_services = AIServiceFactory(builder=broken)
    resp = await client.post("/v1/flashcards-ai/preview", json={"content": "x"})
    assert resp.status_code == 503
    assert "OPENAI_API_KEY" in resp.json()["detail"]["details"]


@pytest.mark.asyncio
async def test_request_validation(client):
    resp = await client.post(
        "/v1/flashcards-ai/generate", json={"content": "x", "numberOfCards": 51}
    )
    assert resp.status_code == 422
    resp = await client.post("/v1/flashcards-ai/generate-from-topic", json={"topic": "t" * 201})
    assert resp.status_code == 422
    resp = await client.post(
        "/v1/study-modules/ai/generate", json={"topic": "Cells", "numberOfCards": 4}
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_study_module_generation(client, session_maker, user):
    resp = await client.post(
        "/v1/study-modules/ai/generate",
        json={"topic": "Photosynthesis", "numberOfCards": 10, "educationLevel": "college"},
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["module"]["title"] == "Photosynthesis"
    assert body["module"]["isAiGenerated"] is True
    assert body["module"]["educationLevel"] == "college"
    assert body["stats"] == {
        "totalFlashcards": 10,
        "estimatedHours": 2,
        "topicsCount": 2,
        "failedTopics": [],
    }
    module_id = body["module"]["id"]
    assert all(card["moduleId"] == module_id for card in body["flashcards"])

    resp = await client.get("/v1/study-modules")
    (summary,) = resp.json()["modules"]
    assert summary["flashcardCount"] == 10
    assert summary["progress"] is None

    resp = await client.get(f"/v1/study-modules/{module_id}")
    assert len(resp.json()["flashcards"]) == 10

    usage = (await client.get("/v1/study-modules/usage")).json()
    assert usage["studyModules"]["current"] == 1
    assert usage["aiCards"]["current"] == 10

    resp = await client.delete(f"/v1/study-modules/{module_id}")
    assert resp.status_code == 200
    assert await count_cards(session_maker, user_id=user.id) == 0


@pytest.mark.asyncio
async def test_fourth_module_of_the_day_is_refused(client, db_session, user):
    now = utcnow()
    for _ in range(3):
        db_session.add(
            StudyModule(
                user_id=user.id, title="m", topics=[], learning_plan=[], is_ai_generated=True,
                created_at=now, updated_at=now,
            )
        )
    await db_session.commit()

    resp = await client.post("/v1/study-modules/ai/generate", json={"topic": "Cells"})
    assert resp.status_code == 429
    limit = resp.json()["limit"]
    assert limit["type"] == "study_modules"
    assert limit["current"] == 3
    assert "requested" not in limit


@pytest.mark.asyncio
async def test_card_quota_also_guards_module_generation(client, db_session, session_maker, user):
    for i in range(15):
        db_session.add(
            Flashcard(user_id=user.id, question=f"q{i}", answer="a", is_ai_generated=True)
        )
    await db_session.commit()

    resp = await client.post(
        "/v1/study-modules/ai/generate", json={"topic": "Cells", "numberOfCards": 20}
    )
    assert resp.status_code == 429
    assert resp.json()["limit"]["type"] == "ai_cards"

    # the module slot was handed back
    assert await ledger_used(session_maker, UsageKind.STUDY_MODULES) == 0


@pytest.mark.asyncio
async def test_module_generation_times_out_with_504(client, app, session_maker, monkeypatch):
    async def slow(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        await asyncio.sleep(5)
        return ModelResponse(parts=[TextPart(default_responder(prompt_text(messages)))])

    app.state.ai_services = AIServiceFactory(builder=lambda _: AIService(FunctionModel(slow)))
    monkeypatch.setattr(settings.ai, "module_timeout_seconds", 0.05)

    resp = await client.post("/v1/study-modules/ai/generate", json={"topic": "Cells"})
    assert resp.status_code == 504
    assert "timeout" in resp.json()["detail"]["details"]
    assert await ledger_used(session_maker, UsageKind.STUDY_MODULES) == 0
    assert await ledger_used(session_maker, UsageKind.AI_CARDS) == 0


@pytest.mark.asyncio
async def test_module_preview_is_not_persisted(anon_client, session_maker):
    resp = await anon_client.post(
        "/v1/study-modules/ai/preview", json={"topic": "Photosynthesis", "numberOfCards": 10}
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["module"]["learningPlan"][0]["topic"] == "Light reactions"
    assert body["stats"]["totalFlashcards"] == 10
    async with session_maker() as session:
        assert (await session.execute(select(func.count(StudyModule.id)))).scalar_one() == 0


@pytest.mark.asyncio
async def test_deleting_a_generated_card_frees_its_slot(client):
    resp = await client.post(
        "/v1/flashcards-ai/generate", json={"content": "Cells", "numberOfCards": 30}
    )
    assert resp.status_code == 201
    first = resp.json()["flashcards"][0]["id"]

    resp = await client.post("/v1/flashcards-ai/generate", json={"content": "x", "numberOfCards": 1})
    assert resp.status_code == 429
    assert resp.json()["limit"]["current"] == 30
    assert resp.json()["limit"]["remaining"] == 0

    assert (await client.delete(f"/v1/flashcards/{first}")).status_code == 200
    usage = (await client.get("/v1/study-modules/usage")).json()
    assert usage["aiCards"] == {"current": 29, "limit": 30, "remaining": 1}

    resp = await client.post("/v1/flashcards-ai/generate", json={"content": "x", "numberOfCards": 1})
    assert resp.status_code == 201, resp.text


@pytest.mark.asyncio
async def test_deleting_a_module_frees_module_and_card_slots(client, db_session, user):
    now = utcnow()
    for _ in range(2):
        db_session.add(
            StudyModule(
                user_id=user.id, title="m", topics=[], learning_plan=[], is_ai_generated=True,
                created_at=now, updated_at=now,
            )
        )
    await db_session.commit()

    resp = await client.post(
        "/v1/study-modules/ai/generate", json={"topic": "Photosynthesis", "numberOfCards": 10}
    )
    assert resp.status_code == 201, resp.text
    module_id = resp.json()["module"]["id"]

    resp = await client.post("/v1/study-modules/ai/generate", json={"topic": "Cells"})
    assert resp.status_code == 429
    assert resp.json()["limit"]["current"] == 3

    assert (await client.delete(f"/v1/study-modules/{module_id}")).status_code == 200

    resp = await client.post(
        "/v1/study-modules/ai/generate", json={"topic": "Photosynthesis", "numberOfCards": 10}
    )
    assert resp.status_code == 201, resp.text
    usage = (await client.get("/v1/study-modules/usage")).json()
    assert usage["studyModules"]["current"] == 3
    assert usage["aiCards"]["current"] == 10
