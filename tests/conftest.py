from __future__ import annotations

import json
import os
import re
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Callable

# Settings are read at import time, so the environment is fixed up first
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault(
    "JWT_KEY_FILE", str(Path(tempfile.gettempdir()) / "smartflash-test-jwt.pem")
)

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi_users.password import PasswordHelper
from httpx import ASGITransport, AsyncClient
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart, UserPromptPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.db.base import Base, get_session
from app.core.db.schemas import User
from app.modules.ai import AIService, AIServiceFactory
from app.modules.auth import current_active_user
from main import create_app


TEST_PASSWORD = "correct-horse"

_CARD_COUNT = re.compile(r"Generate (\d+) flashcards")


def prompt_text(messages: list[ModelMessage]) -> str:
    """The user prompt of the latest request sent to the model."""
    parts = messages[-1].parts
    return "".join(
        p.content for p in parts if isinstance(p, UserPromptPart) and isinstance(p.content, str)
    )


def requested_cards(prompt: str) -> int:
    match = _CARD_COUNT.search(prompt)
    return int(match.group(1)) if match else 0


def cards_json(count: int, label: str = "card", question_type: str = "short_answer") -> str:
    return json.dumps(
        [
            {
                "question": f"{label} question {i + 1}",
                "answer": f"{label} answer {i + 1}",
                "questionType": question_type,
                "difficultyLevel": "intermediate",
            }
            for i in range(count)
        ]
    )


def plan_json(topics: list[str], counts: list[int], title: str = "Photosynthesis") -> str:
    return json.dumps(
        {
            "title": title,
            "description": f"All about {title}",
            "topics": topics,
            "learningPlan": [
                {
                    "week": i + 1,
                    "topic": topic,
                    "description": f"{topic} in depth",
                    "flashcardsCount": count,
                }
                for i, (topic, count) in enumerate(zip(topics, counts))
            ],
            "estimatedHours": 2,
        }
    )


Responder = Callable[[str], str]


def make_service(respond: Responder) -> AIService:
    """An AIService whose model answers every prompt with ``respond(prompt)``."""

    def _model(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        return ModelResponse(parts=[TextPart(respond(prompt_text(messages)))])

    return AIService(FunctionModel(_model))


def default_responder(prompt: str) -> str:
    if "Design a study module" in prompt:
        return plan_json(["Light reactions", "Calvin cycle"], [5, 5])
    return cards_json(requested_cards(prompt) or 1)


@pytest.fixture()
def ai_service() -> AIService:
    return make_service(default_responder)


@pytest.fixture()
def ai_factory(ai_service: AIService) -> AIServiceFactory:
    return AIServiceFactory(builder=lambda _settings: ai_service)


@pytest_asyncio.fixture()
async def engine(tmp_path: Path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_maker(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


async def create_user(session: AsyncSession, email: str = "learner@example.com") -> User:
    user = User(
        email=email,
        hashed_password=PasswordHelper().hash(TEST_PASSWORD),
        is_active=True,
        is_superuser=False,
        is_verified=False,
        name="Learner",
        education_level="high_school",
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture()
async def user(db_session: AsyncSession) -> User:
    return await create_user(db_session)


@pytest.fixture()
def app(session_maker, ai_factory: AIServiceFactory) -> FastAPI:
    app = create_app(ai_services=ai_factory)

    async def _get_test_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _get_test_session
    return app


@pytest_asyncio.fixture()
async def anon_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture()
async def client(app: FastAPI, user: User) -> AsyncGenerator[AsyncClient, None]:
    """Client authenticated as ``user`` without going through a token."""
    app.dependency_overrides[current_active_user] = lambda: user
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
