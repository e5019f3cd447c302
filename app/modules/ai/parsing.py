"""Turn raw model text into validated flashcards and module plans."""

from __future__ import annotations

import json
import re
from typing import Any

from app.core.logging import get_logger
from app.modules.ai.errors import GenerationError
from app.modules.ai.models import (
    Flashcard,
    LearningPlanEntry,
    QuestionType,
    StudyModulePlan,
)


logger = get_logger(__name__)

_FENCE = "```"
# A tag alone on the fence line is dropped with its newline; "json" is also
# dropped when the payload starts on the same line
_OPENING_FENCE = re.compile(r"^```(?:[ \t]*[\w-]*[ \t]*\n|[ \t]*json)?", re.IGNORECASE)
_VALID_QUESTION_TYPES = {qt.value for qt in QuestionType}


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown fence, with or without a language tag."""
    cleaned = _OPENING_FENCE.sub("", text.strip(), count=1)
    if cleaned.endswith(_FENCE):
        cleaned = cleaned[: -len(_FENCE)]
    return cleaned.strip()


def extract_json(text: str) -> Any:
    if not text or not text.strip():
        raise GenerationError("AI response was empty")
    payload = strip_code_fence(text)
    try:
        return json.loads(payload)
    except json.JSONDecodeError as exc:
        logger.warning("Unparseable AI response: %s", payload[:200])
        raise GenerationError(f"Failed to parse AI response as JSON: {exc}") from exc


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _normalize_card(raw: dict[str, Any], default_difficulty: str) -> Flashcard:
    question_type = raw.get("questionType") or QuestionType.SHORT_ANSWER.value
    if question_type not in _VALID_QUESTION_TYPES:
        question_type = QuestionType.SHORT_ANSWER.value

    options = raw.get("options")
    if options is not None:
        options = [_as_text(o) for o in options] if isinstance(options, list) else None

    return Flashcard(
        question=_as_text(raw.get("question")),
        answer=_as_text(raw.get("answer")),
        question_type=QuestionType(question_type),
        difficulty_level=_as_text(raw.get("difficultyLevel")) or default_difficulty,
        options=options,
    )


def normalize_flashcards(data: Any, default_difficulty: str) -> list[Flashcard]:
    """Fill in defaults for every card of a parsed JSON array.

    Missing question/answer become empty strings, a missing or unknown
    questionType becomes short_answer and a missing difficultyLevel takes the
    request's difficulty. Options are passed through untouched.
    """
    if not isinstance(data, list):
        raise GenerationError("AI response is not a JSON array of flashcards")

    cards: list[Flashcard] = []
    for index, raw in enumerate(data):
        if not isinstance(raw, dict):
            logger.warning("Skipping non-object flashcard at index %d", index)
            continue
        cards.append(_normalize_card(raw, default_difficulty))
    return cards


def parse_module_plan(data: Any) -> StudyModulePlan:
    if not isinstance(data, dict):
        raise GenerationError("AI response is not a JSON object")
    if not data.get("title") or not data.get("topics") or not data.get("learningPlan"):
        raise GenerationError(
            "Invalid study module structure: title, topics and learningPlan are required"
        )
    if not isinstance(data["topics"], list) or not isinstance(data["learningPlan"], list):
        raise GenerationError("Invalid study module structure: topics and learningPlan must be arrays")

    entries = [
        LearningPlanEntry(
            week=_as_int(item.get("week")),
            topic=_as_text(item.get("topic")),
            description=_as_text(item.get("description")),
            flashcards_count=_as_int(item.get("flashcardsCount")),
        )
        for item in data["learningPlan"]
        if isinstance(item, dict)
    ]
    return StudyModulePlan(
        title=_as_text(data["title"]),
        description=_as_text(data.get("description")),
        topics=[_as_text(t) for t in data["topics"]],
        learning_plan=entries,
        estimated_hours=_as_int(data.get("estimatedHours")),
    )
