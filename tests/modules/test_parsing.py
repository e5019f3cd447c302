import json

import pytest

from app.modules.ai.errors import GenerationError
from app.modules.ai.models import QuestionType
from app.modules.ai.parsing import (
    extract_json,
    normalize_flashcards,
    parse_module_plan,
    strip_code_fence,
)


PAYLOAD = [{"question": "Q", "answer": "A"}]
RAW = json.dumps(PAYLOAD)


@pytest.mark.parametrize(
    "text",
    [
        RAW,
        f"```json\n{RAW}\n```",
        f"```\n{RAW}\n```",
        f"```JSON\n{RAW}```",
        f"  ```json\n{RAW}\n```  \n",
        f"```{RAW}```",
        f"```json {RAW}\n```",
        f"```json{RAW}```",
    ],
)
def test_fenced_and_bare_payloads_parse_identically(text):
    assert extract_json(text) == PAYLOAD


def test_payload_on_the_fence_line_is_kept():
    assert strip_code_fence('```json [{"question": "q"}]\n```') == '[{"question": "q"}]'


@pytest.mark.parametrize("text", ["", "   ", "not json", "```json\n{oops\n```"])
def test_unparseable_responses_raise_generation_error(text):
    with pytest.raises(GenerationError):
        extract_json(text)


def test_non_array_is_rejected():
    with pytest.raises(GenerationError):
        normalize_flashcards({"question": "Q"}, "easy")


def test_missing_fields_get_defaults():
    cards = normalize_flashcards([{}, {"question": "Only a question"}], "beginner")

    assert [c.question for c in cards] == ["", "Only a question"]
    assert all(c.answer == "" for c in cards)
    assert all(c.question_type is QuestionType.SHORT_ANSWER for c in cards)
    assert all(c.difficulty_level == "beginner" for c in cards)
    assert all(c.options is None for c in cards)


def test_multiple_choice_options_pass_through():
    options = ["Paris", "Rome", "Madrid", "Berlin"]
    cards = normalize_flashcards(
        [
            {
                "question": "Capital of France?",
                "answer": "Paris",
                "questionType": "multiple_choice",
                "difficultyLevel": "easy",
                "options": options,
            },
            {"question": "The sky is blue", "answer": "True", "questionType": "true_false"},
        ],
        "intermediate",
    )

    assert cards[0].question_type is QuestionType.MULTIPLE_CHOICE
    assert cards[0].options == options
    assert cards[0].difficulty_level == "easy"
    assert cards[1].options is None


def test_unknown_question_type_and_non_string_answer_are_coerced():
    [card] = normalize_flashcards(
        [{"question": "2 + 2", "answer": 4, "questionType": "essay"}], "easy"
    )
    assert card.answer == "4"
    assert card.question_type is QuestionType.SHORT_ANSWER


def test_non_object_entries_are_skipped():
    cards = normalize_flashcards(["junk", {"question": "Q", "answer": "A"}], "easy")
    assert len(cards) == 1


def test_parse_module_plan():
    plan = parse_module_plan(
        {
            "title": "Cells",
            "description": "Cell biology",
            "topics": ["Membranes", "Organelles", "Division"],
            "learningPlan": [
                {"week": 1, "topic": "Membranes", "description": "d", "flashcardsCount": "4"},
                {"week": 2, "topic": "Organelles", "description": "d"},
            ],
            "estimatedHours": 3,
        }
    )
    assert plan.title == "Cells"
    assert plan.learning_plan[0].flashcards_count == 4
    assert plan.learning_plan[1].flashcards_count == 0
    assert plan.estimated_hours == 3


@pytest.mark.parametrize("missing", ["title", "topics", "learningPlan"])
def test_parse_module_plan_requires_core_fields(missing):
    data = {
        "title": "Cells",
        "topics": ["Membranes"],
        "learningPlan": [{"topic": "Membranes", "flashcardsCount": 2}],
    }
    del data[missing]
    with pytest.raises(GenerationError):
        parse_module_plan(data)
