"""Prompt builders for flashcard and study module generation."""

from __future__ import annotations

import math

from app.modules.ai.models import (
    EducationLevel,
    GenerateFlashcardsOptions,
    GenerateStudyModuleOptions,
)


EDUCATION_PROMPTS: dict[str, str] = {
    EducationLevel.ELEMENTARY.value: (
        "You write flashcards for elementary school children (grades 1-5). "
        "Keep the vocabulary simple, describe things concretely and keep the "
        "tone warm and encouraging."
    ),
    EducationLevel.MIDDLE.value: (
        "You write flashcards for middle school students (grades 6-8). Use "
        "age-appropriate vocabulary, explain ideas clearly and nudge students "
        "towards critical thinking."
    ),
    EducationLevel.HIGH_SCHOOL.value: (
        "You write flashcards for high school students. Use proper academic "
        "vocabulary, give detailed explanations and help students prepare for "
        "standardized tests."
    ),
    EducationLevel.COLLEGE.value: (
        "You write flashcards for university students. Use advanced academic "
        "vocabulary, cover complex concepts and test deep understanding."
    ),
    EducationLevel.COMPETITIVE.value: (
        "You write flashcards for competitive exam preparation such as UPSC or "
        "GRE. Use precise terminology, thorough explanations and analytical "
        "questions."
    ),
}

DEFAULT_EDUCATION_LEVEL = EducationLevel.HIGH_SCHOOL.value


def get_education_prompt(education_level: str | None) -> str:
    """Persona for the level; unknown or missing levels get the high school one."""
    return EDUCATION_PROMPTS.get(
        education_level or DEFAULT_EDUCATION_LEVEL,
        EDUCATION_PROMPTS[DEFAULT_EDUCATION_LEVEL],
    )


def build_flashcards_prompt(options: GenerateFlashcardsOptions) -> str:
    persona = get_education_prompt(options.education_level)
    question_types = ", ".join(options.question_types)
    return f"""{persona}

Generate {options.number_of_cards} flashcards from the content below. Use a mix of these question types: {question_types}.

Subject: {options.subject}
Difficulty Level: {options.difficulty_level}
Education Level: {options.education_level}

Content:
{options.content}

Respond with a JSON array where every element has this shape:
[
  {{
    "question": "The question text",
    "answer": "The correct answer",
    "questionType": "multiple_choice|true_false|short_answer|fill_in_blank",
    "difficultyLevel": "{options.difficulty_level}",
    "options": ["Option A", "Option B", "Option C", "Option D"]
  }}
]

Rules:
- multiple_choice cards carry exactly 4 entries in "options" and the "answer" is the full text of the correct option, not a letter.
- Every other question type leaves out the "options" field.
- Output only the JSON array. No prose, no markdown."""


def build_study_module_prompt(options: GenerateStudyModuleOptions) -> str:
    persona = get_education_prompt(options.education_level)
    estimated_hours = options.estimated_hours or math.ceil(options.number_of_cards / 5)
    return f"""{persona}

Design a study module for the topic: "{options.topic}"

Subject: {options.subject}
Difficulty Level: {options.difficulty_level}
Education Level: {options.education_level}
Target number of flashcards: {options.number_of_cards}

Respond with a JSON object of this shape:
{{
  "title": "A clear, engaging title for the module",
  "description": "Two or three sentences on what the module covers",
  "topics": ["Topic 1", "Topic 2", "Topic 3"],
  "learningPlan": [
    {{
      "week": 1,
      "topic": "Topic name",
      "description": "What is learned in this week",
      "flashcardsCount": 5
    }}
  ],
  "estimatedHours": {estimated_hours}
}}

Rules:
- "topics" lists between 3 and 7 main topics.
- "learningPlan" has one entry per topic, in study order.
- The "flashcardsCount" values add up to {options.number_of_cards}.
- Output only the JSON object. No prose, no markdown."""
