from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from app.core.logging import setup_logging
from app.modules.ai.errors import AIServiceError
from app.modules.ai.factory import AIServiceFactory
from app.modules.ai.models import (
    GenerateFlashcardsFromTopicOptions,
    GenerateFlashcardsOptions,
    GenerateStudyModuleOptions,
)


def _load_content(args: argparse.Namespace) -> str:
    if args.content and args.content_file:
        raise SystemExit("Provide either --content or --content-file, not both")
    if args.content_file:
        return Path(args.content_file).read_text(encoding="utf-8")
    if args.content:
        return args.content
    raise SystemExit("--content or --content-file is required")


def _add_common(p: argparse.ArgumentParser, default_cards: int) -> None:
    p.add_argument("--subject", default="General")
    p.add_argument("--education-level", default="high_school")
    p.add_argument("--difficulty", default="intermediate")
    p.add_argument("--cards", "-n", type=int, default=default_cards, help="Number of cards")


async def _run(args: argparse.Namespace) -> dict:
    service = AIServiceFactory().get_service()
    common = dict(
        subject=args.subject,
        education_level=args.education_level,
        difficulty_level=args.difficulty,
        number_of_cards=args.cards,
    )
    if args.cmd == "generate":
        cards = await service.generate_flashcards(
            GenerateFlashcardsOptions(content=_load_content(args), **common)
        )
        return {"flashcards": [c.model_dump(mode="json", by_alias=True) for c in cards]}
    if args.cmd == "generate-from-topic":
        cards = await service.generate_flashcards_from_topic(
            GenerateFlashcardsFromTopicOptions(topic=args.topic, **common)
        )
        return {"flashcards": [c.model_dump(mode="json", by_alias=True) for c in cards]}
    result = await service.generate_study_module(
        GenerateStudyModuleOptions(
            topic=args.topic, estimated_hours=args.estimated_hours, **common
        )
    )
    return result.model_dump(mode="json", by_alias=True)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="smartflash-ai",
        description="Generate flashcards with the configured AI provider (nothing is saved)",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("generate", help="Generate flashcards from study content")
    g.add_argument("--content", "-c", help="Study content (text)")
    g.add_argument("--content-file", help="Path to a file containing the content")
    _add_common(g, 5)

    gt = sub.add_parser("generate-from-topic", help="Generate flashcards about a topic")
    gt.add_argument("--topic", "-t", required=True)
    _add_common(gt, 10)

    gm = sub.add_parser(
        "generate-module", help="Generate a study module plan and its flashcards"
    )
    gm.add_argument("--topic", "-t", required=True)
    gm.add_argument("--estimated-hours", type=int, default=None)
    _add_common(gm, 20)

    args = parser.parse_args(argv)
    setup_logging()
    try:
        payload = asyncio.run(_run(args))
    except AIServiceError as exc:
        print(json.dumps({"error": type(exc).__name__, "details": str(exc)}, indent=2))
        return 1
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
