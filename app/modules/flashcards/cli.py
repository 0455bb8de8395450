from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from app.apis.flashcards.schemas import GenerateQuestionsResponse
from app.core.config import settings
from app.modules.flashcards.errors import GenerationError
from app.modules.flashcards.main import build_flashcards_generator
from app.modules.flashcards.parser import parse_cards


def _load_text(args: argparse.Namespace) -> str:
    if args.text and args.text_file:
        raise SystemExit("Provide either --text or --text-file, not both")
    if args.text_file:
        if args.text_file == "-":
            return sys.stdin.read()
        return Path(args.text_file).read_text(encoding="utf-8")
    if args.text:
        return args.text
    raise SystemExit("--text or --text-file is required")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="flashcards-gen", description="Flashcards generator CLI"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("generate", help="Generate flashcards from source text")
    g.add_argument("--text", "-t", help="Source text to draw questions from")
    g.add_argument("--text-file", help="Path to a file with the source text ('-' for stdin)")
    g.add_argument("--num", "-n", type=int, default=None, help="Number of cards")

    p = sub.add_parser("parse", help="Parse already-generated Q:/A: text offline")
    p.add_argument("--text", "-t", help="Generated text")
    p.add_argument("--text-file", help="Path to a file with generated text ('-' for stdin)")

    args = parser.parse_args(argv)
    if args.cmd == "generate":
        text = _load_text(args)
        try:
            svc = build_flashcards_generator(settings)
            result = svc.generate_sync(text, args.num)
        except GenerationError as e:
            print(json.dumps({"error": e.message}, indent=2))
            return 1
        response = GenerateQuestionsResponse(generated_cards=result.cards)
        print(json.dumps(response.model_dump(), indent=2))
        return 0
    if args.cmd == "parse":
        cards = parse_cards(_load_text(args))
        print(json.dumps([c.model_dump() for c in cards], indent=2))
        return 0

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
