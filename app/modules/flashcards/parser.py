"""Turn free-form generated text into question/answer cards.

The generator is asked for ``Q:`` / ``A:`` line pairs separated by blank
lines, but model output drifts. Two strategies are tried in order and the
first one that yields anything wins; results are never merged.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable

from app.core.logging import get_logger
from app.modules.flashcards.models.flashcards import Card


logger = get_logger(__name__)

# Answer runs (across newlines) until the next "Q:" line or end of text.
PAIR_PATTERN = re.compile(
    r"Q:\s*(.*?)\s*\n\s*A:\s*(.*?)(?=\n\s*Q:|$)",
    re.IGNORECASE | re.DOTALL,
)
BLOCK_SEPARATOR = re.compile(r"\n\s*\n")
QUESTION_LINE = re.compile(r"Q:\s*(.*?)(?:\n|$)", re.IGNORECASE)
ANSWER_LINE = re.compile(r"A:\s*(.*?)(?:\n|$)", re.IGNORECASE)


def _make_card(question: str, answer: str) -> Card | None:
    q = question.strip()
    a = answer.strip()
    if q and a:
        return Card(question=q, answer=a)
    return None


def parse_pairs(text: str) -> list[Card]:
    """Primary strategy: scan the whole text for Q/A line pairs."""
    cards: list[Card] = []
    for match in PAIR_PATTERN.finditer(text):
        card = _make_card(match.group(1), match.group(2))
        if card is not None:
            logger.debug("Parsed: Q: %s / A: %s", card.question, card.answer)
            cards.append(card)
    return cards


def parse_blocks(text: str) -> list[Card]:
    """Fallback strategy: look for a Q line and an A line inside each blank-line block."""
    cards: list[Card] = []
    for block in BLOCK_SEPARATOR.split(text):
        if not block:
            continue
        q_match = QUESTION_LINE.search(block)
        a_match = ANSWER_LINE.search(block)
        if not (q_match and a_match):
            continue
        card = _make_card(q_match.group(1), a_match.group(1))
        if card is not None:
            logger.debug(
                "Parsed via fallback: Q: %s / A: %s", card.question, card.answer
            )
            cards.append(card)
    return cards


Strategy = Callable[[str], list[Card]]

STRATEGIES: tuple[Strategy, ...] = (parse_pairs, parse_blocks)


def parse_cards(text: str, strategies: Iterable[Strategy] = STRATEGIES) -> list[Card]:
    """Return the cards found by the first strategy that finds any.

    Never raises on odd input; anything unparseable yields an empty list.
    """
    if not isinstance(text, str) or not text:
        return []

    cards: list[Card] = []
    for strategy in strategies:
        cards = strategy(text)
        if cards:
            break
        logger.info(
            "%s found no cards", getattr(strategy, "__name__", repr(strategy))
        )

    logger.info("Parsing complete. Found %d cards.", len(cards))
    return cards
