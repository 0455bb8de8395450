"""Flashcards module exports."""

from .models.flashcards import Card, GenerationRequest, GenerationResult
from .parser import parse_cards
from .generator import GeminiTextGenerator, TextGenerator, build_instruction
from .main import FlashcardsGenerator, GenerationAttempt, GenerationState

__all__ = [
    "Card",
    "GenerationRequest",
    "GenerationResult",
    "parse_cards",
    "GeminiTextGenerator",
    "TextGenerator",
    "build_instruction",
    "FlashcardsGenerator",
    "GenerationAttempt",
    "GenerationState",
]
