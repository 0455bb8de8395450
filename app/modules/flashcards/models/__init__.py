from .flashcards import Card, GenerationRequest, GenerationResult

__all__ = [
    "Card",
    "GenerationRequest",
    "GenerationResult",
]
