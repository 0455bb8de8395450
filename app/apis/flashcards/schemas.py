from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from app.modules.flashcards.models.flashcards import Card


class GenerateQuestionsRequest(BaseModel):
    text: Optional[str] = Field(default=None, description="Source text for the cards")
    num_questions: Optional[int] = Field(
        default=None, description="How many cards to generate (defaults to 5)"
    )


class GenerateQuestionsResponse(BaseModel):
    generated_cards: list[Card] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
