"""Pydantic models for flashcard generation.

Cards coming out of the parser are frozen; the deck layer stores its own
editable copies.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Card(BaseModel):
    """Simple question/answer flashcard."""

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str


class GenerationRequest(BaseModel):
    """Validated input for one generation call."""

    source_text: str
    desired_count: int = Field(default=5, gt=0)


class GenerationResult(BaseModel):
    """Cards extracted from a single successful generation call."""

    cards: list[Card] = Field(default_factory=list)

    @computed_field
    def count(self) -> int:
        return len(self.cards)
