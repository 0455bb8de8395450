from __future__ import annotations

from pydantic import BaseModel, Field


class DeckCreate(BaseModel):
    title: str = Field(default="", description="Deck title")


class DeckUpdate(BaseModel):
    title: str = Field(default="", description="New deck title")


class CardWrite(BaseModel):
    question: str = ""
    answer: str = ""


class CardRead(BaseModel):
    id: int
    question: str
    answer: str
    order_index: int


class DeckSummary(BaseModel):
    id: int
    title: str
    owner_id: int
    is_owner: bool
    card_count: int = 0
    collaborators: list[str] = Field(default_factory=list)
    created_at: str | None = None


class DeckRead(DeckSummary):
    cards: list[CardRead] = Field(default_factory=list)


class BatchCardsRequest(BaseModel):
    cards: list[CardWrite] = Field(default_factory=list)


class BatchCardsResponse(BaseModel):
    added: int
    skipped: int
    cards: list[CardRead] = Field(default_factory=list)


class CollaboratorAdd(BaseModel):
    email: str = ""
