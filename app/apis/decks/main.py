from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from app.apis.deps import current_user, get_deck_service
from app.core.config import settings
from app.core.db.schemas.auth import User
from app.core.db.schemas.decks import Deck, Flashcard
from app.core.db_services import DeckService
from app.modules.flashcards.models.flashcards import Card
from .schemas import (
    BatchCardsRequest,
    BatchCardsResponse,
    CardRead,
    CardWrite,
    CollaboratorAdd,
    DeckCreate,
    DeckRead,
    DeckSummary,
    DeckUpdate,
)


router = APIRouter()

CurrentUser = Annotated[User, Depends(current_user)]
Decks = Annotated[DeckService, Depends(get_deck_service)]

PREFIX = f"/{settings.app.version}/decks"


def _card_read(c: Flashcard) -> CardRead:
    return CardRead(id=c.id, question=c.question, answer=c.answer, order_index=c.order_index)


def _summary(d: Deck, user: User) -> dict:
    return dict(
        id=d.id,
        title=d.title,
        owner_id=d.owner_id,
        is_owner=d.owner_id == user.id,
        card_count=len(d.flashcards or []),
        collaborators=[c.email for c in (d.collaborators or [])],
        created_at=d.created_at.isoformat() if d.created_at else None,
    )


def _deck_read(d: Deck, user: User) -> DeckRead:
    return DeckRead(
        **_summary(d, user),
        cards=[_card_read(c) for c in (d.flashcards or [])],
    )


@router.get(PREFIX, response_model=list[DeckSummary], tags=["decks"])
async def list_decks(user: CurrentUser, decks: Decks) -> list[DeckSummary]:
    return [DeckSummary(**_summary(d, user)) for d in await decks.list_decks(user)]


@router.post(
    PREFIX,
    response_model=DeckRead,
    status_code=status.HTTP_201_CREATED,
    tags=["decks"],
)
async def create_deck(req: DeckCreate, user: CurrentUser, decks: Decks) -> DeckRead:
    deck = await decks.create_deck(user, req.title)
    return _deck_read(deck, user)


@router.get(f"{PREFIX}/{{deck_id:int}}", response_model=DeckRead, tags=["decks"])
async def get_deck(deck_id: int, user: CurrentUser, decks: Decks) -> DeckRead:
    return _deck_read(await decks.get_deck(user, deck_id), user)


@router.patch(f"{PREFIX}/{{deck_id:int}}", response_model=DeckRead, tags=["decks"])
async def rename_deck(
    deck_id: int, req: DeckUpdate, user: CurrentUser, decks: Decks
) -> DeckRead:
    return _deck_read(await decks.rename_deck(user, deck_id, req.title), user)


@router.delete(
    f"{PREFIX}/{{deck_id:int}}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["decks"],
)
async def delete_deck(deck_id: int, user: CurrentUser, decks: Decks) -> Response:
    await decks.delete_deck(user, deck_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    f"{PREFIX}/{{deck_id:int}}/cards",
    response_model=CardRead,
    status_code=status.HTTP_201_CREATED,
    tags=["decks"],
)
async def add_card(
    deck_id: int, req: CardWrite, user: CurrentUser, decks: Decks
) -> CardRead:
    card = await decks.add_card(user, deck_id, req.question, req.answer)
    return _card_read(card)


@router.put(
    f"{PREFIX}/{{deck_id:int}}/cards/{{card_id:int}}",
    response_model=CardRead,
    tags=["decks"],
)
async def update_card(
    deck_id: int, card_id: int, req: CardWrite, user: CurrentUser, decks: Decks
) -> CardRead:
    card = await decks.update_card(user, deck_id, card_id, req.question, req.answer)
    return _card_read(card)


@router.delete(
    f"{PREFIX}/{{deck_id:int}}/cards/{{card_id:int}}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["decks"],
)
async def delete_card(
    deck_id: int, card_id: int, user: CurrentUser, decks: Decks
) -> Response:
    await decks.delete_card(user, deck_id, card_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    f"{PREFIX}/{{deck_id:int}}/cards/batch",
    response_model=BatchCardsResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["decks"],
)
async def add_generated_cards(
    deck_id: int, req: BatchCardsRequest, user: CurrentUser, decks: Decks
) -> BatchCardsResponse:
    """Store reviewed AI-generated cards; duplicate questions are skipped."""
    added, skipped = await decks.add_generated_cards(
        user,
        deck_id,
        [Card(question=c.question, answer=c.answer) for c in req.cards],
    )
    return BatchCardsResponse(
        added=len(added),
        skipped=skipped,
        cards=[_card_read(c) for c in added],
    )


@router.post(
    f"{PREFIX}/{{deck_id:int}}/collaborators",
    response_model=DeckRead,
    tags=["decks"],
)
async def add_collaborator(
    deck_id: int, req: CollaboratorAdd, user: CurrentUser, decks: Decks
) -> DeckRead:
    return _deck_read(await decks.add_collaborator(user, deck_id, req.email), user)


@router.delete(
    f"{PREFIX}/{{deck_id:int}}/collaborators/{{email}}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["decks"],
)
async def remove_collaborator(
    deck_id: int, email: str, user: CurrentUser, decks: Decks
) -> Response:
    await decks.remove_collaborator(user, deck_id, email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
