"""Database service classes for decks, cards and collaborators."""

from __future__ import annotations

from typing import Iterable, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import or_, select, update
from sqlalchemy.orm import selectinload

from app.core.db.schemas.auth import User
from app.core.db.schemas.decks import Deck, DeckCollaborator, Flashcard
from app.core.logging import get_logger
from app.modules.flashcards.models.flashcards import Card


logger = get_logger(__name__)


class DeckError(Exception):
    status_code: int = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DeckValidationError(DeckError):
    status_code = 400


class PermissionDeniedError(DeckError):
    status_code = 403


class DeckNotFoundError(DeckError):
    status_code = 404

    def __init__(self, message: str = "Deck not found or you may not have access.") -> None:
        super().__init__(message)


class UserNotFoundError(DeckError):
    status_code = 404


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def normalize_question(question: str) -> str:
    """Key used to spot duplicate questions: case-folded, whitespace collapsed."""
    return " ".join((question or "").split()).casefold()


def _clean_card_fields(question: str, answer: str) -> tuple[str, str]:
    q = (question or "").strip()
    a = (answer or "").strip()
    if not q or not a:
        raise DeckValidationError("Both question and answer fields are required.")
    return q, a


def _clean_title(title: str) -> str:
    t = (title or "").strip()
    if not t:
        raise DeckValidationError("Deck title cannot be empty.")
    return t


class DeckService:
    """Service for decks and their cards and collaborators.

    Owners may do anything; collaborators may read the deck and edit cards.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- Users ---

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    # --- Decks ---

    def _visible_to(self, user: User):
        collaborated = select(DeckCollaborator.deck_id).where(
            DeckCollaborator.email == normalize_email(user.email)
        )
        return or_(Deck.owner_id == user.id, Deck.id.in_(collaborated))

    async def list_decks(self, user: User) -> list[Deck]:
        """Decks owned by ``user`` first, then decks shared with them."""
        result = await self.session.execute(
            select(Deck)
            .options(
                selectinload(Deck.collaborators),
                selectinload(Deck.flashcards),
            )
            .where(self._visible_to(user))
            .order_by(Deck.created_at.desc(), Deck.id.desc())
        )
        decks = list(result.scalars().all())
        return sorted(decks, key=lambda d: d.owner_id != user.id)

    async def create_deck(self, user: User, title: str) -> Deck:
        deck = Deck(owner_id=user.id, title=_clean_title(title))
        self.session.add(deck)
        await self.session.commit()
        logger.info("Created deck %s for user %s", deck.id, user.id)
        return await self.get_deck(user, deck.id)

    async def get_deck(self, user: User, deck_id: int) -> Deck:
        """Load a deck with cards and collaborators if ``user`` may see it."""
        result = await self.session.execute(
            select(Deck)
            .options(
                selectinload(Deck.flashcards),
                selectinload(Deck.collaborators),
            )
            .where(Deck.id == deck_id, self._visible_to(user))
            .execution_options(populate_existing=True)
        )
        deck = result.scalar_one_or_none()
        if not deck:
            raise DeckNotFoundError()
        return deck

    async def get_owned_deck(self, user: User, deck_id: int, action: str) -> Deck:
        deck = await self.get_deck(user, deck_id)
        if deck.owner_id != user.id:
            raise PermissionDeniedError(
                f"Permission denied. Only the deck owner can {action}."
            )
        return deck

    async def rename_deck(self, user: User, deck_id: int, title: str) -> Deck:
        deck = await self.get_owned_deck(user, deck_id, "rename this deck")
        deck.title = _clean_title(title)
        await self.session.commit()
        return await self.get_deck(user, deck_id)

    async def delete_deck(self, user: User, deck_id: int) -> None:
        deck = await self.get_owned_deck(user, deck_id, "delete this deck")
        card_count = len(deck.flashcards)
        await self.session.delete(deck)
        await self.session.commit()
        logger.info("Deleted deck %s and its %d cards", deck_id, card_count)

    # --- Cards ---

    async def _reserve_order_indexes(self, deck_id: int, count: int) -> int:
        """Claim ``count`` consecutive order indexes and return the first.

        The UPDATE takes the deck row lock, which is held until commit, so
        concurrent writers to one deck get disjoint ranges.
        """
        result = await self.session.execute(
            update(Deck)
            .where(Deck.id == deck_id)
            .values(next_order_index=Deck.next_order_index + count)
            .returning(Deck.next_order_index)
            .execution_options(synchronize_session=False)
        )
        return int(result.scalar_one()) - count

    async def _get_card(self, deck: Deck, card_id: int) -> Flashcard:
        for c in deck.flashcards:
            if c.id == card_id:
                return c
        raise DeckNotFoundError("Card not found.")

    async def add_card(
        self, user: User, deck_id: int, question: str, answer: str
    ) -> Flashcard:
        q, a = _clean_card_fields(question, answer)
        deck = await self.get_deck(user, deck_id)
        card = Flashcard(
            deck_id=deck.id,
            question=q,
            answer=a,
            order_index=await self._reserve_order_indexes(deck.id, 1),
        )
        self.session.add(card)
        await self.session.commit()
        await self.session.refresh(card)
        return card

    async def update_card(
        self, user: User, deck_id: int, card_id: int, question: str, answer: str
    ) -> Flashcard:
        q, a = _clean_card_fields(question, answer)
        deck = await self.get_deck(user, deck_id)
        card = await self._get_card(deck, card_id)
        card.question = q
        card.answer = a
        await self.session.commit()
        await self.session.refresh(card)
        return card

    async def delete_card(self, user: User, deck_id: int, card_id: int) -> None:
        deck = await self.get_deck(user, deck_id)
        card = await self._get_card(deck, card_id)
        await self.session.delete(card)
        await self.session.commit()

    async def add_generated_cards(
        self, user: User, deck_id: int, cards: Iterable[Card]
    ) -> tuple[list[Flashcard], int]:
        """Append reviewed generated cards in one commit, skipping duplicates.

        A card is a duplicate when its normalized question already exists in
        the deck or earlier in the same batch. Returns ``(added, skipped)``.
        """
        cards = list(cards)
        if not cards:
            raise DeckValidationError("No AI-generated cards to add.")
        cleaned = [_clean_card_fields(c.question, c.answer) for c in cards]

        deck = await self.get_deck(user, deck_id)
        seen = {normalize_question(c.question) for c in deck.flashcards}

        fresh: list[tuple[str, str]] = []
        for q, a in cleaned:
            key = normalize_question(q)
            if key in seen:
                continue
            seen.add(key)
            fresh.append((q, a))
        skipped = len(cleaned) - len(fresh)

        added: list[Flashcard] = []
        if fresh:
            first = await self._reserve_order_indexes(deck.id, len(fresh))
            for offset, (q, a) in enumerate(fresh):
                card = Flashcard(
                    deck_id=deck.id, question=q, answer=a, order_index=first + offset
                )
                self.session.add(card)
                added.append(card)

        await self.session.commit()
        for card in added:
            await self.session.refresh(card)
        logger.info(
            "Added %d generated cards to deck %s (%d duplicates skipped)",
            len(added),
            deck_id,
            skipped,
        )
        return added, skipped

    # --- Collaborators ---

    async def add_collaborator(self, user: User, deck_id: int, email: str) -> Deck:
        deck = await self.get_owned_deck(user, deck_id, "add collaborators")
        email = normalize_email(email)
        if not email:
            raise DeckValidationError("Collaborator email is required.")
        if email == normalize_email(user.email):
            raise DeckValidationError("You already own this deck.")
        if not await self.get_user_by_email(email):
            raise UserNotFoundError(
                f"No registered user found with email '{email}'. "
                "Please ask them to sign up first."
            )
        if all(c.email != email for c in deck.collaborators):
            self.session.add(DeckCollaborator(deck_id=deck.id, email=email))
            await self.session.commit()
            logger.info("Invited %s to deck %s", email, deck_id)
        return await self.get_deck(user, deck_id)

    async def remove_collaborator(self, user: User, deck_id: int, email: str) -> None:
        deck = await self.get_owned_deck(user, deck_id, "remove collaborators")
        email = normalize_email(email)
        for c in list(deck.collaborators):
            if c.email == email:
                await self.session.delete(c)
        await self.session.commit()
