from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db.base import Base

if TYPE_CHECKING:
    from .auth import User


class Deck(Base):
    __tablename__ = "decks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String, nullable=False)
    # Next free Flashcard.order_index; bumped under the row lock when cards are added
    next_order_index: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    owner: Mapped["User"] = relationship("User", back_populates="decks")
    flashcards: Mapped[list["Flashcard"]] = relationship(
        "Flashcard",
        back_populates="deck",
        cascade="all, delete-orphan",
        order_by="Flashcard.order_index",
    )
    collaborators: Mapped[list["DeckCollaborator"]] = relationship(
        "DeckCollaborator",
        back_populates="deck",
        cascade="all, delete-orphan",
        order_by="DeckCollaborator.added_at",
    )


class DeckCollaborator(Base):
    __tablename__ = "deck_collaborators"
    __table_args__ = (
        UniqueConstraint("deck_id", "email", name="uq_deck_collaborator_email"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    deck_id: Mapped[int] = mapped_column(
        ForeignKey("decks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Stored lower-cased; collaborators are matched by email
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    added_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    deck: Mapped["Deck"] = relationship("Deck", back_populates="collaborators")


class Flashcard(Base):
    __tablename__ = "flashcards"
    __table_args__ = (
        UniqueConstraint(
            "deck_id",
            "order_index",
            name="uq_flashcard_deck_order",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    deck_id: Mapped[int] = mapped_column(
        ForeignKey("decks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    deck: Mapped["Deck"] = relationship("Deck", back_populates="flashcards")


__all__ = [
    "Deck",
    "DeckCollaborator",
    "Flashcard",
]
