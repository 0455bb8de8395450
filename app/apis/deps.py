from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db.base import get_session
from app.core.db.schemas.auth import User
from app.core.db_services import DeckService
from app.modules.flashcards.main import FlashcardsGenerator, build_flashcards_generator


def get_flashcards_generator() -> FlashcardsGenerator:
    """Mediator wired from settings; raises ServiceUnavailableError without an API key."""
    return build_flashcards_generator(settings)


def get_deck_service(session: AsyncSession = Depends(get_session)) -> DeckService:
    return DeckService(session)


async def current_user(
    x_user_id: Optional[str] = Header(default=None),
    service: DeckService = Depends(get_deck_service),
) -> User:
    """Resolve the acting user from the ``X-User-Id`` header.

    The header is set by the identity proxy in front of this service; users
    are provisioned there, so an unknown id is treated as unauthenticated.
    """
    if not x_user_id or not x_user_id.strip().isdigit():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    user = await service.get_user(int(x_user_id.strip()))
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user
