from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from app.apis.deps import get_flashcards_generator
from app.core.logging import get_logger
from app.modules.flashcards.errors import GenerationError, UpstreamFailureError
from app.modules.flashcards.main import FlashcardsGenerator
from .schemas import ErrorResponse, GenerateQuestionsRequest, GenerateQuestionsResponse


router = APIRouter()

logger = get_logger(__name__)


@router.post(
    "/generate_questions",
    response_model=GenerateQuestionsResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    tags=["flashcards"],
)
async def generate_questions(
    req: Optional[GenerateQuestionsRequest] = None,
    generator: FlashcardsGenerator = Depends(get_flashcards_generator),
) -> GenerateQuestionsResponse:
    # An empty body is read as {} so validation reports the missing text
    req = req or GenerateQuestionsRequest()
    try:
        result = await generator.generate(req.text, req.num_questions)
    except GenerationError:
        raise
    except Exception as e:
        logger.exception("An error occurred during generation or processing")
        raise UpstreamFailureError() from e
    return GenerateQuestionsResponse(generated_cards=result.cards)
