"""Flashcards service class.

``FlashcardsGenerator`` runs one generation call end to end: validate the
input, ask the text generator for Q/A pairs, parse them, and either return the
cards or raise a single typed ``GenerationError``. It holds no per-call state,
so one instance can serve concurrent requests.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from app.core.logging import get_logger
from app.modules.flashcards.errors import (
    GenerationError,
    InvalidInputError,
    ParseYieldedNothingError,
    ServiceUnavailableError,
    UpstreamFailureError,
    UpstreamTimeoutError,
)
from app.modules.flashcards.generator import (
    GeminiTextGenerator,
    TextGenerator,
    build_instruction,
)
from app.modules.flashcards.models.flashcards import (
    GenerationRequest,
    GenerationResult,
)
from app.modules.flashcards.parser import parse_cards

if TYPE_CHECKING:
    from app.core.config import Settings


logger = get_logger(__name__)


class GenerationState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    AWAITING_EXTERNAL_RESPONSE = "awaiting_external_response"
    PARSING = "parsing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATES = frozenset({GenerationState.SUCCEEDED, GenerationState.FAILED})


@dataclass
class GenerationAttempt:
    """Trace of one invocation; terminal once SUCCEEDED or FAILED."""

    state: GenerationState = GenerationState.IDLE
    history: list[GenerationState] = field(
        default_factory=lambda: [GenerationState.IDLE]
    )
    error: GenerationError | None = None

    def advance(self, state: GenerationState) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"attempt already finished in state {self.state.value}")
        self.state = state
        self.history.append(state)

    def fail(self, error: GenerationError) -> GenerationError:
        self.error = error
        self.advance(GenerationState.FAILED)
        return error


class FlashcardsGenerator:
    """Generate validated flashcards from source text through a ``TextGenerator``."""

    def __init__(
        self,
        text_generator: TextGenerator,
        *,
        timeout_seconds: float = 45.0,
        max_text_length: int = 10_000,
        default_count: int = 5,
        large_count_warning: int | None = 50,
    ) -> None:
        self.text_generator = text_generator
        self.timeout_seconds = timeout_seconds
        self.max_text_length = max_text_length
        self.default_count = default_count
        self.large_count_warning = large_count_warning

    def validate(
        self, source_text: str | None, desired_count: int | None = None
    ) -> GenerationRequest:
        """Check bounds before any external call is made."""
        if not isinstance(source_text, str) or not source_text.strip():
            raise InvalidInputError("Missing 'text' in request body")
        # Length in UTF-16 code units, so astral characters such as emoji count twice
        if len(source_text.encode("utf-16-le")) // 2 > self.max_text_length:
            raise InvalidInputError(
                f"Input text is too large. Please limit to {self.max_text_length:,} characters."
            )

        count = self.default_count if desired_count is None else desired_count
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise InvalidInputError("num_questions must be a positive integer.")
        if self.large_count_warning is not None and count > self.large_count_warning:
            # Uncapped; large requests are only logged
            logger.warning("Large generation requested: %d cards", count)

        return GenerationRequest(source_text=source_text, desired_count=count)

    async def generate(
        self,
        source_text: str | None,
        desired_count: int | None = None,
        *,
        attempt: GenerationAttempt | None = None,
    ) -> GenerationResult:
        attempt = attempt or GenerationAttempt()

        attempt.advance(GenerationState.VALIDATING)
        try:
            request = self.validate(source_text, desired_count)
        except InvalidInputError as e:
            raise attempt.fail(e)

        instruction = build_instruction(request.source_text, request.desired_count)
        logger.info(
            "Sending prompt for %d cards (first 100 chars of context): %s...",
            request.desired_count,
            request.source_text[:100],
        )

        attempt.advance(GenerationState.AWAITING_EXTERNAL_RESPONSE)
        try:
            raw = await asyncio.wait_for(
                self.text_generator.generate(instruction),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.warning(
                "Generation timed out after %.1f seconds", self.timeout_seconds
            )
            raise attempt.fail(UpstreamTimeoutError()) from e
        except Exception as e:
            logger.exception("An error occurred during the generation call")
            raise attempt.fail(UpstreamFailureError()) from e

        if not isinstance(raw, str) or not raw.strip():
            # Safety filtering can leave the candidate without any text
            logger.error("Generation returned no text (possibly blocked by safety filters)")
            raise attempt.fail(UpstreamFailureError())

        attempt.advance(GenerationState.PARSING)
        cards = parse_cards(raw)
        if not cards:
            logger.warning(
                "Parsing returned no cards, despite successful generation."
            )
            raise attempt.fail(ParseYieldedNothingError())

        attempt.advance(GenerationState.SUCCEEDED)
        return GenerationResult(cards=cards)

    def generate_sync(
        self, source_text: str | None, desired_count: int | None = None
    ) -> GenerationResult:
        return asyncio.run(self.generate(source_text, desired_count))


def build_flashcards_generator(cfg: "Settings") -> FlashcardsGenerator:
    """Wire a Gemini-backed generator from explicit settings.

    Raises ``ServiceUnavailableError`` when no API key is configured.
    """
    if not cfg.gemini_api_key:
        raise ServiceUnavailableError()
    gen = cfg.generation
    return FlashcardsGenerator(
        GeminiTextGenerator(
            cfg.gemini_api_key,
            model_name=gen.model_name,
            max_tokens=gen.max_output_tokens,
            temperature=gen.temperature,
            top_p=gen.top_p,
        ),
        timeout_seconds=gen.timeout_seconds,
        max_text_length=gen.max_text_length,
        default_count=gen.default_count,
        large_count_warning=gen.large_count_warning,
    )
