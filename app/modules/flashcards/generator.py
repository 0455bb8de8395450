"""Text generation collaborator for flashcard creation.

The mediator only needs something that turns an instruction into text, so the
contract is the small ``TextGenerator`` protocol. ``GeminiTextGenerator`` is the
production implementation on top of pydantic-ai and the Google provider; imports
for the provider are kept lazy to avoid import-time errors when the Google
extras or credentials are missing.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pydantic_ai import Agent

from app.core.logging import get_logger


logger = get_logger(__name__)

FLASHCARDS_MODEL_NAME = "gemini-2.0-flash"

# Blocked at medium severity and above
SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)
SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"


@runtime_checkable
class TextGenerator(Protocol):
    async def generate(self, instruction: str) -> str: ...


def build_instruction(source_text: str, count: int) -> str:
    """Prompt asking for exactly ``count`` Q/A pairs drawn only from ``source_text``."""
    return (
        f"Generate exactly {int(count)} distinct flashcard question-and-answer pairs "
        "based on the following text.\n"
        "**Instructions:**\n"
        "1. The questions should test understanding of the key information in the text.\n"
        "2. Answers must be concise and directly derivable from the provided text *only*.\n"
        "3. Format **each** pair strictly like this, with 'Q:' starting the question "
        "line and 'A:' starting the answer line:\n"
        "   Q: [The generated question text]\n"
        "   A: [The generated answer text]\n"
        "4. Separate each Q&A pair with exactly one blank line.\n"
        "5. Do not include any introductory text, concluding remarks, or numbering "
        'like "1.", "Pair 1:", etc. Only output the Q&A pairs in the specified format.\n'
        "**Input Text:**\n"
        "---\n"
        f"{source_text}\n"
        "---\n"
        "**Generated Q&A Pairs:**\n"
    )


def _build_model_settings(
    *, max_tokens: int, temperature: float, top_p: float
) -> dict[str, Any]:
    """Sampling limits plus Gemini safety thresholds (lazy import)."""
    from google.genai.types import HarmBlockThreshold, HarmCategory
    from pydantic_ai.models.google import GoogleModelSettings

    return GoogleModelSettings(
        max_tokens=max_tokens,
        temperature=temperature,
        top_p=top_p,
        google_safety_settings=[
            {
                "category": HarmCategory(category),
                "threshold": HarmBlockThreshold(SAFETY_THRESHOLD),
            }
            for category in SAFETY_CATEGORIES
        ],
    )


def _build_google_model(model_name: str, api_key: str):
    """Build the Google Gemini model provider (lazy import)."""
    from pydantic_ai.models.google import GoogleModel
    from pydantic_ai.providers.google import GoogleProvider

    provider = GoogleProvider(api_key=api_key)
    return GoogleModel(model_name, provider=provider)


class GeminiTextGenerator:
    """Plain-text Gemini completion with bounded output and safety filtering.

    ``model`` may be any pydantic-ai model (tests pass a ``FunctionModel``);
    when omitted a ``GoogleModel`` is built from ``api_key``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model_name: str = FLASHCARDS_MODEL_NAME,
        model: Any = None,
        max_tokens: int = 1024,
        temperature: float = 0.6,
        top_p: float = 0.9,
    ) -> None:
        if model is None:
            if not api_key:
                raise ValueError("api_key is required when no model is supplied")
            model = _build_google_model(model_name, api_key)
        self.model_name = model_name
        # retries=0: one generate() call is one request to the provider
        self._agent: Agent[None, str] = Agent[None, str](
            model=model,
            output_type=str,
            retries=0,
            model_settings=_build_model_settings(
                max_tokens=max_tokens, temperature=temperature, top_p=top_p
            ),
        )

    async def generate(self, instruction: str) -> str:
        res = await self._agent.run(instruction)
        return res.output
