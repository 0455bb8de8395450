"""Typed failures for a flashcard generation call.

Each error knows the HTTP status and the user-facing message it maps to, so
API handlers can translate them without inspecting the cause.
"""

from __future__ import annotations


class GenerationError(Exception):
    status_code: int = 500
    default_message: str = "An unexpected error occurred while generating questions."
    retryable: bool = True

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(GenerationError):
    status_code = 400
    default_message = "Missing 'text' in request body"
    retryable = False


class ServiceUnavailableError(GenerationError):
    status_code = 503
    default_message = "Server configuration error: AI Service not available"
    retryable = False


class UpstreamTimeoutError(GenerationError):
    status_code = 504
    default_message = (
        "The request to generate questions timed out. Please try again later."
    )


class UpstreamFailureError(GenerationError):
    """The generation service errored or returned nothing (e.g. safety block)."""


class ParseYieldedNothingError(GenerationError):
    default_message = (
        "Could not parse Q&A pairs from the generated text. The AI might not have "
        "followed the format. Please try again or adjust the input text."
    )


__all__ = [
    "GenerationError",
    "InvalidInputError",
    "ServiceUnavailableError",
    "UpstreamTimeoutError",
    "UpstreamFailureError",
    "ParseYieldedNothingError",
]
