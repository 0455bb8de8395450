"""
Unit tests for FlashcardsGenerator (validation, timeout, error mapping).
"""
import pytest

from app.modules.flashcards.errors import (
    InvalidInputError,
    ParseYieldedNothingError,
    UpstreamFailureError,
    UpstreamTimeoutError,
)
from app.modules.flashcards.generator import build_instruction
from app.modules.flashcards.main import (
    FlashcardsGenerator,
    GenerationAttempt,
    GenerationState,
)
from app.modules.flashcards.models.flashcards import Card


class TestValidation:

    @pytest.mark.parametrize("text", [None, "", "   \n\t "])
    async def test_blank_text_rejected_without_calling_generator(self, make_generator, text):
        fake = make_generator("Q: a\nA: b")
        svc = FlashcardsGenerator(fake)
        with pytest.raises(InvalidInputError) as exc:
            await svc.generate(text)
        assert exc.value.status_code == 400
        assert exc.value.message == "Missing 'text' in request body"
        assert fake.calls == []

    async def test_oversized_text_rejected_without_calling_generator(self, make_generator):
        fake = make_generator("Q: a\nA: b")
        svc = FlashcardsGenerator(fake)
        with pytest.raises(InvalidInputError) as exc:
            await svc.generate("x" * 10_001)
        assert exc.value.message == (
            "Input text is too large. Please limit to 10,000 characters."
        )
        assert fake.calls == []

    async def test_text_at_limit_is_accepted(self, make_generator, sample_output):
        fake = make_generator(sample_output)
        result = await FlashcardsGenerator(fake).generate("x" * 10_000)
        assert result.count == 2
        assert len(fake.calls) == 1

    async def test_limit_counts_utf16_units(self, make_generator, sample_output):
        fake = make_generator(sample_output)
        svc = FlashcardsGenerator(fake)

        # 5,001 emoji are 10,002 UTF-16 units
        with pytest.raises(InvalidInputError):
            await svc.generate("\U0001F600" * 5_001)
        assert fake.calls == []

        result = await svc.generate("\U0001F600" * 5_000)
        assert result.count == 2

    @pytest.mark.parametrize("count", [0, -3, True])
    async def test_non_positive_count_rejected(self, make_generator, count):
        fake = make_generator("Q: a\nA: b")
        with pytest.raises(InvalidInputError):
            await FlashcardsGenerator(fake).generate("some text", count)
        assert fake.calls == []

    def test_count_defaults_to_five(self, make_generator):
        request = FlashcardsGenerator(make_generator()).validate("text")
        assert request.desired_count == 5

    async def test_large_count_is_not_capped(self, make_generator, sample_output, caplog):
        fake = make_generator(sample_output)
        svc = FlashcardsGenerator(fake, large_count_warning=10)
        await svc.generate("text", 500)
        assert "exactly 500 distinct" in fake.calls[0]
        assert "Large generation requested" in caplog.text


class TestGeneration:

    async def test_success_returns_cards_and_count(self, make_generator, sample_output):
        fake = make_generator(sample_output)
        attempt = GenerationAttempt()
        result = await FlashcardsGenerator(fake).generate(
            "The Earth orbits the Sun.", 2, attempt=attempt
        )
        assert result.cards == [
            Card(question="What does the Earth revolve around?", answer="The Sun."),
            Card(question="What is 2+2?", answer="4."),
        ]
        assert result.count == 2
        assert attempt.history == [
            GenerationState.IDLE,
            GenerationState.VALIDATING,
            GenerationState.AWAITING_EXTERNAL_RESPONSE,
            GenerationState.PARSING,
            GenerationState.SUCCEEDED,
        ]

    async def test_instruction_carries_text_and_count(self, make_generator, sample_output):
        fake = make_generator(sample_output)
        await FlashcardsGenerator(fake).generate("Photosynthesis makes sugar.", 3)
        assert fake.calls == [build_instruction("Photosynthesis makes sugar.", 3)]
        assert "Photosynthesis makes sugar." in fake.calls[0]
        assert "exactly 3 distinct" in fake.calls[0]
        assert "Q: [The generated question text]" in fake.calls[0]

    async def test_unparseable_reply_is_parse_failure(self, make_generator):
        fake = make_generator("I'm sorry, I can only write prose about that.")
        attempt = GenerationAttempt()
        with pytest.raises(ParseYieldedNothingError) as exc:
            await FlashcardsGenerator(fake).generate("text", attempt=attempt)
        assert exc.value.status_code == 500
        assert exc.value.message.startswith("Could not parse Q&A pairs")
        assert attempt.state is GenerationState.FAILED
        assert GenerationState.PARSING in attempt.history

    async def test_empty_reply_is_upstream_failure(self, make_generator):
        with pytest.raises(UpstreamFailureError):
            await FlashcardsGenerator(make_generator("   ")).generate("text")

    async def test_generator_error_is_upstream_failure(self, make_generator):
        fake = make_generator(error=RuntimeError("quota exceeded"))
        with pytest.raises(UpstreamFailureError) as exc:
            await FlashcardsGenerator(fake).generate("text")
        assert isinstance(exc.value.__cause__, RuntimeError)
        assert exc.value.message == (
            "An unexpected error occurred while generating questions."
        )
        assert len(fake.calls) == 1

    async def test_slow_generator_times_out(self, make_generator, sample_output):
        fake = make_generator(sample_output, delay=1.0)
        svc = FlashcardsGenerator(fake, timeout_seconds=0.05)
        attempt = GenerationAttempt()
        with pytest.raises(UpstreamTimeoutError) as exc:
            await svc.generate("text", attempt=attempt)
        assert exc.value.retryable
        assert attempt.error is exc.value
        assert len(fake.calls) == 1

    async def test_attempt_is_one_shot(self, make_generator, sample_output):
        svc = FlashcardsGenerator(make_generator(sample_output))
        attempt = GenerationAttempt()
        await svc.generate("text", attempt=attempt)
        with pytest.raises(RuntimeError):
            await svc.generate("text", attempt=attempt)

    def test_generate_sync(self, make_generator, sample_output):
        result = FlashcardsGenerator(make_generator(sample_output)).generate_sync("text")
        assert result.cards == [
            Card(question="What does the Earth revolve around?", answer="The Sun."),
            Card(question="What is 2+2?", answer="4."),
        ]
