"""
Unit tests for the generated-text card parser.

Run: pytest tests/unit/test_parser.py -v
"""
import pytest

from app.modules.flashcards.models.flashcards import Card
from app.modules.flashcards.parser import parse_blocks, parse_cards, parse_pairs


class TestPrimaryStrategy:
    """Q/A pairs scanned across the whole text."""

    def test_documented_example(self, sample_output):
        assert parse_cards(sample_output) == [
            Card(question="What does the Earth revolve around?", answer="The Sun."),
            Card(question="What is 2+2?", answer="4."),
        ]

    @pytest.mark.parametrize("n", [1, 3, 7])
    def test_n_pairs_in_order(self, n):
        text = "\n\n".join(f"Q: question {i}\nA: answer {i}" for i in range(n))
        cards = parse_cards(text)
        assert [c.question for c in cards] == [f"question {i}" for i in range(n)]
        assert [c.answer for c in cards] == [f"answer {i}" for i in range(n)]

    def test_content_is_trimmed(self):
        text = "Q:    padded question   \nA:\t padded answer \t\n\n"
        assert parse_cards(text) == [Card(question="padded question", answer="padded answer")]

    def test_multiline_answer_runs_until_next_question(self):
        text = "Q: List two planets\nA: Mars\nVenus\n\nQ: Largest planet?\nA: Jupiter"
        cards = parse_pairs(text)
        assert cards[0].answer == "Mars\nVenus"
        assert cards[1] == Card(question="Largest planet?", answer="Jupiter")

    def test_markers_are_case_insensitive(self):
        assert parse_pairs("q: lower\na: case") == [Card(question="lower", answer="case")]

    def test_crlf_line_endings(self):
        text = "Q: One?\r\nA: Yes.\r\n\r\nQ: Two?\r\nA: No."
        assert [c.answer for c in parse_cards(text)] == ["Yes.", "No."]

    def test_preamble_is_ignored(self):
        text = "Here are your flashcards:\n\nQ: Capital of France?\nA: Paris."
        assert parse_cards(text) == [Card(question="Capital of France?", answer="Paris.")]

    def test_pair_with_empty_answer_is_dropped(self):
        text = "Q: Kept?\nA: Yes\n\nQ: Dangling?\nA:"
        assert parse_cards(text) == [Card(question="Kept?", answer="Yes")]

    def test_block_without_markers_adds_no_card(self):
        text = "Q: First?\nA: One\n\nSecond without markers\n\nQ: Third?\nA: Three"
        cards = parse_cards(text)
        assert [c.question for c in cards] == ["First?", "Third?"]


class TestFallbackStrategy:
    """Blank-line blocks searched independently, only when the scan finds nothing."""

    def test_answer_before_question_uses_fallback(self):
        text = "A: The Sun.\nQ: What does the Earth orbit?"
        assert parse_pairs(text) == []
        assert parse_cards(text) == [
            Card(question="What does the Earth orbit?", answer="The Sun.")
        ]

    def test_non_adjacent_markers_in_block(self):
        text = "Q: Boiling point of water?\nNote: at sea level\nA: 100 C"
        assert parse_blocks(text) == [
            Card(question="Boiling point of water?", answer="100 C")
        ]

    def test_block_without_both_markers_is_skipped(self):
        text = "A: orphan answer\n\nA: 1\nQ: one?"
        assert parse_blocks(text) == [Card(question="one?", answer="1")]

    def test_fallback_not_used_once_primary_matches(self):
        # The second block is only recoverable by the fallback and must stay unparsed
        text = "Q: Primary?\nA: yes\n\nA: late answer\nQ: Reversed?"
        cards = parse_cards(text)
        assert [c.question for c in cards] == ["Primary?"]

    def test_strategy_order_is_respected(self):
        calls = []

        def first(text):
            calls.append("first")
            return [Card(question="a", answer="b")]

        def second(text):
            calls.append("second")
            return []

        assert parse_cards("anything", strategies=(first, second)) == [
            Card(question="a", answer="b")
        ]
        assert calls == ["first"]


class TestDegenerateInput:

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "   \n\n  ",
            "The mitochondria is the powerhouse of the cell. It produces ATP.",
            "Question: no markers here\nAnswer: none either",
        ],
    )
    def test_no_markers_yields_empty(self, text):
        assert parse_pairs(text) == []
        assert parse_blocks(text) == []
        assert parse_cards(text) == []

    def test_non_string_input_yields_empty(self):
        assert parse_cards(None) == []

    def test_parsing_is_repeatable(self, sample_output):
        assert parse_cards(sample_output) == parse_cards(sample_output)

    def test_cards_are_immutable(self, sample_output):
        card = parse_cards(sample_output)[0]
        with pytest.raises(Exception):
            card.question = "changed"
