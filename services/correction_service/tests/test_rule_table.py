"""
Tests for the local rule table.

Covers pattern rules, span narrowing, overlap resolution and the generic
whitespace and capitalization passes, through the rule-table backend.
"""

from __future__ import annotations

import pytest

from services.correction_service.implementations.rule_table import (
    find_rule_edits,
    match_case,
    narrow_span,
)
from services.correction_service.implementations.rule_table_backend_impl import (
    RULE_TABLE_BACKEND_NAME,
    RuleTableBackendImpl,
)
from services.correction_service.implementations.text_diff_engine import apply_edits
from services.correction_service.implementations.upstream_reconciler import accept_structured_edits
from services.correction_service.internal_models import EditCategory


@pytest.fixture
def backend() -> RuleTableBackendImpl:
    return RuleTableBackendImpl()


class TestRuleTableBackend:
    """End-to-end behavior of the rule-table backend."""

    async def test_subject_verb_agreement_narrowed_to_verb(
        self, backend: RuleTableBackendImpl
    ) -> None:
        # Act
        result = await backend.try_correct("He don't like pizza", "en")

        # Assert
        assert result.corrected_text == "He doesn't like pizza"
        assert len(result.edits) == 1
        edit = result.edits[0]
        assert edit.original_span == "don't"
        assert edit.replacement == "doesn't"
        assert edit.offset == 3
        assert edit.category == EditCategory.GRAMMAR
        assert result.service_used == RULE_TABLE_BACKEND_NAME
        assert result.language.code == "en"

    async def test_correct_text_is_left_alone(self, backend: RuleTableBackendImpl) -> None:
        result = await backend.try_correct("I am happy.", "auto")

        assert result.corrected_text == "I am happy."
        assert result.edits == []

    async def test_missing_final_period_is_not_added(self, backend: RuleTableBackendImpl) -> None:
        result = await backend.try_correct("I am happy", "auto")
        assert result.corrected_text == "I am happy"

    async def test_sentence_starts_and_pronoun_are_capitalized(
        self, backend: RuleTableBackendImpl
    ) -> None:
        result = await backend.try_correct("the dog barked. i ran away.", "auto")

        assert result.corrected_text == "The dog barked. I ran away."
        assert {edit.category for edit in result.edits} == {EditCategory.FORMATTING}

    async def test_abbreviation_does_not_start_a_sentence(
        self, backend: RuleTableBackendImpl
    ) -> None:
        result = await backend.try_correct("Bring fruit, e.g. apples.", "auto")
        assert result.corrected_text == "Bring fruit, e.g. apples."

    async def test_whitespace_is_collapsed_and_trimmed(
        self, backend: RuleTableBackendImpl
    ) -> None:
        result = await backend.try_correct("  The cat  sat. ", "auto")
        assert result.corrected_text == "The cat sat."

    async def test_misspellings_keep_capitalization(self, backend: RuleTableBackendImpl) -> None:
        result = await backend.try_correct("Teh answer is definately yes.", "auto")

        assert result.corrected_text == "The answer is definitely yes."
        assert all(edit.category == EditCategory.SPELLING for edit in result.edits)

    async def test_edits_are_in_descending_offset_order(
        self, backend: RuleTableBackendImpl
    ) -> None:
        result = await backend.try_correct("they was late and he don't care", "auto")

        offsets = [edit.offset for edit in result.edits]
        assert offsets == sorted(offsets, reverse=True)
        assert result.corrected_text == "They were late and he doesn't care"


class TestPatternRules:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("She could of won.", "She could have won."),
            ("We have went there.", "We have gone there."),
            ("It was a honest mistake.", "It was an honest mistake."),
            ("She is an university student.", "She is a university student."),
            ("I ate a apple.", "I ate an apple."),
            ("They discuss about it.", "They discuss it."),
            ("Please return back the book.", "Please return the book."),
            ("It is is fine.", "It is fine."),
            ("you was right.", "You were right."),
        ],
    )
    def test_rule_output(self, text: str, expected: str) -> None:
        edits = accept_structured_edits(text, find_rule_edits(text))
        assert apply_edits(text, edits) == expected

    def test_name_followed_by_dont_is_not_changed(self) -> None:
        assert find_rule_edits("Cats don't like water.") == []

    def test_edits_never_overlap(self) -> None:
        text = "i have went to teh  store"
        spans = sorted((e.offset, e.offset + e.length) for e in find_rule_edits(text))
        for (_, end), (start, _) in zip(spans, spans[1:]):
            assert end <= start


class TestHelpers:
    @pytest.mark.parametrize(
        "source, replacement, expected",
        [
            ("teh", "the", "the"),
            ("Teh", "the", "The"),
            ("TEH", "the", "THE"),
            ("I", "me", "Me"),
        ],
    )
    def test_match_case(self, source: str, replacement: str, expected: str) -> None:
        assert match_case(source, replacement) == expected

    def test_narrow_span_trims_shared_tokens(self) -> None:
        text = "they was late"
        assert narrow_span(text, 0, 8, "they were") == (5, 8, "were")

    def test_narrow_span_returns_none_for_no_change(self) -> None:
        assert narrow_span("I am", 0, 4, "I am") is None
