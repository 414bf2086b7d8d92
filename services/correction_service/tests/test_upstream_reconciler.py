"""Unit tests for turning upstream responses into correction results."""

from __future__ import annotations

import pytest

from services.correction_service.implementations.upstream_reconciler import (
    accept_structured_edits,
    reconcile,
    utf16_index_map,
)
from services.correction_service.internal_models import (
    EditCategory,
    LanguageInfo,
    ReplacementText,
    StructuredEdits,
    UpstreamEdit,
)

ENGLISH = LanguageInfo(name="English (US)", code="en-US")


class TestAcceptStructuredEdits:
    """Selection rules applied to positional upstream candidates."""

    def test_out_of_range_candidates_are_skipped(self) -> None:
        candidates = [
            UpstreamEdit(offset=0, length=3, replacement="The"),
            UpstreamEdit(offset=10, length=5, replacement="nope"),
            UpstreamEdit(offset=-1, length=1, replacement="x"),
        ]

        accepted = accept_structured_edits("teh cat", candidates)

        assert [edit.replacement for edit in accepted] == ["The"]

    def test_no_op_candidates_are_skipped(self) -> None:
        accepted = accept_structured_edits(
            "the cat", [UpstreamEdit(offset=0, length=3, replacement="the")]
        )
        assert accepted == []

    def test_overlap_keeps_candidate_visited_first(self) -> None:
        # Arrange: "cat sat" (4..11) and "sat" (8..11) overlap; higher offset is visited first
        text = "the cat sat"
        candidates = [
            UpstreamEdit(offset=4, length=7, replacement="dog slept"),
            UpstreamEdit(offset=8, length=3, replacement="sits"),
        ]

        # Act
        accepted = accept_structured_edits(text, candidates)

        # Assert
        assert [(edit.offset, edit.replacement) for edit in accepted] == [(8, "sits")]

    def test_longer_span_wins_on_equal_offset(self) -> None:
        candidates = [
            UpstreamEdit(offset=0, length=3, replacement="A"),
            UpstreamEdit(offset=0, length=7, replacement="B"),
        ]
        accepted = accept_structured_edits("teh cat", candidates)
        assert [(edit.length, edit.replacement) for edit in accepted] == [(7, "B")]

    def test_upstream_category_labels_are_mapped(self) -> None:
        accepted = accept_structured_edits(
            "teh cat", [UpstreamEdit(offset=0, length=3, replacement="the", category="TYPOS")]
        )
        assert accepted[0].category == EditCategory.SPELLING
        assert accepted[0].original_span == "teh"


class TestReconcile:
    def test_structured_edits_are_applied_to_original(self) -> None:
        response = StructuredEdits(
            candidates=[
                UpstreamEdit(offset=3, length=5, replacement="doesn't", category="grammar"),
                UpstreamEdit(offset=0, length=2, replacement="She"),
            ]
        )

        result = reconcile("He don't like pizza", response, ENGLISH, "sapling")

        assert result.corrected_text == "She doesn't like pizza"
        assert [edit.offset for edit in result.edits] == [3, 0]
        assert result.service_used == "sapling"
        assert result.statistics.total_candidates == 2
        assert result.statistics.applied_count == 2

    def test_replacement_text_is_diffed(self) -> None:
        result = reconcile(
            "She go to school.", ReplacementText(text="She goes to school."), ENGLISH, "hf"
        )

        assert result.corrected_text == "She goes to school."
        assert len(result.edits) == 1
        assert result.edits[0].original_span == "go"

    def test_identical_replacement_means_no_changes(self) -> None:
        result = reconcile("All good.", ReplacementText(text="All good."), ENGLISH, "hf")

        assert result.edits == []
        assert result.has_changes is False

    def test_unknown_response_type_is_rejected(self) -> None:
        with pytest.raises(TypeError):
            reconcile("text", {"text": "other"}, ENGLISH, "hf")  # type: ignore[arg-type]


class TestUtf16IndexMap:
    def test_ascii_boundaries_are_identity(self) -> None:
        assert utf16_index_map("abc") == {0: 0, 1: 1, 2: 2, 3: 3}

    def test_astral_character_takes_two_code_units(self) -> None:
        positions = utf16_index_map("a😀b")

        assert positions == {0: 0, 1: 1, 3: 2, 4: 3}
        assert 2 not in positions
