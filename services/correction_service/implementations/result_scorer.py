"""Normalization and scoring of correction results.

Pure functions: they take a CorrectionResult produced by a backend and
return a new one with cleaned-up edits, statistics and analysis filled in.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from services.correction_service.internal_models import (
    CorrectionAnalysis,
    CorrectionEdit,
    CorrectionResult,
    CorrectionStatistics,
    EditCategory,
)

# Upstream category labels (LanguageTool categories/issue types, TextGears
# error types, Sapling error types) mapped onto EditCategory
UPSTREAM_CATEGORY_MAP: dict[str, EditCategory] = {
    "typos": EditCategory.SPELLING,
    "misspelling": EditCategory.SPELLING,
    "spelling": EditCategory.SPELLING,
    "spell": EditCategory.SPELLING,
    "r:spell": EditCategory.SPELLING,
    "r:orth": EditCategory.SPELLING,
    "punctuation": EditCategory.PUNCTUATION,
    "typography": EditCategory.PUNCTUATION,
    "r:punct": EditCategory.PUNCTUATION,
    "m:punct": EditCategory.PUNCTUATION,
    "u:punct": EditCategory.PUNCTUATION,
    "grammar": EditCategory.GRAMMAR,
    "agreement": EditCategory.GRAMMAR,
    "r:verb:sva": EditCategory.GRAMMAR,
    "r:verb:form": EditCategory.GRAMMAR,
    "r:verb:tense": EditCategory.TENSE,
    "tense": EditCategory.TENSE,
    "r:pron": EditCategory.PRONOUN,
    "m:pron": EditCategory.PRONOUN,
    "r:det": EditCategory.ARTICLE,
    "m:det": EditCategory.ARTICLE,
    "u:det": EditCategory.ARTICLE,
    "r:prep": EditCategory.PREPOSITION,
    "m:prep": EditCategory.PREPOSITION,
    "u:prep": EditCategory.PREPOSITION,
    "collocations": EditCategory.COLLOCATION,
    "confused_words": EditCategory.COLLOCATION,
    "idioms": EditCategory.IDIOM,
    "style": EditCategory.STYLE,
    "redundancy": EditCategory.STYLE,
    "plain_english": EditCategory.STYLE,
    "duplication": EditCategory.STYLE,
    "whitespace": EditCategory.FORMATTING,
    "casing": EditCategory.FORMATTING,
    "capitalization": EditCategory.FORMATTING,
}


def map_upstream_category(label: str | None) -> EditCategory:
    """Map a raw upstream label to an EditCategory; unknown labels become Other."""
    if not label:
        return EditCategory.OTHER
    key = label.strip().lower()
    for candidate in (key, key.replace(" ", "_")):
        if candidate in UPSTREAM_CATEGORY_MAP:
            return UPSTREAM_CATEGORY_MAP[candidate]
    for category in EditCategory:
        if category.value.lower() == key:
            return category
    return EditCategory.OTHER


def normalize_edits(original: str, edits: Iterable[CorrectionEdit]) -> list[CorrectionEdit]:
    """Drop out-of-range and duplicate edits; order by descending offset."""
    seen: set[tuple[int, int, str]] = set()
    kept: list[CorrectionEdit] = []
    for edit in edits:
        if edit.end > len(original):
            continue
        key = (edit.offset, edit.length, edit.replacement)
        if key in seen:
            continue
        seen.add(key)
        kept.append(edit)
    kept.sort(key=lambda e: (e.offset, e.length), reverse=True)
    return kept


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _consistency(before: int, after: int) -> float:
    if before == 0:
        return 1.0 if after == 0 else 0.0
    return _clamp(1 - abs(after - before) / before)


def _token_similarity(original: str, corrected: str) -> float:
    before = set(original.lower().split())
    after = set(corrected.lower().split())
    union = before | after
    if not union:
        return 1.0
    return len(before & after) / len(union)


def confidence_score(original: str, edits: list[CorrectionEdit]) -> int:
    if not original or not edits:
        return 100
    return round(sum(edit.confidence for edit in edits) / len(edits))


def quality_score(original: str, corrected: str) -> int:
    """Weighted blend of length, word count and token-set consistency, 0-100."""
    if not original:
        return 100
    length_consistency = _consistency(len(original), len(corrected))
    word_consistency = _consistency(len(original.split()), len(corrected.split()))
    similarity = _token_similarity(original, corrected)
    score = 100 * (0.3 * length_consistency + 0.3 * word_consistency + 0.4 * similarity)
    return int(_clamp(round(score), 0, 100))


def category_breakdown(edits: list[CorrectionEdit]) -> dict[EditCategory, int]:
    return dict(Counter(edit.category for edit in edits))


def score_result(result: CorrectionResult, processing_time_ms: int = 0) -> CorrectionResult:
    """Return a copy of `result` with normalized edits, statistics and analysis."""
    edits = normalize_edits(result.original_text, result.edits)
    statistics = CorrectionStatistics(
        total_candidates=max(result.statistics.total_candidates, len(edits)),
        applied_count=len(edits),
        original_length=len(result.original_text),
        corrected_length=len(result.corrected_text),
        processing_time_ms=max(0, processing_time_ms),
    )
    analysis = CorrectionAnalysis(
        confidence_score=confidence_score(result.original_text, edits),
        quality_score=quality_score(result.original_text, result.corrected_text),
        category_breakdown=category_breakdown(edits),
    )
    return result.model_copy(
        update={"edits": edits, "statistics": statistics, "analysis": analysis}
    )
