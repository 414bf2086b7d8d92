"""Turn an UpstreamResponse into a CorrectionResult against the original text."""

from __future__ import annotations

from services.correction_service.implementations.result_scorer import map_upstream_category
from services.correction_service.implementations.text_diff_engine import apply_edits, diff
from services.correction_service.internal_models import (
    CorrectionEdit,
    CorrectionResult,
    CorrectionStatistics,
    LanguageInfo,
    ReplacementText,
    StructuredEdits,
    UpstreamEdit,
    UpstreamResponse,
)


def utf16_index_map(text: str) -> dict[int, int]:
    """Map each UTF-16 code-unit boundary in `text` to its code-point index."""
    boundaries = {0: 0}
    units = 0
    for index, char in enumerate(text, start=1):
        units += 2 if ord(char) > 0xFFFF else 1
        boundaries[units] = index
    return boundaries


def _is_in_range(text: str, candidate: UpstreamEdit) -> bool:
    return (
        candidate.offset >= 0
        and candidate.length >= 0
        and candidate.offset + candidate.length <= len(text)
    )


def accept_structured_edits(text: str, candidates: list[UpstreamEdit]) -> list[CorrectionEdit]:
    """
    Select the applicable candidates, in descending-offset order.

    Candidates are visited by descending offset, longer spans first on ties.
    Out-of-range, no-op and overlapping candidates are skipped; on overlap the
    candidate visited first wins.
    """
    ordered = sorted(candidates, key=lambda c: (c.offset, c.length), reverse=True)
    accepted: list[CorrectionEdit] = []
    boundary = len(text)

    for candidate in ordered:
        if not _is_in_range(text, candidate):
            continue
        end = candidate.offset + candidate.length
        span = text[candidate.offset : end]
        if span == candidate.replacement:
            continue
        if end > boundary:
            continue

        accepted.append(
            CorrectionEdit(
                original_span=span,
                replacement=candidate.replacement,
                offset=candidate.offset,
                length=candidate.length,
                category=map_upstream_category(candidate.category),
                message=candidate.message or f'"{span}" → "{candidate.replacement}"',
                confidence=candidate.confidence,
            )
        )
        boundary = candidate.offset

    return accepted


def reconcile(
    text: str,
    response: UpstreamResponse,
    language: LanguageInfo,
    service_used: str,
) -> CorrectionResult:
    """Build the unscored CorrectionResult for either upstream response shape."""
    if isinstance(response, StructuredEdits):
        edits = accept_structured_edits(text, response.candidates)
        corrected = apply_edits(text, edits)
        total_candidates = len(response.candidates)
    elif isinstance(response, ReplacementText):
        edits = diff(text, response.text)
        corrected = response.text
        total_candidates = len(edits)
    else:
        raise TypeError(f"Unsupported upstream response: {type(response).__name__}")

    return CorrectionResult(
        original_text=text,
        corrected_text=corrected,
        edits=edits,
        language=language,
        service_used=service_used,
        statistics=CorrectionStatistics(
            total_candidates=total_candidates,
            applied_count=len(edits),
            original_length=len(text),
            corrected_length=len(corrected),
        ),
    )
