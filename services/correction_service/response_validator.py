"""Validation of whole-text candidates returned by hosted models."""

from __future__ import annotations

from services.correction_service.exceptions import DegenerateCorrection

MIN_CANDIDATE_LENGTH = 3
MAX_LENGTH_RATIO = 2


def validate_candidate(original: str, candidate: str, backend: str) -> str:
    """
    Return the candidate if it is usable as a correction of `original`.

    A candidate identical to the original is valid and means no changes
    were needed.

    Raises:
        DegenerateCorrection: Candidate is empty, shorter than three
            characters, or more than twice as long as the original
    """
    if candidate == original:
        return candidate
    if not candidate or not candidate.strip():
        raise DegenerateCorrection(backend, "empty candidate")
    if len(candidate) < MIN_CANDIDATE_LENGTH:
        raise DegenerateCorrection(backend, f"candidate too short ({len(candidate)} chars)")
    if len(candidate) > MAX_LENGTH_RATIO * len(original):
        raise DegenerateCorrection(
            backend,
            f"candidate length {len(candidate)} exceeds {MAX_LENGTH_RATIO}x "
            f"input length {len(original)}",
        )
    return candidate
