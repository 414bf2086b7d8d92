"""Token-level diff between an original text and a corrected rewrite.

Tokens alternate between whitespace runs and non-whitespace runs, so
joining the tokens of a string gives the string back unchanged. When both
sides tokenize to the same number of tokens the texts are compared in
lockstep; otherwise a single coarse edit covers everything from the first
divergent token to the end of the string.
"""

from __future__ import annotations

import re
import string
from difflib import SequenceMatcher
from typing import Iterable

from services.correction_service.internal_models import CorrectionEdit, EditCategory

TOKEN_PATTERN = re.compile(r"\s+|\S+")

LOCKSTEP_CONFIDENCE = 75
COARSE_CONFIDENCE = 70
SPELLING_SIMILARITY = 0.75

_PUNCTUATION = set(string.punctuation) | {"‘", "’", "“", "”", "…"}


def tokenize(text: str) -> list[str]:
    return TOKEN_PATTERN.findall(text)


def _strip_punctuation(token: str) -> str:
    return "".join(ch for ch in token if ch not in _PUNCTUATION)


def categorize_token_change(original: str, replacement: str) -> tuple[EditCategory, str]:
    """Pick a category and message for a single token replacement."""
    if original.isspace() or replacement.isspace():
        return EditCategory.FORMATTING, "Adjusted spacing"
    if original.casefold() == replacement.casefold():
        return EditCategory.FORMATTING, f'Capitalization: "{original}" → "{replacement}"'
    if _strip_punctuation(original) == _strip_punctuation(replacement):
        return EditCategory.PUNCTUATION, f'Punctuation: "{original}" → "{replacement}"'

    ratio = SequenceMatcher(None, original.lower(), replacement.lower()).ratio()
    if ratio >= SPELLING_SIMILARITY:
        return EditCategory.SPELLING, f'Spelling: "{original}" → "{replacement}"'
    return EditCategory.GRAMMAR, f'Improved: "{original}" → "{replacement}"'


def _coarse_edit(original: str, corrected: str, offset: int) -> CorrectionEdit:
    return CorrectionEdit(
        original_span=original[offset:],
        replacement=corrected[offset:],
        offset=offset,
        length=len(original) - offset,
        category=EditCategory.GRAMMAR,
        message="Rewrote the remainder of the text",
        confidence=COARSE_CONFIDENCE,
    )


def diff(original: str, corrected: str) -> list[CorrectionEdit]:
    """Edits turning `original` into `corrected`, in descending-offset order."""
    if original == corrected:
        return []
    if not original or not corrected:
        return [_coarse_edit(original, corrected, 0)]

    original_tokens = tokenize(original)
    corrected_tokens = tokenize(corrected)

    if len(original_tokens) != len(corrected_tokens):
        offset = 0
        for before, after in zip(original_tokens, corrected_tokens):
            if before != after:
                break
            offset += len(before)
        return [_coarse_edit(original, corrected, offset)]

    edits: list[CorrectionEdit] = []
    offset = 0
    for before, after in zip(original_tokens, corrected_tokens):
        if before != after:
            category, message = categorize_token_change(before, after)
            edits.append(
                CorrectionEdit(
                    original_span=before,
                    replacement=after,
                    offset=offset,
                    length=len(before),
                    category=category,
                    message=message,
                    confidence=LOCKSTEP_CONFIDENCE,
                )
            )
        offset += len(before)

    edits.reverse()
    return edits


def apply_edits(text: str, edits: Iterable[CorrectionEdit]) -> str:
    """Splice non-overlapping edits into `text`, highest offset first."""
    result = text
    for edit in sorted(edits, key=lambda e: e.offset, reverse=True):
        result = result[: edit.offset] + edit.replacement + result[edit.end :]
    return result
