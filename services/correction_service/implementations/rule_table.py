"""Local correction rules: pattern substitutions plus generic formatting passes.

All matching happens against the original text. Every match is narrowed to
the smallest run of differing tokens, so "He don't" produces the single
edit "don't" -> "doesn't". Overlapping matches are resolved in table order:
a match is dropped when an earlier rule already claimed any of its span.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from services.correction_service.implementations.text_diff_engine import tokenize
from services.correction_service.internal_models import EditCategory, UpstreamEdit


@dataclass(frozen=True)
class PatternRule:
    pattern: re.Pattern[str]
    replacement: str
    category: EditCategory
    message: str
    confidence: int


def _rule(
    regex: str,
    replacement: str,
    category: EditCategory,
    message: str,
    confidence: int = 90,
    flags: int = re.IGNORECASE,
) -> PatternRule:
    return PatternRule(re.compile(regex, flags), replacement, category, message, confidence)


SUBJECT_VERB_RULES: tuple[PatternRule, ...] = (
    _rule(r"\bI\s+(?:are|is)\b", "I am", EditCategory.GRAMMAR, '"I" takes "am"', 95),
    _rule(r"\b(he|she|it)\s+are\b", r"\1 is", EditCategory.GRAMMAR,
          'Singular subjects take "is"', 95),
    _rule(r"\b(he|she|it)\s+were\b", r"\1 was", EditCategory.GRAMMAR,
          'Singular subjects take "was"', 85),
    _rule(r"\b(he|she|it)\s+don't\b", r"\1 doesn't", EditCategory.GRAMMAR,
          'Singular subjects use "doesn\'t"', 95),
    _rule(r"\b(he|she|it)\s+haven't\b", r"\1 hasn't", EditCategory.GRAMMAR,
          'Singular subjects use "hasn\'t"', 95),
    _rule(r"\b(he|she|it)\s+weren't\b", r"\1 wasn't", EditCategory.GRAMMAR,
          'Singular subjects use "wasn\'t"', 90),
    _rule(r"\b(they|we)\s+is\b", r"\1 are", EditCategory.GRAMMAR,
          'Plural subjects take "are"', 95),
    _rule(r"\b(they|we)\s+was\b", r"\1 were", EditCategory.GRAMMAR,
          'Plural subjects take "were"', 95),
    _rule(r"\b(they|we)\s+doesn't\b", r"\1 don't", EditCategory.GRAMMAR,
          'Plural subjects use "don\'t"', 95),
    _rule(r"\b(they|we)\s+hasn't\b", r"\1 haven't", EditCategory.GRAMMAR,
          'Plural subjects use "haven\'t"', 95),
    _rule(r"\b(they|we)\s+wasn't\b", r"\1 weren't", EditCategory.GRAMMAR,
          'Plural subjects use "weren\'t"', 95),
    _rule(r"\byou\s+is\b", "you are", EditCategory.GRAMMAR, '"You" takes "are"', 95),
    _rule(r"\byou\s+was\b", "you were", EditCategory.GRAMMAR, '"You" takes "were"', 95),
    _rule(r"\byou\s+doesn't\b", "you don't", EditCategory.GRAMMAR, '"You" uses "don\'t"', 95),
    _rule(r"\byou\s+hasn't\b", "you haven't", EditCategory.GRAMMAR, '"You" uses "haven\'t"', 95),
)

VERB_FORM_RULES: tuple[PatternRule, ...] = (
    _rule(r"\b(have|has|had)\s+went\b", r"\1 gone", EditCategory.TENSE,
          'Past participle of "go" is "gone"', 95),
    _rule(r"\b(have|has|had)\s+came\b", r"\1 come", EditCategory.TENSE,
          'Past participle of "come" is "come"', 95),
    _rule(r"\b(have|has|had)\s+did\b", r"\1 done", EditCategory.TENSE,
          'Past participle of "do" is "done"', 95),
    _rule(r"\bif\s+I\s+would\s+have\s+knew\b", "if I had known", EditCategory.TENSE,
          'Third conditional uses "had known"', 85),
    _rule(r"\b(would|could|should|must|might)\s+of\b", r"\1 have", EditCategory.GRAMMAR,
          'Use "have" not "of" after modal verbs', 95),
)

PRONOUN_RULES: tuple[PatternRule, ...] = (
    _rule(r"\b(between|for|with)\s+you\s+and\s+I\b", r"\1 you and me", EditCategory.PRONOUN,
          'Use "me" after prepositions', 90),
    _rule(r"\bmyself\s+(?:am|is|are)\b", "I am", EditCategory.PRONOUN,
          'Use "I" not "myself" as subject', 80),
)

# "a"/"an" follow the sound, so silent-h and "you"-sound words are listed first
ARTICLE_RULES: tuple[PatternRule, ...] = (
    _rule(r"\ba\s+(hour|honest|honor|honour|heir)", r"an \1", EditCategory.ARTICLE,
          'Use "an" before a silent "h"', 90),
    _rule(r"\ban\s+(university|user|uniform|unique|european|one)\b", r"a \1",
          EditCategory.ARTICLE, 'Use "a" before a consonant sound', 90),
    _rule(r"\ba\s+(?!(?:uni|use|usu|ure|uro|eu|one|once)\w*)([aeiou]\w*)", r"an \1",
          EditCategory.ARTICLE, 'Use "an" before vowel sounds', 85),
    _rule(r"\ban\s+(?!(?:hour|honest|honor|honour|heir|herb)\w*)([b-df-hj-np-tv-z]\w*)",
          r"a \1", EditCategory.ARTICLE, 'Use "a" before consonant sounds', 85),
)

PREPOSITION_RULES: tuple[PatternRule, ...] = (
    _rule(r"\bdiscuss\s+about\b", "discuss", EditCategory.PREPOSITION,
          '"Discuss" does not take "about"', 90),
    _rule(r"\bmarried\s+with\b", "married to", EditCategory.PREPOSITION,
          'Use "married to"', 85),
    _rule(r"\bdifferent\s+than\b", "different from", EditCategory.PREPOSITION,
          'Use "different from"', 80),
    _rule(r"\binterested\s+about\b", "interested in", EditCategory.PREPOSITION,
          'Use "interested in"', 90),
    _rule(r"\bdepend\s+of\b", "depend on", EditCategory.PREPOSITION, 'Use "depend on"', 90),
    _rule(r"\blisten\s+music\b", "listen to music", EditCategory.PREPOSITION,
          'Use "listen to"', 90),
)

# Literal whole-word substitutions
MISSPELLINGS: dict[str, str] = {
    "teh": "the",
    "hte": "the",
    "adn": "and",
    "recieve": "receive",
    "belive": "believe",
    "acheive": "achieve",
    "begining": "beginning",
    "definately": "definitely",
    "seperate": "separate",
    "occurance": "occurrence",
    "occurrance": "occurrence",
    "comitted": "committed",
    "alot": "a lot",
    "tommorow": "tomorrow",
    "untill": "until",
    "writting": "writing",
    "thier": "their",
    "freind": "friend",
    "wich": "which",
    "whcih": "which",
}

MISWORDINGS: dict[str, str] = {
    "youre": "you're",
    "dont": "don't",
    "cant": "can't",
    "im": "I'm",
    "its a": "it's a",
}

STYLE_RULES: tuple[PatternRule, ...] = (
    _rule(r"\breturn\s+back\b", "return", EditCategory.STYLE, 'Remove redundant "back"', 80),
    _rule(r"\brepeat\s+again\b", "repeat", EditCategory.STYLE, 'Remove redundant "again"', 80),
    _rule(r"\bfree\s+gift\b", "gift", EditCategory.STYLE, "Gifts are inherently free", 75),
    _rule(r"\b(\w+)\s+\1\b", r"\1", EditCategory.STYLE, "Remove repeated word", 80),
)


def _literal_rules() -> tuple[PatternRule, ...]:
    rules = [
        _rule(rf"\b{re.escape(wrong)}\b", right, EditCategory.SPELLING,
              f'Correct spelling is "{right}"', 95)
        for wrong, right in MISSPELLINGS.items()
    ]
    rules += [
        _rule(rf"\b{re.escape(wrong)}\b", right, EditCategory.GRAMMAR,
              f'Use "{right}"', 85)
        for wrong, right in MISWORDINGS.items()
    ]
    return tuple(rules)


RULES: tuple[PatternRule, ...] = (
    SUBJECT_VERB_RULES
    + VERB_FORM_RULES
    + PRONOUN_RULES
    + ARTICLE_RULES
    + PREPOSITION_RULES
    + _literal_rules()
    + STYLE_RULES
)

_SPACE_RUN = re.compile(r"[ \t]{2,}")
_LEADING_WS = re.compile(r"^\s+")
_TRAILING_WS = re.compile(r"\s+$")
_SENTENCE_START = re.compile(r"[.!?]\s+([a-z])")
_LOWERCASE_I = re.compile(r"(?<![\w.'’])i(?=[\s,;:!?'’]|$)")
_LAST_WORD = re.compile(r"([\w.]+)\.$")

ABBREVIATIONS = frozenset({"e.g", "i.e", "etc", "vs", "mr", "mrs", "ms", "dr", "approx"})


def match_case(source: str, replacement: str) -> str:
    """Carry the capitalization of the matched text over to its replacement."""
    if not replacement or not source:
        return replacement
    if len(source) > 1 and source.isupper():
        return replacement.upper()
    if source[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement


def narrow_span(
    text: str, start: int, end: int, replacement: str
) -> Optional[tuple[int, int, str]]:
    """Trim tokens shared by the matched text and its replacement.

    Returns (start, end, replacement) for the differing middle part, or None
    when the replacement changes nothing.
    """
    before = tokenize(text[start:end])
    after = tokenize(replacement)

    prefix = 0
    while prefix < min(len(before), len(after)) and before[prefix] == after[prefix]:
        prefix += 1

    suffix = 0
    while (
        suffix < min(len(before), len(after)) - prefix
        and before[-1 - suffix] == after[-1 - suffix]
    ):
        suffix += 1

    middle_before = before[prefix : len(before) - suffix]
    middle_after = after[prefix : len(after) - suffix]
    if not middle_before and not middle_after:
        return None

    new_start = start + sum(len(token) for token in before[:prefix])
    new_end = new_start + sum(len(token) for token in middle_before)
    return new_start, new_end, "".join(middle_after)


def _overlaps(start: int, end: int, claimed: list[tuple[int, int]]) -> bool:
    for claimed_start, claimed_end in claimed:
        if start < claimed_end and claimed_start < end:
            return True
        # Two edits cannot both replace text at the same position
        if start == claimed_start and (end > start or claimed_end > claimed_start):
            return True
    return False


def find_pattern_edits(text: str, rules: tuple[PatternRule, ...] = RULES) -> list[UpstreamEdit]:
    """Apply every rule to `text`; earlier rules win on overlap."""
    claimed: list[tuple[int, int]] = []
    edits: list[UpstreamEdit] = []

    for rule in rules:
        for match in rule.pattern.finditer(text):
            replacement = match_case(match.group(0), match.expand(rule.replacement))
            narrowed = narrow_span(text, match.start(), match.end(), replacement)
            if narrowed is None:
                continue
            start, end, new_text = narrowed
            if _overlaps(start, end, claimed):
                continue
            claimed.append((start, end))
            edits.append(
                UpstreamEdit(
                    offset=start,
                    length=end - start,
                    replacement=new_text,
                    category=rule.category.value,
                    message=rule.message,
                    confidence=rule.confidence,
                )
            )
    return edits


def _whitespace_edits(text: str, claimed: list[tuple[int, int]]) -> list[UpstreamEdit]:
    edits: list[UpstreamEdit] = []
    spans: list[tuple[int, int, str, str]] = []

    leading = _LEADING_WS.search(text)
    if leading:
        spans.append((leading.start(), leading.end(), "", "Removed leading whitespace"))
    trailing = _TRAILING_WS.search(text)
    if trailing and (not leading or trailing.start() >= leading.end()):
        spans.append((trailing.start(), trailing.end(), "", "Removed trailing whitespace"))
    for match in _SPACE_RUN.finditer(text):
        spans.append((match.start(), match.end(), " ", "Collapsed repeated spaces"))

    for start, end, replacement, message in spans:
        if _overlaps(start, end, claimed):
            continue
        claimed.append((start, end))
        edits.append(
            UpstreamEdit(
                offset=start,
                length=end - start,
                replacement=replacement,
                category=EditCategory.FORMATTING.value,
                message=message,
                confidence=100,
            )
        )
    return edits


def _capitalization_positions(text: str) -> dict[int, str]:
    positions: dict[int, str] = {}

    for match in _LOWERCASE_I.finditer(text):
        positions[match.start()] = 'Capitalize the pronoun "I"'

    stripped = text.lstrip()
    if stripped and stripped[0].islower():
        positions[len(text) - len(stripped)] = "Capitalize the first letter of a sentence"

    for match in _SENTENCE_START.finditer(text):
        last_word = _LAST_WORD.search(text[: match.start() + 1])
        if last_word and last_word.group(1).lower() in ABBREVIATIONS:
            continue
        positions[match.start(1)] = "Capitalize the first letter of a sentence"

    return dict(sorted(positions.items()))


def _capitalize_edits(
    text: str, edits: list[UpstreamEdit], claimed: list[tuple[int, int]]
) -> list[UpstreamEdit]:
    """Capitalize sentence starts, folding into an edit that already starts there."""
    result = list(edits)
    for position, message in _capitalization_positions(text).items():
        starting_here = next(
            (i for i, edit in enumerate(result) if edit.offset == position and edit.length > 0),
            None,
        )
        if starting_here is not None:
            edit = result[starting_here]
            if edit.replacement and edit.replacement[0].islower():
                result[starting_here] = edit.model_copy(
                    update={"replacement": edit.replacement[0].upper() + edit.replacement[1:]}
                )
            continue
        if _overlaps(position, position + 1, claimed):
            continue
        claimed.append((position, position + 1))
        result.append(
            UpstreamEdit(
                offset=position,
                length=1,
                replacement=text[position].upper(),
                category=EditCategory.FORMATTING.value,
                message=message,
                confidence=100,
            )
        )
    return result


def find_rule_edits(text: str) -> list[UpstreamEdit]:
    """All rule-table edits for `text`, non-overlapping, in no particular order."""
    edits = find_pattern_edits(text)
    claimed = [(edit.offset, edit.offset + edit.length) for edit in edits]
    edits += _whitespace_edits(text, claimed)
    return _capitalize_edits(text, edits, claimed)
