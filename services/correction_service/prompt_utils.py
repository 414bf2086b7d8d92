"""Prompt construction and output cleanup for hosted text-generation models."""

from __future__ import annotations

import re

CORRECTION_PROMPT_TEMPLATE = (
    "Please fix all grammar, spelling, and punctuation errors in this text. "
    "Return only the corrected version:\n\n"
    '"{text}"\n\n'
    "Corrected text:"
)

# Boilerplate some models put in front of the answer
ANSWER_PREFIXES: tuple[str, ...] = (
    "Here is the corrected text:",
    "The corrected version is:",
    "Corrected sentence:",
    "Corrected text:",
    "Professional version:",
    "Fixed version:",
    "Corrected:",
    "Fixed:",
    "Output:",
    "Result:",
    "Answer:",
)

_NEWLINES = re.compile(r"\n+")

# Template lines that never contain the user text
_INSTRUCTION_LINES: tuple[str, ...] = tuple(
    line.strip()
    for line in CORRECTION_PROMPT_TEMPLATE.split("\n")
    if line.strip() and "{text}" not in line
)


def build_correction_prompt(text: str) -> str:
    return CORRECTION_PROMPT_TEMPLATE.format(text=text)


def _strip_prompt_echo(output: str) -> str:
    for line in _INSTRUCTION_LINES:
        if line in output:
            output = output.replace(line, "", 1).strip()
    return output


def _strip_prefixes(output: str) -> str:
    stripped = True
    while stripped:
        stripped = False
        for prefix in ANSWER_PREFIXES:
            if output.lower().startswith(prefix.lower()):
                output = output[len(prefix) :].strip()
                stripped = True
    return output


def _is_quote_wrapped(value: str) -> bool:
    return len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"')


def _strip_wrapping_quotes(output: str, original: str | None) -> str:
    # Quotes that were part of the input are kept
    if original is not None and _is_quote_wrapped(original.strip()):
        return output
    if _is_quote_wrapped(output):
        return output[1:-1]
    return output


def extract_corrected_text(generated: str, prompt: str, original: str | None = None) -> str:
    """
    Recover the corrected text from raw model output.

    Removes an echoed prompt, known answer prefixes and quotes wrapping the
    whole answer, unless `original` is itself wrapped in quotes, then folds
    newlines into single spaces.
    """
    if not generated:
        return ""

    output = generated.strip()
    # Text-generation endpoints often return prompt + completion
    if output.startswith(prompt.strip()):
        output = output[len(prompt.strip()) :].strip()
    else:
        output = _strip_prompt_echo(output)

    output = _strip_prefixes(output)
    output = _strip_wrapping_quotes(output.strip(), original)
    return _NEWLINES.sub(" ", output).strip()
