"""Supported languages and language-code helpers."""

from __future__ import annotations

from services.correction_service.internal_models import LanguageInfo

AUTO_LANGUAGE = LanguageInfo(name="Auto-detect", code="auto")

SUPPORTED_LANGUAGES: tuple[LanguageInfo, ...] = (
    AUTO_LANGUAGE,
    LanguageInfo(name="English (General)", code="en"),
    LanguageInfo(name="English (US)", code="en-US"),
    LanguageInfo(name="English (UK)", code="en-GB"),
)

_BY_CODE = {language.code.lower(): language for language in SUPPORTED_LANGUAGES}


def resolve_language(code: str | None) -> LanguageInfo:
    """Known codes resolve to their catalog entry; other tags are passed through as-is."""
    if not code:
        return AUTO_LANGUAGE
    known = _BY_CODE.get(code.strip().lower())
    if known is not None:
        return known
    return LanguageInfo(name=code, code=code)


def to_upstream_code(code: str, auto_value: str = "auto") -> str:
    """Map a client language tag to the regional tag upstream checkers expect."""
    lowered = code.strip().lower()
    if lowered in ("", "auto"):
        return auto_value
    if lowered == "en":
        return "en-US"
    return code
