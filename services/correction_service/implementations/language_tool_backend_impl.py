"""LanguageTool public API backend."""

from __future__ import annotations

from typing import Any

import aiohttp

from services.correction_service.config import Settings
from services.correction_service.exceptions import DegenerateCorrection
from services.correction_service.implementations.http_backend import HttpCorrectionBackend
from services.correction_service.implementations.upstream_reconciler import utf16_index_map
from services.correction_service.internal_models import (
    StructuredEdits,
    UpstreamEdit,
    UpstreamResponse,
)
from services.correction_service.languages import to_upstream_code

LANGUAGE_TOOL_CONFIDENCE = 80


class LanguageToolBackendImpl(HttpCorrectionBackend):
    """LanguageTool `/check` endpoint. Needs no credential; can be disabled in config."""

    name = "languagetool"

    def __init__(
        self, session: aiohttp.ClientSession, settings: Settings, logger: Any | None = None
    ):
        self.settings = settings
        self.timeout_seconds = settings.UPSTREAM_TIMEOUT_SECONDS
        super().__init__(session, logger)

    def is_available(self) -> bool:
        return self.settings.LANGUAGE_TOOL_ENABLED

    async def fetch(self, text: str, language: str) -> UpstreamResponse:
        url = f"{self.settings.LANGUAGE_TOOL_URL.rstrip('/')}/check"
        form = {
            "text": text,
            "language": to_upstream_code(language, auto_value="auto"),
            "enabledOnly": "false",
        }

        async with self.session.post(
            url,
            data=form,
            headers={"Accept": "application/json"},
            timeout=self._client_timeout(),
        ) as response:
            body = await response.text()
            self.raise_for_status(response.status, body)

        data = self.parse_json(body)
        matches = data.get("matches") if isinstance(data, dict) else None
        if not isinstance(matches, list):
            raise DegenerateCorrection(self.name, "response has no matches list")

        detected = (data.get("language") or {}).get("code")
        # Match offsets count UTF-16 code units
        positions = utf16_index_map(text)
        candidates = [
            candidate
            for candidate in (self._to_candidate(match, positions) for match in matches)
            if candidate is not None
        ]
        return StructuredEdits(candidates=candidates, language_code=detected)

    def _to_candidate(
        self, match: dict[str, Any], positions: dict[int, int]
    ) -> UpstreamEdit | None:
        replacements = match.get("replacements") or []
        if not replacements:
            return None
        try:
            offset = int(match["offset"])
            length = int(match["length"])
        except (KeyError, TypeError, ValueError) as e:
            raise DegenerateCorrection(self.name, f"malformed match: {match!r}") from e

        start = positions.get(offset)
        end = positions.get(offset + length)
        if start is None or end is None or end < start:
            self.logger.warning(
                "Dropping match that does not fall on character boundaries",
                backend=self.name,
                offset=offset,
                length=length,
            )
            return None

        rule = match.get("rule") or {}
        category = (rule.get("category") or {}).get("id") or rule.get("issueType") or ""
        return UpstreamEdit(
            offset=start,
            length=end - start,
            replacement=str(replacements[0].get("value", "")),
            category=str(category),
            message=str(match.get("message", "")),
            confidence=LANGUAGE_TOOL_CONFIDENCE,
        )
