"""TextGears grammar API backend."""

from __future__ import annotations

from typing import Any

import aiohttp

from services.correction_service.config import Settings
from services.correction_service.exceptions import BackendUnavailable, DegenerateCorrection
from services.correction_service.implementations.http_backend import HttpCorrectionBackend
from services.correction_service.internal_models import (
    StructuredEdits,
    UpstreamEdit,
    UpstreamResponse,
)
from services.correction_service.languages import to_upstream_code

TEXTGEARS_CONFIDENCE = 80


class TextGearsBackendImpl(HttpCorrectionBackend):
    """TextGears `/grammar` endpoint returning positional errors with suggestions."""

    name = "textgears"

    def __init__(
        self, session: aiohttp.ClientSession, settings: Settings, logger: Any | None = None
    ):
        self.settings = settings
        self.timeout_seconds = settings.UPSTREAM_TIMEOUT_SECONDS
        self.api_key = settings.TEXTGEARS_API_KEY.get_secret_value()
        super().__init__(session, logger)

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def fetch(self, text: str, language: str) -> UpstreamResponse:
        url = f"{self.settings.TEXTGEARS_BASE_URL.rstrip('/')}/grammar"
        params = {
            "text": text,
            "language": to_upstream_code(language, auto_value="en-US"),
            "ai": "false",
            "key": self.api_key,
        }

        async with self.session.get(url, params=params, timeout=self._client_timeout()) as response:
            body = await response.text()
            self.raise_for_status(response.status, body)

        data = self.parse_json(body)
        if not isinstance(data, dict):
            raise DegenerateCorrection(self.name, "unexpected payload shape")
        if data.get("status") is False:
            raise BackendUnavailable(
                self.name, f"request rejected: {data.get('description') or data.get('error_code')}"
            )

        # Errors are nested under "response" in current API versions
        container = data.get("response") if isinstance(data.get("response"), dict) else data
        errors = container.get("errors", [])
        if not isinstance(errors, list):
            raise DegenerateCorrection(self.name, "errors is not a list")

        candidates = [
            candidate
            for candidate in (self._to_candidate(error) for error in errors)
            if candidate is not None
        ]
        return StructuredEdits(candidates=candidates, language_code=params["language"])

    def _to_candidate(self, error: dict[str, Any]) -> UpstreamEdit | None:
        better = error.get("better") or []
        if not better:
            return None
        try:
            offset = int(error["offset"])
            length = int(error["length"])
        except (KeyError, TypeError, ValueError) as e:
            raise DegenerateCorrection(self.name, f"malformed error entry: {error!r}") from e

        description = error.get("description", "")
        if isinstance(description, dict):
            description = description.get("en") or next(iter(description.values()), "")

        return UpstreamEdit(
            offset=offset,
            length=length,
            replacement=str(better[0]),
            category=str(error.get("type", "")),
            message=str(description),
            confidence=TEXTGEARS_CONFIDENCE,
        )
