"""Sapling grammar API backend."""

from __future__ import annotations

import uuid
from typing import Any

import aiohttp

from services.correction_service.config import Settings
from services.correction_service.exceptions import DegenerateCorrection
from services.correction_service.implementations.http_backend import HttpCorrectionBackend
from services.correction_service.internal_models import (
    StructuredEdits,
    UpstreamEdit,
    UpstreamResponse,
)

SAPLING_CONFIDENCE = 85


class SaplingBackendImpl(HttpCorrectionBackend):
    """Sapling `/edits` endpoint; edits are positioned relative to their sentence."""

    name = "sapling"

    def __init__(
        self, session: aiohttp.ClientSession, settings: Settings, logger: Any | None = None
    ):
        self.settings = settings
        self.timeout_seconds = settings.UPSTREAM_TIMEOUT_SECONDS
        self.api_key = settings.SAPLING_API_KEY.get_secret_value()
        super().__init__(session, logger)

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def fetch(self, text: str, language: str) -> UpstreamResponse:
        url = f"{self.settings.SAPLING_BASE_URL.rstrip('/')}/edits"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {"key": self.api_key, "text": text, "session_id": str(uuid.uuid4())}

        async with self.session.post(
            url, json=payload, headers=headers, timeout=self._client_timeout()
        ) as response:
            body = await response.text()
            self.raise_for_status(response.status, body)

        data = self.parse_json(body)
        if not isinstance(data, dict) or not isinstance(data.get("edits", []), list):
            raise DegenerateCorrection(self.name, "response has no edits list")

        return StructuredEdits(
            candidates=[self._to_candidate(edit) for edit in data.get("edits", [])]
        )

    def _to_candidate(self, edit: dict[str, Any]) -> UpstreamEdit:
        try:
            sentence_start = int(edit.get("sentence_start", 0))
            start = int(edit["start"])
            end = int(edit["end"])
        except (KeyError, TypeError, ValueError) as e:
            raise DegenerateCorrection(self.name, f"malformed edit: {edit!r}") from e

        category = edit.get("error_type") or edit.get("general_error_type") or ""
        return UpstreamEdit(
            offset=sentence_start + start,
            length=end - start,
            replacement=str(edit.get("replacement", "")),
            category=str(category),
            message=str(edit.get("general_error_type") or ""),
            confidence=SAPLING_CONFIDENCE,
        )
