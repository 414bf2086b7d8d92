"""Shared plumbing for backends that call an upstream HTTP API."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import aiohttp
from grammarfix_service_libs.logging_utils import create_service_logger

from services.correction_service.exceptions import (
    BackendAuthError,
    BackendRateLimited,
    BackendTimeout,
    BackendUnavailable,
    DegenerateCorrection,
)
from services.correction_service.implementations.upstream_reconciler import reconcile
from services.correction_service.internal_models import CorrectionResult, UpstreamResponse
from services.correction_service.languages import resolve_language
from services.correction_service.protocols import CorrectionBackendProtocol


class HttpCorrectionBackend(CorrectionBackendProtocol):
    """Base class: availability check, status mapping and reconciliation.

    Subclasses implement `fetch`, which talks to the upstream API and maps
    its payload into an UpstreamResponse.
    """

    name: str = "http"
    timeout_seconds: float = 30.0

    def __init__(self, session: aiohttp.ClientSession, logger: Any | None = None):
        self.session = session
        self.logger = logger or create_service_logger(f"correction_service.backend.{self.name}")

    def is_available(self) -> bool:
        return True

    async def fetch(self, text: str, language: str) -> UpstreamResponse:
        raise NotImplementedError

    async def try_correct(self, text: str, language: str) -> CorrectionResult:
        if not self.is_available():
            raise BackendUnavailable(self.name, "credential not configured")

        try:
            upstream = await self.fetch(text, language)
        except asyncio.TimeoutError as e:
            raise BackendTimeout(self.name, self.timeout_seconds) from e
        except aiohttp.ClientError as e:
            raise BackendUnavailable(self.name, f"transport error: {e}") from e

        return reconcile(text, upstream, resolve_language(language), self.name)

    def _client_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.timeout_seconds)

    def raise_for_status(self, status: int, body: str) -> None:
        """Map a non-2xx upstream status to the backend failure taxonomy."""
        if 200 <= status < 300:
            return
        snippet = body[:200]
        if status in (401, 403):
            raise BackendAuthError(self.name, f"HTTP {status}: {snippet}")
        if status == 429:
            raise BackendRateLimited(self.name, f"HTTP 429: {snippet}")
        raise BackendUnavailable(self.name, f"HTTP {status}: {snippet}")

    def parse_json(self, body: str) -> Any:
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise DegenerateCorrection(self.name, f"invalid JSON payload: {e}") from e
