"""Hugging Face hosted-inference backend."""

from __future__ import annotations

from typing import Any

import aiohttp

from services.correction_service.config import Settings
from services.correction_service.exceptions import (
    BackendUnavailable,
    DegenerateCorrection,
    ModelWarmingUp,
)
from services.correction_service.implementations.http_backend import HttpCorrectionBackend
from services.correction_service.implementations.retry_policy import RetryPolicy
from services.correction_service.internal_models import ReplacementText, UpstreamResponse
from services.correction_service.prompt_utils import (
    build_correction_prompt,
    extract_corrected_text,
)
from services.correction_service.response_validator import validate_candidate


class HuggingFaceBackendImpl(HttpCorrectionBackend):
    """Text-generation model asked to rewrite the input with errors fixed.

    One instance per configured model. A 503 from the inference endpoint
    means the model is still loading; the warm-up policy waits and retries
    before the backend gives up as unavailable.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        settings: Settings,
        model: str,
        retry_policy: RetryPolicy,
        logger: Any | None = None,
    ):
        self.name = f"huggingface:{model}"
        self.model = model
        self.settings = settings
        self.retry_policy = retry_policy
        self.timeout_seconds = settings.HUGGINGFACE_TIMEOUT_SECONDS
        self.api_key = settings.HUGGINGFACE_API_KEY.get_secret_value()
        super().__init__(session, logger)

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def fetch(self, text: str, language: str) -> UpstreamResponse:
        prompt = build_correction_prompt(text)

        try:
            generated = await self.retry_policy.run(
                lambda: self._query_model(prompt, text),
                operation_name=f"{self.name} inference",
            )
        except ModelWarmingUp as e:
            raise BackendUnavailable(self.name, "model still loading after retry") from e

        candidate = extract_corrected_text(generated, prompt, original=text)
        validate_candidate(text, candidate, self.name)
        return ReplacementText(text=candidate)

    def _payload(self, prompt: str, text: str) -> dict[str, Any]:
        return {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": min(len(text) + 100, self.settings.HUGGINGFACE_MAX_NEW_TOKENS),
                "temperature": 0.1,
                "return_full_text": False,
            },
            "options": {"wait_for_model": False, "use_cache": False},
        }

    async def _query_model(self, prompt: str, text: str) -> str:
        url = f"{self.settings.HUGGINGFACE_BASE_URL.rstrip('/')}/{self.model}"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        async with self.session.post(
            url,
            json=self._payload(prompt, text),
            headers=headers,
            timeout=self._client_timeout(),
        ) as response:
            body = await response.text()
            if response.status == 503:
                self.logger.info(f"Model {self.model} is loading", backend=self.name)
                raise ModelWarmingUp(self.name)
            self.raise_for_status(response.status, body)

        return self._generated_text(self.parse_json(body))

    def _generated_text(self, payload: Any) -> str:
        if isinstance(payload, list) and payload:
            payload = payload[0]
        if isinstance(payload, dict):
            if "error" in payload:
                raise DegenerateCorrection(self.name, f"upstream error: {payload['error']}")
            generated = payload.get("generated_text")
            if isinstance(generated, str):
                return generated
        raise DegenerateCorrection(self.name, "response has no generated_text")
