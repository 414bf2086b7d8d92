"""Sequential fallback chain over the registered correction backends."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable

from grammarfix_service_libs.logging_utils import create_service_logger

from services.correction_service.exceptions import (
    AllBackendsExhausted,
    BackendError,
    BackendTimeout,
    DegenerateCorrection,
)
from services.correction_service.implementations.result_scorer import score_result
from services.correction_service.implementations.rule_table_backend_impl import (
    RULE_TABLE_BACKEND_NAME,
    RuleTableBackendImpl,
)
from services.correction_service.internal_models import BackendRegistration, CorrectionResult
from services.correction_service.protocols import CorrectionOrchestratorProtocol

Clock = Callable[[], float]


def _matches_preferred(name: str, wanted: str) -> bool:
    """`wanted` matches a full backend name or its family, e.g. "huggingface"."""
    return name.lower() == wanted or name.split(":", 1)[0].lower() == wanted


class CorrectionOrchestratorImpl(CorrectionOrchestratorProtocol):
    """Tries available backends one at a time, ending with the rule table.

    Backends never run concurrently for one request. Any backend failure,
    including a timeout or an unusable answer, moves on to the next
    candidate; only a failing rule table surfaces as an error.
    """

    def __init__(
        self,
        registrations: list[BackendRegistration],
        metrics: dict[str, Any] | None = None,
        preferred_backend: str | None = None,
        fallback_enabled: bool = True,
        clock: Clock = time.perf_counter,
        logger: Any | None = None,
    ):
        ordered = sorted(registrations, key=lambda registration: registration.priority)
        self._upstream = [r for r in ordered if r.name != RULE_TABLE_BACKEND_NAME]
        self._terminal = next(
            (r for r in ordered if r.name == RULE_TABLE_BACKEND_NAME),
            BackendRegistration(backend=RuleTableBackendImpl(), available=True, priority=100),
        )
        self.metrics = metrics or {}
        self.preferred_backend = preferred_backend
        self.fallback_enabled = fallback_enabled
        self.clock = clock
        self.logger = logger or create_service_logger("correction_service.orchestrator")

    @property
    def registrations(self) -> list[BackendRegistration]:
        return [*self._upstream, self._terminal]

    def attempt_order(self) -> list[BackendRegistration]:
        """Available upstream backends in attempt order, without the rule table."""
        candidates = [r for r in self._upstream if r.available]

        if self.preferred_backend:
            wanted = self.preferred_backend.lower()
            preferred = [r for r in candidates if _matches_preferred(r.name, wanted)]
            candidates = preferred + [r for r in candidates if r not in preferred]

        if not self.fallback_enabled:
            candidates = candidates[:1]
        return candidates

    async def correct(self, text: str, language: str) -> CorrectionResult:
        started = self.clock()

        for registration in self.attempt_order():
            result = await self._attempt(registration, text, language)
            if result is not None:
                return score_result(result, self._elapsed_ms(started))

        terminal_started = self.clock()
        try:
            result = await self._terminal.backend.try_correct(text, language)
        except Exception as e:
            self._record_attempt(
                self._terminal.name, "unexpected_error", self.clock() - terminal_started
            )
            self.logger.critical(
                f"Rule table failed, no backend left: {e}",
                backend=self._terminal.name,
                exc_info=True,
            )
            raise AllBackendsExhausted(f"rule table failed: {e}") from e

        self._record_attempt(self._terminal.name, "success", self.clock() - terminal_started)
        return score_result(result, self._elapsed_ms(started))

    async def _attempt(
        self, registration: BackendRegistration, text: str, language: str
    ) -> CorrectionResult | None:
        """One backend attempt; None means move on to the next candidate."""
        attempt_started = self.clock()
        outcome = "cancelled"
        try:
            async with asyncio.timeout(registration.timeout_seconds):
                result = await registration.backend.try_correct(text, language)
            self._check_usable(registration.name, text, result)
            outcome = "success"
            if not result.has_changes:
                self.logger.info(
                    "Backend reports no changes needed", backend=registration.name
                )
            return result
        except TimeoutError:
            outcome = BackendTimeout.outcome
            self.logger.warning(
                f"Backend timed out after {registration.timeout_seconds}s",
                backend=registration.name,
            )
        except BackendError as e:
            outcome = e.outcome
            self.logger.warning(
                f"Backend failed: {e}", backend=registration.name, outcome=outcome
            )
        except Exception as e:
            outcome = "unexpected_error"
            self.logger.error(
                f"Unexpected backend error: {e}",
                backend=registration.name,
                elapsed_ms=self._elapsed_ms(attempt_started),
                exc_info=True,
            )
        finally:
            self._record_attempt(
                registration.name, outcome, self.clock() - attempt_started
            )
        return None

    @staticmethod
    def _check_usable(backend: str, text: str, result: CorrectionResult) -> None:
        if text.strip() and not result.corrected_text.strip():
            raise DegenerateCorrection(backend, "empty corrected text")

    def _elapsed_ms(self, started: float) -> int:
        return max(0, round((self.clock() - started) * 1000))

    def _record_attempt(self, backend: str, outcome: str, duration_seconds: float) -> None:
        attempts = self.metrics.get("backend_attempts_total")
        if attempts is not None:
            attempts.labels(backend=backend, outcome=outcome).inc()
        duration = self.metrics.get("backend_duration_seconds")
        if duration is not None:
            duration.labels(backend=backend).observe(max(0.0, duration_seconds))

    async def probe_backend(self, registration: BackendRegistration, text: str) -> dict:
        """Health probe of one backend, bounded by that backend's timeout."""
        if not registration.available:
            return {"status": "degraded", "reason": "not configured"}

        started = self.clock()
        try:
            async with asyncio.timeout(registration.timeout_seconds):
                await registration.backend.try_correct(text, "auto")
        except DegenerateCorrection as e:
            return {
                "status": "degraded",
                "reason": str(e),
                "responseTimeMs": self._elapsed_ms(started),
            }
        except TimeoutError:
            return {"status": "unhealthy", "error": "timeout"}
        except Exception as e:
            return {"status": "unhealthy", "error": str(e)}

        return {"status": "healthy", "responseTimeMs": self._elapsed_ms(started)}
