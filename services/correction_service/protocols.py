"""Protocol definitions for the Correction Service."""

from __future__ import annotations

from typing import Protocol

from services.correction_service.internal_models import BackendRegistration, CorrectionResult


class CorrectionBackendProtocol(Protocol):
    """Protocol for a single correction backend adapter."""

    name: str
    timeout_seconds: float

    def is_available(self) -> bool:
        """
        Report whether the backend can be attempted at all.

        Decided from configuration only (credential present, feature enabled);
        never performs network I/O.
        """
        ...

    async def try_correct(self, text: str, language: str) -> CorrectionResult:
        """
        Correct the text with this backend.

        Args:
            text: The original text
            language: Language code sent by the client ("auto" when unspecified)

        Returns:
            A CorrectionResult with edits against the original text. Statistics
            and analysis are filled in by the orchestrator.

        Raises:
            BackendUnavailable, BackendRateLimited, BackendAuthError,
            BackendTimeout, DegenerateCorrection
        """
        ...


class CorrectionOrchestratorProtocol(Protocol):
    """Protocol for the fallback chain over all registered backends."""

    @property
    def registrations(self) -> list[BackendRegistration]:
        """All backend registrations, in attempt order."""
        ...

    async def correct(self, text: str, language: str) -> CorrectionResult:
        """
        Correct the text using the first backend that yields a usable result.

        Never raises for upstream failures; the rule table is the terminal
        fallback.

        Raises:
            AllBackendsExhausted: Only if the rule table itself fails
        """
        ...

    async def probe_backend(self, registration: BackendRegistration, text: str) -> dict:
        """Run one backend against the probe text for health reporting."""
        ...
