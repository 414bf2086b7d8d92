"""
Tests for the correction orchestrator's fallback chain.

Upstream backends are FakeBackend doubles; the terminal rule table is the
real implementation unless a test replaces it.
"""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from services.correction_service.exceptions import (
    AllBackendsExhausted,
    BackendAuthError,
    BackendRateLimited,
    BackendUnavailable,
    DegenerateCorrection,
)
from services.correction_service.implementations.correction_orchestrator_impl import (
    CorrectionOrchestratorImpl,
)
from services.correction_service.implementations.rule_table_backend_impl import (
    RULE_TABLE_BACKEND_NAME,
    RuleTableBackendImpl,
)
from services.correction_service.internal_models import BackendRegistration
from services.correction_service.tests.conftest import FakeBackend, fix_spelling, register


def _rule_table() -> BackendRegistration:
    return BackendRegistration(backend=RuleTableBackendImpl(), available=True, priority=100)


def _attempt_outcomes(metrics: dict[str, MagicMock]) -> list[tuple[str, str]]:
    return [
        (call.kwargs["backend"], call.kwargs["outcome"])
        for call in metrics["backend_attempts_total"].labels.call_args_list
    ]


@pytest.fixture
def metrics() -> dict[str, MagicMock]:
    return {"backend_attempts_total": MagicMock(), "backend_duration_seconds": MagicMock()}


class TestFallbackChain:
    """Backends are tried in priority order until one yields a usable result."""

    async def test_first_successful_backend_serves_the_request(self) -> None:
        # Arrange
        first = FakeBackend("huggingface:model", rewrite=fix_spelling)
        second = FakeBackend("sapling", rewrite=fix_spelling)
        orchestrator = CorrectionOrchestratorImpl(
            [register(first, 10), register(second, 20), _rule_table()]
        )

        # Act
        result = await orchestrator.correct("teh cat", "auto")

        # Assert
        assert result.service_used == "huggingface:model"
        assert result.corrected_text == "The cat"
        assert second.calls == []

    async def test_failures_fall_through_to_next_backend(
        self, metrics: dict[str, MagicMock]
    ) -> None:
        # Arrange
        failing = [
            FakeBackend("a", error=BackendRateLimited("a")),
            FakeBackend("b", error=BackendAuthError("b")),
            FakeBackend("c", error=DegenerateCorrection("c", "garbage")),
        ]
        working = FakeBackend("d", rewrite=fix_spelling)
        registrations = [register(b, i) for i, b in enumerate([*failing, working])]
        orchestrator = CorrectionOrchestratorImpl([*registrations, _rule_table()], metrics=metrics)

        # Act
        result = await orchestrator.correct("teh cat", "auto")

        # Assert
        assert result.service_used == "d"
        assert _attempt_outcomes(metrics) == [
            ("a", "rate_limited"),
            ("b", "auth_error"),
            ("c", "degenerate"),
            ("d", "success"),
        ]

    async def test_rule_table_serves_when_all_upstreams_fail(self) -> None:
        # Arrange
        backends = [
            FakeBackend("hf", error=BackendUnavailable("hf", "down")),
            FakeBackend("lt", error=ValueError("unexpected payload")),
        ]
        orchestrator = CorrectionOrchestratorImpl(
            [register(b, i) for i, b in enumerate(backends)] + [_rule_table()]
        )

        # Act
        result = await orchestrator.correct("He don't like pizza", "auto")

        # Assert
        assert result.service_used == RULE_TABLE_BACKEND_NAME
        assert result.corrected_text == "He doesn't like pizza"
        assert result.edits[0].replacement == "doesn't"

    async def test_unchanged_result_stops_the_chain(self) -> None:
        first = FakeBackend("hf")
        second = FakeBackend("sapling", rewrite=fix_spelling)
        orchestrator = CorrectionOrchestratorImpl(
            [register(first, 1), register(second, 2), _rule_table()]
        )

        result = await orchestrator.correct("All good here.", "auto")

        assert result.service_used == "hf"
        assert result.edits == []
        assert result.has_changes is False
        assert second.calls == []

    async def test_empty_correction_is_rejected(self, metrics: dict[str, MagicMock]) -> None:
        blank = FakeBackend("hf", rewrite=lambda text: "   ")
        orchestrator = CorrectionOrchestratorImpl(
            [register(blank, 1), _rule_table()], metrics=metrics
        )

        result = await orchestrator.correct("teh cat", "auto")

        assert result.service_used == RULE_TABLE_BACKEND_NAME
        assert ("hf", "degenerate") in _attempt_outcomes(metrics)

    async def test_slow_backend_times_out_and_chain_advances(
        self, metrics: dict[str, MagicMock]
    ) -> None:
        # Arrange
        slow = FakeBackend("slow", delay=1.0, timeout_seconds=0.01)
        fast = FakeBackend("fast", rewrite=fix_spelling)
        orchestrator = CorrectionOrchestratorImpl(
            [register(slow, 1), register(fast, 2), _rule_table()], metrics=metrics
        )

        # Act
        result = await orchestrator.correct("teh cat", "auto")

        # Assert
        assert result.service_used == "fast"
        assert ("slow", "timeout") in _attempt_outcomes(metrics)

    async def test_unavailable_backends_are_never_called(self) -> None:
        missing_key = FakeBackend("sapling", available=False)
        orchestrator = CorrectionOrchestratorImpl([register(missing_key, 1), _rule_table()])

        result = await orchestrator.correct("teh cat", "auto")

        assert missing_key.calls == []
        assert result.service_used == RULE_TABLE_BACKEND_NAME
        assert result.corrected_text == "The cat"

    async def test_language_is_passed_through(self) -> None:
        backend = FakeBackend("hf")
        orchestrator = CorrectionOrchestratorImpl([register(backend, 1), _rule_table()])

        result = await orchestrator.correct("Fine.", "en-GB")

        assert backend.calls == [("Fine.", "en-GB")]
        assert result.language.name == "English (UK)"

    async def test_result_is_scored(self) -> None:
        orchestrator = CorrectionOrchestratorImpl([_rule_table()])

        result = await orchestrator.correct("He don't like pizza", "auto")

        assert result.statistics.applied_count == 1
        assert result.statistics.original_length == len("He don't like pizza")
        assert result.statistics.processing_time_ms >= 0
        assert 0 <= result.analysis.quality_score <= 100


class TestAttemptOrder:
    def _orchestrator(self, **kwargs) -> CorrectionOrchestratorImpl:
        backends = [
            FakeBackend("huggingface:org/model"),
            FakeBackend("sapling"),
            FakeBackend("textgears"),
        ]
        return CorrectionOrchestratorImpl(
            [register(b, i) for i, b in enumerate(backends)] + [_rule_table()], **kwargs
        )

    def test_priority_order_by_default(self) -> None:
        order = [r.name for r in self._orchestrator().attempt_order()]
        assert order == ["huggingface:org/model", "sapling", "textgears"]

    def test_preferred_backend_moves_to_front(self) -> None:
        order = [r.name for r in self._orchestrator(preferred_backend="textgears").attempt_order()]
        assert order == ["textgears", "huggingface:org/model", "sapling"]

    def test_preferred_backend_matches_family_prefix(self) -> None:
        orchestrator = self._orchestrator(preferred_backend="HuggingFace")
        assert orchestrator.attempt_order()[0].name == "huggingface:org/model"

    def test_disabled_fallback_tries_only_first_upstream(self) -> None:
        orchestrator = self._orchestrator(preferred_backend="sapling", fallback_enabled=False)
        assert [r.name for r in orchestrator.attempt_order()] == ["sapling"]

    async def test_disabled_fallback_still_ends_with_rule_table(self) -> None:
        first = FakeBackend("hf", error=BackendUnavailable("hf", "down"))
        second = FakeBackend("sapling", rewrite=fix_spelling)
        orchestrator = CorrectionOrchestratorImpl(
            [register(first, 1), register(second, 2), _rule_table()], fallback_enabled=False
        )

        result = await orchestrator.correct("teh cat", "auto")

        assert second.calls == []
        assert result.service_used == RULE_TABLE_BACKEND_NAME

    def test_registrations_end_with_rule_table(self) -> None:
        names = [r.name for r in self._orchestrator().registrations]
        assert names[-1] == RULE_TABLE_BACKEND_NAME


class TestFailureSurface:
    async def test_cancellation_propagates(self, metrics: dict[str, MagicMock]) -> None:
        cancelled = FakeBackend("hf", error=asyncio.CancelledError())
        orchestrator = CorrectionOrchestratorImpl(
            [register(cancelled, 1), _rule_table()], metrics=metrics
        )

        with pytest.raises(asyncio.CancelledError):
            await orchestrator.correct("teh cat", "auto")

        assert _attempt_outcomes(metrics) == [("hf", "cancelled")]

    async def test_rule_table_failure_raises_all_backends_exhausted(self) -> None:
        broken = FakeBackend(RULE_TABLE_BACKEND_NAME, error=RuntimeError("regex exploded"))
        orchestrator = CorrectionOrchestratorImpl(
            [BackendRegistration(backend=broken, available=True, priority=100)]
        )

        with pytest.raises(AllBackendsExhausted, match="regex exploded"):
            await orchestrator.correct("teh cat", "auto")


class TestProbeBackend:
    """Health probes classify each backend without raising."""

    async def test_unavailable_backend_is_degraded(self) -> None:
        orchestrator = CorrectionOrchestratorImpl([_rule_table()])
        registration = register(FakeBackend("sapling", available=False), 20)

        probe = await orchestrator.probe_backend(registration, "This is a test sentence.")

        assert probe == {"status": "degraded", "reason": "not configured"}

    async def test_answering_backend_is_healthy(self) -> None:
        orchestrator = CorrectionOrchestratorImpl([_rule_table()])

        probe = await orchestrator.probe_backend(_rule_table(), "This is a test sentence.")

        assert probe["status"] == "healthy"
        assert probe["responseTimeMs"] >= 0

    async def test_unusable_answer_is_degraded(self) -> None:
        orchestrator = CorrectionOrchestratorImpl([_rule_table()])
        registration = register(FakeBackend("hf", error=DegenerateCorrection("hf", "too long")), 10)

        probe = await orchestrator.probe_backend(registration, "This is a test sentence.")

        assert probe["status"] == "degraded"

    @pytest.mark.parametrize(
        "backend",
        [
            FakeBackend("slow", delay=1.0, timeout_seconds=0.01),
            FakeBackend("down", error=BackendUnavailable("down", "HTTP 500")),
        ],
    )
    async def test_failing_backend_is_unhealthy(self, backend: FakeBackend) -> None:
        orchestrator = CorrectionOrchestratorImpl([_rule_table()])

        probe = await orchestrator.probe_backend(register(backend, 10), "This is a test sentence.")

        assert probe["status"] == "unhealthy"
        assert "error" in probe
