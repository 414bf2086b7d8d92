"""Dependency injection configuration for the Correction Service using Dishka."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import aiohttp
from dishka import Provider, Scope, provide
from grammarfix_service_libs.error_handling.correlation import (
    CorrelationContext,
    extract_correlation_context_from_request,
)
from grammarfix_service_libs.logging_utils import create_service_logger
from prometheus_client import REGISTRY, CollectorRegistry
from quart import g, request

from services.correction_service.config import Settings, settings
from services.correction_service.implementations.backend_registry import build_registrations
from services.correction_service.implementations.correction_orchestrator_impl import (
    CorrectionOrchestratorImpl,
)
from services.correction_service.implementations.retry_policy import RetryPolicy
from services.correction_service.internal_models import BackendRegistration
from services.correction_service.metrics import METRICS
from services.correction_service.protocols import CorrectionOrchestratorProtocol

logger = create_service_logger("correction_service.di")


class CoreInfrastructureProvider(Provider):
    """Provider for core infrastructure dependencies (settings, metrics, correlation context)."""

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide service settings."""
        return settings

    @provide(scope=Scope.APP)
    def provide_metrics_registry(self) -> CollectorRegistry:
        """Provide the global Prometheus metrics registry shared across collectors."""
        return REGISTRY

    @provide(scope=Scope.APP)
    def provide_metrics(self) -> dict[str, Any]:
        """Provide shared Prometheus metrics dictionary."""
        return METRICS

    @provide(scope=Scope.REQUEST)
    def provide_correlation_context(self) -> CorrelationContext:
        """Correlation context set by the middleware, or extracted from the request."""
        ctx = getattr(g, "correlation_context", None)
        if isinstance(ctx, CorrelationContext):
            return ctx
        return extract_correlation_context_from_request(request)


class ServiceImplementationsProvider(Provider):
    """Provider for service implementation dependencies."""

    @provide(scope=Scope.APP)
    async def provide_http_session(
        self, settings: Settings
    ) -> AsyncIterator[aiohttp.ClientSession]:
        """Shared HTTP session for all upstream backends, closed on shutdown."""
        session = aiohttp.ClientSession(
            headers={"User-Agent": f"{settings.SERVICE_NAME}/{settings.VERSION}"}
        )
        try:
            yield session
        finally:
            await session.close()

    @provide(scope=Scope.APP)
    def provide_retry_policy(self, settings: Settings) -> RetryPolicy:
        """Warm-up retry policy for hosted models."""
        return RetryPolicy(
            max_attempts=settings.MODEL_WARMUP_MAX_ATTEMPTS,
            backoff_ms=settings.MODEL_WARMUP_BACKOFF_MS,
        )

    @provide(scope=Scope.APP)
    def provide_backend_registrations(
        self,
        settings: Settings,
        session: aiohttp.ClientSession,
        retry_policy: RetryPolicy,
    ) -> list[BackendRegistration]:
        """Backend registrations, built once from configuration."""
        registrations = build_registrations(settings, session, retry_policy)
        logger.info(
            "Correction backends registered",
            backends=[
                {"name": r.name, "available": r.available, "priority": r.priority}
                for r in registrations
            ],
        )
        return registrations

    @provide(scope=Scope.APP)
    def provide_orchestrator(
        self,
        settings: Settings,
        registrations: list[BackendRegistration],
        metrics: dict[str, Any],
    ) -> CorrectionOrchestratorProtocol:
        """Provide the correction orchestrator."""
        return CorrectionOrchestratorImpl(
            registrations=registrations,
            metrics=metrics,
            preferred_backend=settings.PREFERRED_BACKEND,
            fallback_enabled=settings.FALLBACK_ENABLED,
        )
