"""
Test configuration for the Correction Service.

Provides protocol-based fake backends and settings with test credentials.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Any, Optional

import pytest
from dishka import Provider, Scope, make_async_container, provide
from grammarfix_service_libs.correlation_middleware import setup_correlation_middleware
from grammarfix_service_libs.error_handling.correlation import CorrelationContext
from grammarfix_service_libs.error_handling.quart_handlers import register_error_handlers
from grammarfix_service_libs.quart_app import GrammarFixApp
from prometheus_client import REGISTRY, CollectorRegistry
from pydantic import SecretStr
from quart import g
from quart_dishka import QuartDishka

from services.correction_service.api.correction_routes import correction_bp
from services.correction_service.api.health_routes import health_bp
from services.correction_service.config import Settings
from services.correction_service.implementations.correction_orchestrator_impl import (
    CorrectionOrchestratorImpl,
)
from services.correction_service.implementations.upstream_reconciler import reconcile
from services.correction_service.internal_models import (
    BackendRegistration,
    CorrectionResult,
    ReplacementText,
)
from services.correction_service.languages import resolve_language
from services.correction_service.metrics import METRICS
from services.correction_service.protocols import (
    CorrectionBackendProtocol,
    CorrectionOrchestratorProtocol,
)


class FakeBackend(CorrectionBackendProtocol):
    """Backend double that rewrites text with a callable, or raises a configured error."""

    def __init__(
        self,
        name: str,
        rewrite: Callable[[str], str] = lambda text: text,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
        timeout_seconds: float = 1.0,
        available: bool = True,
    ) -> None:
        self.name = name
        self.rewrite = rewrite
        self.error = error
        self.delay = delay
        self.timeout_seconds = timeout_seconds
        self.available = available
        self.calls: list[tuple[str, str]] = []

    def is_available(self) -> bool:
        return self.available

    async def try_correct(self, text: str, language: str) -> CorrectionResult:
        self.calls.append((text, language))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return reconcile(
            text, ReplacementText(text=self.rewrite(text)), resolve_language(language), self.name
        )


def register(backend: FakeBackend, priority: int) -> BackendRegistration:
    return BackendRegistration(
        backend=backend, available=backend.is_available(), priority=priority
    )


def fix_spelling(text: str) -> str:
    return text.replace("teh", "the").replace("recieve", "receive")


@pytest.fixture
def test_settings() -> Settings:
    """Settings with every upstream credential present and short timeouts."""
    return Settings(
        HUGGINGFACE_API_KEY=SecretStr("hf-test-key"),
        SAPLING_API_KEY=SecretStr("sapling-test-key"),
        TEXTGEARS_API_KEY=SecretStr("textgears-test-key"),
        HUGGINGFACE_MODELS=["test-org/test-model"],
        HUGGINGFACE_BASE_URL="https://hf.test/models",
        SAPLING_BASE_URL="https://sapling.test/api/v1",
        TEXTGEARS_BASE_URL="https://textgears.test",
        LANGUAGE_TOOL_URL="https://languagetool.test/v2",
        UPSTREAM_TIMEOUT_SECONDS=5.0,
        HUGGINGFACE_TIMEOUT_SECONDS=5.0,
        MAX_TEXT_LENGTH=50,
    )


@pytest.fixture
def unconfigured_settings() -> Settings:
    """Settings without any upstream credential."""
    return Settings(
        HUGGINGFACE_API_KEY=SecretStr(""),
        SAPLING_API_KEY=SecretStr(""),
        TEXTGEARS_API_KEY=SecretStr(""),
        LANGUAGE_TOOL_ENABLED=False,
    )


@pytest.fixture
def create_test_app(
    test_settings: Settings,
) -> Callable[[CorrectionOrchestratorImpl], GrammarFixApp]:
    """Build an app with both blueprints and the given orchestrator injected."""

    def _create(orchestrator: CorrectionOrchestratorImpl) -> GrammarFixApp:
        app = GrammarFixApp(__name__)
        setup_correlation_middleware(app)
        register_error_handlers(app, test_settings.SERVICE_NAME)
        app.register_blueprint(health_bp)
        app.register_blueprint(correction_bp)
        app.extensions["service_start_time"] = time.time()

        class TestProvider(Provider):
            @provide(scope=Scope.APP)
            def provide_settings(self) -> Settings:
                return test_settings

            @provide(scope=Scope.APP)
            def provide_orchestrator(self) -> CorrectionOrchestratorProtocol:
                return orchestrator

            @provide(scope=Scope.APP)
            def provide_metrics(self) -> dict[str, Any]:
                return METRICS

            @provide(scope=Scope.APP)
            def provide_registry(self) -> CollectorRegistry:
                return REGISTRY

            @provide(scope=Scope.REQUEST)
            def provide_correlation_context(self) -> CorrelationContext:
                return g.correlation_context

        container = make_async_container(TestProvider())
        QuartDishka(app=app, container=container)
        app.container = container
        return app

    return _create
