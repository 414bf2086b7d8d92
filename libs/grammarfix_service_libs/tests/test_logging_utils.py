"""Tests for logging_utils processors and configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
import structlog

from grammarfix_service_libs.logging_utils import (
    add_service_context,
    bind_request_context,
    configure_service_logging,
    create_service_logger,
)


class TestAddServiceContext:
    """Tests for the add_service_context processor."""

    def test_adds_service_fields_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Verify service.name and deployment.environment come from the environment."""
        # Arrange
        monkeypatch.setenv("SERVICE_NAME", "correction-service")
        monkeypatch.setenv("ENVIRONMENT", "staging")
        event_dict: dict[str, Any] = {"event": "hello", "correlation_id": "abc-123"}

        # Act
        result = add_service_context(None, "info", event_dict)

        # Assert
        assert result["service.name"] == "correction-service"
        assert result["deployment.environment"] == "staging"
        assert result["correlation_id"] == "abc-123"

    def test_defaults_when_env_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SERVICE_NAME", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)

        result = add_service_context(None, "info", {})

        assert result["service.name"] == "unknown"
        assert result["deployment.environment"] == "development"


class TestConfigureServiceLogging:
    def test_console_renderer_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LOG_FORMAT", raising=False)

        configure_service_logging("test-service", environment="development", log_level="DEBUG")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
        assert logging.getLogger().level == logging.DEBUG

    def test_json_renderer_in_production(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LOG_FORMAT", raising=False)

        configure_service_logging("test-service", environment="production")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_json_renderer_when_requested(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_FORMAT", "json")

        configure_service_logging("test-service", environment="development")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_file_handler_added_when_enabled(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "service.log"

        with patch.dict("os.environ", {"LOG_FORMAT": "json"}):
            configure_service_logging(
                "test-service", log_to_file=True, log_file_path=str(log_file)
            )

        handler_types = {type(handler).__name__ for handler in logging.getLogger().handlers}
        assert "RotatingFileHandler" in handler_types
        assert log_file.parent.exists()


class TestLoggerHelpers:
    def test_create_service_logger_binds_name(self) -> None:
        logger = create_service_logger("correction_service.test")

        assert structlog.get_context(logger)["logger_name"] == "correction_service.test"

    def test_bind_request_context_replaces_previous_values(self) -> None:
        bind_request_context("first", path="/a")
        bind_request_context("second")

        context = structlog.contextvars.get_contextvars()
        assert context == {"correlation_id": "second"}
        structlog.contextvars.clear_contextvars()
