"""
Configuration module for the GrammarFix Correction Service.

Defines service settings, upstream backend credentials and endpoints, and
the per-backend timeouts used by the correction orchestrator.
"""

from __future__ import annotations

from typing import Any, Optional

from dotenv import find_dotenv, load_dotenv
from grammarfix_service_libs.config import ServiceSettingsBase
from pydantic import Field, SecretStr
from pydantic_settings import SettingsConfigDict

# Load .env file from repository root, regardless of current working directory
load_dotenv(find_dotenv(".env"))


class Settings(ServiceSettingsBase):
    """
    Configuration settings for the Correction Service.

    These settings can be overridden via environment variables prefixed with
    CORRECTION_SERVICE_.
    """

    LOG_LEVEL: str = "INFO"
    SERVICE_NAME: str = "correction-service"
    VERSION: str = "1.0.0"
    HTTP_PORT: int = 5000
    HOST: str = "0.0.0.0"

    # Request boundary
    MAX_TEXT_LENGTH: int = Field(
        default=15000, description="Maximum accepted input length in characters"
    )
    DEFAULT_LANGUAGE: str = Field(default="auto", description="Language used when none is sent")

    # Orchestration
    PREFERRED_BACKEND: Optional[str] = Field(
        default=None, description="Backend name moved to the front of the attempt order"
    )
    FALLBACK_ENABLED: bool = Field(
        default=True,
        description="Try further upstream backends after the first one fails",
    )
    HEALTH_PROBE_TEXT: str = "This is a test sentence."

    # Hugging Face hosted inference
    HUGGINGFACE_API_KEY: SecretStr = Field(default=SecretStr(""))
    HUGGINGFACE_BASE_URL: str = "https://router.huggingface.co/hf-inference/models"
    HUGGINGFACE_MODELS: list[str] = Field(
        default_factory=lambda: ["grammarly/coedit-large"],
        description="Hosted models tried in order, one backend registration each",
    )
    HUGGINGFACE_TIMEOUT_SECONDS: float = 60.0
    HUGGINGFACE_MAX_NEW_TOKENS: int = 500
    MODEL_WARMUP_MAX_ATTEMPTS: int = Field(
        default=2, description="Attempts when the hosted model reports it is loading"
    )
    MODEL_WARMUP_BACKOFF_MS: int = Field(
        default=15000, description="Wait between attempts while the hosted model loads"
    )

    # Sapling grammar API
    SAPLING_API_KEY: SecretStr = Field(default=SecretStr(""))
    SAPLING_BASE_URL: str = "https://api.sapling.ai/api/v1"

    # TextGears grammar API
    TEXTGEARS_API_KEY: SecretStr = Field(default=SecretStr(""))
    TEXTGEARS_BASE_URL: str = "https://api.textgears.com"

    # LanguageTool public API
    LANGUAGE_TOOL_ENABLED: bool = True
    LANGUAGE_TOOL_URL: str = "https://api.languagetool.org/v2"

    UPSTREAM_TIMEOUT_SECONDS: float = Field(
        default=30.0, description="Timeout for Sapling, TextGears and LanguageTool calls"
    )
    RULE_TABLE_TIMEOUT_SECONDS: float = 5.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="CORRECTION_SERVICE_",
    )

    def runtime_config(self) -> dict[str, Any]:
        """Non-secret view of the effective configuration."""
        return {
            "environment": self.ENVIRONMENT.value,
            "max_text_length": self.MAX_TEXT_LENGTH,
            "preferred_backend": self.PREFERRED_BACKEND,
            "fallback_enabled": self.FALLBACK_ENABLED,
            "huggingface_models": list(self.HUGGINGFACE_MODELS),
            "language_tool_enabled": self.LANGUAGE_TOOL_ENABLED,
            "credentials": self.secret_presence(),
        }


# Create a single instance for the application to use
settings = Settings()
