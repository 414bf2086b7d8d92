"""Base settings shared by GrammarFix services."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Defines application environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class ServiceSettingsBase(BaseSettings):
    """
    Common settings for every service.

    Subclasses set their own `model_config` (env prefix, .env handling) and
    add service-specific fields. Secrets are declared as `SecretStr` so they
    never leak into logs or health payloads.
    """

    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        validation_alias="ENVIRONMENT",
        description="Runtime environment for the service",
    )

    def is_production(self) -> bool:
        return self.ENVIRONMENT == Environment.PRODUCTION

    def is_development(self) -> bool:
        return self.ENVIRONMENT in (Environment.DEVELOPMENT, Environment.TESTING)

    def secret_presence(self) -> dict[str, bool]:
        """Report which secret fields hold a non-empty value, without the values."""
        presence: dict[str, bool] = {}
        for name in type(self).model_fields:
            value: Any = getattr(self, name)
            if isinstance(value, SecretStr):
                presence[name] = bool(value.get_secret_value())
        return presence
