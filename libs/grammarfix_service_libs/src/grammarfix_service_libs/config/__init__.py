"""Configuration utilities for GrammarFix services."""

from .service_settings import Environment, ServiceSettingsBase

__all__ = ["Environment", "ServiceSettingsBase"]
