"""Startup construction of the backend registration list."""

from __future__ import annotations

import aiohttp

from services.correction_service.config import Settings
from services.correction_service.implementations.huggingface_backend_impl import (
    HuggingFaceBackendImpl,
)
from services.correction_service.implementations.language_tool_backend_impl import (
    LanguageToolBackendImpl,
)
from services.correction_service.implementations.retry_policy import RetryPolicy
from services.correction_service.implementations.rule_table_backend_impl import (
    RuleTableBackendImpl,
)
from services.correction_service.implementations.sapling_backend_impl import SaplingBackendImpl
from services.correction_service.implementations.textgears_backend_impl import (
    TextGearsBackendImpl,
)
from services.correction_service.internal_models import BackendRegistration

HUGGINGFACE_PRIORITY = 10
SAPLING_PRIORITY = 20
TEXTGEARS_PRIORITY = 30
LANGUAGE_TOOL_PRIORITY = 40
RULE_TABLE_PRIORITY = 100


def build_registrations(
    settings: Settings,
    session: aiohttp.ClientSession,
    retry_policy: RetryPolicy,
) -> list[BackendRegistration]:
    """One registration per backend, with availability fixed from configuration."""
    registrations: list[BackendRegistration] = []

    for index, model in enumerate(settings.HUGGINGFACE_MODELS):
        backend = HuggingFaceBackendImpl(session, settings, model, retry_policy)
        registrations.append(
            BackendRegistration(
                backend=backend,
                available=backend.is_available(),
                priority=HUGGINGFACE_PRIORITY + index,
                requires_credential=True,
            )
        )

    sapling = SaplingBackendImpl(session, settings)
    registrations.append(
        BackendRegistration(
            backend=sapling,
            available=sapling.is_available(),
            priority=SAPLING_PRIORITY,
            requires_credential=True,
        )
    )

    textgears = TextGearsBackendImpl(session, settings)
    registrations.append(
        BackendRegistration(
            backend=textgears,
            available=textgears.is_available(),
            priority=TEXTGEARS_PRIORITY,
            requires_credential=True,
        )
    )

    language_tool = LanguageToolBackendImpl(session, settings)
    registrations.append(
        BackendRegistration(
            backend=language_tool,
            available=language_tool.is_available(),
            priority=LANGUAGE_TOOL_PRIORITY,
        )
    )

    registrations.append(
        BackendRegistration(
            backend=RuleTableBackendImpl(settings.RULE_TABLE_TIMEOUT_SECONDS),
            available=True,
            priority=RULE_TABLE_PRIORITY,
        )
    )

    return sorted(registrations, key=lambda registration: registration.priority)
