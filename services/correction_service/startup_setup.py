"""Startup and shutdown logic for the Correction Service."""

from __future__ import annotations

from dishka import make_async_container
from grammarfix_service_libs.logging_utils import create_service_logger
from grammarfix_service_libs.quart_app import GrammarFixApp
from quart_dishka import QuartDishka

from services.correction_service.config import Settings
from services.correction_service.di import (
    CoreInfrastructureProvider,
    ServiceImplementationsProvider,
)
from services.correction_service.metrics import METRICS

logger = create_service_logger("correction_service.startup")


async def initialize_services(app: GrammarFixApp, settings: Settings) -> None:
    """Initialize DI container, Quart-Dishka integration, and metrics."""
    try:
        container = make_async_container(
            CoreInfrastructureProvider(),
            ServiceImplementationsProvider(),
        )
        QuartDishka(app=app, container=container)
        app.container = container

        # Expose metrics dictionary through app.extensions for middleware
        app.extensions["metrics"] = METRICS

        logger.info(
            "Correction Service DI container and metrics initialized",
            config=settings.runtime_config(),
        )
    except Exception as e:
        logger.critical(f"Failed to initialize Correction Service: {e}", exc_info=True)
        raise


async def shutdown_services(app: GrammarFixApp) -> None:
    """Close the DI container, which closes the shared HTTP session."""
    try:
        if app.container is not None:
            await app.container.close()
        logger.info("Correction Service shutdown completed")
    except Exception as e:
        logger.error(f"Error during service shutdown: {e}", exc_info=True)
