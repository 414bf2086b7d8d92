"""
GrammarFix Correction Service Application.

HTTP API that corrects grammar and spelling by trying configured upstream
backends in priority order and falling back to a local rule table.
"""

from __future__ import annotations

import time

from grammarfix_service_libs.correlation_middleware import setup_correlation_middleware
from grammarfix_service_libs.error_handling.quart_handlers import register_error_handlers
from grammarfix_service_libs.logging_utils import configure_service_logging, create_service_logger
from grammarfix_service_libs.metrics_middleware import setup_metrics_middleware
from grammarfix_service_libs.quart_app import GrammarFixApp

from services.correction_service.api.correction_routes import correction_bp
from services.correction_service.api.health_routes import health_bp
from services.correction_service.config import settings
from services.correction_service.startup_setup import initialize_services, shutdown_services

configure_service_logging(settings.SERVICE_NAME, log_level=settings.LOG_LEVEL)
logger = create_service_logger("correction_service.app")

app = GrammarFixApp(__name__)

SERVICE_START_TIME = time.time()

setup_correlation_middleware(app)
register_error_handlers(app, settings.SERVICE_NAME)


@app.before_serving
async def startup() -> None:
    """Initialize services and middleware."""
    await initialize_services(app, settings)
    app.extensions["service_start_time"] = SERVICE_START_TIME

    setup_metrics_middleware(
        app=app,
        request_count_metric_name="request_count",
        request_duration_metric_name="request_duration",
        status_label_name="status",
        logger_name="correction_service.metrics",
    )

    logger.info("Correction Service startup completed successfully")


@app.after_serving
async def shutdown() -> None:
    """Gracefully shutdown all services."""
    await shutdown_services(app)


app.register_blueprint(health_bp)
app.register_blueprint(correction_bp)
