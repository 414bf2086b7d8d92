"""Shared Prometheus metrics middleware for GrammarFix HTTP services."""

from __future__ import annotations

import time

from quart import Quart, Response, current_app, g, request

from grammarfix_service_libs.logging_utils import create_service_logger

logger = create_service_logger("grammarfix.metrics_middleware")


def setup_metrics_middleware(
    app: Quart,
    request_count_metric_name: str = "request_count",
    request_duration_metric_name: str = "request_duration",
    status_label_name: str = "status_code",
    logger_name: str | None = None,
) -> None:
    """Record request count and duration for every request the app serves.

    Args:
        app: The Quart application to configure
        request_count_metric_name: Key of the request counter in the metrics dict
        request_duration_metric_name: Key of the duration histogram in the metrics dict
        status_label_name: Name of the status code label
        logger_name: Optional custom logger name for this service

    Note:
        The collectors are looked up in app.extensions["metrics"], which
        startup_setup.py populates from the service METRICS dict.
    """
    service_logger = create_service_logger(logger_name) if logger_name else logger

    @app.before_request
    async def before_request() -> None:
        g.start_time = time.perf_counter()

    @app.after_request
    async def after_request(response: Response) -> Response:
        try:
            start_time = getattr(g, "start_time", None)
            metrics = current_app.extensions.get("metrics", {})

            if start_time is not None and metrics:
                duration = time.perf_counter() - start_time
                # Route rule keeps label cardinality bounded for unknown paths
                endpoint = request.url_rule.rule if request.url_rule else "unmatched"

                request_count = metrics.get(request_count_metric_name)
                request_duration = metrics.get(request_duration_metric_name)

                if request_count:
                    request_count.labels(
                        method=request.method,
                        endpoint=endpoint,
                        **{status_label_name: str(response.status_code)},
                    ).inc()
                if request_duration:
                    request_duration.labels(method=request.method, endpoint=endpoint).observe(
                        duration
                    )

        except Exception as e:
            service_logger.error(f"Error recording request metrics: {e}")

        return response
