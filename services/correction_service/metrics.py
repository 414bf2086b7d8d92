"""Shared Prometheus metrics for the Correction Service.

`METRICS` holds every collector the service uses. The collectors are created
once at import time and injected via Dishka, so HTTP routes, middleware and
the orchestrator share them without duplicated registration errors.
"""

from __future__ import annotations

from typing import Any

from prometheus_client import REGISTRY, Counter, Histogram


def _create_metrics() -> dict[str, Any]:
    """Create Prometheus metric collectors for the Correction Service."""

    return {
        # HTTP request metrics
        "request_count": Counter(
            "correction_service_http_requests_total",
            "Total number of HTTP requests",
            ["method", "endpoint", "status"],
            registry=REGISTRY,
        ),
        "request_duration": Histogram(
            "correction_service_http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=REGISTRY,
        ),
        # Correction outcomes
        "correction_requests_total": Counter(
            "correction_service_corrections_total",
            "Correction requests by outcome and serving backend",
            ["status", "service_used"],
            registry=REGISTRY,
        ),
        "correction_edits": Histogram(
            "correction_service_edits_per_request",
            "Number of edits returned per successful correction",
            buckets=(0, 1, 2, 5, 10, 20, 50, 100),
            registry=REGISTRY,
        ),
        # Backend attempts
        "backend_attempts_total": Counter(
            "correction_service_backend_attempts_total",
            "Backend attempts by outcome",
            ["backend", "outcome"],
            registry=REGISTRY,
        ),
        "backend_duration_seconds": Histogram(
            "correction_service_backend_duration_seconds",
            "Time spent in a single backend attempt",
            ["backend"],
            registry=REGISTRY,
        ),
        "api_errors_total": Counter(
            "correction_service_api_errors_total",
            "API errors by endpoint and error type",
            ["endpoint", "error_type"],
            registry=REGISTRY,
        ),
    }


# Singleton instance shared across the application
METRICS: dict[str, Any] = _create_metrics()
