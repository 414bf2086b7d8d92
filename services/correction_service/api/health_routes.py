"""Health and metrics routes for the Correction Service."""

from __future__ import annotations

import asyncio
import time
from typing import Any

from dishka import FromDishka
from grammarfix_service_libs.error_handling.correlation import CorrelationContext
from grammarfix_service_libs.logging_utils import create_service_logger
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from quart import Blueprint, Response, current_app, jsonify
from quart_dishka import inject

from services.correction_service.config import Settings
from services.correction_service.protocols import CorrectionOrchestratorProtocol

logger = create_service_logger("correction_service.api.health")
health_bp = Blueprint("health_routes", __name__)


def _uptime_seconds() -> float:
    start_time = current_app.extensions.get("service_start_time")
    return time.time() - start_time if start_time else 0.0


def overall_status(backends: dict[str, dict[str, Any]], available: list[str]) -> str:
    """healthy only when every configured backend passed its probe."""
    if all(backends[name]["status"] == "healthy" for name in available):
        return "healthy"
    return "degraded"


@health_bp.route("/api/health")
@inject
async def backend_health(
    settings: FromDishka[Settings],
    corr: FromDishka[CorrelationContext],
    orchestrator: FromDishka[CorrectionOrchestratorProtocol],
) -> tuple[Response, int]:
    """Probe every backend concurrently with a fixed sentence and report each outcome."""
    registrations = orchestrator.registrations
    probes = await asyncio.gather(
        *(orchestrator.probe_backend(r, settings.HEALTH_PROBE_TEXT) for r in registrations)
    )

    backends = {
        r.name: {"available": r.available, "priority": r.priority, **probe}
        for r, probe in zip(registrations, probes)
    }
    status = overall_status(backends, [r.name for r in registrations if r.available])

    if status != "healthy":
        logger.warning(
            "Backend health probe reported problems",
            correlation_id=corr.original,
            backends={name: b["status"] for name, b in backends.items()},
        )

    return jsonify(
        {
            "service": settings.SERVICE_NAME,
            "status": status,
            "version": settings.VERSION,
            "backends": backends,
            "uptimeSeconds": _uptime_seconds(),
            "environment": settings.ENVIRONMENT.value,
            "correlationId": corr.original,
        }
    ), 200 if status == "healthy" else 503


@health_bp.route("/healthz")
@inject
async def health_check(settings: FromDishka[Settings]) -> tuple[Response, int]:
    """Liveness check; does not contact any upstream."""
    return jsonify(
        {
            "service": settings.SERVICE_NAME,
            "status": "healthy",
            "version": settings.VERSION,
            "uptime_seconds": _uptime_seconds(),
            "environment": settings.ENVIRONMENT.value,
        }
    ), 200


@health_bp.route("/metrics")
@inject
async def metrics(registry: FromDishka[CollectorRegistry]) -> Response:
    """Prometheus metrics endpoint."""
    try:
        return Response(generate_latest(registry), content_type=CONTENT_TYPE_LATEST)
    except Exception as e:
        logger.error(f"Error generating metrics: {e}", exc_info=True)
        return Response("Error generating metrics", status=500)
