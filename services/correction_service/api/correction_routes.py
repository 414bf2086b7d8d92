"""Correction routes for the Correction Service."""

from __future__ import annotations

from typing import Any, NoReturn

from dishka import FromDishka
from grammarfix_service_libs.error_handling import raise_processing_error, raise_validation_error
from grammarfix_service_libs.error_handling.correlation import CorrelationContext
from grammarfix_service_libs.logging_utils import create_service_logger
from pydantic import ValidationError
from quart import Blueprint, request
from quart_dishka import inject

from services.correction_service.api_models import (
    CorrectOptions,
    CorrectResponse,
    LanguagesResponse,
)
from services.correction_service.config import Settings
from services.correction_service.exceptions import AllBackendsExhausted
from services.correction_service.languages import SUPPORTED_LANGUAGES
from services.correction_service.protocols import CorrectionOrchestratorProtocol

logger = create_service_logger("correction_service.api.correction")
correction_bp = Blueprint("correction_routes", __name__)

OPERATION = "correct_text"


def _validation_failed(
    settings: Settings,
    metrics: dict[str, Any],
    corr: CorrelationContext,
    field: str,
    message: str,
    **context: Any,
) -> NoReturn:
    metrics["api_errors_total"].labels(
        endpoint="/api/correct", error_type="validation_error"
    ).inc()
    metrics["correction_requests_total"].labels(
        status="validation_error", service_used="none"
    ).inc()
    raise_validation_error(
        service=settings.SERVICE_NAME,
        operation=OPERATION,
        field=field,
        message=message,
        correlation_id=corr.uuid,
        **context,
    )


def validate_text(value: Any, max_length: int) -> tuple[str, str] | None:
    """Return (message, reason) for an invalid `text` value, or None when it is valid."""
    if value is None:
        return "Text is required", "required"
    if not isinstance(value, str):
        return "Text must be a string", "type"
    if not value.strip():
        return "Text cannot be empty", "empty"
    if len(value) > max_length:
        return f"Text too long. Maximum {max_length} characters allowed", "too_long"
    return None


@correction_bp.route("/api/correct", methods=["POST"])
@inject
async def correct_text(
    corr: FromDishka[CorrelationContext],
    settings: FromDishka[Settings],
    orchestrator: FromDishka[CorrectionOrchestratorProtocol],
    metrics: FromDishka[dict[str, Any]],
) -> tuple[dict[str, Any], int]:
    """
    Correct grammar and spelling in the submitted text.

    Body: {"text": str, "options": {"language": str}}. Validation happens
    before any backend is contacted.

    Returns:
        Tuple of (response_dict, status_code)

    Raises:
        GrammarFixError: For validation errors (400) and rule-table failure (500)
    """
    payload = await request.get_json(silent=True)
    if not isinstance(payload, dict):
        _validation_failed(
            settings, metrics, corr, "request_body", "Request body must be a JSON object"
        )

    text = payload.get("text")
    problem = validate_text(text, settings.MAX_TEXT_LENGTH)
    if problem is not None:
        message, reason = problem
        context: dict[str, Any] = {"reason": reason}
        if reason == "too_long":
            context.update(max_length=settings.MAX_TEXT_LENGTH, actual_length=len(text))
        _validation_failed(settings, metrics, corr, "text", message, **context)

    raw_options = payload.get("options") or {}
    if not isinstance(raw_options, dict):
        _validation_failed(settings, metrics, corr, "options", "Options must be an object")
    try:
        options = CorrectOptions.model_validate(
            {"language": settings.DEFAULT_LANGUAGE, **raw_options}
        )
    except ValidationError as e:
        _validation_failed(
            settings, metrics, corr, "options.language", f"Invalid options: {e.errors()[0]['msg']}"
        )

    logger.info(
        f"Correcting {len(text)} characters",
        correlation_id=corr.original,
        language=options.language,
    )

    try:
        result = await orchestrator.correct(text, options.language)
    except AllBackendsExhausted as e:
        metrics["correction_requests_total"].labels(status="error", service_used="none").inc()
        metrics["api_errors_total"].labels(
            endpoint="/api/correct", error_type="processing_error"
        ).inc()
        raise_processing_error(
            service=settings.SERVICE_NAME,
            operation=OPERATION,
            message=f"Correction failed: {e}",
            correlation_id=corr.uuid,
        )

    metrics["correction_requests_total"].labels(
        status="success", service_used=result.service_used
    ).inc()
    metrics["correction_edits"].observe(len(result.edits))

    logger.info(
        f"Correction completed: {len(result.edits)} edits in "
        f"{result.statistics.processing_time_ms}ms",
        correlation_id=corr.original,
        service_used=result.service_used,
    )

    return CorrectResponse.from_result(result, corr.original).to_json(), 200


@correction_bp.route("/api/languages", methods=["GET"])
async def list_languages() -> tuple[dict[str, Any], int]:
    """Static list of supported language codes."""
    return LanguagesResponse(data=list(SUPPORTED_LANGUAGES)).to_json(), 200


@correction_bp.route("/api", methods=["GET"])
@inject
async def api_info(
    settings: FromDishka[Settings],
    orchestrator: FromDishka[CorrectionOrchestratorProtocol],
) -> tuple[dict[str, Any], int]:
    """Service description with endpoints and configured backends."""
    return {
        "name": settings.SERVICE_NAME,
        "version": settings.VERSION,
        "endpoints": {
            "correct": "POST /api/correct",
            "languages": "GET /api/languages",
            "health": "GET /api/health",
            "metrics": "GET /metrics",
        },
        "backends": [
            {"name": r.name, "available": r.available, "priority": r.priority}
            for r in orchestrator.registrations
        ],
        "maxTextLength": settings.MAX_TEXT_LENGTH,
    }, 200
