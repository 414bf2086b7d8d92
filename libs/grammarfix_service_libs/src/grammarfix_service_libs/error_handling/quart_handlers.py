"""Quart error handlers turning GrammarFixError into JSON error responses."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

from quart import Response, g, jsonify
from werkzeug.exceptions import HTTPException

from grammarfix_service_libs.error_handling.error_enums import ErrorCode
from grammarfix_service_libs.error_handling.error_models import ErrorDetail
from grammarfix_service_libs.error_handling.factories import create_error_detail
from grammarfix_service_libs.error_handling.grammarfix_error import GrammarFixError
from grammarfix_service_libs.logging_utils import create_service_logger

if TYPE_CHECKING:
    from quart import Quart

logger = create_service_logger("grammarfix.error_handlers")

ERROR_CODE_TO_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.MISSING_REQUIRED_FIELD: 400,
    ErrorCode.RESOURCE_NOT_FOUND: 404,
    ErrorCode.AUTHENTICATION_ERROR: 401,
    ErrorCode.RATE_LIMIT: 429,
    ErrorCode.SERVICE_UNAVAILABLE: 503,
    ErrorCode.TIMEOUT: 504,
}


def create_error_response(error_detail: ErrorDetail) -> tuple[Response, int]:
    """Serialize an ErrorDetail into the service error envelope."""
    status_code = ERROR_CODE_TO_STATUS.get(error_detail.error_code, 500)
    body = {
        "success": False,
        "error": {
            "code": error_detail.error_code.value,
            "message": error_detail.message,
            "service": error_detail.service,
            "operation": error_detail.operation,
            "details": error_detail.details,
            "correlationId": str(error_detail.correlation_id),
            "timestamp": error_detail.timestamp.isoformat(),
        },
    }
    return jsonify(body), status_code


def register_error_handlers(app: Quart, service_name: str) -> None:
    """Register GrammarFixError and fallback handlers on the app."""

    @app.errorhandler(GrammarFixError)
    async def handle_grammarfix_error(error: GrammarFixError) -> tuple[Response, int]:
        detail = error.error_detail
        log = logger.warning if detail.error_code == ErrorCode.VALIDATION_ERROR else logger.error
        log(
            f"{detail.operation} failed: {detail.message}",
            correlation_id=str(detail.correlation_id),
            error_code=detail.error_code.value,
        )
        return create_error_response(detail)

    @app.errorhandler(HTTPException)
    async def handle_http_exception(error: HTTPException) -> tuple[Response, int]:
        code = error.code or 500
        return jsonify(
            {
                "success": False,
                "error": {
                    "code": error.name.upper().replace(" ", "_"),
                    "message": error.description,
                },
            }
        ), code

    @app.errorhandler(Exception)
    async def handle_unexpected_error(error: Exception) -> tuple[Response, int]:
        ctx = getattr(g, "correlation_context", None)
        correlation_id = ctx.uuid if ctx is not None else uuid4()
        logger.error(
            f"Unhandled error: {error}",
            correlation_id=str(correlation_id),
            exc_info=True,
        )
        detail = create_error_detail(
            error_code=ErrorCode.UNKNOWN_ERROR,
            message="Internal server error",
            service=service_name,
            operation="unhandled_exception",
            correlation_id=correlation_id,
            details={"error_type": type(error).__name__},
        )
        return create_error_response(detail)
