"""
Factory functions for structured errors.

Each `raise_*` helper builds an ErrorDetail with consistent `details`
content and raises it wrapped in a GrammarFixError. The helpers are typed
`NoReturn` so call sites read like a `raise` statement.
"""

from __future__ import annotations

import traceback
from datetime import datetime, timezone
from typing import Any, NoReturn
from uuid import UUID

from grammarfix_service_libs.error_handling.error_enums import ErrorCode
from grammarfix_service_libs.error_handling.error_models import ErrorDetail
from grammarfix_service_libs.error_handling.grammarfix_error import GrammarFixError


def create_error_detail(
    error_code: ErrorCode,
    message: str,
    service: str,
    operation: str,
    correlation_id: UUID,
    details: dict[str, Any] | None = None,
    capture_stack: bool = False,
) -> ErrorDetail:
    """Build an ErrorDetail stamped with the current UTC time."""
    return ErrorDetail(
        error_code=error_code,
        message=message,
        correlation_id=correlation_id,
        timestamp=datetime.now(timezone.utc),
        service=service,
        operation=operation,
        details=details or {},
        stack_trace="".join(traceback.format_stack()) if capture_stack else None,
    )


def raise_validation_error(
    service: str,
    operation: str,
    field: str,
    message: str,
    correlation_id: UUID,
    value: Any = None,
    **additional_context: Any,
) -> NoReturn:
    """Raise a VALIDATION_ERROR naming the offending request field."""
    details: dict[str, Any] = {"field": field}
    if value is not None:
        details["value"] = value
    details.update(additional_context)

    raise GrammarFixError(
        create_error_detail(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            service=service,
            operation=operation,
            correlation_id=correlation_id,
            details=details,
        )
    )


def raise_processing_error(
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID,
    **additional_context: Any,
) -> NoReturn:
    """Raise a PROCESSING_ERROR for internal failures."""
    raise GrammarFixError(
        create_error_detail(
            error_code=ErrorCode.PROCESSING_ERROR,
            message=message,
            service=service,
            operation=operation,
            correlation_id=correlation_id,
            details=dict(additional_context),
            capture_stack=True,
        )
    )
