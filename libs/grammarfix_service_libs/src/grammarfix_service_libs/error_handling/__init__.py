"""Structured error handling utilities for GrammarFix services."""

from grammarfix_service_libs.error_handling.correlation import (
    CorrelationContext,
    extract_correlation_context_from_request,
)
from grammarfix_service_libs.error_handling.error_enums import ErrorCode
from grammarfix_service_libs.error_handling.error_models import ErrorDetail
from grammarfix_service_libs.error_handling.factories import (
    create_error_detail,
    raise_processing_error,
    raise_validation_error,
)
from grammarfix_service_libs.error_handling.grammarfix_error import GrammarFixError

__all__ = [
    "CorrelationContext",
    "ErrorCode",
    "ErrorDetail",
    "GrammarFixError",
    "create_error_detail",
    "extract_correlation_context_from_request",
    "raise_processing_error",
    "raise_validation_error",
]
