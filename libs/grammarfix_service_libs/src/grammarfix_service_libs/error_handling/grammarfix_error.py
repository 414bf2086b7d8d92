"""Core exception type carrying a structured ErrorDetail."""

from __future__ import annotations

from typing import Any

from grammarfix_service_libs.error_handling.error_models import ErrorDetail


class GrammarFixError(Exception):
    """Exception raised at service boundaries with a structured error payload.

    The wrapped ErrorDetail is what the Quart error handlers serialize, so
    anything callers need to see belongs in `details`.
    """

    def __init__(self, error_detail: ErrorDetail):
        self.error_detail = error_detail
        super().__init__(f"[{error_detail.error_code.value}] {error_detail.message}")

    @property
    def correlation_id(self) -> str:
        return str(self.error_detail.correlation_id)

    @property
    def error_code(self) -> str:
        return self.error_detail.error_code.value

    @property
    def service(self) -> str:
        return self.error_detail.service

    @property
    def operation(self) -> str:
        return self.error_detail.operation

    def to_dict(self) -> dict[str, Any]:
        return self.error_detail.model_dump(mode="json")
