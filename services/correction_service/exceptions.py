"""Service-specific exceptions for the Correction Service.

Backend errors are raised by adapters and consumed by the orchestrator;
they never reach the HTTP caller.
"""

from grammarfix_service_libs.error_handling.error_enums import ErrorCode


class CorrectionServiceError(Exception):
    """Base exception for the Correction Service."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR):
        self.error_code = error_code
        super().__init__(message)


class BackendError(CorrectionServiceError):
    """Base for failures of a single correction backend."""

    outcome = "error"

    def __init__(self, backend: str, message: str, error_code: ErrorCode):
        self.backend = backend
        super().__init__(f"{backend}: {message}", error_code)


class BackendUnavailable(BackendError):
    """Credential missing, upstream 5xx, or transport failure."""

    outcome = "unavailable"

    def __init__(self, backend: str, message: str):
        super().__init__(backend, message, ErrorCode.SERVICE_UNAVAILABLE)


class BackendRateLimited(BackendError):
    """Upstream answered HTTP 429."""

    outcome = "rate_limited"

    def __init__(self, backend: str, message: str = "Rate limit exceeded"):
        super().__init__(backend, message, ErrorCode.RATE_LIMIT)


class BackendAuthError(BackendError):
    """Upstream rejected the configured credential."""

    outcome = "auth_error"

    def __init__(self, backend: str, message: str = "Invalid API key"):
        super().__init__(backend, message, ErrorCode.AUTHENTICATION_ERROR)


class BackendTimeout(BackendError):
    """Backend did not answer within its timeout."""

    outcome = "timeout"

    def __init__(self, backend: str, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(backend, f"no response within {timeout_seconds}s", ErrorCode.TIMEOUT)


class DegenerateCorrection(BackendError):
    """Backend answered with an unusable candidate."""

    outcome = "degenerate"

    def __init__(self, backend: str, message: str):
        super().__init__(backend, message, ErrorCode.INVALID_RESPONSE)


class ModelWarmingUp(BackendError):
    """Hosted model reported it is still loading; retried by the warm-up policy."""

    outcome = "warming_up"

    def __init__(self, backend: str, message: str = "Model is loading"):
        super().__init__(backend, message, ErrorCode.SERVICE_UNAVAILABLE)


class AllBackendsExhausted(CorrectionServiceError):
    """Even the rule table failed. Indicates a defect, not an upstream problem."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.PROCESSING_ERROR)
