"""Correlation middleware for Quart services.

Resolves the correlation context once per request, stores it on `g` for
the DI provider and error handlers, binds it into the structlog context
and echoes it back on the response.
"""

from __future__ import annotations

from quart import Quart, Response, g, request

from grammarfix_service_libs.error_handling.correlation import (
    CORRELATION_HEADER,
    extract_correlation_context_from_request,
)
from grammarfix_service_libs.logging_utils import bind_request_context


def setup_correlation_middleware(app: Quart) -> None:
    """Install before/after request hooks handling the correlation id."""

    @app.before_request
    async def _bind_correlation() -> None:
        ctx = extract_correlation_context_from_request(request)
        g.correlation_context = ctx
        bind_request_context(ctx.original, path=request.path, method=request.method)

    @app.after_request
    async def _echo_correlation(response: Response) -> Response:
        ctx = getattr(g, "correlation_context", None)
        if ctx is not None:
            response.headers[CORRELATION_HEADER] = ctx.original
        return response
