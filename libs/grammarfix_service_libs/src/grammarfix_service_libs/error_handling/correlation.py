"""Correlation id extraction for inbound HTTP requests."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4, uuid5

from quart import Request

CORRELATION_HEADER = "X-Correlation-ID"

# Namespace for deriving stable UUIDs from non-UUID correlation strings
_CORRELATION_NAMESPACE = UUID("6f1c2a84-3d0e-4b8e-9a51-4f2f0d6b1c37")


@dataclass(frozen=True)
class CorrelationContext:
    """Correlation id as sent by the client plus its canonical UUID form."""

    original: str
    uuid: UUID
    source: str

    @classmethod
    def generate(cls) -> CorrelationContext:
        value = uuid4()
        return cls(original=str(value), uuid=value, source="generated")

    @classmethod
    def from_value(cls, value: str, source: str) -> CorrelationContext:
        try:
            canonical = UUID(value)
        except ValueError:
            canonical = uuid5(_CORRELATION_NAMESPACE, value)
        return cls(original=value, uuid=canonical, source=source)


def extract_correlation_context_from_request(request: Request) -> CorrelationContext:
    """Read the correlation id from the header, then the query string, else generate one."""
    header_value = request.headers.get(CORRELATION_HEADER)
    if header_value and header_value.strip():
        return CorrelationContext.from_value(header_value.strip(), source="header")

    query_value = request.args.get("correlation_id")
    if query_value and query_value.strip():
        return CorrelationContext.from_value(query_value.strip(), source="query")

    return CorrelationContext.generate()
