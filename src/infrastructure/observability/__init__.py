"""Observability: structlog configuration and OpenTelemetry tracing."""

from src.infrastructure.observability.setup import (
    init_observability,
    shutdown_observability,
)
from src.infrastructure.observability.structlog_processor import (
    add_trace_context,
    drop_secrets,
)
from src.infrastructure.observability.tracing import (
    add_span_attributes,
    get_tracer,
)

__all__ = [
    "add_span_attributes",
    "add_trace_context",
    "drop_secrets",
    "get_tracer",
    "init_observability",
    "shutdown_observability",
]
