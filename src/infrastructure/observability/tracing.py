"""Span helpers used by the generation code."""

from opentelemetry import trace
from opentelemetry.trace import Tracer

SpanValue = str | int | float | bool


def get_tracer(name: str) -> Tracer:
    """Tracer for a module, usually called with ``__name__``."""
    return trace.get_tracer(name)


def add_span_attributes(attributes: dict[str, SpanValue]) -> None:
    """Set attributes on the active span. No-op when nothing is recording."""
    span = trace.get_current_span()
    if not span.is_recording():
        return
    span.set_attributes(attributes)
