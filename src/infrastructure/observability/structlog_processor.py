"""Structlog processors: trace context injection and secret scrubbing."""

from typing import Any

from opentelemetry import trace

SECRET_KEYS = frozenset(
    {"api_key", "apikey", "token", "secret", "password", "authorization"}
)
SECRET_KEY_SUFFIXES = ("_api_key", "_apikey", "_token", "_secret", "_password")
REDACTED = "[redacted]"


def add_trace_context(
    logger: Any,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add trace_id and span_id of the active span to log events.

    Lets log lines be correlated with the generation spans they belong to.
    """
    span_context = trace.get_current_span().get_span_context()

    if span_context.is_valid:
        event_dict["trace_id"] = format(span_context.trace_id, "032x")
        event_dict["span_id"] = format(span_context.span_id, "016x")

    return event_dict


def drop_secrets(
    logger: Any,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Redact values of keys named like credentials.

    Matches whole names or suffixes, so ``hf_token`` is redacted while
    ``max_tokens`` is kept.
    """
    for key in event_dict:
        name = key.lower()
        if name in SECRET_KEYS or name.endswith(SECRET_KEY_SUFFIXES):
            event_dict[key] = REDACTED
    return event_dict
