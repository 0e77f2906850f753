"""Logging and OpenTelemetry setup."""

import logging
from typing import TYPE_CHECKING

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ParentBasedTraceIdRatio

from src.infrastructure.observability.structlog_processor import (
    add_trace_context,
    drop_secrets,
)

if TYPE_CHECKING:
    from fastapi import FastAPI

_tracer_provider: TracerProvider | None = None
_initialized: bool = False


def init_observability(
    service_name: str,
    service_version: str,
    *,
    otlp_endpoint: str | None = None,
    console_export: bool = False,
    enabled: bool = True,
    sample_rate: float = 1.0,
    log_level: str = "INFO",
    json_logs: bool = False,
    app: "FastAPI | None" = None,
) -> None:
    """Configure structured logging and, optionally, tracing.

    Safe to call more than once; only the first call has an effect until
    ``shutdown_observability`` runs.

    Args:
        service_name: Reported as ``service.name`` on every span.
        service_version: Reported as ``service.version``.
        otlp_endpoint: Base URL of an OTLP/HTTP collector, without the
            ``/v1/traces`` path.
        console_export: Also print finished spans to stdout.
        enabled: When False only logging is configured and spans stay no-op.
        sample_rate: Fraction of root traces kept, 0.0 to 1.0.
        log_level: Standard library level name, e.g. "DEBUG".
        json_logs: One JSON object per line instead of the console format.
        app: FastAPI app whose requests should get server spans.
    """
    global _initialized

    if _initialized:
        return

    _configure_structlog(log_level=log_level, json_logs=json_logs)
    if enabled:
        _configure_tracing(
            service_name,
            service_version,
            otlp_endpoint=otlp_endpoint,
            console_export=console_export,
            sample_rate=sample_rate,
            app=app,
        )
    _initialized = True


def shutdown_observability() -> None:
    """Flush buffered spans so nothing is lost on exit."""
    global _tracer_provider, _initialized

    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        _tracer_provider = None
    _initialized = False


def _configure_tracing(
    service_name: str,
    service_version: str,
    *,
    otlp_endpoint: str | None,
    console_export: bool,
    sample_rate: float,
    app: "FastAPI | None",
) -> None:
    global _tracer_provider

    provider = TracerProvider(
        resource=Resource.create(
            {SERVICE_NAME: service_name, SERVICE_VERSION: service_version}
        ),
        sampler=ParentBasedTraceIdRatio(sample_rate),
    )
    if otlp_endpoint:
        exporter = OTLPSpanExporter(endpoint=f"{otlp_endpoint.rstrip('/')}/v1/traces")
        provider.add_span_processor(BatchSpanProcessor(exporter))
    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer_provider = provider

    if app is not None:
        FastAPIInstrumentor.instrument_app(app)
    # Vendor calls from the httpx-based adapters become client spans
    HTTPXClientInstrumentor().instrument()


def _configure_structlog(*, log_level: str, json_logs: bool) -> None:
    level = getattr(logging, log_level.upper(), logging.INFO)
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            add_trace_context,
            drop_secrets,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", level=level)
