"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from src.api.health import router as health_router
from src.config import get_settings
from src.infrastructure.llm import (
    FallbackOrchestrator,
    ProviderCredentials,
    ProviderRegistry,
    build_provider_registry,
)
from src.infrastructure.observability import (
    init_observability,
    shutdown_observability,
)
from src.modules.generation import DocumentGenerationService, TemplateRegistry
from src.modules.generation.prompts import SYSTEM_INSTRUCTIONS
from src.modules.generation.routes import router as generation_router
from src.modules.generation.routes import (
    request_validation_handler,
    set_generation_service,
)

logger = structlog.get_logger()
settings = get_settings()

# Provider registry (initialized on startup)
_registry: ProviderRegistry | None = None


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan handler for startup/shutdown."""
    global _registry

    credentials = ProviderCredentials.from_settings(settings)
    if not credentials.configured_providers():
        logger.warning("no_providers_configured")

    _registry = build_provider_registry(
        settings, credentials, system_prompt=SYSTEM_INSTRUCTIONS
    )
    orchestrator = FallbackOrchestrator(
        _registry,
        credentials,
        attempt_timeout_seconds=settings.generation_attempt_timeout_seconds,
    )
    templates = TemplateRegistry.from_directory(Path(settings.templates_path))
    set_generation_service(
        DocumentGenerationService(orchestrator, templates, credentials)
    )
    logger.info(
        "generation_service_initialized",
        providers=[p.value for p in credentials.configured_providers()],
        templates=len(templates),
    )

    yield

    # Cleanup on shutdown
    set_generation_service(None)
    if _registry:
        await _registry.aclose()
        logger.info("provider_clients_closed")
    shutdown_observability()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

init_observability(
    settings.app_name,
    settings.app_version,
    otlp_endpoint=settings.otlp_endpoint,
    console_export=settings.tracing_console_export,
    enabled=settings.tracing_enabled,
    sample_rate=settings.tracing_sample_rate,
    log_level=settings.log_level,
    json_logs=settings.log_json,
    app=app,
)

# Malformed bodies answer 400 {error} like every other caller error
app.add_exception_handler(
    RequestValidationError,
    request_validation_handler,  # type: ignore[arg-type]
)

# Register routers
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(generation_router)
