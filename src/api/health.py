"""Health check endpoints."""

from typing import Annotated, Literal

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.config import Settings, get_settings
from src.infrastructure.llm import Provider, ProviderCredentials

logger = structlog.get_logger()
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: Literal["healthy", "degraded"]
    version: str
    providers: dict[str, bool]


@router.get("", response_model=HealthResponse)
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Report which AI providers have credentials configured.

    The service is "degraded" when no provider is configured, since every
    generation request would then fail. No provider is called.
    """
    credentials = ProviderCredentials.from_settings(settings)
    providers = {p.value: credentials.is_configured(p) for p in Provider}

    if not any(providers.values()):
        logger.warning("health_check_no_providers")
        return HealthResponse(
            status="degraded", version=settings.app_version, providers=providers
        )

    return HealthResponse(
        status="healthy", version=settings.app_version, providers=providers
    )
