"""Dispatch from symbolic models to provider adapters."""

from typing import TYPE_CHECKING

import structlog

from src.infrastructure.llm.anthropic import AnthropicProvider
from src.infrastructure.llm.credentials import ProviderCredentials
from src.infrastructure.llm.gemini import GeminiProvider
from src.infrastructure.llm.huggingface import HuggingFaceProvider
from src.infrastructure.llm.models import MODEL_PROVIDERS, ModelId, Provider
from src.infrastructure.llm.openai import OpenAIProvider
from src.infrastructure.llm.protocol import LLMProvider

if TYPE_CHECKING:
    from src.config import Settings

logger = structlog.get_logger()


class ProviderRegistry:
    """Holds one adapter per configured provider.

    Adapters are registered once at startup and shared by every request;
    they hold no per-request state.
    """

    def __init__(self, adapters: dict[Provider, LLMProvider] | None = None) -> None:
        self._adapters: dict[Provider, LLMProvider] = dict(adapters or {})

    def register(self, provider: Provider, adapter: LLMProvider) -> None:
        self._adapters[provider] = adapter

    def get(self, provider: Provider) -> LLMProvider | None:
        return self._adapters.get(provider)

    def adapter_for(self, model: ModelId) -> LLMProvider | None:
        """Adapter serving a symbolic model, or None if its provider is absent."""
        return self._adapters.get(MODEL_PROVIDERS[model])

    @property
    def providers(self) -> list[Provider]:
        return [p for p in Provider if p in self._adapters]

    async def aclose(self) -> None:
        """Close every adapter's network client."""
        for provider, adapter in self._adapters.items():
            try:
                await adapter.aclose()
            except Exception as e:
                logger.warning(
                    "provider_close_failed",
                    provider=provider.value,
                    error=str(e),
                )


def build_provider_registry(
    settings: "Settings",
    credentials: ProviderCredentials,
    *,
    system_prompt: str | None = None,
) -> ProviderRegistry:
    """Construct adapters for every provider that has a credential.

    Args:
        settings: Application settings (timeouts, model overrides).
        credentials: API keys per provider.
        system_prompt: Instructions sent with every generation request.

    Returns:
        Registry with one adapter per configured provider.
    """
    common = {
        "system_prompt": system_prompt,
        "timeout_seconds": settings.llm_timeout_seconds,
        "circuit_breaker_fail_max": settings.circuit_breaker_fail_max,
        "circuit_breaker_timeout": settings.circuit_breaker_timeout,
    }
    registry = ProviderRegistry()

    if key := credentials.get(Provider.OPENAI):
        registry.register(
            Provider.OPENAI,
            OpenAIProvider(key, default_model=settings.openai_default_model, **common),
        )

    if key := credentials.get(Provider.ANTHROPIC):
        registry.register(Provider.ANTHROPIC, AnthropicProvider(key, **common))

    if key := credentials.get(Provider.GOOGLE):
        registry.register(Provider.GOOGLE, GeminiProvider(key, **common))

    if key := credentials.get(Provider.HUGGINGFACE):
        registry.register(
            Provider.HUGGINGFACE,
            HuggingFaceProvider(
                key,
                model_name=settings.huggingface_model,
                loading_retry_delay=settings.huggingface_loading_retry_delay_seconds,
                max_loading_retries=settings.huggingface_max_loading_retries,
                **common,
            ),
        )

    logger.info(
        "provider_registry_built",
        providers=[p.value for p in registry.providers],
    )
    return registry
