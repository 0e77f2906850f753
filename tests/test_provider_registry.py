"""Tests for building the provider registry from settings."""

import pytest
from pydantic import SecretStr

from src.config import Settings
from src.infrastructure.llm import (
    AnthropicProvider,
    GeminiProvider,
    HuggingFaceProvider,
    ModelId,
    OpenAIProvider,
    Provider,
    ProviderCredentials,
    ProviderRegistry,
    build_provider_registry,
)


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestBuildProviderRegistry:
    @pytest.mark.asyncio
    async def test_only_configured_providers_registered(self):
        settings = _settings(
            anthropic_api_key=SecretStr("sk-ant"), gemini_api_key=SecretStr("g")
        )
        registry = build_provider_registry(
            settings, ProviderCredentials.from_settings(settings)
        )

        assert registry.providers == [Provider.ANTHROPIC, Provider.GOOGLE]
        assert isinstance(registry.get(Provider.ANTHROPIC), AnthropicProvider)
        assert isinstance(registry.adapter_for(ModelId.GEMINI), GeminiProvider)
        assert registry.adapter_for(ModelId.GPT_4O_MINI) is None
        await registry.aclose()

    @pytest.mark.asyncio
    async def test_settings_flow_into_adapters(self):
        settings = _settings(
            openai_api_key=SecretStr("sk"),
            huggingface_api_key=SecretStr("hf"),
            openai_default_model="gpt-4o-2024-08-06",
            huggingface_model="google/flan-t5-large",
            huggingface_max_loading_retries=4,
        )
        registry = build_provider_registry(
            settings, ProviderCredentials.from_settings(settings), system_prompt="S"
        )

        openai = registry.get(Provider.OPENAI)
        huggingface = registry.get(Provider.HUGGINGFACE)
        assert isinstance(openai, OpenAIProvider)
        assert openai._default_model == "gpt-4o-2024-08-06"
        assert openai._system_prompt == "S"
        assert isinstance(huggingface, HuggingFaceProvider)
        assert huggingface._model_name == "google/flan-t5-large"
        assert huggingface._max_loading_retries == 4
        await registry.aclose()

    def test_empty_credentials_build_empty_registry(self):
        registry = build_provider_registry(_settings(), ProviderCredentials())

        assert registry.providers == []


class TestProviderRegistry:
    @pytest.mark.asyncio
    async def test_aclose_continues_after_failure(self):
        closed: list[str] = []

        class Broken:
            provider = Provider.OPENAI

            async def aclose(self) -> None:
                raise RuntimeError("already closed")

        class Fine:
            provider = Provider.GOOGLE

            async def aclose(self) -> None:
                closed.append("google")

        registry = ProviderRegistry(
            {Provider.OPENAI: Broken(), Provider.GOOGLE: Fine()}  # type: ignore[dict-item]
        )

        await registry.aclose()

        assert closed == ["google"]
