"""Tests for the OpenAI provider."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import (
    APIConnectionError,
    APITimeoutError,
    AuthenticationError,
    NotFoundError,
    RateLimitError,
)

from src.infrastructure.llm import (
    LLMAuthenticationError,
    LLMConfigurationError,
    LLMModelNotFoundError,
    LLMProviderError,
    LLMQuotaExceededError,
    LLMRateLimitError,
    LLMTimeoutError,
    LLMUnavailableError,
    ModelId,
    OpenAIProvider,
)


def _rate_limit_error(body=None) -> RateLimitError:
    return RateLimitError(
        message="Rate limited",
        response=MagicMock(status_code=429),
        body=body,
    )


class TestOpenAIProviderInit:
    """Tests for OpenAIProvider initialization."""

    def test_init_with_valid_api_key(self):
        """Provider should initialize with valid API key."""
        provider = OpenAIProvider(api_key="test-key")

        assert provider._default_model == "gpt-4o"
        assert provider._timeout == 30.0

    def test_init_with_empty_api_key_raises(self):
        """Provider should raise error with empty API key."""
        with pytest.raises(LLMConfigurationError) as exc_info:
            OpenAIProvider(api_key="")

        assert "API key is required" in str(exc_info.value)
        assert exc_info.value.provider == "openai"

    def test_init_with_custom_circuit_breaker_settings(self):
        """Provider should accept custom circuit breaker settings."""
        provider = OpenAIProvider(
            api_key="test-key",
            circuit_breaker_fail_max=3,
            circuit_breaker_timeout=30.0,
        )

        assert provider._breaker._fail_max == 3

    def test_tiers_map_to_concrete_models(self):
        """Both OpenAI tiers resolve to their own vendor model."""
        provider = OpenAIProvider(api_key="test-key")

        assert provider.model_name(ModelId.GPT_4_TURBO) == "gpt-4-turbo"
        assert provider.model_name(ModelId.GPT_4O_MINI) == "gpt-4o-mini"

    def test_unmapped_model_falls_back_to_default(self):
        """A symbolic id without a mapping uses the default model."""
        provider = OpenAIProvider(api_key="test-key", default_model="gpt-4o")

        assert provider.model_name(ModelId.GEMINI) == "gpt-4o"


class TestOpenAIProviderGenerate:
    """Tests for OpenAIProvider.generate()."""

    @pytest.fixture
    def provider(self):
        return OpenAIProvider(api_key="test-key", system_prompt="You draft contracts.")

    @pytest.fixture
    def mock_response(self):
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = "# Agreement"
        return response

    async def test_generate_returns_content(self, provider, mock_response):
        provider._sdk.chat.completions.create = AsyncMock(return_value=mock_response)

        result = await provider.generate("Draft an NDA", model=ModelId.GPT_4O_MINI)

        assert result == "# Agreement"

    async def test_generate_sends_system_prompt_and_settings(
        self, provider, mock_response
    ):
        provider._sdk.chat.completions.create = AsyncMock(return_value=mock_response)

        await provider.generate("Draft an NDA", model=ModelId.GPT_4_TURBO)

        call_kwargs = provider._sdk.chat.completions.create.call_args.kwargs
        assert call_kwargs["model"] == "gpt-4-turbo"
        assert call_kwargs["temperature"] == 0.2
        assert call_kwargs["max_tokens"] == 4000
        assert call_kwargs["messages"] == [
            {"role": "system", "content": "You draft contracts."},
            {"role": "user", "content": "Draft an NDA"},
        ]

    async def test_generate_timeout_raises_llm_timeout_error(self, provider):
        provider._sdk.chat.completions.create = AsyncMock(
            side_effect=APITimeoutError(request=MagicMock())
        )

        with pytest.raises(LLMTimeoutError) as exc_info:
            await provider.generate("Hello", model=ModelId.GPT_4O_MINI)

        assert "timed out" in str(exc_info.value)
        assert exc_info.value.provider == "openai"

    async def test_rate_limit_raises_llm_rate_limit_error(self, provider):
        provider._sdk.chat.completions.create = AsyncMock(
            side_effect=_rate_limit_error()
        )

        with pytest.raises(LLMRateLimitError) as exc_info:
            await provider.generate("Hello", model=ModelId.GPT_4O_MINI)

        assert "Rate limited" in str(exc_info.value)
        assert provider._sdk.chat.completions.create.await_count == 1

    async def test_insufficient_quota_raises_quota_error(self, provider):
        """OpenAI reports exhausted credit as a 429 with a distinct code."""
        provider._sdk.chat.completions.create = AsyncMock(
            side_effect=_rate_limit_error(
                body={"code": "insufficient_quota", "message": "You exceeded your quota"}
            )
        )

        with pytest.raises(LLMQuotaExceededError):
            await provider.generate("Hello", model=ModelId.GPT_4O_MINI)

        assert provider._sdk.chat.completions.create.await_count == 1

    async def test_authentication_error_is_classified(self, provider):
        provider._sdk.chat.completions.create = AsyncMock(
            side_effect=AuthenticationError(
                message="Invalid key",
                response=MagicMock(status_code=401),
                body=None,
            )
        )

        with pytest.raises(LLMAuthenticationError) as exc_info:
            await provider.generate("Hello", model=ModelId.GPT_4O_MINI)

        assert "OPENAI_API_KEY" in str(exc_info.value)

    async def test_not_found_error_is_classified(self, provider):
        provider._sdk.chat.completions.create = AsyncMock(
            side_effect=NotFoundError(
                message="No such model",
                response=MagicMock(status_code=404),
                body=None,
            )
        )

        with pytest.raises(LLMModelNotFoundError) as exc_info:
            await provider.generate("Hello", model=ModelId.GPT_4_TURBO)

        assert exc_info.value.model == "gpt-4-turbo"

    async def test_connection_error_raises_unavailable(self, provider):
        provider._sdk.chat.completions.create = AsyncMock(
            side_effect=APIConnectionError(request=MagicMock())
        )

        with pytest.raises(LLMUnavailableError) as exc_info:
            await provider.generate("Hello", model=ModelId.GPT_4O_MINI)

        assert "Unable to connect" in str(exc_info.value)

    async def test_unexpected_error_is_wrapped(self, provider):
        provider._sdk.chat.completions.create = AsyncMock(
            side_effect=RuntimeError("boom")
        )

        with pytest.raises(LLMProviderError) as exc_info:
            await provider.generate("Hello", model=ModelId.GPT_4O_MINI)

        assert str(exc_info.value) == "An unexpected error occurred"

    async def test_handles_empty_response_content(self, provider):
        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = None
        provider._sdk.chat.completions.create = AsyncMock(return_value=response)

        result = await provider.generate("Hello", model=ModelId.GPT_4O_MINI)

        assert result == ""


class TestOpenAIProviderResilience:
    """Tests for retry and circuit breaker behavior."""

    async def test_retries_on_connection_error(self):
        provider = OpenAIProvider(api_key="test-key")

        mock_response = MagicMock()
        mock_response.choices = [MagicMock()]
        mock_response.choices[0].message.content = "Success after retry"

        provider._sdk.chat.completions.create = AsyncMock(
            side_effect=[
                APIConnectionError(request=MagicMock()),
                mock_response,
            ]
        )

        result = await provider.generate("Hello", model=ModelId.GPT_4O_MINI)

        assert result == "Success after retry"
        assert provider._sdk.chat.completions.create.call_count == 2

    async def test_circuit_breaker_opens_after_failures(self):
        """With fail_max=3 the third consecutive failure opens the circuit."""
        provider = OpenAIProvider(
            api_key="test-key",
            circuit_breaker_fail_max=3,
            circuit_breaker_timeout=60.0,
        )
        provider._sdk.chat.completions.create = AsyncMock(
            side_effect=_rate_limit_error()
        )

        for _ in range(2):
            with pytest.raises(LLMRateLimitError):
                await provider.generate("Hello", model=ModelId.GPT_4O_MINI)

        with pytest.raises(LLMUnavailableError) as exc_info:
            await provider.generate("Hello", model=ModelId.GPT_4O_MINI)

        assert "temporarily unavailable" in str(exc_info.value)

    async def test_auth_failures_do_not_open_circuit(self):
        """Configuration errors say nothing about vendor health."""
        provider = OpenAIProvider(api_key="test-key", circuit_breaker_fail_max=2)
        provider._sdk.chat.completions.create = AsyncMock(
            side_effect=AuthenticationError(
                message="Invalid key",
                response=MagicMock(status_code=401),
                body=None,
            )
        )

        for _ in range(4):
            with pytest.raises(LLMAuthenticationError):
                await provider.generate("Hello", model=ModelId.GPT_4O_MINI)
