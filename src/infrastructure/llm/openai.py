"""OpenAI chat completions provider implementation."""

from typing import Any, ClassVar

import structlog
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.infrastructure.llm.credentials import describe_credential
from src.infrastructure.llm.exceptions import (
    LLMAuthenticationError,
    LLMModelNotFoundError,
    LLMProviderError,
    LLMQuotaExceededError,
    LLMRateLimitError,
    LLMTimeoutError,
    LLMUnavailableError,
)
from src.infrastructure.llm.http_errors import QUOTA_MARKERS
from src.infrastructure.llm.http_provider import HTTPProvider
from src.infrastructure.llm.models import ModelId, Provider

logger = structlog.get_logger()


class OpenAIProvider(HTTPProvider):
    """Provider for OpenAI chat models, serving both OpenAI tiers.

    Requests go through the official SDK, which shares the adapter's httpx
    client. SDK errors are mapped onto the provider error taxonomy.
    """

    provider: ClassVar[Provider] = Provider.OPENAI

    MODEL_NAMES: ClassVar[dict[ModelId, str]] = {
        ModelId.GPT_4_TURBO: "gpt-4-turbo",
        ModelId.GPT_4O_MINI: "gpt-4o-mini",
    }

    def __init__(
        self,
        api_key: str,
        *,
        default_model: str = "gpt-4o",
        **kwargs: Any,
    ) -> None:
        """Initialize the OpenAI provider.

        Args:
            api_key: OpenAI API key.
            default_model: Model used for symbolic ids missing from MODEL_NAMES.
            **kwargs: Passed to HTTPProvider.
        """
        super().__init__(api_key, **kwargs)
        self._default_model = default_model
        # Retries happen in _create, not inside the SDK
        self._sdk = AsyncOpenAI(
            api_key=api_key,
            timeout=self._timeout,
            max_retries=0,
            http_client=self._client,
        )

    def model_name(self, model: ModelId) -> str:
        """Concrete OpenAI model name for a symbolic id."""
        return self.MODEL_NAMES.get(model, self._default_model)

    async def _do_generate(self, prompt: str, model: ModelId) -> str:
        model_name = self.model_name(model)

        messages: list[dict[str, str]] = []
        if self._system_prompt:
            messages.append({"role": "system", "content": self._system_prompt})
        messages.append({"role": "user", "content": prompt})

        logger.debug(
            "llm_request_start",
            provider=self.provider.value,
            model=model_name,
            prompt_length=len(prompt),
        )

        try:
            response = await self._create(model_name, messages)
        except APITimeoutError as e:
            logger.warning(
                "llm_timeout",
                provider=self.provider.value,
                model=model_name,
                timeout_seconds=self._timeout,
            )
            raise LLMTimeoutError(
                f"Request to OpenAI timed out after {self._timeout}s",
                provider=self.provider.value,
            ) from e
        except APIConnectionError as e:
            raise LLMUnavailableError(
                "Unable to connect to OpenAI", provider=self.provider.value
            ) from e
        except APIStatusError as e:
            raise _classify_status_error(e, model_name) from e
        except Exception as e:
            logger.error(
                "llm_unexpected_error",
                provider=self.provider.value,
                model=model_name,
                error_type=type(e).__name__,
            )
            raise LLMProviderError(
                "An unexpected error occurred", provider=self.provider.value
            ) from e

        content = response.choices[0].message.content or ""

        logger.debug(
            "llm_request_success",
            provider=self.provider.value,
            model=model_name,
            response_length=len(content),
        )
        return content

    @retry(
        retry=retry_if_exception_type((APIConnectionError, APITimeoutError)),
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, max=5),
        reraise=True,
    )
    async def _create(self, model_name: str, messages: list[dict[str, str]]) -> Any:
        return await self._sdk.chat.completions.create(
            model=model_name,
            messages=messages,  # type: ignore[arg-type]
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )


def _classify_status_error(error: APIStatusError, model_name: str) -> LLMProviderError:
    """Map an SDK status error to the provider error taxonomy."""
    context: dict[str, Any] = {
        "provider": Provider.OPENAI.value,
        "status_code": error.status_code,
        "body": error.body,
    }

    if isinstance(error, RateLimitError):
        if _is_quota_error(error):
            logger.warning("llm_quota_exceeded", provider=Provider.OPENAI.value)
            return LLMQuotaExceededError(
                "OpenAI quota exceeded. Check your plan and billing details.",
                **context,
            )
        logger.warning("llm_rate_limited", provider=Provider.OPENAI.value, model=model_name)
        return LLMRateLimitError(
            "Rate limited by OpenAI. Please try again shortly.", **context
        )

    if isinstance(error, AuthenticationError | PermissionDeniedError):
        return LLMAuthenticationError(
            f"OpenAI rejected the API key ({error.status_code}). "
            f"Check {describe_credential(Provider.OPENAI)}.",
            **context,
        )

    if isinstance(error, NotFoundError):
        return LLMModelNotFoundError(
            f"Model '{model_name}' was not found on OpenAI. "
            "Check that your account has access to it.",
            model=model_name,
            **context,
        )

    logger.error(
        "llm_api_error",
        provider=Provider.OPENAI.value,
        model=model_name,
        status_code=error.status_code,
    )
    error_cls = LLMUnavailableError if error.status_code >= 500 else LLMProviderError
    return error_cls(f"OpenAI API error ({error.status_code}): {error.message}", **context)


def _is_quota_error(error: RateLimitError) -> bool:
    """OpenAI reports exhausted credit as a 429 with a distinct error code."""
    if getattr(error, "code", None) == "insufficient_quota":
        return True
    return any(marker in str(error).lower() for marker in QUOTA_MARKERS)
