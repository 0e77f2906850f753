"""Base class for adapters that speak to a vendor REST API over httpx."""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, ClassVar

import httpx
import structlog
from aiobreaker import CircuitBreaker, CircuitBreakerError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.infrastructure.llm.exceptions import (
    LLMAuthenticationError,
    LLMConfigurationError,
    LLMModelNotFoundError,
    LLMQuotaExceededError,
    LLMUnavailableError,
)
from src.infrastructure.llm.http_errors import classify_transport_error
from src.infrastructure.llm.models import ModelId, Provider
from src.infrastructure.observability import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)

DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_TOKENS = 4000

# Failures caused by account or request configuration say nothing about the
# vendor's health and must not open the circuit.
BREAKER_EXCLUDED_ERRORS: tuple[type[Exception], ...] = (
    LLMAuthenticationError,
    LLMModelNotFoundError,
    LLMQuotaExceededError,
)


class HTTPProvider(ABC):
    """Shared plumbing for REST-based provider adapters.

    Includes resilience patterns:
    - One retry with exponential backoff for transport failures
    - Circuit breaker to fail fast after repeated failures
    - Configurable timeouts

    Subclasses implement ``_do_generate``.
    """

    provider: ClassVar[Provider]

    def __init__(
        self,
        api_key: str,
        *,
        system_prompt: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout_seconds: float = 30.0,
        circuit_breaker_fail_max: int = 5,
        circuit_breaker_timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            api_key: Vendor API key.
            system_prompt: Instructions sent ahead of every prompt.
            temperature: Sampling temperature.
            max_tokens: Maximum number of tokens to generate.
            timeout_seconds: Request timeout in seconds.
            circuit_breaker_fail_max: Open circuit after this many failures.
            circuit_breaker_timeout: Time in seconds before attempting recovery.
            client: Optional preconfigured HTTP client (tests inject one with
                a mock transport).

        Raises:
            LLMConfigurationError: If API key is missing.
        """
        if not api_key:
            raise LLMConfigurationError(
                f"{self.provider.display_name} API key is required",
                provider=self.provider.value,
            )

        self._api_key = api_key
        self._system_prompt = system_prompt
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._timeout = timeout_seconds
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

        self._breaker = CircuitBreaker(
            fail_max=circuit_breaker_fail_max,
            timeout_duration=timedelta(seconds=circuit_breaker_timeout),
            exclude=BREAKER_EXCLUDED_ERRORS,
        )

    async def generate(self, prompt: str, *, model: ModelId) -> str:
        """Generate a document through the vendor API.

        Raises:
            LLMProviderError: Subclass matching the classified failure.
        """
        with tracer.start_as_current_span("llm.generate") as span:
            span.set_attribute("llm.provider", self.provider.value)
            span.set_attribute("llm.model", model.value)
            span.set_attribute("llm.input_length", len(prompt))

            try:
                result: str = await self._breaker.call_async(
                    self._do_generate, prompt, model
                )
            except CircuitBreakerError as e:
                span.record_exception(e)
                logger.warning(
                    "circuit_breaker_open",
                    provider=self.provider.value,
                    model=model.value,
                )
                raise LLMUnavailableError(
                    f"{self.provider.display_name} is temporarily unavailable. "
                    "Please try again in a moment.",
                    provider=self.provider.value,
                ) from e

            span.set_attribute("llm.output_length", len(result))
            return result

    @abstractmethod
    async def _do_generate(self, prompt: str, model: ModelId) -> str:
        """Call the vendor once and return the generated text."""

    async def _post(
        self,
        url: str,
        *,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """POST with transport retries, converting network failures."""
        try:
            return await self._post_with_retry(url, payload=payload, headers=headers)
        except httpx.TransportError as e:
            logger.warning(
                "llm_transport_error",
                provider=self.provider.value,
                error_type=type(e).__name__,
            )
            raise classify_transport_error(
                e, provider=self.provider, timeout_seconds=self._timeout
            ) from e

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, max=5),
        reraise=True,
    )
    async def _post_with_retry(
        self,
        url: str,
        *,
        payload: dict[str, Any],
        headers: dict[str, str] | None,
    ) -> httpx.Response:
        return await self._client.post(url, json=payload, headers=headers)

    async def aclose(self) -> None:
        await self._client.aclose()
