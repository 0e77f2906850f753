"""HuggingFace hosted inference provider implementation."""

import asyncio
from typing import Any, ClassVar

import structlog

from src.infrastructure.llm.exceptions import (
    LLMAuthenticationError,
    LLMModelNotFoundError,
    LLMProviderError,
    LLMResponseFormatError,
    LLMUnavailableError,
)
from src.infrastructure.llm.http_errors import (
    LOADING_MARKERS,
    classify_response,
    extract_error_detail,
    response_body,
)
from src.infrastructure.llm.http_provider import HTTPProvider
from src.infrastructure.llm.models import ModelId, Provider

logger = structlog.get_logger()

TEXT_FIELDS = ("generated_text", "summary_text", "text")


class HuggingFaceProvider(HTTPProvider):
    """Provider for models served by HuggingFace hosted inference.

    Hosted models are unloaded when idle and answer 503 while they warm up.
    The adapter waits and retries on the same endpoint a bounded number of
    times, then tries the mirror endpoint before giving up. Unknown model
    names and rejected keys fail immediately.
    """

    provider: ClassVar[Provider] = Provider.HUGGINGFACE
    ENDPOINTS: ClassVar[tuple[str, ...]] = (
        "https://api-inference.huggingface.co/models",
        "https://router.huggingface.co/hf-inference/models",
    )
    DEFAULT_MODEL = "mistralai/Mistral-7B-Instruct-v0.2"

    def __init__(
        self,
        api_key: str,
        *,
        model_name: str | None = None,
        endpoints: tuple[str, ...] | None = None,
        loading_retry_delay: float = 5.0,
        max_loading_retries: int = 2,
        **kwargs: Any,
    ) -> None:
        """Initialize the HuggingFace provider.

        Args:
            api_key: HuggingFace access token.
            model_name: Hosted model to call. Defaults to DEFAULT_MODEL.
            endpoints: Base URLs tried in order (primary first).
            loading_retry_delay: Seconds to wait after a "model loading" answer.
            max_loading_retries: Retries per endpoint while the model loads.
            **kwargs: Passed to HTTPProvider.
        """
        super().__init__(api_key, **kwargs)
        self._model_name = model_name or self.DEFAULT_MODEL
        self._endpoints = endpoints or self.ENDPOINTS
        self._loading_retry_delay = loading_retry_delay
        self._max_loading_retries = max_loading_retries

    async def _do_generate(self, prompt: str, model: ModelId) -> str:
        last_error: LLMProviderError | None = None

        for endpoint in self._endpoints:
            try:
                return await self._generate_at(f"{endpoint}/{self._model_name}", prompt)
            except (LLMModelNotFoundError, LLMAuthenticationError):
                raise
            except LLMProviderError as e:
                logger.warning(
                    "huggingface_endpoint_failed",
                    endpoint=endpoint,
                    model=self._model_name,
                    error_kind=e.kind.value,
                    error=str(e),
                )
                last_error = e

        assert last_error is not None
        raise last_error

    async def _generate_at(self, url: str, prompt: str) -> str:
        inputs = f"{self._system_prompt}\n\n{prompt}" if self._system_prompt else prompt
        payload: dict[str, Any] = {
            "inputs": inputs,
            "parameters": {
                "max_new_tokens": self._max_tokens,
                "temperature": self._temperature,
                "return_full_text": False,
            },
            "options": {"wait_for_model": False},
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        retries = 0
        while True:
            logger.debug(
                "llm_request_start",
                provider=self.provider.value,
                model=self._model_name,
                url=url,
                attempt=retries + 1,
            )
            response = await self._post(url, payload=payload, headers=headers)

            if response.status_code == 503 and retries < self._max_loading_retries:
                retries += 1
                logger.info(
                    "huggingface_model_loading",
                    model=self._model_name,
                    url=url,
                    retry=retries,
                    retry_in_seconds=self._loading_retry_delay,
                )
                await asyncio.sleep(self._loading_retry_delay)
                continue

            if response.status_code == 404:
                raise LLMModelNotFoundError(
                    f"HuggingFace model '{self._model_name}' was not found. "
                    f"Set HUGGINGFACE_MODEL to a hosted model such as "
                    f"'{self.DEFAULT_MODEL}'.",
                    model=self._model_name,
                    provider=self.provider.value,
                    status_code=404,
                    body=response_body(response),
                )

            if response.is_error:
                raise classify_response(
                    response, provider=self.provider, model=self._model_name
                )

            content = normalize_generated_text(response_body(response))

            logger.debug(
                "llm_request_success",
                provider=self.provider.value,
                model=self._model_name,
                response_length=len(content),
            )
            return content


def normalize_generated_text(data: Any) -> str:
    """Turn any known hosted-inference payload shape into a single string.

    Accepted shapes: a list (first element is used), an object with a
    ``generated_text``, ``summary_text`` or ``text`` field, or a bare string.

    Raises:
        LLMProviderError: If the payload reports an error.
        LLMResponseFormatError: If the shape is not recognized.
    """
    if isinstance(data, str):
        return data

    if isinstance(data, list) and data:
        return normalize_generated_text(data[0])

    if isinstance(data, dict):
        for field in TEXT_FIELDS:
            value = data.get(field)
            if isinstance(value, str):
                return value

        if data.get("error"):
            detail = extract_error_detail(data)
            if any(marker in detail.lower() for marker in LOADING_MARKERS):
                raise LLMUnavailableError(
                    f"HuggingFace model is loading: {detail}",
                    provider=Provider.HUGGINGFACE.value,
                    body=data,
                )
            raise LLMProviderError(
                f"HuggingFace API error: {detail}",
                provider=Provider.HUGGINGFACE.value,
                body=data,
            )

    raise LLMResponseFormatError(
        "Unexpected response format from HuggingFace",
        provider=Provider.HUGGINGFACE.value,
        body=data,
    )
