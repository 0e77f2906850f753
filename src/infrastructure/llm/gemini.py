"""Google Gemini (generative language API) provider implementation."""

from typing import Any, ClassVar

import httpx
import structlog

from src.infrastructure.llm.exceptions import (
    LLMModelNotFoundError,
    LLMResponseFormatError,
)
from src.infrastructure.llm.http_errors import classify_response
from src.infrastructure.llm.http_provider import HTTPProvider
from src.infrastructure.llm.models import ModelId, Provider

logger = structlog.get_logger()


class GeminiProvider(HTTPProvider):
    """Provider for Google Gemini models.

    Google exposes several model names whose availability depends on the
    account and region. Names are tried from most to least capable; the
    adapter moves to the next name only when the current one is not found.
    Any other failure ends the call immediately.

    The API key travels in the ``x-goog-api-key`` header, never in the URL.
    """

    provider: ClassVar[Provider] = Provider.GOOGLE
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
    MODEL_NAMES: ClassVar[tuple[str, ...]] = (
        "gemini-1.5-pro",
        "gemini-1.5-flash",
        "gemini-pro",
    )

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = BASE_URL,
        model_names: tuple[str, ...] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(api_key, **kwargs)
        self._base_url = base_url.rstrip("/")
        self._model_names = model_names or self.MODEL_NAMES

    async def _do_generate(self, prompt: str, model: ModelId) -> str:
        last_error: LLMModelNotFoundError | None = None

        for model_name in self._model_names:
            try:
                return await self._generate_with(model_name, prompt)
            except LLMModelNotFoundError as e:
                logger.info(
                    "gemini_model_not_found_trying_next",
                    model=model_name,
                )
                last_error = e

        assert last_error is not None
        raise LLMModelNotFoundError(
            "None of the Gemini models are available for this API key "
            f"(tried {', '.join(self._model_names)})",
            model=self._model_names[-1],
            provider=self.provider.value,
            status_code=last_error.status_code,
            body=last_error.body,
        ) from last_error

    async def _generate_with(self, model_name: str, prompt: str) -> str:
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._temperature,
                "maxOutputTokens": self._max_tokens,
            },
        }
        if self._system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": self._system_prompt}]}

        logger.debug(
            "llm_request_start",
            provider=self.provider.value,
            model=model_name,
            prompt_length=len(prompt),
        )

        response = await self._post(
            f"{self._base_url}/models/{model_name}:generateContent",
            payload=payload,
            headers={"x-goog-api-key": self._api_key},
        )
        if response.is_error:
            raise classify_response(response, provider=self.provider, model=model_name)

        content = _extract_text(response)

        logger.debug(
            "llm_request_success",
            provider=self.provider.value,
            model=model_name,
            response_length=len(content),
        )
        return content


def _extract_text(response: httpx.Response) -> str:
    """Join the parts of the first candidate.

    A response without candidates means the prompt was blocked.
    """
    try:
        data = response.json()
    except ValueError:
        data = None

    if not isinstance(data, dict):
        raise LLMResponseFormatError(
            "Unexpected response format from Google Gemini",
            provider=Provider.GOOGLE.value,
            status_code=response.status_code,
            body=response.text[:300],
        )

    candidates = data.get("candidates")
    if not candidates:
        reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates")
        raise LLMResponseFormatError(
            f"Google Gemini returned no content ({reason})",
            provider=Provider.GOOGLE.value,
            status_code=response.status_code,
            body=data,
        )

    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))
