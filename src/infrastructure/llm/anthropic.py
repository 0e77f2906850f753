"""Anthropic Messages API provider implementation."""

from typing import Any, ClassVar

import httpx
import structlog

from src.infrastructure.llm.exceptions import LLMResponseFormatError
from src.infrastructure.llm.http_errors import classify_response
from src.infrastructure.llm.http_provider import HTTPProvider
from src.infrastructure.llm.models import ModelId, Provider

logger = structlog.get_logger()


class AnthropicProvider(HTTPProvider):
    """Provider for Claude models via the Anthropic Messages API.

    Authenticates with the ``x-api-key`` header.
    """

    provider: ClassVar[Provider] = Provider.ANTHROPIC
    BASE_URL = "https://api.anthropic.com/v1"
    API_VERSION = "2023-06-01"
    DEFAULT_MODEL = "claude-3-5-sonnet-20241022"

    MODEL_NAMES: ClassVar[dict[ModelId, str]] = {
        ModelId.CLAUDE_3_5_SONNET: "claude-3-5-sonnet-20241022",
    }

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = BASE_URL,
        **kwargs: Any,
    ) -> None:
        super().__init__(api_key, **kwargs)
        self._base_url = base_url.rstrip("/")

    def model_name(self, model: ModelId) -> str:
        return self.MODEL_NAMES.get(model, self.DEFAULT_MODEL)

    async def _do_generate(self, prompt: str, model: ModelId) -> str:
        model_name = self.model_name(model)
        payload: dict[str, Any] = {
            "model": model_name,
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if self._system_prompt:
            payload["system"] = self._system_prompt

        logger.debug(
            "llm_request_start",
            provider=self.provider.value,
            model=model_name,
            prompt_length=len(prompt),
        )

        response = await self._post(
            f"{self._base_url}/messages",
            payload=payload,
            headers={
                "x-api-key": self._api_key,
                "anthropic-version": self.API_VERSION,
            },
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
    """Join the text blocks of a Messages API response."""
    try:
        data = response.json()
        blocks = data["content"]
        return "".join(
            block.get("text", "")
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        )
    except (ValueError, KeyError, TypeError) as e:
        raise LLMResponseFormatError(
            "Unexpected response format from Anthropic",
            provider=Provider.ANTHROPIC.value,
            status_code=response.status_code,
            body=response.text[:300],
        ) from e
