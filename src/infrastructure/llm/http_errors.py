"""Classification of vendor HTTP failures into the provider error taxonomy.

Status codes are matched first. Some vendors report authentication or quota
problems through a generic status (Gemini answers a bad key with 400,
Anthropic reports an empty credit balance the same way), so the response
body is searched for known markers only when the status code alone does not
decide. Body matching depends on vendor wording and breaks silently when a
vendor rephrases a message.
"""

from typing import Any

import httpx

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
from src.infrastructure.llm.models import Provider

MAX_DETAIL_LENGTH = 300

QUOTA_MARKERS = ("quota", "billing", "credit balance", "insufficient_quota")
AUTH_MARKERS = (
    "api key not valid",
    "api_key_invalid",
    "invalid api key",
    "invalid x-api-key",
    "permission denied",
)
LOADING_MARKERS = ("currently loading", "is loading")


def response_body(response: httpx.Response) -> Any:
    """Decoded JSON body, or the raw text when the body is not JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text


def extract_error_detail(body: Any) -> str:
    """Pull the human-readable message out of a vendor error body.

    Handles ``{"error": {"message": ...}}`` (OpenAI, Anthropic, Gemini),
    ``{"error": "..."}`` (HuggingFace) and ``{"message": ...}``.
    """
    detail: Any = body
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            detail = error.get("message") or error.get("status") or error
        elif error:
            detail = error
        elif body.get("message"):
            detail = body["message"]

    text = detail if isinstance(detail, str) else str(detail)
    return text.strip()[:MAX_DETAIL_LENGTH]


def classify_response(
    response: httpx.Response,
    *,
    provider: Provider,
    model: str | None = None,
) -> LLMProviderError:
    """Map a non-success vendor response to a typed exception.

    Args:
        response: The vendor's HTTP response.
        provider: Provider that produced the response.
        model: Concrete vendor model name, used for not-found messages.

    Returns:
        The exception to raise. The caller raises it.
    """
    status = response.status_code
    body = response_body(response)
    detail = extract_error_detail(body) or response.reason_phrase
    lowered = detail.lower()
    name = provider.display_name
    context: dict[str, Any] = {
        "provider": provider.value,
        "status_code": status,
        "body": body,
    }

    if status in (401, 403):
        return LLMAuthenticationError(
            f"{name} rejected the API key ({status}): {detail}. "
            f"Check {describe_credential(provider)}.",
            **context,
        )
    if status == 404:
        target = f"Model '{model}'" if model else "The requested model"
        return LLMModelNotFoundError(
            f"{target} was not found on {name}: {detail}",
            model=model,
            **context,
        )
    if status == 402 or (status == 429 and _has_marker(lowered, QUOTA_MARKERS)):
        return LLMQuotaExceededError(
            f"{name} quota exceeded or billing not enabled: {detail}",
            **context,
        )
    if status == 429:
        return LLMRateLimitError(
            f"Rate limited by {name}. Please try again shortly.",
            **context,
        )
    if status == 408 or status >= 500:
        return LLMUnavailableError(
            f"{name} is temporarily unavailable ({status}): {detail}",
            **context,
        )

    # Status did not decide; fall back to vendor wording
    if _has_marker(lowered, AUTH_MARKERS):
        return LLMAuthenticationError(
            f"{name} rejected the API key: {detail}. "
            f"Check {describe_credential(provider)}.",
            **context,
        )
    if _has_marker(lowered, QUOTA_MARKERS):
        return LLMQuotaExceededError(
            f"{name} quota exceeded or billing not enabled: {detail}",
            **context,
        )
    if _has_marker(lowered, LOADING_MARKERS):
        return LLMUnavailableError(f"{name} model is loading: {detail}", **context)

    return LLMProviderError(f"{name} API error ({status}): {detail}", **context)


def classify_transport_error(
    error: httpx.TransportError,
    *,
    provider: Provider,
    timeout_seconds: float,
) -> LLMProviderError:
    """Map a network-level failure (after retries) to a typed exception."""
    if isinstance(error, httpx.TimeoutException):
        return LLMTimeoutError(
            f"Request to {provider.display_name} timed out after {timeout_seconds}s",
            provider=provider.value,
        )
    return LLMUnavailableError(
        f"Unable to connect to {provider.display_name}",
        provider=provider.value,
    )


def _has_marker(text: str, markers: tuple[str, ...]) -> bool:
    return any(marker in text for marker in markers)
