"""Custom exceptions for LLM provider operations."""

from enum import StrEnum
from typing import Any, ClassVar


class ErrorKind(StrEnum):
    """Classification of provider failures."""

    MISSING_CREDENTIAL = "missing_credential"
    AUTH_FAILURE = "auth_failure"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    TRANSIENT_UNAVAILABLE = "transient_unavailable"
    UNEXPECTED_FORMAT = "unexpected_format"
    UNKNOWN = "unknown"


class LLMProviderError(Exception):
    """Base exception for LLM provider errors."""

    kind: ClassVar[ErrorKind] = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        provider: str = "unknown",
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class LLMConfigurationError(LLMProviderError):
    """Raised when there's a configuration issue (e.g., missing API key)."""

    kind = ErrorKind.MISSING_CREDENTIAL


class LLMAuthenticationError(LLMProviderError):
    """Raised when the provider rejects the API key (401/403)."""

    kind = ErrorKind.AUTH_FAILURE


class LLMModelNotFoundError(LLMProviderError):
    """Raised when the provider does not know the requested model (404)."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str, *, model: str | None = None, **kwargs: Any) -> None:
        self.model = model
        super().__init__(message, **kwargs)


class LLMRateLimitError(LLMProviderError):
    """Raised when rate limited by the LLM provider."""

    kind = ErrorKind.RATE_LIMITED


class LLMQuotaExceededError(LLMProviderError):
    """Raised when the account is out of quota or billing is not set up."""

    kind = ErrorKind.QUOTA_EXCEEDED


class LLMUnavailableError(LLMProviderError):
    """Raised when the provider is temporarily unavailable (5xx, model loading)."""

    kind = ErrorKind.TRANSIENT_UNAVAILABLE


class LLMTimeoutError(LLMUnavailableError):
    """Raised when an LLM request times out."""


class LLMResponseFormatError(LLMProviderError):
    """Raised when the provider response cannot be turned into text."""

    kind = ErrorKind.UNEXPECTED_FORMAT


class GenerationValidationError(ValueError):
    """Raised for caller errors detected before any provider is contacted."""


class PromptValidationError(GenerationValidationError):
    """Raised when the prompt is empty or whitespace only."""

    def __init__(self) -> None:
        super().__init__("Prompt cannot be empty")


class UnknownModelError(GenerationValidationError):
    """Raised when the requested model is not in the catalogue."""

    def __init__(self, model: str) -> None:
        self.model = model
        super().__init__(f"Unknown model: {model}")
