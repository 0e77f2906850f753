"""LLM provider abstraction layer with multi-provider fallback."""

from src.infrastructure.llm.anthropic import AnthropicProvider
from src.infrastructure.llm.credentials import ProviderCredentials
from src.infrastructure.llm.exceptions import (
    ErrorKind,
    GenerationValidationError,
    LLMAuthenticationError,
    LLMConfigurationError,
    LLMModelNotFoundError,
    LLMProviderError,
    LLMQuotaExceededError,
    LLMRateLimitError,
    LLMResponseFormatError,
    LLMTimeoutError,
    LLMUnavailableError,
    PromptValidationError,
    UnknownModelError,
)
from src.infrastructure.llm.fallback import (
    REMEDIATION_SUGGESTION,
    FallbackOrchestrator,
    build_candidates,
)
from src.infrastructure.llm.gemini import GeminiProvider
from src.infrastructure.llm.huggingface import HuggingFaceProvider
from src.infrastructure.llm.models import (
    AUTO,
    FALLBACK_ORDER,
    MODEL_PROVIDERS,
    ComplexityHint,
    ModelId,
    Provider,
    parse_complexity_hint,
    parse_requested_model,
)
from src.infrastructure.llm.openai import OpenAIProvider
from src.infrastructure.llm.protocol import LLMProvider
from src.infrastructure.llm.registry import ProviderRegistry, build_provider_registry
from src.infrastructure.llm.schemas import (
    AttemptOutcome,
    ErrorDescriptor,
    GenerationRequest,
    GenerationResult,
)
from src.infrastructure.llm.selector import ModelSelector

__all__ = [
    "AUTO",
    "FALLBACK_ORDER",
    "MODEL_PROVIDERS",
    "REMEDIATION_SUGGESTION",
    "AnthropicProvider",
    "AttemptOutcome",
    "ComplexityHint",
    "ErrorDescriptor",
    "ErrorKind",
    "FallbackOrchestrator",
    "GeminiProvider",
    "GenerationRequest",
    "GenerationResult",
    "GenerationValidationError",
    "HuggingFaceProvider",
    "LLMAuthenticationError",
    "LLMConfigurationError",
    "LLMModelNotFoundError",
    "LLMProvider",
    "LLMProviderError",
    "LLMQuotaExceededError",
    "LLMRateLimitError",
    "LLMResponseFormatError",
    "LLMTimeoutError",
    "LLMUnavailableError",
    "ModelId",
    "ModelSelector",
    "OpenAIProvider",
    "PromptValidationError",
    "Provider",
    "ProviderCredentials",
    "ProviderRegistry",
    "UnknownModelError",
    "build_candidates",
    "build_provider_registry",
    "parse_complexity_hint",
    "parse_requested_model",
]
