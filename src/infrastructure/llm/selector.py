"""Resolution of the caller's requested model to a concrete model."""

from typing import Final

import structlog

from src.infrastructure.llm.credentials import ProviderCredentials
from src.infrastructure.llm.exceptions import LLMConfigurationError
from src.infrastructure.llm.models import (
    AUTO,
    MODEL_PROVIDERS,
    ComplexityHint,
    ModelId,
    RequestedModel,
    all_credential_env_vars,
)

logger = structlog.get_logger()

# Strongest quality first, for documents flagged as complex
COMPLEX_PRIORITY: Final[tuple[ModelId, ...]] = (
    ModelId.CLAUDE_3_5_SONNET,
    ModelId.GPT_4_TURBO,
    ModelId.GEMINI,
    ModelId.HUGGINGFACE,
)

# Cheapest and fastest first
DEFAULT_PRIORITY: Final[tuple[ModelId, ...]] = (
    ModelId.GPT_4O_MINI,
    ModelId.GEMINI,
    ModelId.CLAUDE_3_5_SONNET,
    ModelId.HUGGINGFACE,
)


def no_credentials_message() -> str:
    return "No AI model API keys configured. Set one of: " + ", ".join(
        all_credential_env_vars()
    )


class ModelSelector:
    """Picks the model to try first.

    An explicit model is always honoured. "auto" walks a priority list and
    takes the first model whose provider has a credential.
    """

    def __init__(self, credentials: ProviderCredentials) -> None:
        self._credentials = credentials

    def select(
        self,
        requested: RequestedModel,
        complexity_hint: ComplexityHint | None = None,
    ) -> ModelId:
        """Resolve the requested model.

        Args:
            requested: A ModelId, or "auto".
            complexity_hint: Only consulted for "auto".

        Returns:
            The model to try first.

        Raises:
            LLMConfigurationError: If "auto" was requested and no provider
                has a credential.
        """
        if requested != AUTO:
            return ModelId(requested)

        priority = (
            COMPLEX_PRIORITY
            if complexity_hint == ComplexityHint.COMPLEX
            else DEFAULT_PRIORITY
        )
        for model in priority:
            if self._credentials.is_configured(MODEL_PROVIDERS[model]):
                logger.debug(
                    "model_auto_selected",
                    model=model.value,
                    complexity_hint=complexity_hint.value if complexity_hint else None,
                )
                return model

        raise LLMConfigurationError(no_credentials_message(), provider="none")
