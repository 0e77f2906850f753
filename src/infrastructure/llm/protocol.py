"""Protocol definition for LLM providers."""

from typing import Protocol

from src.infrastructure.llm.models import ModelId, Provider


class LLMProvider(Protocol):
    """Protocol for provider adapters.

    Each adapter translates the uniform ``generate`` contract into one vendor's
    wire protocol, so the orchestrator can fall back across vendors without
    knowing any of them.
    """

    provider: Provider

    async def generate(self, prompt: str, *, model: ModelId) -> str:
        """Generate a document for the given prompt.

        Args:
            prompt: The fully built user prompt.
            model: Symbolic model the caller asked for. Adapters serving
                several tiers map it to a concrete vendor model name.

        Returns:
            The generated text.

        Raises:
            LLMProviderError: If the completion fails. The subclass carries
                the failure classification.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources held by the adapter."""
        ...
