"""Model catalogue: symbolic model identifiers and their providers."""

from enum import StrEnum
from typing import Final, Literal

from src.infrastructure.llm.exceptions import UnknownModelError


class Provider(StrEnum):
    """AI backends the service can talk to."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    HUGGINGFACE = "huggingface"

    @property
    def display_name(self) -> str:
        """Human-readable vendor name for error messages."""
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES: Final[dict[Provider, str]] = {
    Provider.OPENAI: "OpenAI",
    Provider.ANTHROPIC: "Anthropic",
    Provider.GOOGLE: "Google Gemini",
    Provider.HUGGINGFACE: "HuggingFace",
}


class ModelId(StrEnum):
    """Symbolic model identifiers accepted from callers."""

    GPT_4_TURBO = "gpt-4-turbo"
    GPT_4O_MINI = "gpt-4o-mini"
    CLAUDE_3_5_SONNET = "claude-3-5-sonnet"
    GEMINI = "gemini"
    HUGGINGFACE = "huggingface"


class ComplexityHint(StrEnum):
    """Caller hint used only when the requested model is "auto"."""

    SIMPLE = "simple"
    COMPLEX = "complex"


AUTO: Final = "auto"

RequestedModel = ModelId | Literal["auto"]

MODEL_PROVIDERS: Final[dict[ModelId, Provider]] = {
    ModelId.GPT_4_TURBO: Provider.OPENAI,
    ModelId.GPT_4O_MINI: Provider.OPENAI,
    ModelId.CLAUDE_3_5_SONNET: Provider.ANTHROPIC,
    ModelId.GEMINI: Provider.GOOGLE,
    ModelId.HUGGINGFACE: Provider.HUGGINGFACE,
}

# Tail of every candidate list, independent of what was requested
FALLBACK_ORDER: Final[tuple[ModelId, ...]] = (
    ModelId.GPT_4_TURBO,
    ModelId.GPT_4O_MINI,
    ModelId.CLAUDE_3_5_SONNET,
    ModelId.GEMINI,
    ModelId.HUGGINGFACE,
)

# Environment variable names accepted for each provider's API key
CREDENTIAL_ENV_VARS: Final[dict[Provider, tuple[str, ...]]] = {
    Provider.OPENAI: ("OPENAI_API_KEY",),
    Provider.ANTHROPIC: ("ANTHROPIC_API_KEY",),
    Provider.GOOGLE: ("GOOGLE_API_KEY", "GEMINI_API_KEY"),
    Provider.HUGGINGFACE: ("HUGGINGFACE_API_KEY", "HF_TOKEN"),
}

# Labels shown by model pickers
MODEL_LABELS: Final[dict[str, tuple[str, str]]] = {
    AUTO: ("Auto (Recommended)", "Automatically selects the best available model"),
    ModelId.GPT_4_TURBO: ("GPT-4 Turbo", "High-quality, fast generation (OpenAI)"),
    ModelId.GPT_4O_MINI: ("GPT-4o Mini", "Cost-effective option (OpenAI)"),
    ModelId.CLAUDE_3_5_SONNET: (
        "Claude 3.5 Sonnet",
        "Premium quality for complex documents (Anthropic)",
    ),
    ModelId.GEMINI: ("Google Gemini", "Free tier available (Google)"),
    ModelId.HUGGINGFACE: ("HuggingFace", "Open-source models (Free)"),
}


def all_credential_env_vars() -> list[str]:
    """Every accepted credential variable name, in provider order."""
    return [name for names in CREDENTIAL_ENV_VARS.values() for name in names]


def parse_requested_model(value: str | None) -> RequestedModel:
    """Parse a caller-supplied model string.

    Args:
        value: Raw model string. None or blank means "auto".

    Returns:
        The matching ModelId, or "auto".

    Raises:
        UnknownModelError: If the value is not a known model.
    """
    if value is None or not value.strip():
        return AUTO

    normalized = value.strip().lower()
    if normalized == AUTO:
        return AUTO

    try:
        return ModelId(normalized)
    except ValueError as e:
        raise UnknownModelError(value) from e


def parse_complexity_hint(value: str | None) -> ComplexityHint | None:
    """Parse an optional complexity hint, ignoring unrecognized values."""
    if not value:
        return None
    try:
        return ComplexityHint(value.strip().lower())
    except ValueError:
        return None
