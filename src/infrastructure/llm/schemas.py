"""Request-scoped value types for document generation."""

from dataclasses import dataclass, field

from src.infrastructure.llm.exceptions import ErrorKind, LLMProviderError
from src.infrastructure.llm.models import ComplexityHint, ModelId, RequestedModel


@dataclass(frozen=True)
class GenerationRequest:
    """A single generation call as seen by the orchestrator."""

    prompt: str
    requested_model: RequestedModel = "auto"
    complexity_hint: ComplexityHint | None = None


@dataclass(frozen=True)
class ErrorDescriptor:
    """Classified failure of one attempt."""

    kind: ErrorKind
    message: str
    provider: str = "unknown"

    @property
    def recoverable(self) -> bool:
        """Whether the orchestrator expects this failure as part of normal fallback."""
        return self.kind in (ErrorKind.MISSING_CREDENTIAL, ErrorKind.NOT_FOUND)

    @classmethod
    def from_exception(cls, error: LLMProviderError) -> "ErrorDescriptor":
        """Create from a typed provider exception."""
        return cls(kind=error.kind, message=str(error), provider=error.provider)


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of trying one candidate model."""

    model: ModelId
    success: bool
    text: str | None = None
    error: ErrorDescriptor | None = None


@dataclass
class GenerationResult:
    """Outcome of an orchestrator call.

    Exactly one of ``text`` or ``error`` is set.
    """

    text: str | None = None
    model: ModelId | None = None
    error: str | None = None
    suggestion: str | None = None
    attempts: list[AttemptOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.text is not None

    @classmethod
    def succeeded(
        cls, text: str, model: ModelId, attempts: list[AttemptOutcome]
    ) -> "GenerationResult":
        return cls(text=text, model=model, attempts=attempts)

    @classmethod
    def failed(
        cls, error: str, suggestion: str, attempts: list[AttemptOutcome]
    ) -> "GenerationResult":
        return cls(error=error, suggestion=suggestion, attempts=attempts)
