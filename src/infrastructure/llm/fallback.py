"""Fallback orchestrator: tries candidate models in order until one succeeds."""

import asyncio

import structlog
from opentelemetry.trace import Span

from src.infrastructure.llm.credentials import ProviderCredentials, describe_credential
from src.infrastructure.llm.exceptions import (
    ErrorKind,
    LLMConfigurationError,
    LLMProviderError,
    LLMResponseFormatError,
    LLMTimeoutError,
    PromptValidationError,
)
from src.infrastructure.llm.models import (
    FALLBACK_ORDER,
    MODEL_PROVIDERS,
    ComplexityHint,
    ModelId,
    RequestedModel,
    all_credential_env_vars,
    parse_requested_model,
)
from src.infrastructure.llm.registry import ProviderRegistry
from src.infrastructure.llm.schemas import (
    AttemptOutcome,
    ErrorDescriptor,
    GenerationRequest,
    GenerationResult,
)
from src.infrastructure.llm.selector import ModelSelector
from src.infrastructure.observability import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)

REMEDIATION_SUGGESTION = (
    "Make sure at least one of "
    + ", ".join(all_credential_env_vars())
    + " is configured in your environment variables."
)


def build_candidates(
    selected: ModelId,
    fallback_order: tuple[ModelId, ...] = FALLBACK_ORDER,
) -> list[ModelId]:
    """Selected model first, then the fallback order without it."""
    return [selected, *(m for m in fallback_order if m != selected)]


class FallbackOrchestrator:
    """Generates text across providers with transparent fallback.

    Candidates are tried strictly one after another. A candidate whose
    provider has no credential is skipped without a network call. The first
    non-empty text wins. When every candidate fails, the last error is
    reported together with a fixed remediation hint.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        credentials: ProviderCredentials,
        *,
        selector: ModelSelector | None = None,
        fallback_order: tuple[ModelId, ...] = FALLBACK_ORDER,
        attempt_timeout_seconds: float = 60.0,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            registry: Adapters per provider.
            credentials: API keys per provider.
            selector: Model selector. Built from credentials if omitted.
            fallback_order: Models tried after the selected one.
            attempt_timeout_seconds: Upper bound for a single adapter call,
                including that adapter's own retries.
        """
        self._registry = registry
        self._credentials = credentials
        self._selector = selector or ModelSelector(credentials)
        self._fallback_order = fallback_order
        self._attempt_timeout = attempt_timeout_seconds

    async def generate(
        self,
        prompt: str,
        requested_model: RequestedModel | str | None = "auto",
        complexity_hint: ComplexityHint | None = None,
    ) -> GenerationResult:
        """Generate text for a prompt, falling back across providers.

        Args:
            prompt: The fully built prompt.
            requested_model: A model id string, a ModelId, or "auto".
            complexity_hint: Bias for "auto" selection.

        Returns:
            GenerationResult holding either the text or the last error.

        Raises:
            PromptValidationError: If the prompt is empty.
            UnknownModelError: If the requested model is not known.
        """
        if not prompt or not prompt.strip():
            raise PromptValidationError()
        request = GenerationRequest(
            prompt=prompt,
            requested_model=parse_requested_model(requested_model),
            complexity_hint=complexity_hint,
        )
        return await self.run(request)

    async def run(self, request: GenerationRequest) -> GenerationResult:
        """Run a validated request through selection and the candidate loop."""
        try:
            selected = self._selector.select(
                request.requested_model, request.complexity_hint
            )
        except LLMConfigurationError as e:
            logger.error("generation_no_providers_configured")
            return GenerationResult.failed(
                error=str(e), suggestion=REMEDIATION_SUGGESTION, attempts=[]
            )

        candidates = build_candidates(selected, self._fallback_order)
        logger.info(
            "generation_started",
            requested_model=str(request.requested_model),
            selected_model=selected.value,
            candidates=[c.value for c in candidates],
            prompt_length=len(request.prompt),
        )

        attempts: list[AttemptOutcome] = []
        for candidate in candidates:
            outcome = await self._attempt(candidate, request.prompt)
            attempts.append(outcome)
            if outcome.success and outcome.text is not None:
                logger.info(
                    "generation_succeeded",
                    model=candidate.value,
                    attempts=len(attempts),
                    fallback_used=candidate != selected,
                )
                return GenerationResult.succeeded(outcome.text, candidate, attempts)

        last_error = attempts[-1].error
        assert last_error is not None
        logger.error(
            "generation_exhausted",
            attempts=len(attempts),
            errors=[
                {"model": a.model.value, "kind": a.error.kind.value}
                for a in attempts
                if a.error is not None
            ],
            last_error=last_error.message,
        )
        return GenerationResult.failed(
            error=last_error.message,
            suggestion=REMEDIATION_SUGGESTION,
            attempts=attempts,
        )

    async def _attempt(self, model: ModelId, prompt: str) -> AttemptOutcome:
        provider = MODEL_PROVIDERS[model]
        adapter = self._registry.adapter_for(model)

        if not self._credentials.is_configured(provider) or adapter is None:
            logger.debug(
                "generation_candidate_skipped",
                model=model.value,
                reason=ErrorKind.MISSING_CREDENTIAL.value,
            )
            return AttemptOutcome(
                model=model,
                success=False,
                error=ErrorDescriptor(
                    kind=ErrorKind.MISSING_CREDENTIAL,
                    message=f"{provider.display_name} API key is not configured. "
                    f"Set {describe_credential(provider)}.",
                    provider=provider.value,
                ),
            )

        with tracer.start_as_current_span("generation.attempt") as span:
            span.set_attribute("generation.model", model.value)
            span.set_attribute("generation.provider", provider.value)

            try:
                async with asyncio.timeout(self._attempt_timeout):
                    text = await adapter.generate(prompt, model=model)
                if not text or not text.strip():
                    raise LLMResponseFormatError(
                        f"{provider.display_name} returned an empty document",
                        provider=provider.value,
                    )
            except TimeoutError as e:
                error = LLMTimeoutError(
                    f"{provider.display_name} did not respond within "
                    f"{self._attempt_timeout}s",
                    provider=provider.value,
                )
                return self._failed(model, error, span, cause=e)
            except LLMProviderError as e:
                return self._failed(model, e, span)
            except Exception as e:
                logger.exception(
                    "generation_adapter_crashed",
                    model=model.value,
                    error_type=type(e).__name__,
                )
                error = LLMProviderError(
                    f"{provider.display_name} failed: {e}", provider=provider.value
                )
                return self._failed(model, error, span, cause=e)

            span.set_attribute("generation.outcome", "success")
            return AttemptOutcome(model=model, success=True, text=text.strip())

    def _failed(
        self,
        model: ModelId,
        error: LLMProviderError,
        span: Span,
        *,
        cause: Exception | None = None,
    ) -> AttemptOutcome:
        descriptor = ErrorDescriptor.from_exception(error)
        span.record_exception(cause or error)
        span.set_attribute("generation.outcome", descriptor.kind.value)

        log = logger.info if descriptor.recoverable else logger.warning
        log(
            "generation_candidate_failed",
            model=model.value,
            provider=descriptor.provider,
            error_kind=descriptor.kind.value,
            status_code=error.status_code,
            error=descriptor.message,
        )
        return AttemptOutcome(model=model, success=False, error=descriptor)
