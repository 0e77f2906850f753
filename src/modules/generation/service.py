"""Document generation service: turns form submissions into documents."""

from dataclasses import dataclass
from typing import Any

import structlog

from src.infrastructure.llm import (
    MODEL_PROVIDERS,
    ComplexityHint,
    FallbackOrchestrator,
    GenerationResult,
    GenerationValidationError,
    ModelId,
    ProviderCredentials,
    parse_requested_model,
)
from src.infrastructure.llm.models import AUTO, MODEL_LABELS
from src.infrastructure.observability import add_span_attributes, get_tracer
from src.modules.generation.prompts import (
    build_legal_document_prompt,
    build_template_code_prompt,
    is_direct_document,
    strip_code_fences,
)
from src.modules.generation.templates import TemplateRegistry, humanize

logger = structlog.get_logger()
tracer = get_tracer(__name__)

MISSING_TEMPLATE_CODE_FIELDS = (
    "Missing required fields: title, description, or formSchema"
)


@dataclass(frozen=True)
class DocumentOutcome:
    """Result of a document request.

    ``result`` is None when the template already rendered a complete
    document and no provider was called.
    """

    markdown: str | None
    result: GenerationResult | None

    @property
    def ok(self) -> bool:
        return self.markdown is not None


class DocumentGenerationService:
    """Builds prompts from contract templates and runs them through the orchestrator."""

    def __init__(
        self,
        orchestrator: FallbackOrchestrator,
        templates: TemplateRegistry,
        credentials: ProviderCredentials,
    ) -> None:
        self._orchestrator = orchestrator
        self._templates = templates
        self._credentials = credentials

    def list_models(self) -> list[dict[str, Any]]:
        """Model catalogue with availability, "auto" first."""
        label, description = MODEL_LABELS[AUTO]
        models: list[dict[str, Any]] = [
            {
                "id": AUTO,
                "label": label,
                "description": description,
                "provider": None,
                "available": bool(self._credentials.configured_providers()),
            }
        ]
        for model in ModelId:
            provider = MODEL_PROVIDERS[model]
            label, description = MODEL_LABELS[model]
            models.append(
                {
                    "id": model.value,
                    "label": label,
                    "description": description,
                    "provider": provider.value,
                    "available": self._credentials.is_configured(provider),
                }
            )
        return models

    async def generate_document(
        self,
        contract_id: str | None,
        values: Any,
        *,
        requested_model: str | None = None,
        complexity_hint: ComplexityHint | None = None,
        template_structure: str | None = None,
        template_code: str | None = None,
    ) -> DocumentOutcome:
        """Generate a legal document for a contract.

        Args:
            contract_id: Template id. Required.
            values: Form answers. Must be an object.
            requested_model: Model id or "auto".
            complexity_hint: Bias for automatic model selection.
            template_structure: Explicit structure, overriding the template.
            template_code: Client-side template function source. It is never
                executed; custom contracts must send ``template_structure``.

        Returns:
            DocumentOutcome with either the markdown or the failed result.

        Raises:
            GenerationValidationError: On missing or malformed input, an
                unknown contract or an unknown model.
        """
        if not contract_id or not contract_id.strip():
            raise GenerationValidationError("Missing contractId")
        if not isinstance(values, dict):
            raise GenerationValidationError("values must be an object")
        model = parse_requested_model(requested_model)

        template = self._templates.get(contract_id)
        if template is None and not template_structure:
            if template_code:
                raise GenerationValidationError(
                    "templateCode is not executed by the server. "
                    "Send the rendered templateStructure for custom contracts."
                )
            raise GenerationValidationError(f"Unknown contract: {contract_id}")

        structure = template_structure or (
            template.render(values) if template is not None else ""
        )
        title = template.title if template is not None else humanize(contract_id)

        with tracer.start_as_current_span("generation.document"):
            add_span_attributes(
                {
                    "generation.contract_id": contract_id,
                    "generation.field_count": len(values),
                }
            )

            if is_direct_document(structure):
                logger.info("document_rendered_directly", contract_id=contract_id)
                add_span_attributes({"generation.direct": True})
                return DocumentOutcome(markdown=structure.strip(), result=None)

            prompt = build_legal_document_prompt(
                title, values, template_structure=structure or None
            )
            result = await self._orchestrator.generate(
                prompt, model, complexity_hint
            )

            if result.ok and result.model is not None:
                add_span_attributes({"generation.model": result.model.value})
            return DocumentOutcome(markdown=result.text, result=result)

    async def generate_template_code(
        self,
        title: str | None,
        description: str | None,
        form_schema: Any,
        *,
        requested_model: str | None = None,
        quality: str | None = None,
    ) -> GenerationResult:
        """Generate JavaScript template code for a custom template.

        Raises:
            GenerationValidationError: If a required field is missing or the
                model is unknown.
        """
        if not title or not description or not form_schema:
            raise GenerationValidationError(MISSING_TEMPLATE_CODE_FIELDS)

        hint = ComplexityHint.COMPLEX if quality == "high" else ComplexityHint.SIMPLE
        prompt = build_template_code_prompt(title, description, form_schema)
        result = await self._orchestrator.generate(prompt, requested_model, hint)

        if result.ok and result.text is not None:
            cleaned = strip_code_fences(result.text)
            logger.info(
                "template_code_generated",
                model=result.model.value if result.model else None,
                code_length=len(cleaned),
            )
            return GenerationResult.succeeded(cleaned, result.model, result.attempts)
        return result
