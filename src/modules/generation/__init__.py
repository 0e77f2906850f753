"""Legal document generation: templates, prompts, service and routes."""

from src.modules.generation.service import DocumentGenerationService, DocumentOutcome
from src.modules.generation.templates import ContractTemplate, TemplateRegistry

__all__ = [
    "ContractTemplate",
    "DocumentGenerationService",
    "DocumentOutcome",
    "TemplateRegistry",
]
