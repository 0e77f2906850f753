"""Pydantic schemas for the document generation API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    """Accepts camelCase field names from the browser client."""

    model_config = ConfigDict(populate_by_name=True)


class GenerateDocumentRequest(_CamelModel):
    """Request to generate a document from a contract template."""

    contract_id: str | None = Field(default=None, alias="contractId")
    values: Any = None
    requested_model: str | None = Field(default=None, alias="requestedModel")
    complexity_hint: str | None = Field(default=None, alias="complexityHint")
    template_structure: str | None = Field(default=None, alias="templateStructure")
    # Client-side template functions are never executed by the server
    template_code: str | None = Field(default=None, alias="templateCode")


class GenerateDocumentResponse(BaseModel):
    """Generated markdown and the model that produced it."""

    markdown: str
    model: str | None = None  # None when the template was already a document


class GenerateTemplateCodeRequest(_CamelModel):
    """Request to generate template function code for a custom template."""

    title: str | None = None
    description: str | None = None
    form_schema: Any = Field(default=None, alias="formSchema")
    model: str | None = None
    quality: str | None = None  # "high" biases auto selection to stronger models


class GenerateTemplateCodeResponse(BaseModel):
    """Generated template code."""

    model_config = ConfigDict(populate_by_name=True)

    template_code: str = Field(alias="templateCode")
    model: str


class GenerationErrorResponse(BaseModel):
    """Error body returned when generation fails."""

    error: str
    suggestion: str | None = None


class ModelInfo(BaseModel):
    """A selectable model."""

    id: str
    label: str
    description: str
    provider: str | None
    available: bool
