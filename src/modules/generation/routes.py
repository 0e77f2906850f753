"""Document generation API routes."""

import asyncio
from collections.abc import Awaitable
from typing import Annotated, Any, TypeVar

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from src.infrastructure.llm import GenerationValidationError, parse_complexity_hint
from src.modules.generation.schemas import (
    GenerateDocumentRequest,
    GenerateDocumentResponse,
    GenerateTemplateCodeRequest,
    GenerateTemplateCodeResponse,
    GenerationErrorResponse,
    ModelInfo,
)
from src.modules.generation.service import DocumentGenerationService

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["generation"])

T = TypeVar("T")

# nginx convention for "client closed request"
CLIENT_CLOSED_REQUEST = 499
DISCONNECT_POLL_SECONDS = 0.5

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": GenerationErrorResponse},
    500: {"model": GenerationErrorResponse},
}

_generation_service: DocumentGenerationService | None = None


def get_generation_service() -> DocumentGenerationService:
    """Get the generation service configured at startup."""
    if _generation_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Generation service not configured",
        )
    return _generation_service


def set_generation_service(service: DocumentGenerationService | None) -> None:
    """Set the generation service instance.

    Called during app startup to configure the service.
    """
    global _generation_service
    _generation_service = service


class ClientDisconnected(Exception):
    """The client went away before the response was ready."""


async def run_until_disconnect(request: Request, work: Awaitable[T]) -> T:
    """Await ``work`` while watching for the client to disconnect.

    Raises:
        ClientDisconnected: If the client disconnected first. The work is
            cancelled before this is raised.
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass


def _error(
    status_code: int, error: str, suggestion: str | None = None
) -> JSONResponse:
    body = GenerationErrorResponse(error=error, suggestion=suggestion)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True)
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 with a single error message."""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    logger.info("request_body_invalid", path=request.url.path, error=message)
    return _error(
        status.HTTP_400_BAD_REQUEST,
        f"{location}: {message}" if location else "Invalid request body",
    )


def _client_closed(path: str) -> Response:
    logger.info("client_disconnected", path=path, status_code=CLIENT_CLOSED_REQUEST)
    return Response(status_code=CLIENT_CLOSED_REQUEST)


@router.post(
    "/generate",
    response_model=GenerateDocumentResponse,
    responses=ERROR_RESPONSES,
    summary="Generate a legal document",
)
async def generate_document(
    data: GenerateDocumentRequest,
    request: Request,
    service: Annotated[DocumentGenerationService, Depends(get_generation_service)],
) -> Any:
    """Generate a document from a contract template and form values."""
    try:
        outcome = await run_until_disconnect(
            request,
            service.generate_document(
                data.contract_id,
                data.values,
                requested_model=data.requested_model,
                complexity_hint=parse_complexity_hint(data.complexity_hint),
                template_structure=data.template_structure,
                template_code=data.template_code,
            ),
        )
    except GenerationValidationError as e:
        logger.info("generation_rejected", contract_id=data.contract_id, error=str(e))
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    except ClientDisconnected:
        return _client_closed(request.url.path)

    if outcome.markdown is not None:
        model = outcome.result.model if outcome.result is not None else None
        return GenerateDocumentResponse(
            markdown=outcome.markdown, model=model.value if model else None
        )

    result = outcome.result
    assert result is not None
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        result.error or "Failed to generate document",
        result.suggestion,
    )


@router.post(
    "/templates/generate-code",
    response_model=GenerateTemplateCodeResponse,
    responses=ERROR_RESPONSES,
    summary="Generate template code for a custom template",
)
async def generate_template_code(
    data: GenerateTemplateCodeRequest,
    request: Request,
    service: Annotated[DocumentGenerationService, Depends(get_generation_service)],
) -> Any:
    try:
        result = await run_until_disconnect(
            request,
            service.generate_template_code(
                data.title,
                data.description,
                data.form_schema,
                requested_model=data.model,
                quality=data.quality,
            ),
        )
    except GenerationValidationError as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    except ClientDisconnected:
        return _client_closed(request.url.path)

    if result.ok and result.text is not None and result.model is not None:
        return JSONResponse(
            content={"templateCode": result.text, "model": result.model.value}
        )

    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        result.error or "Failed to generate template code",
        result.suggestion,
    )


@router.get("/models", response_model=list[ModelInfo], summary="List models")
async def list_models(
    service: Annotated[DocumentGenerationService, Depends(get_generation_service)],
) -> list[ModelInfo]:
    """List selectable models and whether each provider is configured."""
    return [ModelInfo(**m) for m in service.list_models()]
