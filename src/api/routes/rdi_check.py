"""Residential delivery indicator endpoint (classification mode).

Storefront pages post a flat address and get back whether it is residential.
Unlike quote mode, failures surface as 400/500 error bodies.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.api.dependencies import (
    get_pipeline,
    get_request_context,
    read_json_body,
)
from src.api.schemas import ClassificationResponse, ErrorResponse
from src.services.models import RequestContext
from src.services.pipeline import AddressCheckPipeline

router = APIRouter(prefix="/rdi-check", tags=["rdi"])


@router.post(
    "",
    response_model=ClassificationResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def check_rdi(
    request: Request,
    pipeline: AddressCheckPipeline = Depends(get_pipeline),
    context: RequestContext = Depends(get_request_context),
) -> JSONResponse:
    """Classify one address as residential or commercial.

    Args:
        request: Incoming request (JSON body read directly).
        pipeline: Address check pipeline (injected).
        context: Request provenance (injected).

    Returns:
        Classification body, or an error body with 400/500.
    """
    body = await read_json_body(request)
    outcome = await pipeline.run_classification(body, context)
    return JSONResponse(status_code=outcome.status_code, content=outcome.body)
