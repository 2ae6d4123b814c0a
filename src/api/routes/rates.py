"""Carrier-calculated-rate endpoint (quote mode).

The storefront's carrier-service callback posts the destination and expects
a JSON array of rates back. This route always answers with exactly one rate,
falling back to the base rate when anything goes wrong.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.api.dependencies import (
    get_pipeline,
    get_request_context,
    read_json_body,
)
from src.api.schemas import RateResponse
from src.services.models import RequestContext
from src.services.pipeline import AddressCheckPipeline

router = APIRouter(prefix="/asr-rates", tags=["rates"])


@router.post(
    "",
    response_model=list[RateResponse],
)
async def quote_rates(
    request: Request,
    pipeline: AddressCheckPipeline = Depends(get_pipeline),
    context: RequestContext = Depends(get_request_context),
) -> JSONResponse:
    """Quote a residential-aware standard rate for one destination.

    Args:
        request: Incoming request (JSON body read directly).
        pipeline: Address check pipeline (injected).
        context: Request provenance (injected).

    Returns:
        One-element array of rate objects.
    """
    body = await read_json_body(request)
    outcome = await pipeline.run_quote(body, context)
    return JSONResponse(status_code=outcome.status_code, content=outcome.body)
