"""API dependency injection and shared request helpers.

The app factory stores the frozen config and the pipeline on ``app.state``;
routes reach them through these dependencies instead of module globals.
"""

import json
import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from src.config import AppConfig
from src.services.models import RequestContext
from src.services.pipeline import AddressCheckPipeline

logger = logging.getLogger(__name__)


def get_config(request: Request) -> AppConfig:
    """Process-wide configuration."""
    return request.app.state.config


def get_pipeline(request: Request) -> AddressCheckPipeline:
    """Shared pipeline (stateless between requests)."""
    return request.app.state.pipeline


def get_request_context(request: Request) -> RequestContext:
    """Provenance headers for notification routing."""
    config: AppConfig = request.app.state.config
    return RequestContext.from_headers(
        request.headers,
        provenance_header=config.notifications.provenance_header,
    )


async def read_json_body(request: Request) -> Any:
    """Decode the request body.

    Returns:
        The decoded JSON value, or None for an empty or unparseable body
        (the normalizer rejects None as an invalid body).
    """
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("Failed to parse JSON body: %s", e)
        return None


def method_not_allowed() -> JSONResponse:
    return JSONResponse(status_code=405, content={"error": "Method not allowed"})
