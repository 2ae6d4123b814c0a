"""Origin-echo CORS middleware.

Storefront pages call the RDI check from the browser. Allow-listed origins
are echoed back; any other origin gets ``*``. Preflight ``OPTIONS``
requests are answered here with 200, an empty body and the CORS headers.
"""

from fastapi import Request
from fastapi.responses import Response

from src.config import CorsConfig


def cors_headers(origin: str | None, config: CorsConfig) -> dict[str, str]:
    """Build the CORS response headers for a request origin."""
    allowed = origin if origin and origin in config.allowed_origins else "*"
    return {
        "Access-Control-Allow-Origin": allowed,
        "Access-Control-Allow-Methods": ", ".join(config.allow_methods),
        "Access-Control-Allow-Headers": ", ".join(config.allow_headers),
        "Vary": "Origin",
    }


async def apply_cors(request: Request, call_next) -> Response:
    """FastAPI middleware entrypoint for CORS headers and preflight."""
    headers = cors_headers(request.headers.get("origin"), request.app.state.config.cors)
    if request.method.upper() == "OPTIONS":
        return Response(status_code=200, headers=headers)

    response = await call_next(request)
    response.headers.update(headers)
    return response
