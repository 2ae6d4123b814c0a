"""Optional API-key gate for the address check routes.

Enabled when ``auth.api_key`` is configured. Callers send the key as
``X-API-Key`` or ``Authorization: Bearer <key>``. The key is a shared
secret: every authenticated caller has the same privileges.
"""

from __future__ import annotations

import hmac
import logging

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from src.errors import AuthError
from src.services.response_builder import build_error_response

logger = logging.getLogger(__name__)

_PUBLIC_PATH_PREFIXES = (
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
)


def _is_public_path(path: str) -> bool:
    return path.startswith(_PUBLIC_PATH_PREFIXES)


def should_authenticate(path: str) -> bool:
    """Return True when this path should be protected by API-key auth."""
    if _is_public_path(path):
        return False
    return path.startswith("/api/")


def extract_provided_key(request: Request) -> str:
    """Read the caller's key from X-API-Key, then Authorization: Bearer."""
    provided = request.headers.get("X-API-Key", "").strip()
    if provided:
        return provided
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer":
        return token.strip()
    return ""


def check_api_key(provided: str, expected: str) -> None:
    """Compare keys in constant time.

    Raises:
        AuthError: When the provided key is empty or does not match.
    """
    if not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
        raise AuthError()


async def maybe_require_api_key(request: Request, call_next) -> Response:
    """FastAPI middleware entrypoint for optional API-key auth."""
    if request.method.upper() == "OPTIONS":
        return await call_next(request)

    expected_key = request.app.state.config.auth.api_key
    if not expected_key or not should_authenticate(request.url.path):
        return await call_next(request)

    try:
        check_api_key(extract_provided_key(request), expected_key)
    except AuthError as e:
        client = request.client.host if request.client else "unknown"
        logger.warning("Rejected %s %s from %s: %s", request.method, request.url.path, client, e)
        return JSONResponse(status_code=e.http_status, content=build_error_response(e))
    return await call_next(request)
