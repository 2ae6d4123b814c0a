"""FastAPI application for the RDI Quote API.

Provides the application factory with routers, middleware and exception
handlers configured. Nothing is built at import time; run it with
``rdiquote serve`` or ``uvicorn src.api.main:create_app --factory``.
"""

import logging
import sys
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

# Configure logging to stdout for uvicorn to capture
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

from src.api.dependencies import method_not_allowed
from src.api.middleware.auth import maybe_require_api_key
from src.api.middleware.cors import apply_cors
from src.api.routes import rates, rdi_check
from src.api.schemas import HealthResponse
from src.config import AppConfig, load_config
from src.errors import DomainError
from src.services.notification_router import NotificationRouter, NotificationSink
from src.services.notification_sink import SlackWebhookSink
from src.services.pipeline import AddressCheckPipeline, Verifier
from src.services.response_builder import build_error_response
from src.services.verification_client import VerificationClient

logger = logging.getLogger(__name__)

_MODE_ROUTERS = {
    "quote": rates.router,
    "classification": rdi_check.router,
}


def _package_version() -> str:
    try:
        return _pkg_version("rdiquote")
    except PackageNotFoundError:
        return "unknown"


async def _close_quietly(resource: object) -> None:
    aclose = getattr(resource, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception as e:
        logger.warning("Failed closing %s: %s", type(resource).__name__, e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Async lifespan: log the deployment shape, then drain and close on shutdown."""
    config: AppConfig = app.state.config
    logger.info("RDI Quote starting with modes: %s", ", ".join(config.modes))
    if not config.provider.api_key:
        logger.warning("EASYPOST_API_KEY is not configured; every verification will fail.")
    if not config.notifications.webhook_url:
        logger.info("WEBHOOK_URL is not configured; notifications are disabled.")

    yield

    await app.state.router.drain()
    await _close_quietly(app.state.verifier)
    await _close_quietly(app.state.sink)


def create_app(
    config: AppConfig | None = None,
    verifier: Verifier | None = None,
    sink: NotificationSink | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        config: Frozen configuration; loaded from file/env when omitted.
        verifier: Address verification adapter (EasyPost client by default).
        sink: Notification sink (Slack webhook by default).

    Returns:
        Configured FastAPI application.
    """
    config = config or load_config()
    logging.getLogger("src").setLevel(config.server.log_level.upper())

    verifier = verifier or VerificationClient(config.provider)
    sink = sink or SlackWebhookSink(config.notifications)
    router = NotificationRouter(sink, config.notifications)

    app = FastAPI(
        title="RDI Quote API",
        description="Residential delivery classification and carrier rate quotes",
        version=_package_version(),
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.verifier = verifier
    app.state.sink = sink
    app.state.router = router
    app.state.pipeline = AddressCheckPipeline(verifier, router)

    # Registration order matters: CORS is added last so it wraps auth and
    # 401 responses still carry CORS headers.
    app.middleware("http")(maybe_require_api_key)
    app.middleware("http")(apply_cors)

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        """Render domain errors raised outside the pipeline."""
        return JSONResponse(status_code=exc.http_status, content=build_error_response(exc))

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException) -> Response:
        """Answer 405 with the JSON error body for every unsupported method."""
        if exc.status_code != 405:
            return await http_exception_handler(request, exc)
        response = method_not_allowed()
        if exc.headers and "Allow" in exc.headers:
            response.headers["Allow"] = exc.headers["Allow"]
        return response

    for mode in config.modes:
        app.include_router(_MODE_ROUTERS[mode], prefix="/api")

    @app.get("/health", response_model=HealthResponse)
    def health_check() -> HealthResponse:
        """Health check with deployment shape; never exposes secrets."""
        return HealthResponse(
            status="healthy",
            version=app.version,
            modes=list(config.modes),
            provider_configured=bool(config.provider.api_key),
            notifications_configured=bool(config.notifications.webhook_url),
        )

    return app
