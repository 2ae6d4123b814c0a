"""Pydantic schemas documenting the RDI Quote API contracts.

Request bodies are read as raw JSON so missing fields produce the
``{error}`` 400 contract rather than FastAPI's 422. These models document
the responses in the OpenAPI schema.
"""

from pydantic import BaseModel, Field


class RateResponse(BaseModel):
    """One rate line; quote mode always returns a list of exactly one."""

    service_name: str
    service_code: str
    total_price: int = Field(..., description="Integer cents")
    description: str
    currency: str = "USD"


class ClassificationResponse(BaseModel):
    """Residential/commercial determination for the RDI check."""

    residential: bool
    verification: bool
    message: str


class ErrorResponse(BaseModel):
    """Error body; ``details`` only on 5xx."""

    error: str
    error_code: str | None = None
    details: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    modes: list[str]
    provider_configured: bool
    notifications_configured: bool
