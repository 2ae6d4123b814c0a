"""Output shapers for the two integration modes.

Quote mode answers a carrier-calculated-rate callback, whose contract
requires a JSON array of rate objects in every case. Classification mode
answers the storefront RDI check and is allowed to fail loudly.
"""

from typing import Any

from src.errors import DomainError
from src.services.models import Classification, RateQuote, VerificationResult
from src.services.rate_calculator import BASE_PRICE_CENTS, CURRENCY
from src.utils.redaction import sanitize_error_message

FALLBACK_SERVICE_CODE = "STD_FALLBACK"

RESIDENTIAL_MESSAGE = "Residential address detected"
COMMERCIAL_MESSAGE = "Commercial address detected"
UNVERIFIED_MESSAGE = "Unable to verify address"


def rate_to_dict(quote: RateQuote) -> dict[str, Any]:
    return {
        "service_name": quote.service_name,
        "service_code": quote.service_code,
        "total_price": quote.total_price_cents,
        "description": quote.description,
        "currency": quote.currency,
    }


def build_quote_response(quote: RateQuote) -> list[dict[str, Any]]:
    """Single-element rate array."""
    return [rate_to_dict(quote)]


def build_fallback_quote(error: Exception) -> RateQuote:
    """Synthesize the base-price quote used when the pipeline fails.

    The error text goes into ``description`` so the failure is visible in
    the caller's rate list; it is never empty.
    """
    if isinstance(error, DomainError):
        reason = error.message
    else:
        reason = str(error) or type(error).__name__
    return RateQuote(
        service_name="Standard Shipping",
        service_code=FALLBACK_SERVICE_CODE,
        total_price_cents=BASE_PRICE_CENTS,
        description=f"Standard rate applied: {sanitize_error_message(reason, 200)}",
        currency=CURRENCY,
    )


def classification_message(classification: Classification, result: VerificationResult) -> str:
    if not result.success:
        return UNVERIFIED_MESSAGE
    return RESIDENTIAL_MESSAGE if classification.is_residential else COMMERCIAL_MESSAGE


def build_classification_response(
    classification: Classification,
    result: VerificationResult,
) -> dict[str, Any]:
    """``{residential, verification, message}`` for the RDI check."""
    return {
        "residential": classification.is_residential,
        "verification": result.success,
        "message": classification_message(classification, result),
    }


def build_error_response(error: DomainError) -> dict[str, Any]:
    """Error body for classification mode.

    Validation and auth errors carry only ``error``; everything else adds
    sanitized ``details``.
    """
    if error.http_status < 500:
        return {"error": error.message, "error_code": error.code}
    return {
        "error": "Internal Server Error",
        "error_code": error.code,
        "details": sanitize_error_message(error.message),
    }
