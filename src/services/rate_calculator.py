"""Flat-rate pricing derived from the residential classification.

Prices are integer cents: base 1000, plus a 1000 residential surcharge.
"""

from src.services.models import Classification, RateQuote

BASE_PRICE_CENTS = 1000
RESIDENTIAL_SURCHARGE_CENTS = 1000
CURRENCY = "USD"

COMMERCIAL_SERVICE_CODE = "STD"
RESIDENTIAL_SERVICE_CODE = "RES_STD"


def price(classification: Classification) -> RateQuote:
    """Map a classification to its rate quote.

    Args:
        classification: Resolved residential/commercial flag.

    Returns:
        RateQuote with ``total_price_cents`` of 2000 when residential,
        1000 otherwise.
    """
    if classification.is_residential:
        surcharge_dollars = RESIDENTIAL_SURCHARGE_CENTS // 100
        return RateQuote(
            service_name="Standard (Residential Fee Applied)",
            service_code=RESIDENTIAL_SERVICE_CODE,
            total_price_cents=BASE_PRICE_CENTS + RESIDENTIAL_SURCHARGE_CENTS,
            description=f"Includes ${surcharge_dollars} residential delivery fee",
            currency=CURRENCY,
        )
    return RateQuote(
        service_name="Standard Shipping",
        service_code=COMMERCIAL_SERVICE_CODE,
        total_price_cents=BASE_PRICE_CENTS,
        description="Commercial address - no fee",
        currency=CURRENCY,
    )
