"""Tests for flat-rate pricing."""

import pytest

from src.services.models import Classification, ClassificationSource
from src.services.rate_calculator import (
    BASE_PRICE_CENTS,
    RESIDENTIAL_SURCHARGE_CENTS,
    price,
)


@pytest.mark.parametrize("source", list(ClassificationSource))
@pytest.mark.parametrize("is_residential", [True, False])
def test_price_depends_only_on_residential_flag(is_residential, source):
    quote = price(Classification(is_residential, source))

    assert quote.total_price_cents == (2000 if is_residential else 1000)
    assert quote.currency == "USD"


def test_residential_quote():
    quote = price(Classification(True, ClassificationSource.PROVIDER_DETAIL))

    assert quote.service_code == "RES_STD"
    assert quote.service_name == "Standard (Residential Fee Applied)"
    assert quote.total_price_cents == BASE_PRICE_CENTS + RESIDENTIAL_SURCHARGE_CENTS
    assert "$10" in quote.description


def test_commercial_quote():
    quote = price(Classification(False, ClassificationSource.DEFAULT))

    assert quote.service_code == "STD"
    assert quote.service_name == "Standard Shipping"
    assert quote.total_price_cents == BASE_PRICE_CENTS


def test_price_is_deterministic():
    classification = Classification(True, ClassificationSource.HEURISTIC_REGEX)

    assert price(classification) == price(classification)
