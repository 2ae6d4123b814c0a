"""Tests for request payload normalization."""

import pytest

from src.errors import ValidationError
from src.services.address_normalizer import (
    normalize_classification_payload,
    normalize_quote_payload,
)
from src.services.models import AddressRecord

FIELDS = {"address1": "123 Main St Apt 4", "city": "Springfield", "state": "IL", "zip": "62701"}


class TestQuotePayload:

    def test_reads_to_address(self):
        address = normalize_quote_payload({"to_address": dict(FIELDS)})

        assert address == AddressRecord("123 Main St Apt 4", "Springfield", "IL", "62701", "US")

    def test_reads_to_alias(self):
        address = normalize_quote_payload({"to": dict(FIELDS, country="CA")})

        assert address.street1 == "123 Main St Apt 4"
        assert address.country == "CA"

    def test_to_address_preferred_over_to(self):
        body = {"to_address": dict(FIELDS), "to": dict(FIELDS, city="Elsewhere")}

        assert normalize_quote_payload(body).city == "Springfield"

    def test_missing_address_block(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize_quote_payload({"from": dict(FIELDS)})

        assert exc_info.value.code == "E-2001"
        assert exc_info.value.http_status == 400

    def test_address_block_not_an_object(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize_quote_payload({"to_address": "123 Main St"})

        assert exc_info.value.code == "E-2001"

    def test_incomplete_nested_address(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize_quote_payload({"to_address": dict(FIELDS, zip="")})

        assert exc_info.value.code == "E-2002"
        assert exc_info.value.details == {"missing": ["zip"]}


class TestClassificationPayload:

    def test_flat_fields(self):
        address = normalize_classification_payload(dict(FIELDS))

        assert address.one_line() == "123 Main St Apt 4, Springfield, IL 62701"
        assert address.country == "US"

    def test_street1_accepted_as_street_key(self):
        body = {"street1": "9 Hill Road", "city": "Austin", "state": "TX", "zip": "78701"}

        assert normalize_classification_payload(body).street1 == "9 Hill Road"

    def test_values_are_stripped(self):
        address = normalize_classification_payload(
            {"address1": "  1 Main St ", "city": " Austin", "state": "TX ", "zip": 78701}
        )

        assert address == AddressRecord("1 Main St", "Austin", "TX", "78701")

    @pytest.mark.parametrize("field", ["address1", "city", "state", "zip"])
    def test_each_required_field(self, field):
        body = dict(FIELDS)
        del body[field]

        with pytest.raises(ValidationError) as exc_info:
            normalize_classification_payload(body)

        expected = "street1" if field == "address1" else field
        assert exc_info.value.details["missing"] == [expected]
        assert expected in exc_info.value.message

    def test_whitespace_only_counts_as_missing(self):
        with pytest.raises(ValidationError):
            normalize_classification_payload(dict(FIELDS, city="   "))

    def test_reports_all_missing_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize_classification_payload({"address1": "1 Main St"})

        assert exc_info.value.details["missing"] == ["city", "state", "zip"]

    @pytest.mark.parametrize("body", [None, [], "text", 42])
    def test_non_object_body(self, body):
        with pytest.raises(ValidationError) as exc_info:
            normalize_classification_payload(body)

        assert exc_info.value.code == "E-2003"
        assert exc_info.value.message == "Invalid JSON body."
