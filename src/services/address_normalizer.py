"""Input normalizer: request payload -> AddressRecord.

Carrier-calculated-rate callers nest the destination under ``to_address``
(or ``to``); the storefront RDI check posts flat top-level fields. Both
shapes collapse into one AddressRecord. No I/O.
"""

from typing import Any

from src.errors import ValidationError
from src.services.models import DEFAULT_COUNTRY, AddressRecord

REQUIRED_FIELDS = ("street1", "city", "state", "zip")

# Street line keys in lookup order
_STREET_KEYS = ("address1", "street1")


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _require_object(body: Any) -> dict:
    if not isinstance(body, dict):
        raise ValidationError("E-2003")
    return body


def extract_address(fields: dict[str, Any]) -> AddressRecord:
    """Build an AddressRecord from a flat field mapping.

    Args:
        fields: Mapping with ``address1`` (or ``street1``), ``city``,
            ``state``, ``zip`` and optional ``country``.

    Returns:
        AddressRecord with whitespace-stripped values.

    Raises:
        ValidationError: E-2002 naming every required field that is empty.
    """
    street1 = next(
        (_text(fields.get(key)) for key in _STREET_KEYS if _text(fields.get(key))),
        "",
    )
    values = {
        "street1": street1,
        "city": _text(fields.get("city")),
        "state": _text(fields.get("state")),
        "zip": _text(fields.get("zip")),
    }
    missing = [name for name in REQUIRED_FIELDS if not values[name]]
    if missing:
        raise ValidationError(
            "E-2002",
            fields=", ".join(missing),
            details={"missing": missing},
        )
    return AddressRecord(
        country=_text(fields.get("country")) or DEFAULT_COUNTRY,
        **values,
    )


def normalize_quote_payload(body: Any) -> AddressRecord:
    """Normalize a carrier-rate request (``{to_address | to: {...}}``).

    Raises:
        ValidationError: E-2003 for a non-object body, E-2001 when neither
            key holds an object, E-2002 for empty required fields.
    """
    body = _require_object(body)
    to = body.get("to_address") or body.get("to")
    if not isinstance(to, dict):
        raise ValidationError("E-2001")
    return extract_address(to)


def normalize_classification_payload(body: Any) -> AddressRecord:
    """Normalize a flat RDI check request (``{address1, city, state, zip}``).

    Raises:
        ValidationError: E-2003 for a non-object body, E-2002 for empty
            required fields.
    """
    return extract_address(_require_object(body))
