"""Request-scoped domain types for address classification and quoting.

Neutral module with no I/O. Every value here is created once per request
by a single pipeline and never mutated afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Union

DEFAULT_COUNTRY = "US"


@dataclass(frozen=True)
class AddressRecord:
    """Canonical destination address built by the input normalizer."""

    street1: str
    city: str
    state: str
    zip: str
    country: str = DEFAULT_COUNTRY

    def one_line(self) -> str:
        """Human-readable single line, as shown in notifications."""
        return f"{self.street1}, {self.city}, {self.state} {self.zip}"

    def as_provider_fields(self) -> dict[str, str]:
        return {
            "street1": self.street1,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "country": self.country,
        }


# --- Residential signal variants ---
# The provider reports the residential flag at different depths depending on
# the call mode. The adapter matches the known shapes into these variants.


@dataclass(frozen=True)
class DeliveryDetailResidential:
    """Flag found at ``verifications.delivery.details.residential``."""

    residential: bool


@dataclass(frozen=True)
class TopLevelResidential:
    """Flag found at the payload root (``residential``)."""

    residential: bool


@dataclass(frozen=True)
class Unverified:
    """No boolean residential flag anywhere in the payload."""

    reason: str = "no residential flag in provider response"


ResidentialSignal = Union[DeliveryDetailResidential, TopLevelResidential, Unverified]


@dataclass(frozen=True)
class VerificationResult:
    """Provider answer for one address.

    Attributes:
        success: Delivery verification succeeded.
        signals: Residential signals found in the payload, in discovery order.
        status_code: HTTP status of the provider response.
        errors: Provider verification messages (may be empty).
        raw: Read-only view of the provider body.
    """

    success: bool
    signals: tuple[ResidentialSignal, ...] = (Unverified(),)
    status_code: int = 200
    errors: tuple[str, ...] = ()
    raw: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


class ClassificationSource(str, Enum):
    """Which resolution tier produced the classification."""

    PROVIDER_DETAIL = "provider_detail"
    PROVIDER_TOP_LEVEL = "provider_top_level"
    HEURISTIC_REGEX = "heuristic_regex"
    DEFAULT = "default"


@dataclass(frozen=True)
class Classification:
    """Residential/commercial determination. Never unknown."""

    is_residential: bool
    source: ClassificationSource


@dataclass(frozen=True)
class RateQuote:
    """Carrier-style rate line; prices are integer cents."""

    service_name: str
    service_code: str
    total_price_cents: int
    description: str
    currency: str = "USD"


class NotificationType(str, Enum):
    """Severity of a notification event."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class NotificationEvent:
    """Observability event handed to the notification router."""

    type: NotificationType
    title: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RequestContext:
    """Provenance headers of the inbound request."""

    origin: str = ""
    referer: str = ""
    page_context: str = ""

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        provenance_header: str = "X-Page-Context",
    ) -> "RequestContext":
        """Build from a case-insensitive header mapping (e.g. Starlette Headers)."""
        return cls(
            origin=headers.get("origin", "") or "",
            referer=headers.get("referer", "") or "",
            page_context=headers.get(provenance_header, "") or "",
        )
