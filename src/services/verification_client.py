"""EasyPost address verification adapter.

Wraps ``POST /v2/addresses?verify[]=delivery`` and turns the answer into a
VerificationResult. Any HTTP response with a JSON object body is a result,
including non-2xx "could not verify" answers: the provider did answer.
Only transport failures and unreadable bodies raise ProviderError.

The call is made exactly once per request. Cancelling the awaiting task
cancels the in-flight request.

Example:
    client = VerificationClient(config.provider)
    result = await client.verify(address)
    await client.aclose()
"""

import json
import logging
from types import MappingProxyType
from typing import Any

import httpx

from src.config import ProviderConfig
from src.errors import ProviderError
from src.services.models import (
    AddressRecord,
    DeliveryDetailResidential,
    ResidentialSignal,
    TopLevelResidential,
    Unverified,
    VerificationResult,
)
from src.utils.redaction import redact_for_logging, sanitize_error_message

logger = logging.getLogger(__name__)

ADDRESSES_PATH = "/v2/addresses"


def _delivery_block(payload: dict[str, Any]) -> dict[str, Any]:
    verifications = payload.get("verifications")
    if not isinstance(verifications, dict):
        return {}
    delivery = verifications.get("delivery")
    return delivery if isinstance(delivery, dict) else {}


def extract_signals(payload: dict[str, Any]) -> tuple[ResidentialSignal, ...]:
    """Match the known provider shapes into residential signal variants.

    Only real booleans count; ``null`` or a missing key is not a signal.

    Args:
        payload: Decoded provider body.

    Returns:
        Signals in the order they were found, or a single Unverified.
    """
    signals: list[ResidentialSignal] = []

    details = _delivery_block(payload).get("details")
    if isinstance(details, dict) and isinstance(details.get("residential"), bool):
        signals.append(DeliveryDetailResidential(details["residential"]))

    if isinstance(payload.get("residential"), bool):
        signals.append(TopLevelResidential(payload["residential"]))

    if not signals:
        return (Unverified(),)
    return tuple(signals)


def _verification_errors(payload: dict[str, Any]) -> tuple[str, ...]:
    errors = _delivery_block(payload).get("errors") or []
    messages = []
    for error in errors if isinstance(errors, list) else []:
        if isinstance(error, dict) and error.get("message"):
            messages.append(str(error["message"]))
    provider_error = payload.get("error")
    if isinstance(provider_error, dict) and provider_error.get("message"):
        messages.append(str(provider_error["message"]))
    return tuple(messages)


def parse_verification_payload(payload: dict[str, Any], status_code: int = 200) -> VerificationResult:
    """Build a VerificationResult from a decoded provider body."""
    return VerificationResult(
        success=_delivery_block(payload).get("success") is True,
        signals=extract_signals(payload),
        status_code=status_code,
        errors=_verification_errors(payload),
        raw=MappingProxyType(dict(payload)),
    )


class VerificationClient:
    """Async client for the EasyPost address endpoint.

    Holds one ``httpx.AsyncClient`` (connection pool) for the process.
    Pass ``transport`` to substitute the network in tests.
    """

    def __init__(
        self,
        config: ProviderConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url.rstrip("/"),
            timeout=config.timeout_seconds,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self._config.api_key)

    async def verify(self, address: AddressRecord) -> VerificationResult:
        """Request delivery verification for one address.

        Args:
            address: Normalized destination.

        Returns:
            VerificationResult for any HTTP answer with a JSON object body.

        Raises:
            ProviderError: E-3003 without an API key, E-3001 on transport
                failure, E-3002 on a body that is not a JSON object.
        """
        if not self._config.api_key:
            raise ProviderError("E-3003")

        try:
            response = await self._client.post(
                ADDRESSES_PATH,
                params={"verify[]": "delivery"},
                json={"address": address.as_provider_fields()},
                headers={"Authorization": f"Bearer {self._config.api_key}"},
            )
        except httpx.RequestError as e:
            reason = sanitize_error_message(f"{type(e).__name__}: {e}")
            logger.error("EasyPost request failed: %s", reason)
            raise ProviderError("E-3001", reason=reason) from e

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProviderError(
                "E-3002",
                reason=f"HTTP {response.status_code}, body is not JSON",
            ) from e
        if not isinstance(payload, dict):
            raise ProviderError(
                "E-3002",
                reason=f"HTTP {response.status_code}, expected a JSON object",
            )

        logger.debug("EasyPost raw response: %s", redact_for_logging(payload))
        result = parse_verification_payload(payload, response.status_code)
        if response.is_error:
            logger.warning(
                "EasyPost answered HTTP %s for %s: %s",
                response.status_code,
                address.zip,
                "; ".join(result.errors) or "no message",
            )
        return result

    async def aclose(self) -> None:
        await self._client.aclose()
