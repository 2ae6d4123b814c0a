"""Per-request address check pipeline.

    received -> normalized -> verified -> classified -> (priced ->) responded
                    \\             \\            \\
                     +-------------+------------+--> errored

Quote mode maps ``errored`` back into a response carrying a fallback quote,
because the carrier-rate caller needs a rate array no matter what.
Classification mode surfaces ``errored`` as an error status.

Each run is sequential and owns everything it creates. The provider call is
the only awaited I/O; notifications are handed to the router, which sends
them in the background.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

from src.errors import DomainError, ProviderError, ValidationError
from src.services.address_normalizer import (
    normalize_classification_payload,
    normalize_quote_payload,
)
from src.services.classifier import classify
from src.services.models import (
    AddressRecord,
    Classification,
    NotificationEvent,
    NotificationType,
    RequestContext,
    VerificationResult,
)
from src.services.notification_router import NotificationRouter
from src.services.rate_calculator import price
from src.services.response_builder import (
    build_classification_response,
    build_error_response,
    build_fallback_quote,
    build_quote_response,
    classification_message,
)
from src.utils.redaction import redact_for_logging

logger = logging.getLogger(__name__)


class PipelineMode(str, Enum):
    """Integration variant; fixed per route, never chosen by the caller."""

    QUOTE = "quote"
    CLASSIFICATION = "classification"


class PipelineState(str, Enum):
    RECEIVED = "received"
    NORMALIZED = "normalized"
    VERIFIED = "verified"
    CLASSIFIED = "classified"
    PRICED = "priced"
    RESPONDED = "responded"
    ERRORED = "errored"


class Verifier(Protocol):
    async def verify(self, address: AddressRecord) -> VerificationResult:
        ...


@dataclass
class PipelineOutcome:
    """What the route returns, plus the trail for logs and tests."""

    status_code: int
    body: Any
    trail: list[PipelineState]
    classification: Classification | None = None

    @property
    def errored(self) -> bool:
        return PipelineState.ERRORED in self.trail


class _Run:
    """Mutable bookkeeping for a single pipeline run."""

    def __init__(self, mode: PipelineMode) -> None:
        self.mode = mode
        self.trail = [PipelineState.RECEIVED]
        self.address: AddressRecord | None = None

    def advance(self, state: PipelineState) -> None:
        self.trail.append(state)
        logger.debug("%s pipeline: %s", self.mode.value, state.value)


class AddressCheckPipeline:
    """Runs normalize -> verify -> classify (-> price) for one request.

    Args:
        verifier: Address verification adapter.
        router: Notification router for the side-channel events.
    """

    def __init__(self, verifier: Verifier, router: NotificationRouter) -> None:
        self._verifier = verifier
        self._router = router

    async def _check(
        self,
        run: _Run,
        body: Any,
        normalize: Callable[[Any], AddressRecord],
    ) -> tuple[VerificationResult, Classification]:
        if isinstance(body, dict):
            logger.debug("Incoming %s request: %s", run.mode.value, redact_for_logging(body))
        run.address = normalize(body)
        run.advance(PipelineState.NORMALIZED)

        result = await self._verifier.verify(run.address)
        run.advance(PipelineState.VERIFIED)

        classification = classify(result, run.address)
        run.advance(PipelineState.CLASSIFIED)
        logger.info(
            "Classified %s as %s (source=%s, verified=%s)",
            run.address.zip,
            "residential" if classification.is_residential else "commercial",
            classification.source.value,
            result.success,
        )
        return result, classification

    def _notify_outcome(
        self,
        run: _Run,
        result: VerificationResult,
        classification: Classification,
        context: RequestContext,
        extra: dict[str, Any] | None = None,
    ) -> None:
        address = run.address
        event_context: dict[str, Any] = {
            "address": address.one_line() if address else "",
            "verified": result.success,
            "residential": classification.is_residential,
            "source": classification.source.value,
            "mode": run.mode.value,
        }
        event_context.update(extra or {})
        if result.success:
            event = NotificationEvent(
                type=NotificationType.SUCCESS,
                title="RDI Address Check Successful",
                message=classification_message(classification, result),
                context=event_context,
            )
        else:
            logger.warning(
                "Address verification incomplete for %s; classified via %s",
                address.zip if address else "?",
                classification.source.value,
            )
            if result.errors:
                event_context["provider_errors"] = list(result.errors)
            event = NotificationEvent(
                type=NotificationType.WARNING,
                title="Address Verification Incomplete",
                message=classification_message(classification, result),
                context=event_context,
            )
        self._router.route(event, context)

    def _notify_error(self, run: _Run, error: Exception, context: RequestContext) -> None:
        if isinstance(error, DomainError):
            title, message, code = error.title, error.message, error.code
        else:
            title, message, code = "Unexpected Error", str(error) or type(error).__name__, "E-4001"
        event_context: dict[str, Any] = {"error_code": code, "mode": run.mode.value}
        if run.address is not None:
            event_context["address"] = run.address.one_line()
        elif isinstance(error, DomainError) and error.details:
            event_context.update(error.details)
        self._router.route(
            NotificationEvent(
                type=NotificationType.ERROR,
                title=title,
                message=message,
                context=event_context,
            ),
            context,
        )

    async def run_quote(self, body: Any, context: RequestContext) -> PipelineOutcome:
        """Quote mode: always answers with a one-element rate array.

        Validation failures answer 400, every other failure 200; both carry
        a fallback quote whose description holds the error message.
        """
        run = _Run(PipelineMode.QUOTE)
        try:
            result, classification = await self._check(run, body, normalize_quote_payload)
            quote = price(classification)
            run.advance(PipelineState.PRICED)
        except Exception as e:
            run.advance(PipelineState.ERRORED)
            if isinstance(e, DomainError):
                logger.error("Quote pipeline failed: %s", e)
            else:
                logger.exception("Quote pipeline failed unexpectedly")
            self._notify_error(run, e, context)
            run.advance(PipelineState.RESPONDED)
            return PipelineOutcome(
                status_code=400 if isinstance(e, ValidationError) else 200,
                body=build_quote_response(build_fallback_quote(e)),
                trail=run.trail,
            )

        self._notify_outcome(
            run,
            result,
            classification,
            context,
            extra={"total_price": quote.total_price_cents, "service_code": quote.service_code},
        )
        run.advance(PipelineState.RESPONDED)
        return PipelineOutcome(
            status_code=200,
            body=build_quote_response(quote),
            trail=run.trail,
            classification=classification,
        )

    async def run_classification(self, body: Any, context: RequestContext) -> PipelineOutcome:
        """Classification mode: ``{residential, verification, message}``.

        Validation failures answer 400 before the provider is called;
        provider and unexpected failures answer 500 with details.
        """
        run = _Run(PipelineMode.CLASSIFICATION)
        try:
            result, classification = await self._check(
                run, body, normalize_classification_payload
            )
        except (ValidationError, ProviderError) as e:
            run.advance(PipelineState.ERRORED)
            logger.error("Classification pipeline failed: %s", e)
            self._notify_error(run, e, context)
            return PipelineOutcome(
                status_code=e.http_status,
                body=build_error_response(e),
                trail=run.trail,
            )
        except Exception as e:
            run.advance(PipelineState.ERRORED)
            logger.exception("Classification pipeline failed unexpectedly")
            self._notify_error(run, e, context)
            wrapped = DomainError("E-4001", reason=str(e) or type(e).__name__)
            return PipelineOutcome(
                status_code=500,
                body=build_error_response(wrapped),
                trail=run.trail,
            )

        self._notify_outcome(run, result, classification, context)
        run.advance(PipelineState.RESPONDED)
        return PipelineOutcome(
            status_code=200,
            body=build_classification_response(classification, result),
            trail=run.trail,
            classification=classification,
        )
