"""Provenance-filtered notification routing.

Error events always go to the sink so operators see every failure. Success
and warning events only go out for traffic whose provenance matches the
configured route: the referer contains a path marker, or the provenance
header carries the expected value.

Dispatch is a detached asyncio task. The request that produced the event
never awaits it, and a failed dispatch is logged here and goes no further.
Events are sent at most once.
"""

import asyncio
import logging
from typing import Protocol

from src.config import NotificationConfig
from src.errors import SinkDispatchError
from src.services.models import NotificationEvent, NotificationType, RequestContext

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Destination for routed events."""

    @property
    def configured(self) -> bool:
        """False when the sink has no endpoint and should be skipped."""
        ...

    async def send(self, event: NotificationEvent) -> None:
        """Deliver one event, raising SinkDispatchError on failure."""
        ...


def matches_route(context: RequestContext, rule: NotificationConfig) -> bool:
    """Return True when the request provenance matches the route predicate.

    Empty marker or empty expected value never match.
    """
    if rule.referer_marker and rule.referer_marker in context.referer:
        return True
    if rule.provenance_value and context.page_context == rule.provenance_value:
        return True
    return False


def should_dispatch(
    event: NotificationEvent,
    context: RequestContext,
    rule: NotificationConfig,
) -> bool:
    """Decide whether an event is emitted.

    Args:
        event: Event produced by the pipeline.
        context: Provenance of the request that produced it.
        rule: Route predicate settings.

    Returns:
        True for every error event; for success/warning events, whether
        the route predicate matches.
    """
    if event.type == NotificationType.ERROR:
        return True
    return matches_route(context, rule)


class NotificationRouter:
    """Applies the route predicate and hands matching events to the sink.

    Outstanding dispatch tasks are tracked so they are not garbage
    collected mid-flight and can be drained on shutdown.
    """

    def __init__(self, sink: NotificationSink, rule: NotificationConfig) -> None:
        self._sink = sink
        self._rule = rule
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def route(self, event: NotificationEvent, context: RequestContext) -> bool:
        """Emit the event if the predicate holds.

        Must be called from a running event loop. Returns immediately; the
        sink call runs in a background task.

        Returns:
            The routing decision.
        """
        if not should_dispatch(event, context, self._rule):
            logger.debug("Notification '%s' not routed (provenance mismatch)", event.title)
            return False
        if not self._sink.configured:
            return True

        task = asyncio.create_task(self._dispatch(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def _dispatch(self, event: NotificationEvent) -> None:
        try:
            await self._sink.send(event)
        except SinkDispatchError as e:
            logger.warning("Notification '%s' dropped: %s", event.title, e)
        except Exception:
            logger.exception("Notification '%s' dropped: unexpected sink failure", event.title)

    async def drain(self, timeout: float = 5.0) -> None:
        """Wait for outstanding dispatches, up to ``timeout`` seconds."""
        if not self._tasks:
            return
        _, still_pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in still_pending:
            task.cancel()
        if still_pending:
            logger.warning("Cancelled %d unfinished notification dispatches", len(still_pending))
