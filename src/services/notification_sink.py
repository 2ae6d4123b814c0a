"""Slack incoming-webhook sink for address check notifications.

Formats a NotificationEvent as a single Slack attachment (colour by event
type, one field per context entry, footer with a timestamp) and posts it.
"""

import json
import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from src.config import NotificationConfig
from src.errors import SinkDispatchError
from src.services.models import NotificationEvent, NotificationType
from src.utils.redaction import sanitize_error_message

logger = logging.getLogger(__name__)

_COLORS = {
    NotificationType.ERROR: "#e01e5a",
    NotificationType.SUCCESS: "#2eb67d",
    NotificationType.WARNING: "#ecb22e",
}
_DEFAULT_COLOR = "#439fe0"


def _field_value(value: Any) -> str:
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, indent=2, default=str)
    return str(value)


def build_slack_payload(
    event: NotificationEvent,
    footer: str,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Render an event as a Slack webhook body.

    Args:
        event: Event to render.
        footer: Label shown before the timestamp.
        now: Timestamp for the footer (defaults to current UTC time).

    Returns:
        JSON-serializable webhook payload.
    """
    stamp = (now or datetime.now(UTC)).strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    return {
        "attachments": [
            {
                "color": _COLORS.get(event.type, _DEFAULT_COLOR),
                "title": event.title,
                "text": event.message,
                "fields": [
                    {"title": key, "value": _field_value(value), "short": False}
                    for key, value in event.context.items()
                ],
                "footer": f"{footer} • {stamp}",
            }
        ]
    }


class SlackWebhookSink:
    """Posts events to the configured webhook URL.

    An empty URL leaves the sink unconfigured; the router then skips it.
    """

    def __init__(
        self,
        config: NotificationConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._client = httpx.AsyncClient(
            timeout=config.timeout_seconds,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self._config.webhook_url)

    async def send(self, event: NotificationEvent) -> None:
        """Post one event.

        Raises:
            SinkDispatchError: On transport failure or a non-2xx answer.
        """
        payload = build_slack_payload(event, self._config.footer)
        try:
            response = await self._client.post(self._config.webhook_url, json=payload)
        except httpx.RequestError as e:
            raise SinkDispatchError(
                reason=sanitize_error_message(f"{type(e).__name__}: {e}"),
            ) from e

        logger.debug("Slack webhook answered HTTP %s", response.status_code)
        if response.is_error:
            raise SinkDispatchError(
                reason=f"HTTP {response.status_code}: {sanitize_error_message(response.text, 200)}",
            )

    async def aclose(self) -> None:
        await self._client.aclose()
