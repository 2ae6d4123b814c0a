"""Tests for the Slack webhook sink."""

import json
from datetime import UTC, datetime

import httpx
import pytest

from src.config import NotificationConfig
from src.errors import SinkDispatchError
from src.services.models import NotificationEvent, NotificationType
from src.services.notification_sink import SlackWebhookSink, build_slack_payload

EVENT = NotificationEvent(
    type=NotificationType.SUCCESS,
    title="RDI Address Check Successful",
    message="Residential address detected",
    context={"address": "1 Main St Apt 2, Austin, TX 78701", "verified": True, "extra": {"a": 1}},
)


class TestBuildSlackPayload:

    def test_attachment_shape(self):
        payload = build_slack_payload(EVENT, "RDI Checker", now=datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC))

        attachment = payload["attachments"][0]
        assert attachment["color"] == "#2eb67d"
        assert attachment["title"] == "RDI Address Check Successful"
        assert attachment["text"] == "Residential address detected"
        assert attachment["footer"].startswith("RDI Checker • 2026-01-02 03:04:05")
        assert attachment["fields"][0] == {
            "title": "address",
            "value": "1 Main St Apt 2, Austin, TX 78701",
            "short": False,
        }
        assert attachment["fields"][1]["value"] == "True"
        assert json.loads(attachment["fields"][2]["value"]) == {"a": 1}

    @pytest.mark.parametrize(
        "event_type,color",
        [
            (NotificationType.ERROR, "#e01e5a"),
            (NotificationType.WARNING, "#ecb22e"),
        ],
    )
    def test_color_per_type(self, event_type, color):
        event = NotificationEvent(type=event_type, title="t", message="m")

        assert build_slack_payload(event, "f")["attachments"][0]["color"] == color


class TestSlackWebhookSink:

    @pytest.mark.asyncio
    async def test_posts_to_webhook(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="ok")

        sink = SlackWebhookSink(
            NotificationConfig(webhook_url="https://hooks.example.test/notify"),
            transport=httpx.MockTransport(handler),
        )
        await sink.send(EVENT)
        await sink.aclose()

        assert str(seen[0].url) == "https://hooks.example.test/notify"
        assert json.loads(seen[0].content)["attachments"][0]["title"] == EVENT.title

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self):
        sink = SlackWebhookSink(
            NotificationConfig(webhook_url="https://hooks.example.test/notify"),
            transport=httpx.MockTransport(lambda request: httpx.Response(404, text="no_service")),
        )
        with pytest.raises(SinkDispatchError) as exc_info:
            await sink.send(EVENT)
        await sink.aclose()

        assert "404" in exc_info.value.message
        assert "no_service" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_transport_failure_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        sink = SlackWebhookSink(
            NotificationConfig(webhook_url="https://hooks.example.test/notify"),
            transport=httpx.MockTransport(handler),
        )
        with pytest.raises(SinkDispatchError) as exc_info:
            await sink.send(EVENT)
        await sink.aclose()

        assert exc_info.value.code == "E-4002"

    def test_configured_flag(self):
        assert SlackWebhookSink(NotificationConfig()).configured is False
        assert SlackWebhookSink(NotificationConfig(webhook_url="https://x")).configured is True
