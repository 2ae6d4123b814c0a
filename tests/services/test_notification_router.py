"""Tests for provenance-filtered notification routing."""

import asyncio
import logging

import pytest

from src.config import NotificationConfig
from src.services.models import NotificationEvent, NotificationType, RequestContext
from src.services.notification_router import (
    NotificationRouter,
    matches_route,
    should_dispatch,
)
from tests.helpers.fakes import PAGE_MARKER, PROVENANCE_VALUE, RecordingSink

MATCHING_REFERER = RequestContext(referer=f"https://shop.example.com{PAGE_MARKER}/spring")
MATCHING_HEADER = RequestContext(page_context=PROVENANCE_VALUE)
UNRELATED = RequestContext(origin="https://shop.example.com", referer="https://shop.example.com/cart")


def _event(event_type: NotificationType) -> NotificationEvent:
    return NotificationEvent(type=event_type, title="Title", message="Message", context={"k": "v"})


class TestRoutePredicate:

    def test_referer_marker_matches(self, notification_config):
        assert matches_route(MATCHING_REFERER, notification_config) is True

    def test_provenance_header_matches(self, notification_config):
        assert matches_route(MATCHING_HEADER, notification_config) is True

    def test_unrelated_request_does_not_match(self, notification_config):
        assert matches_route(UNRELATED, notification_config) is False

    def test_header_must_match_exactly(self, notification_config):
        context = RequestContext(page_context=PROVENANCE_VALUE + "-other")

        assert matches_route(context, notification_config) is False

    def test_empty_rule_never_matches(self):
        rule = NotificationConfig(referer_marker="", provenance_value="")

        assert matches_route(RequestContext(), rule) is False
        assert matches_route(RequestContext(referer="https://x", page_context=""), rule) is False

    def test_error_events_always_dispatch(self, notification_config):
        assert should_dispatch(_event(NotificationType.ERROR), UNRELATED, notification_config) is True

    @pytest.mark.parametrize("event_type", [NotificationType.SUCCESS, NotificationType.WARNING])
    def test_non_error_events_follow_predicate(self, event_type, notification_config):
        assert should_dispatch(_event(event_type), UNRELATED, notification_config) is False
        assert should_dispatch(_event(event_type), MATCHING_REFERER, notification_config) is True
        assert should_dispatch(_event(event_type), MATCHING_HEADER, notification_config) is True


class TestNotificationRouter:

    @pytest.mark.asyncio
    async def test_error_event_sent_without_matching_provenance(self, notification_config):
        sink = RecordingSink()
        router = NotificationRouter(sink, notification_config)

        assert router.route(_event(NotificationType.ERROR), UNRELATED) is True
        await router.drain()

        assert [e.type for e in sink.events] == [NotificationType.ERROR]

    @pytest.mark.asyncio
    async def test_success_event_not_sent_without_matching_provenance(self, notification_config):
        sink = RecordingSink()
        router = NotificationRouter(sink, notification_config)

        assert router.route(_event(NotificationType.SUCCESS), UNRELATED) is False
        await router.drain()

        assert sink.attempts == 0

    @pytest.mark.asyncio
    async def test_success_event_sent_for_matching_provenance(self, notification_config):
        sink = RecordingSink()
        router = NotificationRouter(sink, notification_config)

        router.route(_event(NotificationType.SUCCESS), MATCHING_REFERER)
        await router.drain()

        assert len(sink.events) == 1

    @pytest.mark.asyncio
    async def test_route_does_not_wait_for_sink(self, notification_config):
        release = asyncio.Event()

        class SlowSink(RecordingSink):
            async def send(self, event):
                await release.wait()
                await super().send(event)

        sink = SlowSink()
        router = NotificationRouter(sink, notification_config)

        router.route(_event(NotificationType.ERROR), UNRELATED)
        assert router.pending == 1
        assert sink.events == []

        release.set()
        await router.drain()
        assert len(sink.events) == 1
        assert router.pending == 0

    @pytest.mark.asyncio
    async def test_sink_failure_is_logged_and_swallowed(self, notification_config, caplog):
        sink = RecordingSink(fail=True)
        router = NotificationRouter(sink, notification_config)

        with caplog.at_level(logging.WARNING, logger="src.services.notification_router"):
            router.route(_event(NotificationType.ERROR), UNRELATED)
            await router.drain()

        assert sink.attempts == 1
        assert "dropped" in caplog.text

    @pytest.mark.asyncio
    async def test_unexpected_sink_exception_is_swallowed(self, notification_config):
        class BrokenSink(RecordingSink):
            async def send(self, event):
                self.attempts += 1
                raise RuntimeError("boom")

        sink = BrokenSink()
        router = NotificationRouter(sink, notification_config)

        router.route(_event(NotificationType.ERROR), UNRELATED)
        await router.drain()

        assert sink.attempts == 1

    @pytest.mark.asyncio
    async def test_unconfigured_sink_is_a_no_op(self, notification_config):
        sink = RecordingSink(configured=False)
        router = NotificationRouter(sink, notification_config)

        router.route(_event(NotificationType.ERROR), UNRELATED)
        await router.drain()

        assert sink.attempts == 0
        assert router.pending == 0

    @pytest.mark.asyncio
    async def test_drain_cancels_stuck_dispatches(self, notification_config):
        class HangingSink(RecordingSink):
            async def send(self, event):
                await asyncio.sleep(3600)

        router = NotificationRouter(HangingSink(), notification_config)
        router.route(_event(NotificationType.ERROR), UNRELATED)

        await router.drain(timeout=0.01)
        await asyncio.sleep(0.01)

        assert router.pending == 0
