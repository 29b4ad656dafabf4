"""Tests for the read model event handlers."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from notifyhub.core.events import InMemoryEventBus
from notifyhub.modules.notification.application.event_handlers import (
    NotificationReadModelHandlers,
    register_notification_event_handlers,
)
from notifyhub.modules.notification.application.read_models import (
    NotificationHistoryQuery,
    NotificationStatsQuery,
)
from notifyhub.modules.notification.domain.enums import (
    NotificationChannel,
    NotificationStatusType,
)
from notifyhub.modules.notification.domain.events import (
    NotificationFailed,
    NotificationSent,
)
from notifyhub.modules.notification.infrastructure.repositories import (
    InMemoryNotificationHistoryRepository,
    InMemoryNotificationStatsRepository,
)
from tests.factories import make_notification


@pytest.fixture
def history():
    return InMemoryNotificationHistoryRepository()


@pytest.fixture
def stats():
    return InMemoryNotificationStatsRepository()


@pytest.fixture
def handlers(history, stats):
    return NotificationReadModelHandlers(history, stats)


class TestNotificationReadModelHandlers:
    @pytest.mark.asyncio
    async def test_sent_event_records_history_and_counts(self, handlers, history, stats):
        notification = make_notification(NotificationChannel.EMAIL).mark_as_sent()

        await handlers.on_notification_sent(NotificationSent.from_notification(notification))

        entry = await history.find_by_notification_id(notification.id)
        assert entry.status is NotificationStatusType.SENT
        assert entry.recipient_id == "user-1"
        assert entry.created_at == notification.created_at
        assert entry.sent_at == notification.sent_at
        report = await stats.get_stats(NotificationStatsQuery())
        assert report.total_sent == 1
        assert report.total_failed == 0

    @pytest.mark.asyncio
    async def test_failed_event_keeps_reason(self, handlers, history, stats):
        notification = make_notification().mark_as_failed("number not found")

        await handlers.on_notification_failed(
            NotificationFailed.from_notification(notification)
        )

        entry = await history.find_by_notification_id(notification.id)
        assert entry.status is NotificationStatusType.FAILED
        assert entry.failure_reason == "number not found"
        [channel_stats] = await stats.get_channel_stats(NotificationStatsQuery())
        assert channel_stats.channel is NotificationChannel.WHATSAPP
        assert channel_stats.total_failed == 1

    @pytest.mark.asyncio
    async def test_repeated_event_is_counted_once(self, handlers, history, stats):
        notification = make_notification().mark_as_sent()
        event = NotificationSent.from_notification(notification)

        await handlers.on_notification_sent(event)
        await handlers.on_notification_sent(event)

        assert len(history) == 1
        assert (await stats.get_stats(NotificationStatsQuery())).total_sent == 1

    @pytest.mark.asyncio
    async def test_status_change_replaces_entry(self, handlers, history, stats):
        notification = make_notification().mark_as_sent()
        await handlers.on_notification_sent(NotificationSent.from_notification(notification))

        notification.mark_as_failed("bounced")
        await handlers.on_notification_failed(
            NotificationFailed.from_notification(notification)
        )

        page = await history.get_history(NotificationHistoryQuery())
        assert [e.status for e in page.entries] == [NotificationStatusType.FAILED]
        report = await stats.get_stats(NotificationStatsQuery())
        assert (report.total_sent, report.total_failed) == (1, 1)

    @pytest.mark.asyncio
    async def test_stats_use_the_utc_day_of_the_outcome(self, handlers, stats):
        event = NotificationSent(
            notification_id=make_notification().id,
            recipient_id="user-1",
            channel=NotificationChannel.SYSTEM,
            sent_at=datetime(2024, 3, 5, 23, 30, tzinfo=UTC),
        )

        await handlers.on_notification_sent(event)

        [row] = (await stats.get_stats(NotificationStatsQuery())).stats
        assert row.day.isoformat() == "2024-03-05"

    @pytest.mark.asyncio
    async def test_repository_error_is_contained(self, history):
        broken_stats = AsyncMock()
        broken_stats.increment_sent.side_effect = RuntimeError("stats store offline")
        handlers = NotificationReadModelHandlers(history, broken_stats)
        notification = make_notification().mark_as_sent()

        await handlers.on_notification_sent(NotificationSent.from_notification(notification))

        assert await history.find_by_notification_id(notification.id) is not None


@pytest_asyncio.fixture
async def bus(handlers):
    bus = InMemoryEventBus()
    register_notification_event_handlers(bus, handlers)
    await bus.start()
    yield bus
    await bus.stop()


@pytest.mark.asyncio
async def test_registered_handlers_receive_published_events(bus, history):
    sent = make_notification(NotificationChannel.EMAIL).mark_as_sent()
    failed = make_notification(recipient_id="user-2").mark_as_failed("timeout")

    await bus.publish(NotificationSent.from_notification(sent))
    await bus.publish(NotificationFailed.from_notification(failed))

    page = await history.get_history(NotificationHistoryQuery())
    assert {e.notification_id for e in page.entries} == {sent.id, failed.id}
    assert bus.get_statistics()["handler_errors"] == 0
