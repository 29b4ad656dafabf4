"""Tests for SendNotificationUseCase."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from notifyhub.core.errors import ValidationError
from notifyhub.core.events.bus import EventBusError, InMemoryEventBus
from notifyhub.modules.notification.application.dtos import (
    BatchRecipient,
    SendBatchNotificationCommand,
    SendNotificationCommand,
    SendNotificationResult,
    parse_channel,
)
from notifyhub.modules.notification.application.use_cases import (
    SendNotificationUseCase,
    build_contact_info,
)
from notifyhub.modules.notification.domain.enums import (
    NotificationChannel,
    NotificationStatusType,
)
from notifyhub.modules.notification.domain.events import (
    NotificationFailed,
    NotificationSent,
)
from notifyhub.modules.notification.domain.services import (
    DeliveryStrategyResolver,
    DirectDeliveryStrategy,
    SlidingWindowRateLimiter,
    ThrottledChunkedDeliveryStrategy,
)
from notifyhub.modules.notification.domain.value_objects import (
    EmailContactInfo,
    WhatsAppContactInfo,
)
from notifyhub.modules.notification.infrastructure.repositories import (
    InMemoryNotificationBatchRepository,
    InMemoryNotificationRepository,
)
from tests.factories import RecordingBatchVendor, RecordingVendor


class Harness:
    """Use case wired to recording vendors and in-memory stores."""

    def __init__(self, fake_clock, email_vendor=None, whatsapp_vendor=None):
        self.email_vendor = email_vendor or RecordingBatchVendor()
        self.whatsapp_vendor = whatsapp_vendor or RecordingVendor()
        self.notifications = InMemoryNotificationRepository()
        self.batches = InMemoryNotificationBatchRepository()
        self.bus = InMemoryEventBus()
        self.events = []

        limiter = SlidingWindowRateLimiter(clock=fake_clock, sleep=fake_clock.sleep)
        self.resolver = DeliveryStrategyResolver(
            email=DirectDeliveryStrategy(self.email_vendor),
            whatsapp=ThrottledChunkedDeliveryStrategy(
                self.whatsapp_vendor, limiter, sleep=fake_clock.sleep
            ),
        )
        self.use_case = SendNotificationUseCase(
            notification_repository=self.notifications,
            batch_repository=self.batches,
            strategy_resolver=self.resolver,
            event_bus=self.bus,
        )

    async def start(self):
        def record(event):
            self.events.append(event)

        self.bus.subscribe(NotificationSent, record)
        self.bus.subscribe(NotificationFailed, record)
        await self.bus.start()
        return self

    def events_of(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]


@pytest_asyncio.fixture
async def harness(fake_clock):
    return await Harness(fake_clock).start()


def email_command(**overrides):
    values = {
        "recipient_id": "user-1",
        "channel": "email",
        "contact_info": "aluno@example.com",
        "title": "Lembrete",
        "body": "Sua aula começa em 10 minutos",
    }
    values.update(overrides)
    return SendNotificationCommand(**values)


def whatsapp_batch_command(count, **overrides):
    values = {
        "channel": NotificationChannel.WHATSAPP,
        "recipients": [
            BatchRecipient(id=f"user-{i}", contact_info=f"+55319999900{i:02d}")
            for i in range(count)
        ],
        "body": "Reunião às 19h",
    }
    values.update(overrides)
    return SendBatchNotificationCommand(**values)


class TestCommands:
    @pytest.mark.parametrize("raw", ["email", "EMAIL", " email ", NotificationChannel.EMAIL])
    def test_parse_channel(self, raw):
        assert parse_channel(raw) is NotificationChannel.EMAIL

    def test_parse_unknown_channel(self):
        with pytest.raises(ValidationError):
            parse_channel("sms")

    def test_build_contact_info(self):
        assert isinstance(
            build_contact_info(NotificationChannel.EMAIL, "a@x.com"), EmailContactInfo
        )
        assert isinstance(
            build_contact_info(NotificationChannel.WHATSAPP, "+5531999990000"),
            WhatsAppContactInfo,
        )

    def test_result_to_dict(self):
        assert SendNotificationResult.failure("boom").to_dict() == {
            "success": False,
            "error": "boom",
        }


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_success(self, harness):
        result = await harness.use_case.send_message(email_command())

        assert result.success
        assert result.error is None
        stored = await harness.notifications.find_by_id(result.notification_id)
        assert stored.status.is_sent()
        assert harness.email_vendor.sent == [stored]

        sent_events = harness.events_of(NotificationSent)
        assert len(sent_events) == 1
        assert sent_events[0].notification_id == result.notification_id
        assert sent_events[0].channel is NotificationChannel.EMAIL
        assert sent_events[0].title == "Lembrete"
        assert harness.events_of(NotificationFailed) == []

    @pytest.mark.asyncio
    async def test_vendor_failure(self, fake_clock):
        vendor = RecordingBatchVendor()
        vendor.fail_on = {1: ConnectionError("SMTP timeout")}
        harness = await Harness(fake_clock, email_vendor=vendor).start()

        result = await harness.use_case.send_message(email_command())

        assert not result.success
        assert result.error == "SMTP timeout"
        assert result.notification_id is None

        [stored] = await harness.notifications.find_by_status(NotificationStatusType.FAILED)
        assert stored.failure_reason == "SMTP timeout"

        failed_events = harness.events_of(NotificationFailed)
        assert len(failed_events) == 1
        assert failed_events[0].reason == "SMTP timeout"
        assert harness.events_of(NotificationSent) == []

    @pytest.mark.asyncio
    async def test_invalid_contact_is_reported_without_persisting(self, harness):
        result = await harness.use_case.send_message(email_command(contact_info="not-an-email"))

        assert not result.success
        assert "not a valid email address" in result.error
        assert len(harness.notifications) == 0
        assert harness.events == []

    @pytest.mark.asyncio
    async def test_unknown_channel(self, harness):
        result = await harness.use_case.send_message(email_command(channel="pigeon"))

        assert not result.success
        assert "pigeon" in result.error

    @pytest.mark.asyncio
    async def test_unconfigured_channel_marks_notification_failed(self, harness):
        result = await harness.use_case.send_message(
            email_command(channel="system", contact_info="user-1")
        )

        assert not result.success
        [stored] = await harness.notifications.find_by_recipient_id("user-1")
        assert stored.status.is_failed()
        assert len(harness.events_of(NotificationFailed)) == 1

    @pytest.mark.asyncio
    async def test_repository_error_after_send_still_succeeds(self, harness):
        harness.notifications.update = AsyncMock(side_effect=RuntimeError("db offline"))

        result = await harness.use_case.send_message(email_command())

        assert result.success
        assert result.notification_id is not None
        assert len(harness.email_vendor.sent) == 1
        assert len(harness.events_of(NotificationSent)) == 1
        assert harness.events_of(NotificationFailed) == []

    @pytest.mark.asyncio
    async def test_stopped_bus_does_not_fail_the_send(self, harness):
        await harness.bus.stop()

        result = await harness.use_case.send_message(email_command())

        assert result.success

    @pytest.mark.asyncio
    async def test_event_bus_error_is_contained(self, harness):
        harness.use_case.event_bus = AsyncMock()
        harness.use_case.event_bus.publish.side_effect = EventBusError("bus down")

        result = await harness.use_case.send_message(email_command())

        assert result.success


class TestSendBatchMessages:
    @pytest.mark.asyncio
    async def test_batch_is_accepted_then_processed(self, harness, fake_clock):
        result = await harness.use_case.send_batch_messages(whatsapp_batch_command(5))

        assert result.success
        assert result.batch_id is not None
        assert result.notification_id is None

        await harness.use_case.wait_for_background_tasks()

        batch = await harness.batches.find_by_id(result.batch_id)
        assert batch.status.is_completed()
        assert len(harness.whatsapp_vendor.sent) == 5
        assert fake_clock.sleeps == [60.0]
        assert len(harness.events_of(NotificationSent)) == 5
        assert all(e.batch_id == batch.id for e in harness.events)
        assert harness.use_case.pending_batches == 0

    @pytest.mark.asyncio
    async def test_batch_members_are_persisted_before_delivery(self, harness):
        result = await harness.use_case.send_batch_messages(whatsapp_batch_command(2))

        assert len(harness.notifications) == 2
        batch = await harness.batches.find_by_id(result.batch_id)
        assert batch is not None

        await harness.use_case.wait_for_background_tasks()

    @pytest.mark.asyncio
    async def test_partial_failure_emits_per_notification_events(self, fake_clock):
        vendor = RecordingVendor(fail_on={2: RuntimeError("number blocked")})
        harness = await Harness(fake_clock, whatsapp_vendor=vendor).start()

        result = await harness.use_case.send_batch_messages(whatsapp_batch_command(3))
        await harness.use_case.wait_for_background_tasks()

        assert result.success
        batch = await harness.batches.find_by_id(result.batch_id)
        assert batch.status.is_failed()
        assert len(harness.events_of(NotificationSent)) == 2
        [failed] = harness.events_of(NotificationFailed)
        assert failed.reason == "number blocked"
        assert failed.notification_id == batch.notifications[1].id

        stored = await harness.notifications.find_by_id(batch.notifications[1].id)
        assert stored.status.is_failed()

    @pytest.mark.asyncio
    async def test_email_batch_uses_one_vendor_call(self, harness):
        command = SendBatchNotificationCommand(
            channel="email",
            recipients=[
                BatchRecipient(id="user-1", contact_info="a@example.com"),
                BatchRecipient(id="user-2", contact_info="b@example.com"),
            ],
            title="Aviso",
            body="Aula cancelada",
        )

        result = await harness.use_case.send_batch_messages(command)
        await harness.use_case.wait_for_background_tasks()

        assert result.success
        assert len(harness.email_vendor.batches) == 1
        assert harness.email_vendor.calls == 0

    @pytest.mark.asyncio
    async def test_channel_without_batch_support(self, fake_clock):
        harness = await Harness(fake_clock).start()
        harness.use_case.strategy_resolver = DeliveryStrategyResolver(
            email=DirectDeliveryStrategy(RecordingVendor())
        )

        result = await harness.use_case.send_batch_messages(
            SendBatchNotificationCommand(
                channel="email",
                recipients=[BatchRecipient(id="user-1", contact_info="a@example.com")],
                body="Oi",
            )
        )

        assert not result.success
        assert result.error == "Channel email does not support batch delivery"
        assert len(harness.notifications) == 0
        assert len(harness.batches) == 0

    @pytest.mark.asyncio
    async def test_empty_recipients(self, harness):
        result = await harness.use_case.send_batch_messages(whatsapp_batch_command(0))

        assert not result.success
        assert len(harness.batches) == 0

    @pytest.mark.asyncio
    async def test_invalid_recipient_rejects_whole_batch(self, harness):
        command = whatsapp_batch_command(
            2,
            recipients=[
                BatchRecipient(id="user-1", contact_info="+5531999990000"),
                BatchRecipient(id="user-2", contact_info="12"),
            ],
        )

        result = await harness.use_case.send_batch_messages(command)

        assert not result.success
        assert len(harness.notifications) == 0
