"""Send notification use case.

Entry point for callers that want a message delivered: builds the aggregates,
persists them, picks the channel's delivery strategy and publishes one event
per notification once its outcome is known. Batches are accepted right away
and delivered in the background.
"""

import asyncio

from notifyhub.core.domain.base import DomainEvent
from notifyhub.core.errors import error_message
from notifyhub.core.events.bus import EventBus, EventBusError
from notifyhub.core.logging import get_logger
from notifyhub.modules.notification.application.dtos import (
    SendBatchNotificationCommand,
    SendNotificationCommand,
    SendNotificationResult,
    parse_channel,
)
from notifyhub.modules.notification.domain.aggregates import (
    Notification,
    NotificationBatch,
)
from notifyhub.modules.notification.domain.enums import NotificationChannel
from notifyhub.modules.notification.domain.errors import PartialBatchFailureError
from notifyhub.modules.notification.domain.events import (
    NotificationFailed,
    NotificationSent,
)
from notifyhub.modules.notification.domain.interfaces import (
    INotificationBatchRepository,
    INotificationRepository,
)
from notifyhub.modules.notification.domain.services import (
    DeliveryStrategyResolver,
    NotificationDeliveryStrategy,
)
from notifyhub.modules.notification.domain.value_objects import (
    CONTACT_INFO_TYPES,
    ContactInfo,
    NotificationContent,
)

logger = get_logger(__name__)


def build_contact_info(channel: NotificationChannel, value: str) -> ContactInfo:
    """Wrap a raw contact value in the contact info variant of ``channel``."""
    return CONTACT_INFO_TYPES[channel](value)


class SendNotificationUseCase:
    """Sends single notifications and accepts batches for background delivery."""

    def __init__(
        self,
        notification_repository: INotificationRepository,
        batch_repository: INotificationBatchRepository,
        strategy_resolver: DeliveryStrategyResolver,
        event_bus: EventBus,
    ):
        self.notification_repository = notification_repository
        self.batch_repository = batch_repository
        self.strategy_resolver = strategy_resolver
        self.event_bus = event_bus
        self._background_tasks: set[asyncio.Task] = set()

    async def send_message(self, command: SendNotificationCommand) -> SendNotificationResult:
        """Deliver one notification now.

        Never raises: every failure is reported through the result. Once the
        vendor accepted the message the result is a success, even when storing
        the sent status fails; that failure is only logged, so a caller that
        retries on failure never sends the message twice.
        """
        notification: Notification | None = None
        try:
            channel = parse_channel(command.channel)
            logger.info(
                "Sending notification",
                channel=channel.value,
                recipient_id=command.recipient_id,
            )

            notification = Notification.create(
                recipient_id=command.recipient_id,
                content=NotificationContent(command.title, command.body, command.metadata),
                channel=channel,
                contact_info=build_contact_info(channel, command.contact_info),
            )
            await self.notification_repository.save(notification)

            strategy = self.strategy_resolver.resolve(channel)
            await strategy.deliver_single(notification)

        except Exception as exc:
            message = error_message(exc)
            logger.error(
                "Failed to send notification",
                recipient_id=command.recipient_id,
                error=message,
                exc_info=True,
            )

            if notification is not None:
                if notification.status.is_pending():
                    notification.mark_as_failed(message)
                await self._save_outcome(notification)
                if notification.status.is_failed():
                    await self._publish(
                        NotificationFailed.from_notification(notification, message)
                    )

            return SendNotificationResult.failure(message)

        await self._save_outcome(notification)
        await self._publish(NotificationSent.from_notification(notification))

        logger.info("Notification sent", notification_id=str(notification.id))
        return SendNotificationResult(success=True, notification_id=notification.id)

    async def send_batch_messages(
        self, command: SendBatchNotificationCommand
    ) -> SendNotificationResult:
        """Accept a batch and deliver it in the background.

        ``success`` means the batch was stored and scheduled; per-notification
        outcomes arrive later as events.
        """
        try:
            channel = parse_channel(command.channel)
            logger.info(
                "Sending batch notification",
                channel=channel.value,
                recipients=len(command.recipients),
            )

            content = NotificationContent(command.title, command.body, command.metadata)
            notifications = [
                Notification.create(
                    recipient_id=recipient.id,
                    content=content,
                    channel=channel,
                    contact_info=build_contact_info(channel, recipient.contact_info),
                )
                for recipient in command.recipients
            ]
            batch = NotificationBatch.create(channel, notifications)

            strategy = self.strategy_resolver.resolve(channel)
            if not strategy.supports_batch():
                logger.warning("Channel does not support batch delivery", channel=channel.value)
                return SendNotificationResult.failure(
                    f"Channel {channel.value} does not support batch delivery"
                )

            await self.notification_repository.save_many(notifications)
            await self.batch_repository.save(batch)

        except Exception as exc:
            message = error_message(exc)
            logger.error("Failed to accept batch", error=message, exc_info=True)
            return SendNotificationResult.failure(message)

        task = asyncio.create_task(self._process_batch(batch, strategy))
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_done)

        logger.info(
            "Batch accepted for processing", batch_id=str(batch.id), size=batch.size
        )
        return SendNotificationResult(success=True, batch_id=batch.id)

    async def wait_for_background_tasks(self) -> None:
        """Wait until every accepted batch has finished processing."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    @property
    def pending_batches(self) -> int:
        return len(self._background_tasks)

    async def _process_batch(
        self, batch: NotificationBatch, strategy: NotificationDeliveryStrategy
    ) -> None:
        logger.info("Background batch processing started", batch_id=str(batch.id))
        try:
            await strategy.deliver_batch(batch)
        except PartialBatchFailureError as exc:
            logger.warning(
                "Batch finished with failures",
                batch_id=str(batch.id),
                failed=exc.failed_count,
                total=exc.total_count,
            )
        except Exception as exc:
            logger.error(
                "Batch processing failed",
                batch_id=str(batch.id),
                error=error_message(exc),
                exc_info=True,
            )

        for notification in batch.notifications:
            await self.notification_repository.update(notification)
        await self.batch_repository.update(batch)

        for notification in batch.notifications:
            if notification.status.is_sent():
                await self._publish(NotificationSent.from_notification(notification))
            elif notification.status.is_failed():
                await self._publish(NotificationFailed.from_notification(notification))

        logger.info(
            "Background batch processing finished", **batch.get_processing_summary()
        )

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background batch task crashed", error=error_message(exc))

    async def _save_outcome(self, notification: Notification) -> None:
        try:
            if await self.notification_repository.find_by_id(notification.id) is None:
                await self.notification_repository.save(notification)
            else:
                await self.notification_repository.update(notification)
        except Exception as exc:
            logger.error(
                "Could not persist notification outcome",
                notification_id=str(notification.id),
                status=str(notification.status),
                error=error_message(exc),
            )

    async def _publish(self, event: DomainEvent) -> None:
        try:
            await self.event_bus.publish(event)
        except EventBusError as exc:
            logger.error(
                "Could not publish event",
                event_type=event.event_type,
                error=error_message(exc),
            )
