"""Notification event handlers registration.

Keeps the history and stats read models in step with delivery outcomes.
Read model failures are logged and never reach the publisher.
"""

from notifyhub.core.errors import error_message
from notifyhub.core.events.bus import EventBus
from notifyhub.core.logging import get_logger
from notifyhub.modules.notification.application.read_models import (
    INotificationHistoryRepository,
    INotificationStatsRepository,
    NotificationHistoryEntry,
)
from notifyhub.modules.notification.domain.enums import NotificationStatusType
from notifyhub.modules.notification.domain.events import (
    NotificationFailed,
    NotificationSent,
)

logger = get_logger(__name__)


class NotificationReadModelHandlers:
    """Projects ``NotificationSent`` and ``NotificationFailed`` into read models.

    Stats are only counted when a notification's recorded status changes, so
    an event published twice for the same outcome is counted once.
    """

    def __init__(
        self,
        history_repository: INotificationHistoryRepository,
        stats_repository: INotificationStatsRepository,
    ):
        self.history_repository = history_repository
        self.stats_repository = stats_repository

    async def on_notification_sent(self, event: NotificationSent) -> None:
        logger.info(
            "Recording sent notification",
            notification_id=str(event.notification_id),
            recipient_id=event.recipient_id,
            channel=event.channel.value,
        )
        entry = NotificationHistoryEntry(
            notification_id=event.notification_id,
            recipient_id=event.recipient_id,
            channel=event.channel,
            status=NotificationStatusType.SENT,
            title=event.title,
            body=event.body,
            created_at=event.created_at,
            sent_at=event.sent_at,
            batch_id=event.batch_id,
        )
        try:
            if await self._record(entry):
                await self.stats_repository.increment_sent(event.channel, event.sent_at)
        except Exception as exc:
            self._log_failure(event, exc)

    async def on_notification_failed(self, event: NotificationFailed) -> None:
        logger.info(
            "Recording failed notification",
            notification_id=str(event.notification_id),
            recipient_id=event.recipient_id,
            channel=event.channel.value,
            error=event.reason,
        )
        entry = NotificationHistoryEntry(
            notification_id=event.notification_id,
            recipient_id=event.recipient_id,
            channel=event.channel,
            status=NotificationStatusType.FAILED,
            title=event.title,
            body=event.body,
            created_at=event.created_at,
            failure_reason=event.reason,
            batch_id=event.batch_id,
        )
        try:
            if await self._record(entry):
                await self.stats_repository.increment_failed(event.channel, event.failed_at)
        except Exception as exc:
            self._log_failure(event, exc)

    async def _record(self, entry: NotificationHistoryEntry) -> bool:
        """Store ``entry``; True when the notification's status changed."""
        previous = await self.history_repository.record(entry)
        return previous is None or previous.status != entry.status

    @staticmethod
    def _log_failure(event, exc: Exception) -> None:
        logger.error(
            "Failed to update read models",
            event_type=event.event_type,
            notification_id=str(event.notification_id),
            error=error_message(exc),
        )


def register_notification_event_handlers(
    event_bus: EventBus, handlers: NotificationReadModelHandlers
) -> None:
    """Subscribe the read model handlers to the notification events."""
    event_bus.subscribe(NotificationSent, handlers.on_notification_sent)
    event_bus.subscribe(NotificationFailed, handlers.on_notification_failed)
    logger.debug("Notification read model handlers registered")
