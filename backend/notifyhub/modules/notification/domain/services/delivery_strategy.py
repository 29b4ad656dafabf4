"""Delivery strategy contract.

A strategy turns notification aggregates into vendor calls and reconciles
the vendor outcome back into aggregate status. Every vendor error is
recorded on the affected aggregates before it propagates.
"""

from abc import ABC, abstractmethod

from notifyhub.core.errors import error_message
from notifyhub.core.logging import get_logger
from notifyhub.modules.notification.domain.aggregates import (
    Notification,
    NotificationBatch,
)
from notifyhub.modules.notification.domain.errors import (
    CannotProcessError,
    CannotSendError,
)
from notifyhub.modules.notification.domain.interfaces import INotificationVendor

logger = get_logger(__name__)


class NotificationDeliveryStrategy(ABC):
    """Base class for channel delivery strategies."""

    def __init__(self, vendor: INotificationVendor):
        self._vendor = vendor

    async def deliver_single(self, notification: Notification) -> Notification:
        """Send one notification through the vendor, exactly once.

        Raises:
            CannotSendError: If the notification is not pending
            Exception: The vendor error, after the notification is marked failed
        """
        if not notification.can_be_sent():
            raise CannotSendError(notification.id, str(notification.status))

        try:
            await self._vendor.send(notification)
        except Exception as exc:
            notification.mark_as_failed(error_message(exc))
            logger.warning(
                "Notification delivery failed",
                notification_id=str(notification.id),
                channel=notification.channel.value,
                error=error_message(exc),
            )
            raise

        notification.mark_as_sent()
        logger.info(
            "Notification delivered",
            notification_id=str(notification.id),
            channel=notification.channel.value,
        )
        return notification

    @abstractmethod
    async def deliver_batch(self, batch: NotificationBatch) -> NotificationBatch:
        """Deliver every notification of a pending batch.

        Raises:
            CannotProcessError: If the batch is not pending
            PartialBatchFailureError: If some notifications failed
        """

    @abstractmethod
    def supports_batch(self) -> bool:
        """Whether ``deliver_batch`` is available for this strategy."""

    def _begin_batch(self, batch: NotificationBatch) -> None:
        if not batch.can_be_processed():
            raise CannotProcessError(batch.id, str(batch.status))
        batch.start_processing()
        logger.info(
            "Batch processing started",
            batch_id=str(batch.id),
            channel=batch.channel.value,
            size=batch.size,
        )

    def _abort_batch(self, batch: NotificationBatch, exc: Exception) -> None:
        """Mark still-pending members and the batch failed after an unexpected error."""
        message = error_message(exc)
        for notification in batch.pending_notifications:
            notification.mark_as_failed(f"Batch failed: {message}")
        if not batch.status.is_final():
            batch.mark_as_failed(message)
        logger.error(
            "Batch processing aborted",
            batch_id=str(batch.id),
            channel=batch.channel.value,
            error=message,
            sent=len(batch.sent_notifications),
            failed=len(batch.failed_notifications),
        )
