"""Direct delivery: one vendor call per notification, one per batch."""

from notifyhub.core.logging import get_logger
from notifyhub.modules.notification.domain.aggregates import NotificationBatch
from notifyhub.modules.notification.domain.errors import (
    BatchNotSupportedError,
    CannotProcessError,
    PartialBatchFailureError,
)
from notifyhub.modules.notification.domain.interfaces import IBatchNotificationVendor
from notifyhub.modules.notification.domain.services.delivery_strategy import (
    NotificationDeliveryStrategy,
)

logger = get_logger(__name__)

UNREPORTED_REASON = "Vendor did not report a delivery outcome"


class DirectDeliveryStrategy(NotificationDeliveryStrategy):
    """Sends without pacing and hands whole batches to the vendor.

    Used for email and the in-app system channel.
    """

    def supports_batch(self) -> bool:
        return isinstance(self._vendor, IBatchNotificationVendor)

    async def deliver_batch(self, batch: NotificationBatch) -> NotificationBatch:
        if not batch.can_be_processed():
            raise CannotProcessError(batch.id, str(batch.status))
        if not self.supports_batch():
            raise BatchNotSupportedError(batch.id, type(self._vendor).__name__)

        self._begin_batch(batch)

        try:
            result = await self._vendor.send_batch(batch)

            failure_reason = result.error or "Vendor rejected the notification"
            succeeded_ids = {n.id for n in result.succeeded}
            failed_ids = {n.id for n in result.failed}

            for notification in batch.notifications:
                if notification.id in failed_ids:
                    notification.mark_as_failed(failure_reason)
                elif notification.id in succeeded_ids:
                    notification.mark_as_sent()
                else:
                    notification.mark_as_failed(UNREPORTED_REASON)
        except Exception as exc:
            self._abort_batch(batch, exc)
            raise

        failed_count = len(batch.failed_notifications)
        if failed_count:
            batch.mark_as_failed(
                f"{failed_count} of {batch.size} notifications failed: {failure_reason}"
            )
            logger.warning(
                "Batch partially failed",
                batch_id=str(batch.id),
                channel=batch.channel.value,
                failed=failed_count,
                total=batch.size,
            )
            raise PartialBatchFailureError(failed_count, batch.size, batch.id)

        batch.mark_as_completed()
        logger.info(
            "Batch delivered",
            batch_id=str(batch.id),
            channel=batch.channel.value,
            total=batch.size,
        )
        return batch
