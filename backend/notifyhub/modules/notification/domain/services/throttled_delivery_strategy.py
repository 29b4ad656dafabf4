"""Throttled delivery: paced, chunked single sends for rate-sensitive channels."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from notifyhub.core.errors import error_message
from notifyhub.core.logging import get_logger, log_context
from notifyhub.modules.notification.domain.aggregates import (
    Notification,
    NotificationBatch,
)
from notifyhub.modules.notification.domain.enums import NotificationChannel
from notifyhub.modules.notification.domain.errors import PartialBatchFailureError
from notifyhub.modules.notification.domain.interfaces import INotificationVendor
from notifyhub.modules.notification.domain.services.delivery_strategy import (
    NotificationDeliveryStrategy,
)
from notifyhub.modules.notification.domain.services.rate_limiter import (
    SlidingWindowRateLimiter,
)

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 3
DEFAULT_CHUNK_DELAY_SECONDS = 60.0


class ThrottledChunkedDeliveryStrategy(NotificationDeliveryStrategy):
    """Delivers batches one notification at a time, in paced chunks.

    Every send waits on the rate limiter first. Chunks run strictly in
    sequence with a fixed pause between consecutive chunks. A failed send
    marks only that notification failed; the rest of the batch continues.
    Single sends do not consult the rate limiter.
    """

    def __init__(
        self,
        vendor: INotificationVendor,
        rate_limiter: SlidingWindowRateLimiter,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_delay_seconds: float = DEFAULT_CHUNK_DELAY_SECONDS,
        rate_limit_key: str = NotificationChannel.WHATSAPP.rate_limit_key,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize throttled strategy.

        Args:
            vendor: Single-send vendor for the channel
            rate_limiter: Limiter shared by every caller of the vendor
            chunk_size: Notifications per chunk
            chunk_delay_seconds: Pause between consecutive chunks
            rate_limit_key: Service key passed to the rate limiter
            sleep: Awaitable sleep taking seconds
        """
        super().__init__(vendor)
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
        if chunk_delay_seconds < 0:
            raise ValueError(f"chunk_delay_seconds cannot be negative, got {chunk_delay_seconds}")

        self._rate_limiter = rate_limiter
        self._chunk_size = chunk_size
        self._chunk_delay_seconds = chunk_delay_seconds
        self._rate_limit_key = rate_limit_key
        self._sleep = sleep

    def supports_batch(self) -> bool:
        return True

    def chunk(self, notifications: list[Notification]) -> list[list[Notification]]:
        size = self._chunk_size
        return [notifications[i : i + size] for i in range(0, len(notifications), size)]

    async def deliver_batch(self, batch: NotificationBatch) -> NotificationBatch:
        self._begin_batch(batch)
        chunks = self.chunk(list(batch.notifications))

        with log_context(batch_id=str(batch.id), channel=batch.channel.value):
            try:
                for index, chunk in enumerate(chunks):
                    logger.info(
                        "Processing chunk",
                        chunk=index + 1,
                        chunks=len(chunks),
                        size=len(chunk),
                    )
                    for notification in chunk:
                        await self._send_one(notification)

                    if index < len(chunks) - 1:
                        logger.debug(
                            "Pausing between chunks", delay_seconds=self._chunk_delay_seconds
                        )
                        await self._sleep(self._chunk_delay_seconds)
            except Exception as exc:
                self._abort_batch(batch, exc)
                raise

            failed_count = len(batch.failed_notifications)
            if failed_count:
                batch.mark_as_failed(
                    f"{failed_count} of {batch.size} notifications failed"
                )
                logger.warning(
                    "Batch partially failed", failed=failed_count, total=batch.size
                )
                raise PartialBatchFailureError(failed_count, batch.size, batch.id)

            batch.mark_as_completed()
            logger.info("Batch delivered", total=batch.size, chunks=len(chunks))
            return batch

    async def _send_one(self, notification: Notification) -> None:
        await self._rate_limiter.check_and_wait_if_needed(self._rate_limit_key)

        try:
            await self._vendor.send(notification)
        except Exception as exc:
            notification.mark_as_failed(error_message(exc))
            logger.warning(
                "Notification delivery failed",
                notification_id=str(notification.id),
                error=error_message(exc),
            )
            return

        notification.mark_as_sent()
