"""In-memory repository for the NotificationBatch aggregate."""

import asyncio
from uuid import UUID

from notifyhub.core.logging import get_logger
from notifyhub.modules.notification.domain.aggregates import NotificationBatch
from notifyhub.modules.notification.domain.enums import (
    BatchStatusType,
    NotificationChannel,
)
from notifyhub.modules.notification.domain.errors import BatchNotFoundError
from notifyhub.modules.notification.domain.interfaces import (
    INotificationBatchRepository,
)
from notifyhub.modules.notification.infrastructure.repositories.notification_repository import (
    paginate,
)

logger = get_logger(__name__)


class InMemoryNotificationBatchRepository(INotificationBatchRepository):
    """Process-local batch store. Batches keep references to their members."""

    def __init__(self):
        self._items: dict[UUID, NotificationBatch] = {}
        self._lock = asyncio.Lock()

    async def save(self, batch: NotificationBatch) -> None:
        async with self._lock:
            self._items[batch.id] = batch
        logger.debug("Batch saved", batch_id=str(batch.id), size=batch.size)

    async def find_by_id(self, batch_id: UUID) -> NotificationBatch | None:
        return self._items.get(batch_id)

    async def find_by_status(
        self, status: BatchStatusType, limit: int | None = None, offset: int = 0
    ) -> list[NotificationBatch]:
        matches = [b for b in self._items.values() if b.status.value == status]
        matches.sort(key=lambda b: b.created_at)
        return paginate(matches, limit, offset)

    async def find_by_channel(
        self, channel: NotificationChannel, limit: int | None = None, offset: int = 0
    ) -> list[NotificationBatch]:
        matches = [b for b in self._items.values() if b.channel == channel]
        matches.sort(key=lambda b: b.created_at, reverse=True)
        return paginate(matches, limit, offset)

    async def update(self, batch: NotificationBatch) -> None:
        async with self._lock:
            if batch.id not in self._items:
                raise BatchNotFoundError(batch.id)
            self._items[batch.id] = batch

    async def delete(self, batch_id: UUID) -> bool:
        async with self._lock:
            return self._items.pop(batch_id, None) is not None

    def __len__(self) -> int:
        return len(self._items)
