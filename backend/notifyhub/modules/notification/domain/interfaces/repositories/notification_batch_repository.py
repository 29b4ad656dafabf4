"""Notification Batch Repository Interface.

Domain contract for notification batch data access operations.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from notifyhub.modules.notification.domain.aggregates.notification_batch import (
    NotificationBatch,
)
from notifyhub.modules.notification.domain.enums import (
    BatchStatusType,
    NotificationChannel,
)


class INotificationBatchRepository(ABC):
    """Repository interface for NotificationBatch aggregate operations."""

    @abstractmethod
    async def save(self, batch: NotificationBatch) -> None:
        """Persist a new batch together with its notifications."""

    @abstractmethod
    async def find_by_id(self, batch_id: UUID) -> NotificationBatch | None:
        """Find batch by id."""

    @abstractmethod
    async def find_by_status(
        self, status: BatchStatusType, limit: int | None = None, offset: int = 0
    ) -> list[NotificationBatch]:
        """Find batches by status."""

    @abstractmethod
    async def find_by_channel(
        self, channel: NotificationChannel, limit: int | None = None, offset: int = 0
    ) -> list[NotificationBatch]:
        """Find batches for a specific channel."""

    @abstractmethod
    async def update(self, batch: NotificationBatch) -> None:
        """Persist changes to an existing batch.

        Raises:
            BatchNotFoundError: If the batch was never saved
        """

    @abstractmethod
    async def delete(self, batch_id: UUID) -> bool:
        """Delete a batch. Returns False if it did not exist."""
