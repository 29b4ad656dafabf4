"""Notification Repository Interface.

Domain contract for notification data access operations.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from notifyhub.modules.notification.domain.aggregates.notification import Notification
from notifyhub.modules.notification.domain.enums import NotificationStatusType


class INotificationRepository(ABC):
    """Repository interface for Notification aggregate operations."""

    @abstractmethod
    async def save(self, notification: Notification) -> None:
        """Persist a new notification."""

    @abstractmethod
    async def save_many(self, notifications: list[Notification]) -> None:
        """Persist several new notifications."""

    @abstractmethod
    async def find_by_id(self, notification_id: UUID) -> Notification | None:
        """Find notification by id."""

    @abstractmethod
    async def find_by_recipient_id(
        self, recipient_id: str, limit: int | None = None, offset: int = 0
    ) -> list[Notification]:
        """Find notifications addressed to a recipient, newest first."""

    @abstractmethod
    async def find_by_status(
        self, status: NotificationStatusType, limit: int | None = None, offset: int = 0
    ) -> list[Notification]:
        """Find notifications by status."""

    @abstractmethod
    async def update(self, notification: Notification) -> None:
        """Persist changes to an existing notification.

        Raises:
            NotificationNotFoundError: If the notification was never saved
        """

    @abstractmethod
    async def delete(self, notification_id: UUID) -> bool:
        """Delete a notification. Returns False if it did not exist."""
