"""In-memory repository for the Notification aggregate."""

import asyncio
from uuid import UUID

from notifyhub.core.logging import get_logger
from notifyhub.modules.notification.domain.aggregates import Notification
from notifyhub.modules.notification.domain.enums import NotificationStatusType
from notifyhub.modules.notification.domain.errors import NotificationNotFoundError
from notifyhub.modules.notification.domain.interfaces import INotificationRepository

logger = get_logger(__name__)


def paginate(items: list, limit: int | None, offset: int) -> list:
    end = None if limit is None else offset + limit
    return items[offset:end]


class InMemoryNotificationRepository(INotificationRepository):
    """Process-local notification store keyed by notification id."""

    def __init__(self):
        self._items: dict[UUID, Notification] = {}
        self._lock = asyncio.Lock()

    async def save(self, notification: Notification) -> None:
        async with self._lock:
            self._items[notification.id] = notification
        logger.debug("Notification saved", notification_id=str(notification.id))

    async def save_many(self, notifications: list[Notification]) -> None:
        async with self._lock:
            for notification in notifications:
                self._items[notification.id] = notification
        logger.debug("Notifications saved", count=len(notifications))

    async def find_by_id(self, notification_id: UUID) -> Notification | None:
        return self._items.get(notification_id)

    async def find_by_recipient_id(
        self, recipient_id: str, limit: int | None = None, offset: int = 0
    ) -> list[Notification]:
        matches = [n for n in self._items.values() if n.recipient_id == recipient_id]
        matches.sort(key=lambda n: n.created_at, reverse=True)
        return paginate(matches, limit, offset)

    async def find_by_status(
        self, status: NotificationStatusType, limit: int | None = None, offset: int = 0
    ) -> list[Notification]:
        matches = [n for n in self._items.values() if n.status.value == status]
        matches.sort(key=lambda n: n.created_at)
        return paginate(matches, limit, offset)

    async def update(self, notification: Notification) -> None:
        async with self._lock:
            if notification.id not in self._items:
                raise NotificationNotFoundError(notification.id)
            self._items[notification.id] = notification

    async def delete(self, notification_id: UUID) -> bool:
        async with self._lock:
            return self._items.pop(notification_id, None) is not None

    def __len__(self) -> int:
        return len(self._items)
