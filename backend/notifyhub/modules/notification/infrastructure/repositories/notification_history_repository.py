"""In-memory notification history read model."""

import asyncio
from uuid import UUID

from notifyhub.core.logging import get_logger
from notifyhub.modules.notification.application.read_models import (
    INotificationHistoryRepository,
    NotificationHistoryEntry,
    NotificationHistoryPage,
    NotificationHistoryQuery,
)
from notifyhub.modules.notification.infrastructure.repositories.notification_repository import (
    paginate,
)

logger = get_logger(__name__)


class InMemoryNotificationHistoryRepository(INotificationHistoryRepository):
    """One history entry per notification, replaced on every status change."""

    def __init__(self):
        self._entries: dict[UUID, NotificationHistoryEntry] = {}
        self._lock = asyncio.Lock()

    async def record(
        self, entry: NotificationHistoryEntry
    ) -> NotificationHistoryEntry | None:
        async with self._lock:
            previous = self._entries.get(entry.notification_id)
            self._entries[entry.notification_id] = entry
        logger.debug(
            "History entry recorded",
            notification_id=str(entry.notification_id),
            status=entry.status.value,
            replaced=previous is not None,
        )
        return previous

    async def find_by_notification_id(
        self, notification_id: UUID
    ) -> NotificationHistoryEntry | None:
        return self._entries.get(notification_id)

    async def get_history(self, query: NotificationHistoryQuery) -> NotificationHistoryPage:
        matches = [e for e in self._entries.values() if query.matches(e)]
        matches.sort(key=lambda e: e.created_at, reverse=True)
        return NotificationHistoryPage(
            entries=paginate(matches, query.limit, query.offset),
            total=len(matches),
            limit=query.limit,
            offset=query.offset,
        )

    def __len__(self) -> int:
        return len(self._entries)
