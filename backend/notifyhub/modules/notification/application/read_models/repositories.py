"""Read model repository interfaces."""

from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from notifyhub.modules.notification.application.read_models.models import (
    ChannelStats,
    NotificationHistoryEntry,
    NotificationHistoryPage,
    NotificationHistoryQuery,
    NotificationStatsQuery,
    NotificationStatsReport,
)
from notifyhub.modules.notification.domain.enums import NotificationChannel


class INotificationHistoryRepository(ABC):
    """Store of the latest outcome per notification."""

    @abstractmethod
    async def record(
        self, entry: NotificationHistoryEntry
    ) -> NotificationHistoryEntry | None:
        """Insert or replace the entry of ``entry.notification_id``.

        Returns the entry it replaced, or None for a new notification.
        """

    @abstractmethod
    async def find_by_notification_id(
        self, notification_id: UUID
    ) -> NotificationHistoryEntry | None:
        """Find the entry of one notification."""

    @abstractmethod
    async def get_history(self, query: NotificationHistoryQuery) -> NotificationHistoryPage:
        """Entries matching ``query``, newest first."""


class INotificationStatsRepository(ABC):
    """Daily per-channel delivery counters."""

    @abstractmethod
    async def increment_sent(self, channel: NotificationChannel, at: datetime) -> None:
        """Count one sent notification on the UTC day of ``at``."""

    @abstractmethod
    async def increment_failed(self, channel: NotificationChannel, at: datetime) -> None:
        """Count one failed notification on the UTC day of ``at``."""

    @abstractmethod
    async def get_stats(self, query: NotificationStatsQuery) -> NotificationStatsReport:
        """Daily rows matching ``query``, newest day first."""

    @abstractmethod
    async def get_channel_stats(self, query: NotificationStatsQuery) -> list[ChannelStats]:
        """Totals per channel over the rows matching ``query``."""
