"""Notification history and stats queries."""

from dataclasses import replace

from notifyhub.core.logging import get_logger
from notifyhub.modules.notification.application.dtos import parse_channel
from notifyhub.modules.notification.application.read_models import (
    ChannelStats,
    INotificationHistoryRepository,
    INotificationStatsRepository,
    NotificationHistoryPage,
    NotificationHistoryQuery,
    NotificationStatsQuery,
    NotificationStatsReport,
)
from notifyhub.modules.notification.domain.enums import NotificationChannel

logger = get_logger(__name__)


class GetNotificationHistoryUseCase:
    """Read side of the notification module."""

    def __init__(
        self,
        history_repository: INotificationHistoryRepository,
        stats_repository: INotificationStatsRepository,
    ):
        self.history_repository = history_repository
        self.stats_repository = stats_repository

    async def get_history(
        self, query: NotificationHistoryQuery | None = None
    ) -> NotificationHistoryPage:
        query = query or NotificationHistoryQuery()
        page = await self.history_repository.get_history(query)
        logger.debug(
            "Notification history loaded",
            returned=len(page.entries),
            total=page.total,
            offset=query.offset,
        )
        return page

    async def get_by_recipient(
        self, recipient_id: str, query: NotificationHistoryQuery | None = None
    ) -> NotificationHistoryPage:
        """History of one recipient; other filters come from ``query``."""
        logger.info("Getting notification history for recipient", recipient_id=recipient_id)
        query = replace(query or NotificationHistoryQuery(), recipient_id=recipient_id)
        return await self.get_history(query)

    async def get_by_channel(
        self,
        channel: NotificationChannel | str,
        query: NotificationHistoryQuery | None = None,
    ) -> NotificationHistoryPage:
        """History of one channel; other filters come from ``query``.

        Raises:
            ValidationError: If ``channel`` is not a known channel
        """
        channel = parse_channel(channel)
        logger.info("Getting notification history for channel", channel=channel.value)
        query = replace(query or NotificationHistoryQuery(), channel=channel)
        return await self.get_history(query)

    async def get_stats(
        self, query: NotificationStatsQuery | None = None
    ) -> NotificationStatsReport:
        return await self.stats_repository.get_stats(query or NotificationStatsQuery())

    async def get_channel_stats(
        self, query: NotificationStatsQuery | None = None
    ) -> list[ChannelStats]:
        return await self.stats_repository.get_channel_stats(
            query or NotificationStatsQuery()
        )
