"""Notification read models.

Query-side views of delivery outcomes, kept up to date from
``NotificationSent`` and ``NotificationFailed`` events.
"""

from notifyhub.modules.notification.application.read_models.models import (
    DEFAULT_HISTORY_LIMIT,
    MAX_HISTORY_LIMIT,
    ChannelStats,
    DailyChannelStats,
    NotificationHistoryEntry,
    NotificationHistoryPage,
    NotificationHistoryQuery,
    NotificationStatsQuery,
    NotificationStatsReport,
    success_rate,
)
from notifyhub.modules.notification.application.read_models.repositories import (
    INotificationHistoryRepository,
    INotificationStatsRepository,
)

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "MAX_HISTORY_LIMIT",
    "ChannelStats",
    "DailyChannelStats",
    "INotificationHistoryRepository",
    "INotificationStatsRepository",
    "NotificationHistoryEntry",
    "NotificationHistoryPage",
    "NotificationHistoryQuery",
    "NotificationStatsQuery",
    "NotificationStatsReport",
    "success_rate",
]
