"""Notification infrastructure repositories."""

from notifyhub.modules.notification.infrastructure.repositories.notification_batch_repository import (
    InMemoryNotificationBatchRepository,
)
from notifyhub.modules.notification.infrastructure.repositories.notification_history_repository import (
    InMemoryNotificationHistoryRepository,
)
from notifyhub.modules.notification.infrastructure.repositories.notification_repository import (
    InMemoryNotificationRepository,
)
from notifyhub.modules.notification.infrastructure.repositories.notification_stats_repository import (
    InMemoryNotificationStatsRepository,
)

__all__ = [
    "InMemoryNotificationBatchRepository",
    "InMemoryNotificationHistoryRepository",
    "InMemoryNotificationRepository",
    "InMemoryNotificationStatsRepository",
]
