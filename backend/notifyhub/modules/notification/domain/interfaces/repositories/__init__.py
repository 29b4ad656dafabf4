"""Notification repository interfaces."""

from notifyhub.modules.notification.domain.interfaces.repositories.notification_batch_repository import (
    INotificationBatchRepository,
)
from notifyhub.modules.notification.domain.interfaces.repositories.notification_repository import (
    INotificationRepository,
)

__all__ = ["INotificationBatchRepository", "INotificationRepository"]
