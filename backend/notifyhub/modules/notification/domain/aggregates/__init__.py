"""Notification domain aggregates."""

from notifyhub.modules.notification.domain.aggregates.notification import Notification
from notifyhub.modules.notification.domain.aggregates.notification_batch import (
    NotificationBatch,
)

__all__ = ["Notification", "NotificationBatch"]
