"""Notification domain ports."""

from notifyhub.modules.notification.domain.interfaces.repositories import (
    INotificationBatchRepository,
    INotificationRepository,
)
from notifyhub.modules.notification.domain.interfaces.vendors import (
    BatchSendResult,
    IBatchNotificationVendor,
    INotificationVendor,
)

__all__ = [
    "BatchSendResult",
    "IBatchNotificationVendor",
    "INotificationBatchRepository",
    "INotificationRepository",
    "INotificationVendor",
]
