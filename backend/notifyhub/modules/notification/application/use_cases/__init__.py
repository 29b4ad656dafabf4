"""Notification use cases."""

from notifyhub.modules.notification.application.use_cases.get_notification_history import (
    GetNotificationHistoryUseCase,
)
from notifyhub.modules.notification.application.use_cases.send_notification import (
    SendNotificationUseCase,
    build_contact_info,
)

__all__ = [
    "GetNotificationHistoryUseCase",
    "SendNotificationUseCase",
    "build_contact_info",
]
