"""Notification domain value objects."""

from notifyhub.modules.notification.domain.value_objects.contact_info import (
    CONTACT_INFO_TYPES,
    ContactInfo,
    EmailContactInfo,
    SystemContactInfo,
    WhatsAppContactInfo,
)
from notifyhub.modules.notification.domain.value_objects.content import (
    NotificationContent,
)
from notifyhub.modules.notification.domain.value_objects.status import (
    BatchStatus,
    NotificationStatus,
)

__all__ = [
    "CONTACT_INFO_TYPES",
    "BatchStatus",
    "ContactInfo",
    "EmailContactInfo",
    "NotificationContent",
    "NotificationStatus",
    "SystemContactInfo",
    "WhatsAppContactInfo",
]
