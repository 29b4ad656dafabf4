"""Notification domain enums.

Type-safe constants for delivery channels and the raw status values held by
the notification and batch status value objects.
"""

from enum import Enum


class NotificationChannel(Enum):
    """Available notification delivery channels."""

    EMAIL = "email"
    WHATSAPP = "whatsapp"
    SYSTEM = "system"

    @property
    def rate_limit_key(self) -> str:
        """Service key used for this channel's sliding window."""
        return self.value


class NotificationStatusType(Enum):
    """Raw notification status values."""

    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"

    def is_final(self) -> bool:
        """Check if this is a terminal status."""
        return self in [NotificationStatusType.DELIVERED, NotificationStatusType.FAILED]

    def can_transition_to(self, new_status: "NotificationStatusType") -> bool:
        """Check if transition to new status is valid."""
        valid_transitions: dict[NotificationStatusType, list[NotificationStatusType]] = {
            NotificationStatusType.PENDING: [
                NotificationStatusType.SENT,
                NotificationStatusType.FAILED,
            ],
            NotificationStatusType.SENT: [
                NotificationStatusType.DELIVERED,
                NotificationStatusType.FAILED,
            ],
            NotificationStatusType.DELIVERED: [],
            NotificationStatusType.FAILED: [],
        }
        return new_status in valid_transitions.get(self, [])


class BatchStatusType(Enum):
    """Raw notification batch status values."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    def is_final(self) -> bool:
        """Check if this is a terminal batch status."""
        return self in [BatchStatusType.COMPLETED, BatchStatusType.FAILED]

    def can_add_notifications(self) -> bool:
        """Check if notifications can still be added to batch."""
        return self == BatchStatusType.PENDING

    def can_transition_to(self, new_status: "BatchStatusType") -> bool:
        """Check if transition to new status is valid."""
        valid_transitions: dict[BatchStatusType, list[BatchStatusType]] = {
            BatchStatusType.PENDING: [BatchStatusType.PROCESSING, BatchStatusType.FAILED],
            BatchStatusType.PROCESSING: [
                BatchStatusType.COMPLETED,
                BatchStatusType.FAILED,
            ],
            BatchStatusType.COMPLETED: [],
            BatchStatusType.FAILED: [],
        }
        return new_status in valid_transitions.get(self, [])


__all__ = ["BatchStatusType", "NotificationChannel", "NotificationStatusType"]
