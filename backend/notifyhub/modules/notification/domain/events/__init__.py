"""Notification domain events.

Events are built by the application layer from a notification's status
after a delivery attempt; delivery strategies never publish them.
"""

from datetime import UTC, datetime
from uuid import UUID

from notifyhub.core.domain.base import DomainEvent
from notifyhub.modules.notification.domain.aggregates import Notification
from notifyhub.modules.notification.domain.enums import NotificationChannel


class NotificationSent(DomainEvent):
    """Emitted when a notification was accepted by its channel vendor."""

    def __init__(
        self,
        notification_id: UUID,
        recipient_id: str,
        channel: NotificationChannel,
        title: str = "",
        body: str = "",
        sent_at: datetime | None = None,
        batch_id: UUID | None = None,
        created_at: datetime | None = None,
    ):
        super().__init__()
        self.notification_id = notification_id
        self.recipient_id = recipient_id
        self.channel = channel
        self.title = title
        self.body = body
        self.sent_at = sent_at or datetime.now(UTC)
        self.batch_id = batch_id
        self.created_at = created_at or self.sent_at

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationSent":
        return cls(
            notification_id=notification.id,
            recipient_id=notification.recipient_id,
            channel=notification.channel,
            title=notification.content.title,
            body=notification.content.body,
            sent_at=notification.sent_at,
            batch_id=notification.batch_id,
            created_at=notification.created_at,
        )

    def __str__(self) -> str:
        return f"NotificationSent({self.notification_id} via {self.channel.value})"


class NotificationFailed(DomainEvent):
    """Emitted when delivering a notification failed."""

    def __init__(
        self,
        notification_id: UUID,
        recipient_id: str,
        channel: NotificationChannel,
        reason: str,
        title: str = "",
        body: str = "",
        failed_at: datetime | None = None,
        batch_id: UUID | None = None,
        created_at: datetime | None = None,
    ):
        super().__init__()
        self.notification_id = notification_id
        self.recipient_id = recipient_id
        self.channel = channel
        self.reason = reason
        self.title = title
        self.body = body
        self.failed_at = failed_at or datetime.now(UTC)
        self.batch_id = batch_id
        self.created_at = created_at or self.failed_at

    @classmethod
    def from_notification(
        cls, notification: Notification, reason: str | None = None
    ) -> "NotificationFailed":
        return cls(
            notification_id=notification.id,
            recipient_id=notification.recipient_id,
            channel=notification.channel,
            reason=reason or notification.failure_reason or "Unknown error",
            title=notification.content.title,
            body=notification.content.body,
            batch_id=notification.batch_id,
            created_at=notification.created_at,
        )

    def __str__(self) -> str:
        return f"NotificationFailed({self.notification_id} via {self.channel.value}: {self.reason})"


__all__ = ["NotificationFailed", "NotificationSent"]
