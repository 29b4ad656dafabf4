"""Notification application DTOs.

Commands accepted by the send use case and the result it hands back.
"""

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from notifyhub.core.errors import ValidationError
from notifyhub.modules.notification.domain.enums import NotificationChannel


def parse_channel(channel: NotificationChannel | str) -> NotificationChannel:
    """Accept a channel enum member or its string value."""
    if isinstance(channel, NotificationChannel):
        return channel
    try:
        return NotificationChannel(str(channel).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unsupported notification channel: {channel!r}", field="channel"
        ) from None


@dataclass(frozen=True)
class SendNotificationCommand:
    """Send one notification to one recipient."""

    recipient_id: str
    channel: NotificationChannel | str
    contact_info: str
    body: str
    title: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BatchRecipient:
    id: str
    contact_info: str


@dataclass(frozen=True)
class SendBatchNotificationCommand:
    """Send the same content to several recipients over one channel."""

    channel: NotificationChannel | str
    recipients: list[BatchRecipient]
    body: str
    title: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SendNotificationResult:
    """Outcome of a send request.

    For batches ``success`` only means the batch was accepted; delivery
    continues in the background.
    """

    success: bool
    notification_id: UUID | None = None
    batch_id: UUID | None = None
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> "SendNotificationResult":
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success}
        if self.notification_id:
            data["notification_id"] = str(self.notification_id)
        if self.batch_id:
            data["batch_id"] = str(self.batch_id)
        if self.error:
            data["error"] = self.error
        return data


__all__ = [
    "BatchRecipient",
    "SendBatchNotificationCommand",
    "SendNotificationCommand",
    "SendNotificationResult",
    "parse_channel",
]
