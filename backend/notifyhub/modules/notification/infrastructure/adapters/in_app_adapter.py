"""In-app inbox: the vendor behind the system channel."""

from collections import defaultdict
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from notifyhub.core.logging import get_logger
from notifyhub.modules.notification.domain.aggregates import (
    Notification,
    NotificationBatch,
)
from notifyhub.modules.notification.domain.enums import NotificationChannel
from notifyhub.modules.notification.domain.interfaces import (
    BatchSendResult,
    IBatchNotificationVendor,
)
from notifyhub.modules.notification.domain.value_objects import SystemContactInfo
from notifyhub.modules.notification.infrastructure.adapters.base import (
    require_channel,
)

logger = get_logger(__name__)

PROVIDER = "in_app"


@dataclass(frozen=True)
class InboxMessage:
    notification_id: UUID
    title: str
    body: str
    delivered_at: datetime
    read: bool = False


class InAppInboxAdapter(IBatchNotificationVendor):
    """Keeps delivered system notifications in per-recipient inboxes."""

    def __init__(self):
        self._inboxes: dict[str, list[InboxMessage]] = defaultdict(list)

    async def send(self, notification: Notification) -> None:
        self._deliver(notification)

    async def send_batch(self, batch: NotificationBatch) -> BatchSendResult:
        for notification in batch.notifications:
            self._deliver(notification)
        return BatchSendResult(succeeded=list(batch.notifications))

    def _deliver(self, notification: Notification) -> None:
        contact_info = require_channel(
            PROVIDER, notification, NotificationChannel.SYSTEM, SystemContactInfo
        )
        inbox_key = contact_info.format()
        self._inboxes[inbox_key].append(
            InboxMessage(
                notification_id=notification.id,
                title=notification.content.title,
                body=notification.content.body,
                delivered_at=datetime.now(UTC),
            )
        )
        logger.debug(
            "Stored in-app notification",
            notification_id=str(notification.id),
            inbox=inbox_key,
        )

    def inbox(self, inbox_key: str) -> list[InboxMessage]:
        """Messages delivered to an inbox, oldest first."""
        return list(self._inboxes.get(inbox_key, []))

    def clear(self) -> None:
        self._inboxes.clear()
