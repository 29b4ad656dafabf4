"""Notification aggregate: one message to one recipient through one channel."""

from datetime import UTC, datetime
from uuid import UUID

from notifyhub.core.domain.base import AggregateRoot
from notifyhub.core.errors import ValidationError
from notifyhub.modules.notification.domain.enums import NotificationChannel
from notifyhub.modules.notification.domain.errors import (
    CannotAssignToBatchError,
    CannotSendError,
    IllegalTransitionError,
    NotYetSentError,
)
from notifyhub.modules.notification.domain.value_objects import (
    ContactInfo,
    NotificationContent,
    NotificationStatus,
)


class Notification(AggregateRoot):
    """Notification aggregate.

    Status only moves along the notification transition table, and
    ``sent_at`` is set exactly when the notification has passed through
    ``sent``. Transition methods return the aggregate itself.
    """

    def __init__(
        self,
        recipient_id: str,
        content: NotificationContent,
        channel: NotificationChannel,
        contact_info: ContactInfo,
        status: NotificationStatus | None = None,
        sent_at: datetime | None = None,
        batch_id: UUID | None = None,
        entity_id: UUID | None = None,
        created_at: datetime | None = None,
    ):
        """Initialize notification.

        Args:
            recipient_id: Identifier of the recipient in the calling system
            content: Message content
            channel: Delivery channel
            contact_info: Contact info variant belonging to ``channel``
            status: Current status, pending when omitted
            sent_at: When the notification was sent
            batch_id: Batch the notification belongs to
            entity_id: Optional entity ID
            created_at: Optional creation time
        """
        super().__init__(entity_id, created_at)

        if not recipient_id or not str(recipient_id).strip():
            raise ValidationError("Recipient id is required", field="recipient_id")
        if not isinstance(content, NotificationContent):
            raise ValidationError("Content must be NotificationContent", field="content")
        if not isinstance(channel, NotificationChannel):
            raise ValidationError(
                f"Unsupported notification channel: {channel!r}", field="channel"
            )
        if not isinstance(contact_info, ContactInfo) or contact_info.channel != channel:
            raise ValidationError(
                f"Contact info does not belong to channel '{channel.value}'",
                field="contact_info",
            )

        self.recipient_id = str(recipient_id).strip()
        self.content = content
        self.channel = channel
        self.contact_info = contact_info
        self._status = status or NotificationStatus.pending()
        self._sent_at = sent_at
        self._batch_id = batch_id

        self._validate_sent_at()

    @classmethod
    def create(
        cls,
        recipient_id: str,
        content: NotificationContent,
        channel: NotificationChannel,
        contact_info: ContactInfo,
    ) -> "Notification":
        """Create a new pending notification after validating its contact info."""
        contact_info.validate()
        return cls(
            recipient_id=recipient_id,
            content=content,
            channel=channel,
            contact_info=contact_info,
        )

    @classmethod
    def reconstitute(
        cls,
        notification_id: UUID,
        recipient_id: str,
        content: NotificationContent,
        channel: NotificationChannel,
        contact_info: ContactInfo,
        status: NotificationStatus,
        created_at: datetime,
        sent_at: datetime | None = None,
        batch_id: UUID | None = None,
    ) -> "Notification":
        """Rebuild a notification from stored state."""
        return cls(
            recipient_id=recipient_id,
            content=content,
            channel=channel,
            contact_info=contact_info,
            status=status,
            sent_at=sent_at,
            batch_id=batch_id,
            entity_id=notification_id,
            created_at=created_at,
        )

    def _validate_sent_at(self) -> None:
        if self._status.is_pending() and self._sent_at is not None:
            raise ValidationError(
                "A pending notification cannot have a sent time", field="sent_at"
            )
        if (self._status.is_sent() or self._status.is_delivered()) and self._sent_at is None:
            raise ValidationError(
                f"A {self._status} notification must have a sent time", field="sent_at"
            )

    # Read-only state

    @property
    def status(self) -> NotificationStatus:
        return self._status

    @property
    def sent_at(self) -> datetime | None:
        return self._sent_at

    @property
    def batch_id(self) -> UUID | None:
        return self._batch_id

    @property
    def failure_reason(self) -> str | None:
        return self._status.reason

    # Queries

    def can_be_sent(self) -> bool:
        return self._status.is_pending()

    def can_be_assigned_to_batch(self) -> bool:
        return self._status.is_pending() and self._batch_id is None

    # Transitions

    def assign_to_batch(self, batch_id: UUID) -> "Notification":
        if not self.can_be_assigned_to_batch():
            reason = (
                f"already assigned to batch {self._batch_id}"
                if self._batch_id is not None
                else f"status is {self._status}"
            )
            raise CannotAssignToBatchError(self.id, reason)

        self._batch_id = batch_id
        self.increment_version()
        return self

    def mark_as_sent(self) -> "Notification":
        if not self.can_be_sent():
            raise CannotSendError(self.id, str(self._status))

        self._transition_to(NotificationStatus.sent())
        self._sent_at = datetime.now(UTC)
        return self

    def mark_as_delivered(self) -> "Notification":
        if not self._status.is_sent():
            raise NotYetSentError(self.id, str(self._status))

        self._transition_to(NotificationStatus.delivered())
        return self

    def mark_as_failed(self, reason: str) -> "Notification":
        self._transition_to(NotificationStatus.failed(reason))
        return self

    def _transition_to(self, target: NotificationStatus) -> None:
        if not self._status.can_transition_to(target):
            raise IllegalTransitionError(
                "Notification", self.id, str(self._status), target.value.value
            )
        self._status = target
        self.increment_version()

    def equals(self, other: object) -> bool:
        return isinstance(other, Notification) and self.id == other.id

    def __str__(self) -> str:
        return f"Notification({self.id}, {self.channel.value}, {self._status})"
