"""NotificationBatch aggregate for same-channel bulk delivery.

A batch owns the processing status of a group of notifications. Member
statuses are updated by the delivery strategy independently of the batch
status, so a failed batch may still contain sent members.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from notifyhub.core.domain.base import AggregateRoot
from notifyhub.modules.notification.domain.aggregates.notification import Notification
from notifyhub.modules.notification.domain.enums import NotificationChannel
from notifyhub.modules.notification.domain.errors import (
    BatchInvariantViolationError,
    CannotAddToBatchError,
    CannotAssignToBatchError,
    CannotProcessError,
    EmptyBatchError,
    IllegalTransitionError,
    NotProcessingError,
)
from notifyhub.modules.notification.domain.value_objects import BatchStatus


class NotificationBatch(AggregateRoot):
    """Aggregate for batch notification processing.

    Invariants, checked when a batch is constructed and again before it
    starts processing:
    - the batch has at least one notification
    - every notification uses the batch channel
    - no notification appears twice
    - while the batch is pending, every notification is pending
    """

    def __init__(
        self,
        channel: NotificationChannel,
        notifications: list[Notification],
        status: BatchStatus | None = None,
        processed_at: datetime | None = None,
        entity_id: UUID | None = None,
        created_at: datetime | None = None,
    ):
        """Initialize notification batch.

        Args:
            channel: Channel shared by every member
            notifications: Ordered batch members
            status: Current status, pending when omitted
            processed_at: When processing finished
            entity_id: Optional entity ID
            created_at: Optional creation time
        """
        super().__init__(entity_id, created_at)

        self.channel = channel
        self._notifications = list(notifications)
        self._status = status or BatchStatus.pending()
        self._processed_at = processed_at

        self._validate_invariants()

    def _validate_invariants(self) -> None:
        if not self._notifications:
            raise EmptyBatchError()

        seen: set[UUID] = set()
        for notification in self._notifications:
            if notification.channel != self.channel:
                raise BatchInvariantViolationError(
                    f"notification {notification.id} uses channel "
                    f"'{notification.channel.value}' in a '{self.channel.value}' batch",
                    batch_id=self.id,
                )
            if notification.id in seen:
                raise BatchInvariantViolationError(
                    f"notification {notification.id} appears more than once",
                    batch_id=self.id,
                )
            seen.add(notification.id)

            if notification.batch_id not in (None, self.id):
                raise BatchInvariantViolationError(
                    f"notification {notification.id} belongs to batch {notification.batch_id}",
                    batch_id=self.id,
                )
            if self._status.is_pending() and not notification.status.is_pending():
                raise BatchInvariantViolationError(
                    f"notification {notification.id} is {notification.status} "
                    "in a pending batch",
                    batch_id=self.id,
                )

    @classmethod
    def create(
        cls, channel: NotificationChannel, notifications: list[Notification]
    ) -> "NotificationBatch":
        """Create a pending batch and assign every notification to it.

        Every check runs before any notification is touched, so a failed
        create leaves all notifications unassigned.

        Raises:
            EmptyBatchError: If ``notifications`` is empty
            CannotAssignToBatchError: If any notification is not assignable
            BatchInvariantViolationError: On mixed channels or duplicates
        """
        if not notifications:
            raise EmptyBatchError()

        for notification in notifications:
            if not notification.can_be_assigned_to_batch():
                reason = (
                    f"already assigned to batch {notification.batch_id}"
                    if notification.batch_id is not None
                    else f"status is {notification.status}"
                )
                raise CannotAssignToBatchError(notification.id, reason)

        batch = cls(channel=channel, notifications=notifications)
        for notification in batch._notifications:
            notification.assign_to_batch(batch.id)
        return batch

    @classmethod
    def reconstitute(
        cls,
        batch_id: UUID,
        channel: NotificationChannel,
        notifications: list[Notification],
        status: BatchStatus,
        created_at: datetime,
        processed_at: datetime | None = None,
    ) -> "NotificationBatch":
        """Rebuild a batch from stored state."""
        return cls(
            channel=channel,
            notifications=notifications,
            status=status,
            processed_at=processed_at,
            entity_id=batch_id,
            created_at=created_at,
        )

    # Read-only state

    @property
    def status(self) -> BatchStatus:
        return self._status

    @property
    def processed_at(self) -> datetime | None:
        return self._processed_at

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return tuple(self._notifications)

    @property
    def size(self) -> int:
        return len(self._notifications)

    @property
    def pending_notifications(self) -> list[Notification]:
        return [n for n in self._notifications if n.status.is_pending()]

    @property
    def sent_notifications(self) -> list[Notification]:
        return [
            n for n in self._notifications if n.status.is_sent() or n.status.is_delivered()
        ]

    @property
    def failed_notifications(self) -> list[Notification]:
        return [n for n in self._notifications if n.status.is_failed()]

    # Membership

    def _add_rejection_reason(self, notification: Notification) -> str | None:
        if not self._status.value.can_add_notifications():
            return f"batch is {self._status}"
        if notification.channel != self.channel:
            return (
                f"channel '{notification.channel.value}' does not match "
                f"batch channel '{self.channel.value}'"
            )
        if not notification.can_be_assigned_to_batch():
            if notification.batch_id is not None:
                return f"already assigned to batch {notification.batch_id}"
            return f"status is {notification.status}"
        return None

    def can_add_notification(self, notification: Notification) -> bool:
        return self._add_rejection_reason(notification) is None

    def add_notification(self, notification: Notification) -> "NotificationBatch":
        reason = self._add_rejection_reason(notification)
        if reason is not None:
            raise CannotAddToBatchError(self.id, notification.id, reason)

        notification.assign_to_batch(self.id)
        self._notifications.append(notification)
        self.increment_version()
        return self

    # Processing

    def can_be_processed(self) -> bool:
        return self._status.is_pending()

    def start_processing(self) -> "NotificationBatch":
        if not self.can_be_processed():
            raise CannotProcessError(self.id, str(self._status))
        # members may have been sent on their own since the batch was built
        self._validate_invariants()

        self._transition_to(BatchStatus.processing())
        return self

    def mark_as_completed(self) -> "NotificationBatch":
        if not self._status.is_processing():
            raise NotProcessingError(self.id, str(self._status))

        self._transition_to(BatchStatus.completed())
        self._processed_at = datetime.now(UTC)
        return self

    def mark_as_failed(self, reason: str) -> "NotificationBatch":
        self._transition_to(BatchStatus.failed(reason))
        self._processed_at = datetime.now(UTC)
        return self

    def _transition_to(self, target: BatchStatus) -> None:
        if not self._status.can_transition_to(target):
            raise IllegalTransitionError(
                "NotificationBatch", self.id, str(self._status), target.value.value
            )
        self._status = target
        self.increment_version()

    def get_processing_summary(self) -> dict[str, Any]:
        """Get batch processing summary."""
        return {
            "batch_id": str(self.id),
            "channel": self.channel.value,
            "status": self._status.value.value,
            "failure_reason": self._status.reason,
            "total": self.size,
            "sent": len(self.sent_notifications),
            "failed": len(self.failed_notifications),
            "pending": len(self.pending_notifications),
            "created_at": self.created_at.isoformat(),
            "processed_at": self._processed_at.isoformat() if self._processed_at else None,
        }

    def equals(self, other: object) -> bool:
        return isinstance(other, NotificationBatch) and self.id == other.id

    def __str__(self) -> str:
        return f"NotificationBatch({self.id}, {self.channel.value}, {self.size} notifications, {self._status})"
