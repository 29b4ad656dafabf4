"""Notification domain errors.

State-transition errors are usage errors raised immediately by the
aggregates; validation errors describe malformed input; delivery errors
are raised after the affected aggregates already reflect the failure.
"""

from typing import Any
from uuid import UUID

from notifyhub.core.errors import (
    ConfigurationError,
    DomainError,
    NotFoundError,
    ValidationError,
)


class NotificationError(DomainError):
    """Base error for notification domain."""

    default_code = "NOTIFICATION_ERROR"


class NotificationNotFoundError(NotFoundError):
    """Raised when a notification is not found."""

    def __init__(self, notification_id: UUID, **kwargs):
        super().__init__(resource="Notification", identifier=notification_id, **kwargs)


class BatchNotFoundError(NotFoundError):
    """Raised when a notification batch is not found."""

    def __init__(self, batch_id: UUID, **kwargs):
        super().__init__(resource="NotificationBatch", identifier=batch_id, **kwargs)


# Status value errors


class InvalidStatusError(NotificationError):
    """Raised when a raw status value is not a recognized variant."""

    default_code = "INVALID_STATUS"

    def __init__(self, value: Any, status_kind: str, **kwargs):
        super().__init__(
            message=f"Invalid {status_kind} status: {value!r}",
            details={"value": repr(value), "status_kind": status_kind},
            **kwargs,
        )


class MissingReasonError(NotificationError):
    """Raised when a failed status is constructed without a reason."""

    default_code = "MISSING_FAILURE_REASON"

    def __init__(self, status_kind: str, **kwargs):
        super().__init__(
            message=f"A failed {status_kind} status requires a reason",
            details={"status_kind": status_kind},
            **kwargs,
        )


class IllegalTransitionError(NotificationError):
    """Raised when a status change is not in the transition table."""

    default_code = "ILLEGAL_TRANSITION"

    def __init__(self, entity: str, entity_id: UUID, current: str, target: str, **kwargs):
        super().__init__(
            message=f"{entity} {entity_id} cannot transition from {current} to {target}",
            details={
                "entity": entity,
                "entity_id": str(entity_id),
                "current_status": current,
                "target_status": target,
            },
            **kwargs,
        )


# Notification errors


class CannotSendError(NotificationError):
    """Raised when sending a notification that is not pending."""

    default_code = "CANNOT_SEND"

    def __init__(self, notification_id: UUID, current_status: str, **kwargs):
        super().__init__(
            message=f"Notification {notification_id} cannot be sent from status {current_status}",
            details={
                "notification_id": str(notification_id),
                "current_status": current_status,
            },
            user_message="This notification has already been processed",
            **kwargs,
        )


class NotYetSentError(NotificationError):
    """Raised when marking a notification delivered before it was sent."""

    default_code = "NOT_YET_SENT"

    def __init__(self, notification_id: UUID, current_status: str, **kwargs):
        super().__init__(
            message=f"Notification {notification_id} has not been sent (status {current_status})",
            details={
                "notification_id": str(notification_id),
                "current_status": current_status,
            },
            **kwargs,
        )


class CannotAssignToBatchError(NotificationError):
    """Raised when a notification is not eligible for batch membership."""

    default_code = "CANNOT_ASSIGN_TO_BATCH"

    def __init__(self, notification_id: UUID, reason: str, **kwargs):
        super().__init__(
            message=f"Notification {notification_id} cannot be assigned to a batch: {reason}",
            details={"notification_id": str(notification_id), "reason": reason},
            **kwargs,
        )


# Batch errors


class EmptyBatchError(ValidationError):
    """Raised when creating a batch without notifications."""

    default_code = "EMPTY_BATCH"

    def __init__(self, **kwargs):
        super().__init__(
            "A notification batch must contain at least one notification",
            field="notifications",
            **kwargs,
        )


class CannotAddToBatchError(NotificationError):
    """Raised when adding an ineligible notification to a batch."""

    default_code = "CANNOT_ADD_TO_BATCH"

    def __init__(self, batch_id: UUID, notification_id: UUID, reason: str, **kwargs):
        super().__init__(
            message=f"Notification {notification_id} cannot be added to batch {batch_id}: {reason}",
            details={
                "batch_id": str(batch_id),
                "notification_id": str(notification_id),
                "reason": reason,
            },
            **kwargs,
        )


class CannotProcessError(NotificationError):
    """Raised when processing a batch that is not pending."""

    default_code = "CANNOT_PROCESS_BATCH"

    def __init__(self, batch_id: UUID, current_status: str, **kwargs):
        super().__init__(
            message=f"Batch {batch_id} cannot be processed from status {current_status}",
            details={"batch_id": str(batch_id), "current_status": current_status},
            **kwargs,
        )


class NotProcessingError(NotificationError):
    """Raised when completing a batch that is not processing."""

    default_code = "BATCH_NOT_PROCESSING"

    def __init__(self, batch_id: UUID, current_status: str, **kwargs):
        super().__init__(
            message=f"Batch {batch_id} is not processing (status {current_status})",
            details={"batch_id": str(batch_id), "current_status": current_status},
            **kwargs,
        )


class BatchNotSupportedError(NotificationError):
    """Raised when a channel vendor can only send one notification at a time."""

    default_code = "BATCH_NOT_SUPPORTED"

    def __init__(self, batch_id: UUID, vendor: str, **kwargs):
        super().__init__(
            message=f"{vendor} cannot deliver batch {batch_id}",
            details={"batch_id": str(batch_id), "vendor": vendor},
            **kwargs,
        )


class BatchInvariantViolationError(NotificationError):
    """Raised when a batch is built or started in an inconsistent state."""

    default_code = "BATCH_INVARIANT_VIOLATION"

    def __init__(self, reason: str, batch_id: UUID | None = None, **kwargs):
        super().__init__(
            message=f"Batch invariant violated: {reason}",
            details={
                "batch_id": str(batch_id) if batch_id else None,
                "reason": reason,
            },
            **kwargs,
        )


# Delivery errors


class PartialBatchFailureError(NotificationError):
    """Raised when some members of a batch failed delivery.

    The remaining members were delivered and stay ``sent``; the batch itself
    is already marked ``failed`` when this is raised.
    """

    default_code = "PARTIAL_BATCH_FAILURE"
    retryable = True

    def __init__(self, failed_count: int, total_count: int, batch_id: UUID, **kwargs):
        self.failed_count = failed_count
        self.total_count = total_count
        self.batch_id = batch_id
        super().__init__(
            message=f"{failed_count} of {total_count} notifications failed in batch {batch_id}",
            details={
                "batch_id": str(batch_id),
                "failed_count": failed_count,
                "total_count": total_count,
                "sent_count": total_count - failed_count,
            },
            user_message="Some notifications could not be delivered",
            **kwargs,
        )


class InvalidContactInfoError(ValidationError):
    """Raised when contact info is malformed for its channel."""

    default_code = "INVALID_CONTACT_INFO"

    def __init__(self, channel: str, value: str, reason: str, **kwargs):
        super().__init__(
            f"Invalid {channel} contact info {value!r}: {reason}",
            field="contact_info",
            details={"channel": channel, "reason": reason},
            **kwargs,
        )


class ChannelNotConfiguredError(ConfigurationError):
    """Raised when no delivery strategy is configured for a channel."""

    default_code = "CHANNEL_NOT_CONFIGURED"

    def __init__(self, channel: str, **kwargs):
        super().__init__(
            f"No delivery strategy configured for channel '{channel}'",
            config_key=f"channel.{channel}",
            **kwargs,
        )
        self.code = self.default_code


__all__ = [
    "BatchInvariantViolationError",
    "BatchNotFoundError",
    "BatchNotSupportedError",
    "CannotAddToBatchError",
    "CannotAssignToBatchError",
    "CannotProcessError",
    "CannotSendError",
    "ChannelNotConfiguredError",
    "EmptyBatchError",
    "IllegalTransitionError",
    "InvalidContactInfoError",
    "InvalidStatusError",
    "MissingReasonError",
    "NotProcessingError",
    "NotYetSentError",
    "NotificationError",
    "NotificationNotFoundError",
    "PartialBatchFailureError",
]
