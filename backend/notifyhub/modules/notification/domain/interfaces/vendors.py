"""
Channel vendor ports.

A vendor turns a notification into a call to an external provider. Batch
capable vendors additionally accept a whole batch and report which members
the provider accepted.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from notifyhub.modules.notification.domain.aggregates import (
    Notification,
    NotificationBatch,
)


@dataclass
class BatchSendResult:
    """Partition of a batch's notifications after a vendor batch call."""

    succeeded: list[Notification] = field(default_factory=list)
    failed: list[Notification] = field(default_factory=list)
    error: str | None = None

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


class INotificationVendor(ABC):
    """Port for single-notification delivery."""

    @abstractmethod
    async def send(self, notification: Notification) -> None:
        """
        Deliver one notification.

        Raises:
            Exception: Any transport or provider error; the caller records the
                error message as the failure reason.
        """


class IBatchNotificationVendor(INotificationVendor):
    """Port for vendors that accept a whole batch in one call."""

    @abstractmethod
    async def send_batch(self, batch: NotificationBatch) -> BatchSendResult:
        """
        Deliver every notification of ``batch``.

        Returns:
            The batch's notifications split by provider outcome; ``error``
            explains the failed partition.

        Raises:
            Exception: If the call as a whole failed and no outcome is known.
        """
