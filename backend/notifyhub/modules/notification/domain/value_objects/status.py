"""Lifecycle status value objects for notifications and batches."""

from enum import Enum
from typing import Any, ClassVar

from notifyhub.core.domain.base import ValueObject
from notifyhub.modules.notification.domain.enums import (
    BatchStatusType,
    NotificationStatusType,
)
from notifyhub.modules.notification.domain.errors import (
    InvalidStatusError,
    MissingReasonError,
)


class _LifecycleStatus(ValueObject):
    """Immutable status with an optional failure reason.

    Subclasses bind the raw status enum. Only the ``failed`` variant carries
    a reason, and it must carry one.
    """

    status_type: ClassVar[type[Enum]]
    status_kind: ClassVar[str]

    def __init__(self, value: Any, reason: str | None = None):
        super().__init__()

        self.value = self._parse(value)
        if self.value.value == "failed":
            if reason is None or not str(reason).strip():
                raise MissingReasonError(self.status_kind)
            self.reason = str(reason).strip()
        else:
            self.reason = None

        self._freeze()

    @classmethod
    def _parse(cls, value: Any) -> Enum:
        if isinstance(value, cls.status_type):
            return value
        if isinstance(value, str):
            try:
                return cls.status_type(value.strip().lower())
            except ValueError:
                pass
        raise InvalidStatusError(value, cls.status_kind)

    def can_transition_to(self, candidate: Any) -> bool:
        """Whether moving from this status to ``candidate`` is legal.

        Pure query: never raises, returns False for anything that is not a
        status of the same kind.
        """
        if not isinstance(candidate, self.__class__):
            return False
        return self.value.can_transition_to(candidate.value)

    def is_final(self) -> bool:
        return self.value.is_final()

    def is_failed(self) -> bool:
        return self.value.value == "failed"

    def __str__(self) -> str:
        if self.reason:
            return f"{self.value.value}({self.reason})"
        return self.value.value


class NotificationStatus(_LifecycleStatus):
    """Status of a single notification.

    pending -> sent | failed, sent -> delivered | failed.
    """

    status_type = NotificationStatusType
    status_kind = "notification"

    @classmethod
    def pending(cls) -> "NotificationStatus":
        return cls(NotificationStatusType.PENDING)

    @classmethod
    def sent(cls) -> "NotificationStatus":
        return cls(NotificationStatusType.SENT)

    @classmethod
    def delivered(cls) -> "NotificationStatus":
        return cls(NotificationStatusType.DELIVERED)

    @classmethod
    def failed(cls, reason: str) -> "NotificationStatus":
        return cls(NotificationStatusType.FAILED, reason)

    def is_pending(self) -> bool:
        return self.value == NotificationStatusType.PENDING

    def is_sent(self) -> bool:
        return self.value == NotificationStatusType.SENT

    def is_delivered(self) -> bool:
        return self.value == NotificationStatusType.DELIVERED


class BatchStatus(_LifecycleStatus):
    """Status of a notification batch.

    pending -> processing | failed, processing -> completed | failed.
    """

    status_type = BatchStatusType
    status_kind = "batch"

    @classmethod
    def pending(cls) -> "BatchStatus":
        return cls(BatchStatusType.PENDING)

    @classmethod
    def processing(cls) -> "BatchStatus":
        return cls(BatchStatusType.PROCESSING)

    @classmethod
    def completed(cls) -> "BatchStatus":
        return cls(BatchStatusType.COMPLETED)

    @classmethod
    def failed(cls, reason: str) -> "BatchStatus":
        return cls(BatchStatusType.FAILED, reason)

    def is_pending(self) -> bool:
        return self.value == BatchStatusType.PENDING

    def is_processing(self) -> bool:
        return self.value == BatchStatusType.PROCESSING

    def is_completed(self) -> bool:
        return self.value == BatchStatusType.COMPLETED
