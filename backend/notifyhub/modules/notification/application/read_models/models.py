"""Read models for notification delivery history and channel stats."""

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID

from notifyhub.core.errors import ValidationError
from notifyhub.modules.notification.domain.enums import (
    NotificationChannel,
    NotificationStatusType,
)

DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 100


def success_rate(total_sent: int, total_failed: int) -> float:
    """Share of attempts that reached the vendor, 0.0 when nothing was attempted."""
    attempts = total_sent + total_failed
    return total_sent / attempts if attempts else 0.0


@dataclass
class NotificationHistoryEntry:
    """Latest known outcome of one notification."""

    notification_id: UUID
    recipient_id: str
    channel: NotificationChannel
    status: NotificationStatusType
    title: str
    body: str
    created_at: datetime
    sent_at: datetime | None = None
    failure_reason: str | None = None
    batch_id: UUID | None = None


@dataclass(frozen=True)
class NotificationHistoryQuery:
    """Filters and paging for a history lookup. Dates bound ``created_at``."""

    recipient_id: str | None = None
    channel: NotificationChannel | None = None
    status: NotificationStatusType | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int = DEFAULT_HISTORY_LIMIT
    offset: int = 0

    def __post_init__(self):
        if not 1 <= self.limit <= MAX_HISTORY_LIMIT:
            raise ValidationError(
                f"limit must be between 1 and {MAX_HISTORY_LIMIT}, got {self.limit}",
                field="limit",
            )
        if self.offset < 0:
            raise ValidationError(
                f"offset cannot be negative, got {self.offset}", field="offset"
            )
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError("start_date must not be after end_date", field="start_date")

    def matches(self, entry: NotificationHistoryEntry) -> bool:
        if self.recipient_id is not None and entry.recipient_id != self.recipient_id:
            return False
        if self.channel is not None and entry.channel != self.channel:
            return False
        if self.status is not None and entry.status != self.status:
            return False
        if self.start_date is not None and entry.created_at < self.start_date:
            return False
        if self.end_date is not None and entry.created_at > self.end_date:
            return False
        return True


@dataclass(frozen=True)
class NotificationHistoryPage:
    entries: list[NotificationHistoryEntry]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total


@dataclass
class DailyChannelStats:
    """Sent and failed counters of one channel on one UTC day."""

    day: date
    channel: NotificationChannel
    total_sent: int = 0
    total_failed: int = 0

    @property
    def success_rate(self) -> float:
        return success_rate(self.total_sent, self.total_failed)


@dataclass(frozen=True)
class NotificationStatsQuery:
    """Optional channel and inclusive day range for stats lookups."""

    channel: NotificationChannel | None = None
    start_date: date | None = None
    end_date: date | None = None

    def matches(self, stats: DailyChannelStats) -> bool:
        if self.channel is not None and stats.channel != self.channel:
            return False
        if self.start_date is not None and stats.day < self.start_date:
            return False
        if self.end_date is not None and stats.day > self.end_date:
            return False
        return True


@dataclass(frozen=True)
class NotificationStatsReport:
    """Per-day rows, newest first, with totals across them."""

    stats: list[DailyChannelStats] = field(default_factory=list)

    @property
    def total_sent(self) -> int:
        return sum(s.total_sent for s in self.stats)

    @property
    def total_failed(self) -> int:
        return sum(s.total_failed for s in self.stats)

    @property
    def success_rate(self) -> float:
        return success_rate(self.total_sent, self.total_failed)


@dataclass(frozen=True)
class ChannelStats:
    channel: NotificationChannel
    total_sent: int
    total_failed: int

    @property
    def success_rate(self) -> float:
        return success_rate(self.total_sent, self.total_failed)
