"""In-memory daily channel stats read model."""

import asyncio
from datetime import UTC, date, datetime

from notifyhub.modules.notification.application.read_models import (
    ChannelStats,
    DailyChannelStats,
    INotificationStatsRepository,
    NotificationStatsQuery,
    NotificationStatsReport,
)
from notifyhub.modules.notification.domain.enums import NotificationChannel


def utc_day(at: datetime) -> date:
    if at.tzinfo is None:
        return at.date()
    return at.astimezone(UTC).date()


class InMemoryNotificationStatsRepository(INotificationStatsRepository):
    """Counters keyed by (UTC day, channel)."""

    def __init__(self):
        self._rows: dict[tuple[date, NotificationChannel], DailyChannelStats] = {}
        self._lock = asyncio.Lock()

    async def increment_sent(self, channel: NotificationChannel, at: datetime) -> None:
        async with self._lock:
            self._row(channel, at).total_sent += 1

    async def increment_failed(self, channel: NotificationChannel, at: datetime) -> None:
        async with self._lock:
            self._row(channel, at).total_failed += 1

    def _row(self, channel: NotificationChannel, at: datetime) -> DailyChannelStats:
        day = utc_day(at)
        key = (day, channel)
        if key not in self._rows:
            self._rows[key] = DailyChannelStats(day=day, channel=channel)
        return self._rows[key]

    def _matching(self, query: NotificationStatsQuery) -> list[DailyChannelStats]:
        return [row for row in self._rows.values() if query.matches(row)]

    async def get_stats(self, query: NotificationStatsQuery) -> NotificationStatsReport:
        rows = sorted(
            self._matching(query), key=lambda r: (r.day, r.channel.value), reverse=True
        )
        return NotificationStatsReport(stats=rows)

    async def get_channel_stats(self, query: NotificationStatsQuery) -> list[ChannelStats]:
        totals: dict[NotificationChannel, list[int]] = {}
        for row in self._matching(query):
            sent_failed = totals.setdefault(row.channel, [0, 0])
            sent_failed[0] += row.total_sent
            sent_failed[1] += row.total_failed

        result = []
        for channel in NotificationChannel:
            if channel in totals:
                sent, failed = totals[channel]
                result.append(
                    ChannelStats(channel=channel, total_sent=sent, total_failed=failed)
                )
        return result
