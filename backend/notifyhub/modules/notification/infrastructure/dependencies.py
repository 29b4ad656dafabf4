"""Notification module dependency wiring.

Builds the object graph of the notification module from ``Settings``: one
shared rate limiter, one adapter per configured channel, the channel
strategies, the send use case and the history read side fed by the event bus.
"""

from dataclasses import dataclass

import httpx

from notifyhub.core.config import Settings, get_settings
from notifyhub.core.events.bus import InMemoryEventBus
from notifyhub.core.logging import get_logger
from notifyhub.modules.notification.application.event_handlers import (
    NotificationReadModelHandlers,
    register_notification_event_handlers,
)
from notifyhub.modules.notification.application.use_cases import (
    GetNotificationHistoryUseCase,
    SendNotificationUseCase,
)
from notifyhub.modules.notification.domain.enums import NotificationChannel
from notifyhub.modules.notification.domain.services import (
    DeliveryStrategyResolver,
    DirectDeliveryStrategy,
    SlidingWindowRateLimiter,
    ThrottledChunkedDeliveryStrategy,
)
from notifyhub.modules.notification.infrastructure.adapters import (
    InAppInboxAdapter,
    MailtrapEmailAdapter,
    WahaWhatsAppAdapter,
)
from notifyhub.modules.notification.infrastructure.repositories import (
    InMemoryNotificationBatchRepository,
    InMemoryNotificationHistoryRepository,
    InMemoryNotificationRepository,
    InMemoryNotificationStatsRepository,
)

logger = get_logger(__name__)


@dataclass
class NotificationModule:
    """Everything a caller needs to send notifications."""

    use_case: SendNotificationUseCase
    history: GetNotificationHistoryUseCase
    event_bus: InMemoryEventBus
    rate_limiter: SlidingWindowRateLimiter
    resolver: DeliveryStrategyResolver
    notification_repository: InMemoryNotificationRepository
    batch_repository: InMemoryNotificationBatchRepository
    history_repository: InMemoryNotificationHistoryRepository
    stats_repository: InMemoryNotificationStatsRepository
    whatsapp_adapter: WahaWhatsAppAdapter
    in_app_adapter: InAppInboxAdapter
    email_adapter: MailtrapEmailAdapter | None = None

    async def shutdown(self) -> None:
        """Finish accepted batches, then release HTTP clients and the bus."""
        await self.use_case.wait_for_background_tasks()
        await self.whatsapp_adapter.close()
        if self.email_adapter:
            await self.email_adapter.close()
        await self.event_bus.stop()


async def build_notification_module(
    settings: Settings | None = None,
    waha_transport: httpx.AsyncBaseTransport | None = None,
    mailtrap_transport: httpx.AsyncBaseTransport | None = None,
) -> NotificationModule:
    """Wire the notification module and start its event bus.

    Email is only available when a Mailtrap token is configured; without
    one, email sends fail with ``ChannelNotConfiguredError``.
    """
    settings = settings or get_settings()

    rate_limiter = SlidingWindowRateLimiter(
        max_requests=settings.rate_limiter.max_requests,
        window_ms=settings.rate_limiter.window_ms,
    )

    whatsapp_adapter = WahaWhatsAppAdapter(settings.waha, transport=waha_transport)
    in_app_adapter = InAppInboxAdapter()

    email_adapter = None
    email_strategy = None
    if settings.mailtrap.is_configured:
        email_adapter = MailtrapEmailAdapter(
            settings.mailtrap, transport=mailtrap_transport
        )
        email_strategy = DirectDeliveryStrategy(email_adapter)
    else:
        logger.warning("Mailtrap is not configured, email channel disabled")

    resolver = DeliveryStrategyResolver(
        email=email_strategy,
        whatsapp=ThrottledChunkedDeliveryStrategy(
            whatsapp_adapter,
            rate_limiter,
            chunk_size=settings.delivery.chunk_size,
            chunk_delay_seconds=settings.delivery.chunk_delay_seconds,
            rate_limit_key=NotificationChannel.WHATSAPP.rate_limit_key,
        ),
        system=DirectDeliveryStrategy(in_app_adapter),
    )

    notification_repository = InMemoryNotificationRepository()
    batch_repository = InMemoryNotificationBatchRepository()
    history_repository = InMemoryNotificationHistoryRepository()
    stats_repository = InMemoryNotificationStatsRepository()

    event_bus = InMemoryEventBus()
    register_notification_event_handlers(
        event_bus, NotificationReadModelHandlers(history_repository, stats_repository)
    )
    await event_bus.start()

    use_case = SendNotificationUseCase(
        notification_repository=notification_repository,
        batch_repository=batch_repository,
        strategy_resolver=resolver,
        event_bus=event_bus,
    )

    logger.info(
        "Notification module ready",
        channels=[c.value for c in resolver.configured_channels()],
        rate_limit_max_requests=rate_limiter.max_requests,
        rate_limit_window_ms=rate_limiter.window_ms,
    )

    return NotificationModule(
        use_case=use_case,
        history=GetNotificationHistoryUseCase(history_repository, stats_repository),
        event_bus=event_bus,
        rate_limiter=rate_limiter,
        resolver=resolver,
        notification_repository=notification_repository,
        batch_repository=batch_repository,
        history_repository=history_repository,
        stats_repository=stats_repository,
        whatsapp_adapter=whatsapp_adapter,
        in_app_adapter=in_app_adapter,
        email_adapter=email_adapter,
    )
