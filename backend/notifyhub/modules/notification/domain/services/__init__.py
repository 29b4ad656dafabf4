"""Notification domain services."""

from notifyhub.modules.notification.domain.services.delivery_strategy import (
    NotificationDeliveryStrategy,
)
from notifyhub.modules.notification.domain.services.direct_delivery_strategy import (
    DirectDeliveryStrategy,
)
from notifyhub.modules.notification.domain.services.rate_limiter import (
    SlidingWindowRateLimiter,
)
from notifyhub.modules.notification.domain.services.strategy_resolver import (
    DeliveryStrategyResolver,
)
from notifyhub.modules.notification.domain.services.throttled_delivery_strategy import (
    ThrottledChunkedDeliveryStrategy,
)

__all__ = [
    "DeliveryStrategyResolver",
    "DirectDeliveryStrategy",
    "NotificationDeliveryStrategy",
    "SlidingWindowRateLimiter",
    "ThrottledChunkedDeliveryStrategy",
]
