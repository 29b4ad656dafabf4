"""Channel vendor adapters."""

from notifyhub.modules.notification.infrastructure.adapters.base import (
    ChannelAdapterError,
)
from notifyhub.modules.notification.infrastructure.adapters.email import (
    MailtrapEmailAdapter,
)
from notifyhub.modules.notification.infrastructure.adapters.in_app_adapter import (
    InAppInboxAdapter,
    InboxMessage,
)
from notifyhub.modules.notification.infrastructure.adapters.whatsapp import (
    WahaWhatsAppAdapter,
)

__all__ = [
    "ChannelAdapterError",
    "InAppInboxAdapter",
    "InboxMessage",
    "MailtrapEmailAdapter",
    "WahaWhatsAppAdapter",
]
