"""Email channel adapters."""

from notifyhub.modules.notification.infrastructure.adapters.email.mailtrap_adapter import (
    MailtrapEmailAdapter,
)

__all__ = ["MailtrapEmailAdapter"]
