"""WhatsApp channel adapters."""

from notifyhub.modules.notification.infrastructure.adapters.whatsapp.waha_adapter import (
    WahaWhatsAppAdapter,
    format_message_text,
)

__all__ = ["WahaWhatsAppAdapter", "format_message_text"]
