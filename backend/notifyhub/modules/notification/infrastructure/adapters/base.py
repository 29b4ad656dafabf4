"""Shared pieces of the channel adapters."""

from typing import Any

from notifyhub.core.errors import ExternalServiceError
from notifyhub.modules.notification.domain.aggregates import Notification
from notifyhub.modules.notification.domain.enums import NotificationChannel
from notifyhub.modules.notification.domain.value_objects import ContactInfo

SENSITIVE_FIELDS = (
    "api_key",
    "secret",
    "token",
    "password",
    "authorization",
    "x-api-key",
    "bearer",
)


class ChannelAdapterError(ExternalServiceError):
    """Raised when a provider call fails."""

    default_code = "CHANNEL_ADAPTER_ERROR"

    def __init__(
        self,
        provider: str,
        message: str,
        error_code: str | None = None,
        is_retryable: bool = True,
        provider_status_code: int | None = None,
        provider_response: dict[str, Any] | None = None,
        **kwargs: Any,
    ):
        """Initialize adapter error.

        Args:
            provider: Provider name, e.g. ``waha``
            message: Error message
            error_code: Provider specific error code
            is_retryable: Whether a later attempt may succeed
            provider_status_code: HTTP status returned by the provider
            provider_response: Sanitized provider response body
        """
        super().__init__(
            provider, message, service_status_code=provider_status_code, **kwargs
        )
        # Failure reasons recorded on notifications carry the bare message
        self.message = message
        self.provider = provider
        self.error_code = error_code
        self.provider_status_code = provider_status_code
        self.retryable = is_retryable
        self.provider_response = sanitize_provider_response(provider_response or {})
        self.code = self.default_code


def sanitize_provider_response(response: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of a provider response with credentials redacted."""
    sanitized = {}
    for key, value in response.items():
        if key.lower() in SENSITIVE_FIELDS:
            sanitized[key] = "[REDACTED]"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_provider_response(value)
        else:
            sanitized[key] = value
    return sanitized


def require_channel(
    provider: str,
    notification: Notification,
    channel: NotificationChannel,
    contact_type: type[ContactInfo],
) -> ContactInfo:
    """Check that a notification belongs to the adapter's channel.

    Returns:
        The notification's contact info

    Raises:
        ChannelAdapterError: On a channel or contact info mismatch
    """
    if notification.channel != channel:
        raise ChannelAdapterError(
            provider,
            f"Notification is not a {channel.value} notification",
            error_code="wrong_channel",
            is_retryable=False,
        )
    if not isinstance(notification.contact_info, contact_type):
        raise ChannelAdapterError(
            provider,
            f"Contact info is not {channel.value} contact info",
            error_code="wrong_contact_info",
            is_retryable=False,
        )
    return notification.contact_info
