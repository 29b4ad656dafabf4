"""Email delivery through the Mailtrap sending API."""

from typing import Any

import httpx

from notifyhub.core.config import MailtrapConfig
from notifyhub.core.errors import ConfigurationError
from notifyhub.core.logging import get_logger
from notifyhub.modules.notification.domain.aggregates import (
    Notification,
    NotificationBatch,
)
from notifyhub.modules.notification.domain.enums import NotificationChannel
from notifyhub.modules.notification.domain.interfaces import (
    BatchSendResult,
    IBatchNotificationVendor,
)
from notifyhub.modules.notification.domain.value_objects import EmailContactInfo
from notifyhub.modules.notification.infrastructure.adapters.base import (
    ChannelAdapterError,
    require_channel,
)
from notifyhub.modules.notification.infrastructure.templates import (
    EmailTemplateRenderer,
)

logger = get_logger(__name__)

PROVIDER = "mailtrap"
DEFAULT_SUBJECT = "Notificação"


class MailtrapEmailAdapter(IBatchNotificationVendor):
    """Mailtrap client for single and batch email sends.

    A batch is one ``/api/batch`` call; Mailtrap answers with one result per
    request, in request order.
    """

    def __init__(
        self,
        config: MailtrapConfig,
        renderer: EmailTemplateRenderer | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize Mailtrap adapter.

        Args:
            config: API token and sender identity
            renderer: HTML renderer for the message body
            transport: Optional httpx transport, used by tests

        Raises:
            ConfigurationError: If no API token is configured
        """
        if not config.is_configured:
            raise ConfigurationError(
                "MAILTRAP_API_TOKEN is required for email notifications",
                config_key="MAILTRAP_API_TOKEN",
            )
        self.config = config
        self.renderer = renderer or EmailTemplateRenderer()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers={
                    "Authorization": f"Bearer {self.config.api_token}",
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                timeout=httpx.Timeout(self.config.timeout_seconds),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def sender(self) -> dict[str, str]:
        return {"email": self.config.sender_email, "name": self.config.sender_name}

    def build_message(self, notification: Notification) -> dict[str, Any]:
        """Build the Mailtrap request body for one notification."""
        contact_info = require_channel(
            PROVIDER, notification, NotificationChannel.EMAIL, EmailContactInfo
        )
        return {
            "from": self.sender,
            "to": [{"email": contact_info.format()}],
            "subject": notification.content.title or DEFAULT_SUBJECT,
            "html": self.renderer.render(notification),
            "category": self.config.category,
        }

    async def send(self, notification: Notification) -> None:
        message = self.build_message(notification)
        logger.info(
            "Sending email",
            notification_id=str(notification.id),
            to=message["to"][0]["email"],
        )

        data = await self._post("/api/send", message)

        logger.info(
            "Email sent",
            notification_id=str(notification.id),
            message_ids=data.get("message_ids", []),
        )

    async def send_batch(self, batch: NotificationBatch) -> BatchSendResult:
        notifications = list(batch.notifications)
        requests = []
        for notification in notifications:
            message = self.build_message(notification)
            del message["from"]
            requests.append(message)

        logger.info("Sending email batch", batch_id=str(batch.id), size=len(requests))

        data = await self._post(
            "/api/batch", {"base": {"from": self.sender}, "requests": requests}
        )

        responses = data.get("responses", [])
        result = BatchSendResult()
        errors: list[str] = []
        for index, notification in enumerate(notifications):
            outcome = responses[index] if index < len(responses) else None
            if outcome is None:
                # Left unreported; the strategy decides what that means
                continue
            if outcome.get("success"):
                result.succeeded.append(notification)
            else:
                result.failed.append(notification)
                errors.extend(str(e) for e in outcome.get("errors", []))

        if result.failed:
            result.error = "; ".join(dict.fromkeys(errors)) or "Mailtrap rejected the email"

        logger.info(
            "Email batch sent",
            batch_id=str(batch.id),
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        return result

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._get_client().post(path, json=payload)
        except httpx.TransportError as exc:
            raise ChannelAdapterError(
                PROVIDER,
                f"Mailtrap request to {path} failed: {exc!s}",
                error_code="transport",
            ) from exc

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {"raw": response.text}
            errors = body.get("errors") if isinstance(body, dict) else None
            detail = "; ".join(str(e) for e in errors) if errors else response.text
            logger.error(
                "Mailtrap request failed", path=path, status_code=response.status_code
            )
            raise ChannelAdapterError(
                PROVIDER,
                f"Mailtrap API error! status: {response.status_code}, {detail}",
                error_code=f"http_{response.status_code}",
                is_retryable=response.status_code >= 500 or response.status_code == 429,
                provider_status_code=response.status_code,
                provider_response=body if isinstance(body, dict) else None,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ChannelAdapterError(
                PROVIDER,
                f"Mailtrap returned invalid JSON from {path}",
                error_code="bad_response",
            ) from exc
