"""WhatsApp delivery through a WAHA (WhatsApp HTTP API) gateway."""

from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from notifyhub.core.config import WahaConfig
from notifyhub.core.logging import get_logger
from notifyhub.modules.notification.domain.aggregates import Notification
from notifyhub.modules.notification.domain.enums import NotificationChannel
from notifyhub.modules.notification.domain.interfaces import INotificationVendor
from notifyhub.modules.notification.domain.value_objects import (
    NotificationContent,
    WhatsAppContactInfo,
)
from notifyhub.modules.notification.infrastructure.adapters.base import (
    ChannelAdapterError,
    require_channel,
)

logger = get_logger(__name__)

PROVIDER = "waha"


def format_message_text(content: NotificationContent) -> str:
    """Render content as WhatsApp text: a bold title line, then the body."""
    if content.has_title:
        return f"*{content.title}*\n\n{content.body}"
    return content.body


class WahaWhatsAppAdapter(INotificationVendor):
    """WAHA gateway client.

    Phone numbers are resolved to chat ids through WAHA before sending; a
    value that already is a chat id is sent as-is. Lookups are retried on
    transport errors, message posts are attempted once.
    """

    def __init__(
        self,
        config: WahaConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize WAHA adapter.

        Args:
            config: Gateway connection settings
            transport: Optional httpx transport, used by tests
        """
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self.config.api_key:
                headers["X-Api-Key"] = self.config.api_key

            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.config.timeout_seconds),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def send(self, notification: Notification) -> None:
        contact_info = require_channel(
            PROVIDER, notification, NotificationChannel.WHATSAPP, WhatsAppContactInfo
        )

        if contact_info.is_chat_id():
            chat_id = contact_info.format()
        else:
            lookup = await self.check_number_exists(contact_info.format())
            if not lookup["numberExists"]:
                raise ChannelAdapterError(
                    PROVIDER,
                    f"Phone number {contact_info.format()} does not exist",
                    error_code="number_not_found",
                    is_retryable=False,
                )
            chat_id = lookup["chatId"]

        logger.info(
            "Sending WhatsApp message",
            notification_id=str(notification.id),
            chat_id=chat_id,
        )

        response = await self._post(
            "/api/sendText",
            {
                "chatId": chat_id,
                "text": format_message_text(notification.content),
                "session": self.config.default_session,
            },
        )

        logger.info(
            "WhatsApp message sent",
            notification_id=str(notification.id),
            message_id=response.get("id"),
        )

    async def check_number_exists(
        self, phone_number: str, session: str | None = None
    ) -> dict[str, Any]:
        """Ask WAHA whether a phone number has a WhatsApp account.

        Returns:
            ``{"numberExists": bool, "chatId": str}``; ``chatId`` is empty
            when the number does not exist
        """
        digits = "".join(ch for ch in phone_number if ch.isdigit())
        data = await self._get(
            "/api/contacts/check-exists",
            params={"phone": digits, "session": session or self.config.default_session},
        )

        if not data.get("numberExists"):
            return {"numberExists": False, "chatId": ""}
        return {"numberExists": True, "chatId": data["chatId"]}

    async def get_session_status(self, session: str | None = None) -> dict[str, Any]:
        """Return the WAHA session document, e.g. ``{"name": ..., "status": "WORKING"}``."""
        return await self._get(f"/api/sessions/{session or self.config.default_session}")

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            response = await self._get_with_retry(path, params)
        except httpx.TransportError as exc:
            raise ChannelAdapterError(
                PROVIDER, f"WAHA request to {path} failed: {exc!s}", error_code="transport"
            ) from exc
        return self._parse(response, path)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, max=4),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _get_with_retry(
        self, path: str, params: dict[str, Any] | None
    ) -> httpx.Response:
        return await self._get_client().get(path, params=params)

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._get_client().post(path, json=payload)
        except httpx.TransportError as exc:
            raise ChannelAdapterError(
                PROVIDER, f"WAHA request to {path} failed: {exc!s}", error_code="transport"
            ) from exc
        return self._parse(response, path)

    def _parse(self, response: httpx.Response, path: str) -> dict[str, Any]:
        if response.is_error:
            logger.error(
                "WAHA request failed",
                path=path,
                status_code=response.status_code,
            )
            raise ChannelAdapterError(
                PROVIDER,
                f"WAHA API error! status: {response.status_code}, body: {response.text}",
                error_code=f"http_{response.status_code}",
                is_retryable=response.status_code >= 500 or response.status_code == 429,
                provider_status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ChannelAdapterError(
                PROVIDER, f"WAHA returned invalid JSON from {path}", error_code="bad_response"
            ) from exc
