"""Tests for the Mailtrap email adapter and the email renderer."""

import json
from datetime import UTC, datetime

import httpx
import pytest

from notifyhub.core.config import MailtrapConfig
from notifyhub.core.errors import ConfigurationError
from notifyhub.modules.notification.domain.enums import NotificationChannel
from notifyhub.modules.notification.domain.errors import PartialBatchFailureError
from notifyhub.modules.notification.domain.services import DirectDeliveryStrategy
from notifyhub.modules.notification.infrastructure.adapters import (
    ChannelAdapterError,
    MailtrapEmailAdapter,
)
from notifyhub.modules.notification.infrastructure.adapters.base import (
    sanitize_provider_response,
)
from notifyhub.modules.notification.infrastructure.templates import (
    EmailTemplateRenderer,
)
from tests.factories import make_batch, make_notification


def make_adapter(handler, **config):
    return MailtrapEmailAdapter(
        MailtrapConfig(api_token="mt-token", **config),
        transport=httpx.MockTransport(handler),
    )


def recording(status=200, body=None):
    requests: list[httpx.Request] = []

    def handler(request):
        requests.append(request)
        return httpx.Response(status, json=body if body is not None else {"success": True})

    return handler, requests


class TestRenderer:
    def test_renders_title_body_and_date(self):
        notification = make_notification(
            NotificationChannel.EMAIL, title="Reunião", body="Hoje às 19h"
        )
        notification.created_at = datetime(2024, 3, 5, 12, 0, tzinfo=UTC)

        html = EmailTemplateRenderer().render(notification)

        assert "Reunião" in html
        assert "Hoje às 19h" in html
        assert "05/03/2024" in html
        assert "Por favor, não responda a este email" in html

    def test_escapes_user_text(self):
        notification = make_notification(
            NotificationChannel.EMAIL, title="<b>x</b>", body="<script>alert(1)</script>"
        )

        html = EmailTemplateRenderer(footer="rodapé").render(notification)

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "rodapé" in html

    def test_title_block_is_optional(self):
        notification = make_notification(NotificationChannel.EMAIL, title="")

        assert 'class="notification-title"' not in EmailTemplateRenderer().render(notification)


class TestConfiguration:
    def test_token_is_required(self):
        with pytest.raises(ConfigurationError):
            MailtrapEmailAdapter(MailtrapConfig(api_token=None))

    def test_build_message(self):
        adapter = MailtrapEmailAdapter(
            MailtrapConfig(api_token="mt-token", sender_email="no-reply@incluir.org")
        )
        notification = make_notification(
            NotificationChannel.EMAIL, contact="Aluno@Example.com", title=""
        )

        message = adapter.build_message(notification)

        assert message["from"] == {"email": "no-reply@incluir.org", "name": "Programa Incluir"}
        assert message["to"] == [{"email": "aluno@example.com"}]
        assert message["subject"] == "Notificação"
        assert message["category"] == "Notification"
        assert "<html>" in message["html"]

    def test_build_message_rejects_other_channels(self):
        adapter = MailtrapEmailAdapter(MailtrapConfig(api_token="mt-token"))

        with pytest.raises(ChannelAdapterError) as exc_info:
            adapter.build_message(make_notification(NotificationChannel.SYSTEM))

        assert exc_info.value.error_code == "wrong_channel"


class TestSend:
    @pytest.mark.asyncio
    async def test_posts_to_send_endpoint(self):
        handler, requests = recording(body={"success": True, "message_ids": ["m-1"]})
        adapter = make_adapter(handler)

        await adapter.send(make_notification(NotificationChannel.EMAIL, title="Aviso"))

        [request] = requests
        assert request.method == "POST"
        assert request.url.path == "/api/send"
        assert request.headers["Authorization"] == "Bearer mt-token"
        assert json.loads(request.content)["subject"] == "Aviso"
        await adapter.close()

    @pytest.mark.asyncio
    async def test_error_response(self):
        handler, _ = recording(
            status=401, body={"success": False, "errors": ["Unauthorized"], "token": "abc"}
        )
        adapter = make_adapter(handler)

        with pytest.raises(ChannelAdapterError) as exc_info:
            await adapter.send(make_notification(NotificationChannel.EMAIL))

        error = exc_info.value
        assert error.message == "Mailtrap API error! status: 401, Unauthorized"
        assert error.error_code == "http_401"
        assert not error.retryable
        assert error.provider_response["token"] == "[REDACTED]"

    @pytest.mark.asyncio
    async def test_rate_limited_is_retryable(self):
        handler, _ = recording(status=429, body={"errors": ["Too many requests"]})

        with pytest.raises(ChannelAdapterError) as exc_info:
            await make_adapter(handler).send(make_notification(NotificationChannel.EMAIL))

        assert exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(ChannelAdapterError) as exc_info:
            await make_adapter(handler).send(make_notification(NotificationChannel.EMAIL))

        assert exc_info.value.error_code == "transport"


class TestSendBatch:
    @pytest.mark.asyncio
    async def test_single_batch_call_with_shared_sender(self):
        handler, requests = recording(
            body={"success": True, "responses": [{"success": True}, {"success": True}]}
        )
        adapter = make_adapter(handler)
        batch = make_batch(2, NotificationChannel.EMAIL)

        result = await adapter.send_batch(batch)

        [request] = requests
        assert request.url.path == "/api/batch"
        payload = json.loads(request.content)
        assert payload["base"]["from"]["email"] == "coordenacao@programaincluir.org"
        assert [r["to"][0]["email"] for r in payload["requests"]] == [
            "aluno0@example.com",
            "aluno1@example.com",
        ]
        assert all("from" not in r for r in payload["requests"])
        assert result.succeeded == list(batch.notifications)
        assert result.failed == []
        assert result.error is None

    @pytest.mark.asyncio
    async def test_per_request_failures(self):
        handler, _ = recording(
            body={
                "success": True,
                "responses": [
                    {"success": True, "message_ids": ["m-1"]},
                    {"success": False, "errors": ["Invalid recipient"]},
                    {"success": False, "errors": ["Invalid recipient"]},
                ],
            }
        )
        batch = make_batch(3, NotificationChannel.EMAIL)

        result = await make_adapter(handler).send_batch(batch)

        first, second, third = batch.notifications
        assert result.succeeded == [first]
        assert result.failed == [second, third]
        assert result.error == "Invalid recipient"

    @pytest.mark.asyncio
    async def test_missing_responses_are_left_unreported(self):
        handler, _ = recording(body={"responses": [{"success": True}]})
        batch = make_batch(2, NotificationChannel.EMAIL)

        result = await make_adapter(handler).send_batch(batch)

        assert result.succeeded == [batch.notifications[0]]
        assert result.failed == []

    @pytest.mark.asyncio
    async def test_through_direct_strategy(self):
        handler, _ = recording(
            body={"responses": [{"success": True}, {"success": False}]}
        )
        batch = make_batch(2, NotificationChannel.EMAIL)
        strategy = DirectDeliveryStrategy(make_adapter(handler))

        with pytest.raises(PartialBatchFailureError):
            await strategy.deliver_batch(batch)

        assert batch.notifications[0].status.is_sent()
        assert batch.notifications[1].failure_reason == "Mailtrap rejected the email"

    @pytest.mark.asyncio
    async def test_whole_call_failure_fails_batch(self):
        handler, _ = recording(status=503, body={"errors": ["Service unavailable"]})
        batch = make_batch(2, NotificationChannel.EMAIL)
        strategy = DirectDeliveryStrategy(make_adapter(handler))

        with pytest.raises(ChannelAdapterError):
            await strategy.deliver_batch(batch)

        assert batch.status.is_failed()
        assert all(n.status.is_failed() for n in batch.notifications)


def test_sanitize_provider_response_is_recursive():
    response = {"data": {"Authorization": "Bearer x", "id": 1}, "api_key": "k"}

    assert sanitize_provider_response(response) == {
        "data": {"Authorization": "[REDACTED]", "id": 1},
        "api_key": "[REDACTED]",
    }
