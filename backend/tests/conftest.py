"""Shared fixtures for notifyhub tests."""

from unittest.mock import AsyncMock

import pytest

from notifyhub.modules.notification.domain.enums import NotificationChannel
from notifyhub.modules.notification.domain.interfaces import INotificationVendor
from notifyhub.modules.notification.domain.value_objects import NotificationContent
from tests.factories import FakeClock, make_notification


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def content():
    return NotificationContent("Lembrete", "Sua aula começa em 10 minutos")


@pytest.fixture
def email_notification():
    return make_notification(NotificationChannel.EMAIL)


@pytest.fixture
def whatsapp_notification():
    return make_notification(NotificationChannel.WHATSAPP)


@pytest.fixture
def system_notification():
    return make_notification(NotificationChannel.SYSTEM)


@pytest.fixture
def mock_vendor():
    vendor = AsyncMock(spec=INotificationVendor)
    vendor.send = AsyncMock(return_value=None)
    return vendor
