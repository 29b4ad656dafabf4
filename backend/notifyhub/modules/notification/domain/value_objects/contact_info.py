"""Channel-specific recipient contact information.

Each variant belongs to exactly one channel. Instances hold the raw value as
given; ``validate()`` checks it against the channel's rules and ``format()``
returns the canonical form used for delivery and comparison.
"""

import re
from abc import abstractmethod
from typing import Any, ClassVar

from notifyhub.core.domain.base import ValueObject
from notifyhub.modules.notification.domain.enums import NotificationChannel
from notifyhub.modules.notification.domain.errors import InvalidContactInfoError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CHAT_ID_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?\d{8,15}$")
PHONE_SEPARATORS = re.compile(r"[\s\-().]")


class ContactInfo(ValueObject):
    """Base class for contact info variants."""

    channel: ClassVar[NotificationChannel]

    def __init__(self, value: str):
        super().__init__()
        self.value = value if isinstance(value, str) else ""
        self._freeze()

    @abstractmethod
    def validate(self) -> None:
        """Raise InvalidContactInfoError if the value is malformed."""

    @abstractmethod
    def format(self) -> str:
        """Canonical representation of the value."""

    def equals(self, other: Any) -> bool:
        if not isinstance(other, ContactInfo) or other.channel != self.channel:
            return False
        return self.format() == other.format()

    def is_valid(self) -> bool:
        try:
            self.validate()
        except InvalidContactInfoError:
            return False
        return True

    def _invalid(self, reason: str) -> InvalidContactInfoError:
        return InvalidContactInfoError(self.channel.value, self.value, reason)

    def __str__(self) -> str:
        return self.format()


class EmailContactInfo(ContactInfo):
    channel = NotificationChannel.EMAIL

    def validate(self) -> None:
        if not self.value.strip():
            raise self._invalid("email address cannot be empty")
        if not EMAIL_PATTERN.match(self.value.strip()):
            raise self._invalid("not a valid email address")

    def format(self) -> str:
        return self.value.strip().lower()


class WhatsAppContactInfo(ContactInfo):
    """WhatsApp recipient: a phone number or a WhatsApp chat id.

    Chat ids look like ``5511999999999@c.us``; phone numbers may carry a
    leading ``+`` and the usual separators.
    """

    channel = NotificationChannel.WHATSAPP

    def is_chat_id(self) -> bool:
        return "@" in self.value

    def validate(self) -> None:
        value = self.value.strip()
        if not value:
            raise self._invalid("WhatsApp contact cannot be empty")

        if self.is_chat_id():
            if not CHAT_ID_PATTERN.match(value):
                raise self._invalid("not a valid WhatsApp chat id")
            return

        if not PHONE_PATTERN.match(PHONE_SEPARATORS.sub("", value)):
            raise self._invalid("phone number must have 8 to 15 digits")

    def format(self) -> str:
        value = self.value.strip()
        if self.is_chat_id():
            return value
        return PHONE_SEPARATORS.sub("", value)

    @property
    def digits(self) -> str:
        """Phone number digits only, as expected by the messaging gateway."""
        return re.sub(r"\D", "", self.format()) if not self.is_chat_id() else ""


class SystemContactInfo(ContactInfo):
    """In-app inbox key, usually the recipient's user id."""

    channel = NotificationChannel.SYSTEM

    def validate(self) -> None:
        if not self.value.strip():
            raise self._invalid("inbox key cannot be empty")

    def format(self) -> str:
        return self.value.strip()


CONTACT_INFO_TYPES: dict[NotificationChannel, type[ContactInfo]] = {
    NotificationChannel.EMAIL: EmailContactInfo,
    NotificationChannel.WHATSAPP: WhatsAppContactInfo,
    NotificationChannel.SYSTEM: SystemContactInfo,
}
