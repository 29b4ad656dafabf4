"""Channel to delivery strategy dispatch."""

from notifyhub.modules.notification.domain.enums import NotificationChannel
from notifyhub.modules.notification.domain.errors import ChannelNotConfiguredError
from notifyhub.modules.notification.domain.services.delivery_strategy import (
    NotificationDeliveryStrategy,
)


class DeliveryStrategyResolver:
    """Maps every NotificationChannel to the strategy that serves it."""

    def __init__(
        self,
        email: NotificationDeliveryStrategy | None = None,
        whatsapp: NotificationDeliveryStrategy | None = None,
        system: NotificationDeliveryStrategy | None = None,
    ):
        self._email = email
        self._whatsapp = whatsapp
        self._system = system

    def resolve(self, channel: NotificationChannel) -> NotificationDeliveryStrategy:
        """
        Return the strategy for ``channel``.

        Raises:
            ChannelNotConfiguredError: If no strategy serves the channel
        """
        if channel == NotificationChannel.EMAIL:
            strategy = self._email
        elif channel == NotificationChannel.WHATSAPP:
            strategy = self._whatsapp
        elif channel == NotificationChannel.SYSTEM:
            strategy = self._system
        else:
            raise ChannelNotConfiguredError(str(channel))

        if strategy is None:
            raise ChannelNotConfiguredError(channel.value)
        return strategy

    def configured_channels(self) -> list[NotificationChannel]:
        return [
            channel
            for channel, strategy in (
                (NotificationChannel.EMAIL, self._email),
                (NotificationChannel.WHATSAPP, self._whatsapp),
                (NotificationChannel.SYSTEM, self._system),
            )
            if strategy is not None
        ]
