"""Domain event publishing."""

from notifyhub.core.events.bus import EventBus, EventBusError, InMemoryEventBus

__all__ = ["EventBus", "EventBusError", "InMemoryEventBus"]
