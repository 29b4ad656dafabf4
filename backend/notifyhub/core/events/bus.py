"""
Event bus for notifyhub domain events.

Usage Examples:
    bus = InMemoryEventBus()
    await bus.start()

    async def handle_sent(event):
        print(f"Notification {event.notification_id} sent")

    bus.subscribe(NotificationSent, handle_sent)
    await bus.publish(NotificationSent.from_notification(notification))

Error Handling:
    - ValidationError: Invalid subscription
    - EventBusError: Publishing on a bus that is not running
    Handler failures are logged and never propagate to the publisher.
"""

import asyncio
import inspect
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from notifyhub.core.domain.base import DomainEvent
from notifyhub.core.errors import InfrastructureError, ValidationError
from notifyhub.core.logging import get_logger

logger = get_logger(__name__)

EventHandlerType = Callable[[DomainEvent], Any] | Callable[[DomainEvent], Awaitable[Any]]


class EventBusError(InfrastructureError):
    """Base exception for event bus operations."""

    default_code = "EVENT_BUS_ERROR"
    status_code = 500
    retryable = False


class EventBus(ABC):
    """Contract for publishing and subscribing to domain events."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event to every subscribed handler.

        Raises:
            EventBusError: If bus is not started
        """

    @abstractmethod
    def subscribe(self, event_type: type[DomainEvent], handler: EventHandlerType) -> None:
        """
        Subscribe a handler to an event type.

        Raises:
            ValidationError: If handler signature is invalid
        """

    @abstractmethod
    def unsubscribe(
        self, event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        """Remove a handler subscription for an event type."""

    @abstractmethod
    async def start(self) -> None:
        """Prepare the bus for event processing."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop accepting events. Must not raise."""


class InMemoryEventBus(EventBus):
    """
    In-process event bus.

    Sync handlers run sequentially in subscription order; async handlers run
    concurrently. Handlers registered for a base event class also receive
    its subclasses.
    """

    def __init__(self):
        self._handlers: dict[str, list[EventHandlerType]] = defaultdict(list)
        self._async_handlers: dict[str, list[EventHandlerType]] = defaultdict(list)
        self._running = False
        self._start_time: datetime | None = None
        self._event_count = 0
        self._handler_error_count = 0

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._start_time = datetime.now(UTC)
        logger.info("In-memory event bus started")

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        logger.info(
            "In-memory event bus stopped",
            events_processed=self._event_count,
            handler_errors=self._handler_error_count,
        )

    @property
    def is_running(self) -> bool:
        return self._running

    async def publish(self, event: DomainEvent) -> None:
        if not self._running:
            raise EventBusError(
                "Event bus is not running",
                details={"event_type": event.__class__.__name__},
            )
        if not isinstance(event, DomainEvent):
            raise ValidationError(f"Event must be a DomainEvent, got {type(event)}")

        self._event_count += 1
        handlers = self._get_handlers_for_event(event)

        if not handlers:
            logger.debug(
                "No handlers registered for event",
                event_type=event.event_type,
                event_id=str(event.event_id),
            )
            return

        logger.debug(
            "Publishing event",
            event_type=event.event_type,
            event_id=str(event.event_id),
            handler_count=len(handlers),
        )

        sync_handlers = [h for h in handlers if not inspect.iscoroutinefunction(h)]
        async_handlers = [h for h in handlers if inspect.iscoroutinefunction(h)]

        for handler in sync_handlers:
            self._execute_sync_handler(handler, event)

        if async_handlers:
            results = await asyncio.gather(
                *(handler(event) for handler in async_handlers),
                return_exceptions=True,
            )
            for handler, result in zip(async_handlers, results, strict=True):
                if isinstance(result, Exception):
                    self._handler_error_count += 1
                    logger.error(
                        "Async event handler failed",
                        event_type=event.event_type,
                        handler=getattr(handler, "__name__", repr(handler)),
                        error=str(result),
                    )

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandlerType) -> None:
        self._validate_subscription(event_type, handler)

        event_name = event_type.__name__
        if inspect.iscoroutinefunction(handler):
            self._async_handlers[event_name].append(handler)
        else:
            self._handlers[event_name].append(handler)

        logger.debug(
            "Handler subscribed",
            event_type=event_name,
            handler=getattr(handler, "__name__", repr(handler)),
            is_async=inspect.iscoroutinefunction(handler),
        )

    def _validate_subscription(
        self, event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        if not isinstance(event_type, type) or not issubclass(event_type, DomainEvent):
            raise ValidationError(
                f"event_type must be DomainEvent subclass, got {event_type}"
            )

        if not callable(handler):
            raise ValidationError(f"Handler must be callable, got {type(handler)}")

        try:
            sig = inspect.signature(handler)
        except (ValueError, TypeError) as e:
            raise ValidationError(f"Invalid handler signature: {e}") from e

        if len(sig.parameters) != 1:
            raise ValidationError(
                f"Handler must accept exactly one parameter (event), "
                f"got {len(sig.parameters)} parameters"
            )

    def unsubscribe(
        self, event_type: type[DomainEvent], handler: EventHandlerType
    ) -> None:
        """No-op if handler was not previously subscribed."""
        event_name = event_type.__name__
        registry = (
            self._async_handlers
            if inspect.iscoroutinefunction(handler)
            else self._handlers
        )
        if handler in registry[event_name]:
            registry[event_name].remove(handler)
            logger.debug(
                "Handler unsubscribed",
                event_type=event_name,
                handler=getattr(handler, "__name__", repr(handler)),
            )

    def _get_handlers_for_event(self, event: DomainEvent) -> list[EventHandlerType]:
        handlers: list[EventHandlerType] = []
        for event_class in event.__class__.__mro__:
            if event_class is DomainEvent:
                break
            handlers.extend(self._handlers.get(event_class.__name__, []))
            handlers.extend(self._async_handlers.get(event_class.__name__, []))
        return handlers

    def _execute_sync_handler(self, handler: EventHandlerType, event: DomainEvent) -> None:
        try:
            handler(event)
        except Exception as e:
            self._handler_error_count += 1
            logger.exception(
                "Sync event handler failed",
                handler=getattr(handler, "__name__", repr(handler)),
                event_type=event.event_type,
                error=str(e),
            )

    def get_statistics(self) -> dict[str, Any]:
        return {
            "running": self._running,
            "started_at": self._start_time.isoformat() if self._start_time else None,
            "events_processed": self._event_count,
            "handler_errors": self._handler_error_count,
            "subscriptions": sum(len(h) for h in self._handlers.values())
            + sum(len(h) for h in self._async_handlers.values()),
        }


__all__ = ["EventBus", "EventBusError", "EventHandlerType", "InMemoryEventBus"]
