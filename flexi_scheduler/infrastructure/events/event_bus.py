"""
Event bus for scheduling notifications.

Routes the notifications emitted by the scheduler and the integrity monitor
to the rendering layer's handlers. A failing handler is logged and does not
stop delivery to the others.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from flexi_scheduler.domain.scheduling.events import DomainEvent

logger = logging.getLogger(__name__)


class EventBusInterface(ABC):
    """
    Abstract interface for event bus implementations.

    Defines the contract for publishing events and subscribing to event types.
    """

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event to all registered synchronous handlers.

        Args:
            event: Domain event to publish
        """
        pass

    @abstractmethod
    async def publish_async(self, event: DomainEvent) -> None:
        """
        Publish a domain event to all registered handlers, awaiting async ones.

        Args:
            event: Domain event to publish
        """
        pass

    @abstractmethod
    def subscribe(
        self, event_type: type[DomainEvent], handler: Callable[[DomainEvent], Any]
    ) -> None:
        pass

    @abstractmethod
    def unsubscribe(
        self, event_type: type[DomainEvent], handler: Callable[[DomainEvent], Any]
    ) -> None:
        pass


class InMemoryEventBus(EventBusInterface):
    """
    In-memory implementation of event bus.

    Handlers are called in subscription order. Coroutine handlers are only
    awaited by ``publish_async``; ``publish`` skips them.
    """

    def __init__(self, max_history_size: int = 1000) -> None:
        self._handlers: dict[type[DomainEvent], list[Callable]] = defaultdict(list)
        self._event_history: list[DomainEvent] = []
        self._max_history_size = max_history_size

    def publish(self, event: DomainEvent) -> None:
        self._add_to_history(event)
        handlers = self._handlers_for(event)
        if not handlers:
            logger.debug(
                f"No handlers registered for event type: {type(event).__name__}"
            )
            return

        for handler in handlers:
            if asyncio.iscoroutinefunction(handler):
                logger.warning(
                    f"Skipping async handler {handler} for {type(event).__name__}; "
                    "use publish_async"
                )
                continue
            self._safe_handle_sync(handler, event)

    async def publish_async(self, event: DomainEvent) -> None:
        self._add_to_history(event)
        handlers = self._handlers_for(event)
        if not handlers:
            logger.debug(
                f"No handlers registered for event type: {type(event).__name__}"
            )
            return

        logger.debug(f"Publishing event {type(event).__name__} to {len(handlers)} handlers")
        for handler in handlers:
            await self._safe_handle_async(handler, event)

    def subscribe(
        self, event_type: type[DomainEvent], handler: Callable[[DomainEvent], Any]
    ) -> None:
        """
        Subscribe a handler (plain function or coroutine function) to an event type.

        Subscribing ``DomainEvent`` itself receives every event.
        """
        if handler in self._handlers[event_type]:
            logger.warning(
                f"Handler {handler} already subscribed to event type {event_type.__name__}"
            )
            return
        self._handlers[event_type].append(handler)
        logger.debug(f"Subscribed handler {handler} to event type {event_type.__name__}")

    def unsubscribe(
        self, event_type: type[DomainEvent], handler: Callable[[DomainEvent], Any]
    ) -> None:
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)
        else:
            logger.warning(
                f"Handler {handler} not found for event type {event_type.__name__}"
            )

    def get_handler_count(self, event_type: type[DomainEvent]) -> int:
        return len(self._handlers.get(event_type, []))

    def get_event_history(
        self, event_type: type[DomainEvent] | None = None
    ) -> list[DomainEvent]:
        """
        Get history of published events.

        Args:
            event_type: Optional event type to filter by

        Returns:
            List of published events, oldest first
        """
        if event_type:
            return [e for e in self._event_history if isinstance(e, event_type)]
        return self._event_history.copy()

    def clear_event_history(self) -> None:
        self._event_history.clear()

    def _handlers_for(self, event: DomainEvent) -> list[Callable]:
        handlers = list(self._handlers.get(type(event), []))
        if type(event) is not DomainEvent:
            handlers.extend(self._handlers.get(DomainEvent, []))
        return handlers

    def _add_to_history(self, event: DomainEvent) -> None:
        self._event_history.append(event)
        if len(self._event_history) > self._max_history_size:
            self._event_history.pop(0)

    def _safe_handle_sync(self, handler: Callable, event: DomainEvent) -> None:
        try:
            handler(event)
        except Exception as e:
            logger.error(
                f"Error handling event {type(event).__name__} with {handler}: {str(e)}"
            )

    async def _safe_handle_async(self, handler: Callable, event: DomainEvent) -> None:
        try:
            if asyncio.iscoroutinefunction(handler):
                await handler(event)
            else:
                handler(event)
        except Exception as e:
            logger.error(
                f"Error handling event {type(event).__name__} with {handler}: {str(e)}"
            )
