"""In-memory event bus.

Dispatches subscription domain events to async handlers inside the
current process. Handlers subscribed to a base class (for example
``DomainEvent``) receive every subclass event as well.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Type, TypeVar

from domain.subscription.core.events.base import DomainEvent

logger = logging.getLogger(__name__)

TEvent = TypeVar("TEvent", bound=DomainEvent)
Handler = Callable[[Any], Awaitable[None]]


class InMemoryEventBus:
    """
    In-memory implementation of the IEventBus port.

    Error handling: a failing handler is logged and skipped; the remaining
    handlers still run and ``publish`` never raises. Publishing happens
    after a state transition has been saved, so a broken subscriber can
    never undo it.

    Example:
        >>> bus = InMemoryEventBus()
        >>>
        >>> async def on_activated(event: SubscriptionActivated) -> None:
        ...     print(f"Activated: {event.subscription_id}")
        >>>
        >>> bus.subscribe(SubscriptionActivated, on_activated)
        >>> await bus.publish(SubscriptionActivated.create(...))
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[Handler]] = {}

    def subscribe(
        self,
        event_type: Type[TEvent],
        handler: Callable[[TEvent], Awaitable[None]],
    ) -> None:
        """
        Register handler for event_type and its subclasses.

        Args:
            event_type: Event class to listen for
            handler: Async callable invoked with the event
        """
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(
            "Handler subscribed",
            extra={"event_type": event_type.__name__, "handler": _name(handler)},
        )

    def _handlers_for(self, event: DomainEvent) -> List[Handler]:
        handlers: List[Handler] = []
        for event_type in type(event).__mro__:
            handlers.extend(self._handlers.get(event_type, []))
        return handlers

    async def publish(self, event: DomainEvent) -> None:
        """
        Deliver event to every matching handler, most specific type first.

        Args:
            event: Domain event to publish
        """
        handlers = self._handlers_for(event)
        event_name = type(event).__name__
        if not handlers:
            logger.debug("No handlers for event", extra={"event_type": event_name})
            return

        logger.info(
            "Publishing event",
            extra={
                "event_type": event_name,
                "event_id": str(event.event_id),
                "handler_count": len(handlers),
            },
        )
        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    "Event handler failed",
                    extra={
                        "event_type": event_name,
                        "event_id": str(event.event_id),
                        "handler": _name(handler),
                        "error": str(e),
                    },
                    exc_info=True,
                )

    async def publish_all(self, events: Iterable[DomainEvent]) -> None:
        """Publish events in order."""
        for event in events:
            await self.publish(event)

    def unsubscribe(
        self,
        event_type: Type[TEvent],
        handler: Callable[[TEvent], Awaitable[None]],
    ) -> bool:
        """
        Remove the first registration of handler for event_type.

        Returns:
            True if a registration was removed
        """
        handlers = self._handlers.get(event_type, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def clear(self) -> None:
        """Remove every subscription (testing utility)."""
        self._handlers.clear()

    def get_handler_count(self, event_type: Type[TEvent]) -> int:
        """Number of handlers registered directly for event_type."""
        return len(self._handlers.get(event_type, []))


def _name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", repr(handler))
