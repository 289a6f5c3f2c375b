"""Domain ports shared across bounded contexts."""

from domain.shared.ports.event_bus import EventHandler, IEventBus

__all__ = [
    "IEventBus",
    "EventHandler",
]
