"""Subscription core: entities, value objects, events, ports, factories."""
