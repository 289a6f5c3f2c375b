"""Infrastructure adapters for meal subscriptions."""
