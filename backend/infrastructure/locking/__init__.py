"""Locking adapters."""

from .lock_registry import SubscriptionLockRegistry

__all__ = ["SubscriptionLockRegistry"]
