"""Factories for the subscription domain."""

from .subscription_factory import SubscriptionFactory

__all__ = ["SubscriptionFactory"]
