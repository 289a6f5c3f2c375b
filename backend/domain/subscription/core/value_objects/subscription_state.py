"""Subscription lifecycle state as a tagged union.

Each state carries only the timestamps that are meaningful for it, so a
paused subscription without a pause timestamp (or an active one that was
never activated) cannot be represented.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class SubscriptionStatus(str, Enum):
    """Externally visible subscription status."""

    PENDING_FIRST_DELIVERY = "pending_first_delivery"
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self in (SubscriptionStatus.CANCELLED, SubscriptionStatus.EXPIRED)


@dataclass(frozen=True)
class PendingFirstDelivery:
    """Created, waiting for the first delivery to complete."""

    @property
    def status(self) -> SubscriptionStatus:
        return SubscriptionStatus.PENDING_FIRST_DELIVERY

    @property
    def activated_at(self) -> Optional[datetime]:
        return None


@dataclass(frozen=True)
class Active:
    """Running subscription.

    Attributes:
        activated_at: When the first delivery completed
        resumed_at: Last resume timestamp, if the subscription was ever paused
    """

    activated_at: datetime
    resumed_at: Optional[datetime] = None

    @property
    def status(self) -> SubscriptionStatus:
        return SubscriptionStatus.ACTIVE


@dataclass(frozen=True)
class Paused:
    """Temporarily suspended by the customer or an admin.

    Attributes:
        activated_at: Original activation timestamp
        since: When the pause started
        reason: Why the subscription was paused
    """

    activated_at: datetime
    since: datetime
    reason: str

    @property
    def status(self) -> SubscriptionStatus:
        return SubscriptionStatus.PAUSED


@dataclass(frozen=True)
class Cancelled:
    """Terminal state requested by the customer or an admin."""

    cancelled_at: datetime
    reason: str
    activated_at: Optional[datetime] = None

    @property
    def status(self) -> SubscriptionStatus:
        return SubscriptionStatus.CANCELLED


@dataclass(frozen=True)
class Expired:
    """Terminal state reached when the end date passed."""

    expired_at: datetime
    activated_at: Optional[datetime] = None

    @property
    def status(self) -> SubscriptionStatus:
        return SubscriptionStatus.EXPIRED


SubscriptionState = Union[PendingFirstDelivery, Active, Paused, Cancelled, Expired]
