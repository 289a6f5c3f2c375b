"""Domain exceptions for meal subscriptions."""

from .domain_errors import (
    CatalogUnavailableError,
    ConcurrentModificationError,
    DelegationGenerationError,
    DelegationNotFoundError,
    DependencyFailure,
    InconsistentStateError,
    InvalidStatusTransitionError,
    NotFoundError,
    PlanNotFoundError,
    SnapshotUnavailableError,
    SubscriptionClosedError,
    SubscriptionDomainError,
    SubscriptionNotFoundError,
    TimelineEntryNotFoundError,
    ValidationError,
)

__all__ = [
    "SubscriptionDomainError",
    "ValidationError",
    "NotFoundError",
    "PlanNotFoundError",
    "SubscriptionNotFoundError",
    "DelegationNotFoundError",
    "TimelineEntryNotFoundError",
    "InconsistentStateError",
    "InvalidStatusTransitionError",
    "SubscriptionClosedError",
    "DependencyFailure",
    "CatalogUnavailableError",
    "SnapshotUnavailableError",
    "DelegationGenerationError",
    "ConcurrentModificationError",
]
