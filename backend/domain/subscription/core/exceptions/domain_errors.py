"""Domain exceptions for meal subscriptions."""

from typing import Optional


class SubscriptionDomainError(Exception):
    """Base exception for subscription domain errors."""

    pass


class ValidationError(SubscriptionDomainError):
    """Raised when subscription input is rejected before anything is persisted.

    Examples: empty meal category selection, end date before start date,
    non-positive duration.
    """

    pass


class NotFoundError(SubscriptionDomainError):
    """Base class for missing aggregates or collaborator records."""

    pass


class PlanNotFoundError(NotFoundError):
    """Raised when the catalog has no meal plan with the given ID."""

    def __init__(self, plan_id: str):
        super().__init__(f"Meal plan not found: {plan_id}")
        self.plan_id = plan_id


class SubscriptionNotFoundError(NotFoundError):
    """Raised when a subscription cannot be found."""

    def __init__(self, subscription_id: str):
        super().__init__(f"Subscription not found: {subscription_id}")
        self.subscription_id = subscription_id


class DelegationNotFoundError(NotFoundError):
    """Raised when no delegation exists for a subscription."""

    def __init__(self, subscription_id: str):
        super().__init__(f"Delegation not found for subscription: {subscription_id}")
        self.subscription_id = subscription_id


class TimelineEntryNotFoundError(NotFoundError):
    """Raised when a timeline entry ID does not belong to any delegation."""

    def __init__(self, timeline_entry_id: str):
        super().__init__(f"Timeline entry not found: {timeline_entry_id}")
        self.timeline_entry_id = timeline_entry_id


class InconsistentStateError(SubscriptionDomainError):
    """Raised when the progression cursor points outside the snapshot.

    Handled internally by the progression tracker recovery scan.
    """

    pass


class InvalidStatusTransitionError(SubscriptionDomainError):
    """Raised when a slot or timeline status would move backwards."""

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot move status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class SubscriptionClosedError(SubscriptionDomainError):
    """Raised when a cancelled or expired subscription's delegation would change."""

    def __init__(self, subscription_id: str, status: str):
        super().__init__(f"Subscription {subscription_id} is {status}; its delegation is closed")
        self.subscription_id = subscription_id
        self.status = status


class DependencyFailure(SubscriptionDomainError):
    """Raised when a collaborator fails while building a dependent artifact.

    Subscription creation still succeeds; the artifact is marked
    incomplete and queued for retry.
    """

    pass


class CatalogUnavailableError(DependencyFailure):
    """Raised when the meal plan catalog cannot be read."""

    def __init__(self, plan_id: str, cause: Optional[BaseException] = None):
        message = f"Catalog unavailable while reading plan {plan_id}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.plan_id = plan_id


class SnapshotUnavailableError(DependencyFailure):
    """Raised when an operation needs a snapshot that was never compiled."""

    def __init__(self, subscription_id: str):
        super().__init__(f"Meal plan snapshot incomplete for subscription: {subscription_id}")
        self.subscription_id = subscription_id


class DelegationGenerationError(DependencyFailure):
    """Raised when the delegation timeline cannot be generated or stored."""

    pass


class ConcurrentModificationError(SubscriptionDomainError):
    """Raised when a save loses an optimistic version check."""

    def __init__(self, subscription_id: str, expected_version: int):
        super().__init__(
            f"Subscription {subscription_id} was modified concurrently "
            f"(expected version {expected_version})"
        )
        self.subscription_id = subscription_id
        self.expected_version = expected_version
