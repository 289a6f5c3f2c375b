"""CQRS Commands for subscriptions."""

from .assign_delegation import AssignDelegationCommand, AssignDelegationHandler
from .cancel_subscription import CancelSubscriptionCommand, CancelSubscriptionHandler
from .complete_delivery import (
    CompleteDeliveryCommand,
    CompleteDeliveryHandler,
    CompleteDeliveryResult,
)
from .create_subscription import (
    CreateSubscriptionCommand,
    CreateSubscriptionHandler,
    CreateSubscriptionResult,
)
from .expire_subscriptions import ExpireSubscriptionsCommand, ExpireSubscriptionsHandler
from .pause_subscription import PauseSubscriptionCommand, PauseSubscriptionHandler
from .resume_subscription import ResumeSubscriptionCommand, ResumeSubscriptionHandler
from .retry_incomplete_artifacts import (
    RetryIncompleteArtifactsCommand,
    RetryIncompleteArtifactsHandler,
    RetryIncompleteArtifactsResult,
)
from .skip_meal import SkipMealCommand, SkipMealHandler, SkipMealResult
from .update_timeline_status import UpdateTimelineStatusCommand, UpdateTimelineStatusHandler

__all__ = [
    # Creation
    "CreateSubscriptionCommand",
    "CreateSubscriptionHandler",
    "CreateSubscriptionResult",
    # Delivery progress
    "CompleteDeliveryCommand",
    "CompleteDeliveryHandler",
    "CompleteDeliveryResult",
    "UpdateTimelineStatusCommand",
    "UpdateTimelineStatusHandler",
    "AssignDelegationCommand",
    "AssignDelegationHandler",
    # Customer actions
    "PauseSubscriptionCommand",
    "PauseSubscriptionHandler",
    "ResumeSubscriptionCommand",
    "ResumeSubscriptionHandler",
    "CancelSubscriptionCommand",
    "CancelSubscriptionHandler",
    "SkipMealCommand",
    "SkipMealHandler",
    "SkipMealResult",
    # Scheduled jobs
    "ExpireSubscriptionsCommand",
    "ExpireSubscriptionsHandler",
    "RetryIncompleteArtifactsCommand",
    "RetryIncompleteArtifactsHandler",
    "RetryIncompleteArtifactsResult",
]
