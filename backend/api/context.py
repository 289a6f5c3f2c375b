"""GraphQL context factory for dependency injection.

Provides the dependencies subscription resolvers need:
- Repositories (subscriptions, delegations)
- Event bus (domain events -> notifications)
- Domain services (progression tracker, lifecycle state machine)
- Orchestrators (snapshot and delegation artifacts)
"""

from typing import Any, Optional

from fastapi import Request
from strawberry.fastapi import BaseContext

from application.subscription.concurrency import SubscriptionMutator
from application.subscription.orchestrators import ArtifactOrchestrator
from domain.shared.ports.event_bus import IEventBus
from domain.subscription.core.ports import (
    IArtifactRetryQueue,
    IDelegationRepository,
    ISubscriptionRepository,
)
from domain.subscription.lifecycle import LifecycleStateMachine
from domain.subscription.progression import ProgressionTracker


class GraphQLContext(BaseContext):
    """GraphQL context with all dependencies.

    Injected into every resolver via ``info.context``. Resolvers access
    dependencies with ``info.context.get("name")``.

    Attributes:
        subscription_repository: Subscription persistence
        delegation_repository: Delegation persistence
        event_bus: Event bus for domain events
        mutator: Locked read-modify-write runner for subscriptions
        artifact_orchestrator: Snapshot/delegation builder
        progression_tracker: Cursor progression service
        state_machine: Lifecycle transitions
        retry_queue: Queue of incomplete artifacts
        request: FastAPI request object
    """

    def __init__(
        self,
        subscription_repository: ISubscriptionRepository,
        delegation_repository: IDelegationRepository,
        event_bus: IEventBus,
        mutator: SubscriptionMutator,
        artifact_orchestrator: ArtifactOrchestrator,
        progression_tracker: ProgressionTracker,
        state_machine: LifecycleStateMachine,
        retry_queue: IArtifactRetryQueue,
        request: Optional[Request] = None,
    ) -> None:
        super().__init__()
        self.subscription_repository = subscription_repository
        self.delegation_repository = delegation_repository
        self.event_bus = event_bus
        self.mutator = mutator
        self.artifact_orchestrator = artifact_orchestrator
        self.progression_tracker = progression_tracker
        self.state_machine = state_machine
        self.retry_queue = retry_queue
        self.request = request

    def get(self, key: str) -> Any:
        """Get dependency by name (None if missing).

        Example:
            >>> tracker = info.context.get("progression_tracker")
        """
        return getattr(self, key, None)


def create_context(
    subscription_repository: ISubscriptionRepository,
    delegation_repository: IDelegationRepository,
    event_bus: IEventBus,
    mutator: SubscriptionMutator,
    artifact_orchestrator: ArtifactOrchestrator,
    progression_tracker: ProgressionTracker,
    state_machine: LifecycleStateMachine,
    retry_queue: IArtifactRetryQueue,
    request: Optional[Request] = None,
) -> GraphQLContext:
    """Create GraphQL context with all dependencies."""
    return GraphQLContext(
        subscription_repository=subscription_repository,
        delegation_repository=delegation_repository,
        event_bus=event_bus,
        mutator=mutator,
        artifact_orchestrator=artifact_orchestrator,
        progression_tracker=progression_tracker,
        state_machine=state_machine,
        retry_queue=retry_queue,
        request=request,
    )
