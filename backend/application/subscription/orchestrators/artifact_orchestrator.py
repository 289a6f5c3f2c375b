"""ArtifactOrchestrator - builds snapshots and delegations with partial-failure handling."""

from datetime import datetime
from typing import Optional

import structlog

from domain.subscription.core.entities import Delegation, Subscription
from domain.subscription.core.exceptions import (
    DependencyFailure,
    InconsistentStateError,
    SubscriptionDomainError,
)
from domain.subscription.core.ports import (
    ArtifactRetryTask,
    IArtifactRetryQueue,
    IDelegationRepository,
)
from domain.subscription.core.value_objects import ArtifactKind, ArtifactState
from domain.subscription.delegation import DelegationGenerator
from domain.subscription.progression import ProgressionTracker
from domain.subscription.snapshot import SnapshotCompiler

logger = structlog.get_logger(__name__)


class ArtifactOrchestrator:
    """Coordinates the artifacts created alongside a subscription.

    Failure policy:
    - Snapshot: ValidationError and PlanNotFoundError propagate (the
      subscription must not be created). A DependencyFailure leaves the
      snapshot empty, marks it incomplete and queues a retry.
    - Delegation: any failure is logged, marked incomplete and queued; it
      never undoes the subscription.

    The orchestrator mutates the subscription in memory; callers save it.
    """

    def __init__(
        self,
        compiler: SnapshotCompiler,
        generator: DelegationGenerator,
        tracker: ProgressionTracker,
        delegations: IDelegationRepository,
        retry_queue: IArtifactRetryQueue,
    ):
        self._compiler = compiler
        self._generator = generator
        self._tracker = tracker
        self._delegations = delegations
        self._retry_queue = retry_queue

    async def compile_snapshot(
        self, subscription: Subscription, now: datetime, attempts: int = 0
    ) -> bool:
        """Compile the subscription's snapshot from its compile request.

        Returns:
            bool: True if the snapshot is present afterwards

        Raises:
            ValidationError: If compile inputs are invalid
            PlanNotFoundError: If the plan does not exist
        """
        if subscription.snapshot is not None:
            self._mark(subscription, ArtifactKind.SNAPSHOT, ArtifactState.COMPLETE)
            return True
        if subscription.compile_request is None:
            raise InconsistentStateError(
                f"Subscription {subscription.id} has no compile request"
            )

        try:
            snapshot = await self._compiler.compile_request(
                subscription.compile_request, compiled_at=now
            )
        except DependencyFailure as e:
            await self._incomplete(subscription, ArtifactKind.SNAPSHOT, e, now, attempts)
            return False

        subscription.snapshot = snapshot
        self._mark(subscription, ArtifactKind.SNAPSHOT, ArtifactState.COMPLETE)
        self._tracker.refresh_next_delivery(subscription, now.date())
        return True

    async def ensure_delegation(
        self, subscription: Subscription, now: datetime, attempts: int = 0
    ) -> Optional[Delegation]:
        """Return the subscription's delegation, generating it if missing.

        Writes timeline entry ids onto the snapshot; the caller must save
        the subscription afterwards.
        """
        snapshot = subscription.snapshot
        if snapshot is None:
            # Built once the snapshot retry succeeds.
            self._mark(subscription, ArtifactKind.DELEGATION, ArtifactState.INCOMPLETE)
            return None

        existing = await self._delegations.find_by_subscription_id(subscription.id)
        if existing is not None:
            self._mark(subscription, ArtifactKind.DELEGATION, ArtifactState.COMPLETE)
            return existing

        previous_sync = snapshot.last_synced_at
        previous_ids = [slot.timeline_entry_id for slot in snapshot]
        try:
            delegation = self._generator.generate(subscription, snapshot, now)
            await self._delegations.save(delegation)
        except Exception as e:
            for slot, entry_id in zip(snapshot, previous_ids):
                slot.timeline_entry_id = entry_id
            snapshot.last_synced_at = previous_sync
            logger.error(
                "delegation.generation_failed",
                subscription_id=subscription.id,
                error=str(e),
            )
            await self._incomplete(subscription, ArtifactKind.DELEGATION, e, now, attempts)
            return None

        self._mark(subscription, ArtifactKind.DELEGATION, ArtifactState.COMPLETE)
        return delegation

    async def _incomplete(
        self,
        subscription: Subscription,
        kind: ArtifactKind,
        error: Exception,
        now: datetime,
        attempts: int,
    ) -> None:
        self._mark(subscription, kind, ArtifactState.INCOMPLETE)
        await self._retry_queue.enqueue(
            ArtifactRetryTask(
                subscription_id=subscription.id,
                kind=kind,
                error=str(error),
                enqueued_at=now,
                attempts=attempts,
            )
        )
        logger.warning(
            "subscription.artifact_incomplete",
            subscription_id=subscription.id,
            artifact=kind.value,
            error=str(error),
            domain_error=isinstance(error, SubscriptionDomainError),
        )

    @staticmethod
    def _mark(subscription: Subscription, kind: ArtifactKind, state: ArtifactState) -> None:
        subscription.artifacts = subscription.artifacts.with_state(kind, state)


