"""RetryIncompleteArtifactsCommand - rebuild snapshots and delegations queued after failures."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog

from domain.subscription.core.entities import Subscription, utc_now
from domain.subscription.core.exceptions import (
    ConcurrentModificationError,
    InconsistentStateError,
    NotFoundError,
    ValidationError,
)
from domain.subscription.core.ports import ArtifactRetryTask, IArtifactRetryQueue
from domain.subscription.core.value_objects import ArtifactKind

from ..concurrency import Mutation, SubscriptionMutator
from ..orchestrators.artifact_orchestrator import ArtifactOrchestrator

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 5


@dataclass(frozen=True)
class RetryIncompleteArtifactsCommand:
    """Command to drain the artifact retry queue.

    Attributes:
        limit: Maximum tasks to process (None = all queued)
        now: Retry time (defaults to current UTC time)
    """

    limit: Optional[int] = None
    now: Optional[datetime] = None


@dataclass(frozen=True)
class RetryIncompleteArtifactsResult:
    """Counters for one retry run.

    Attributes:
        processed: Tasks taken from the queue
        completed: Subscriptions whose artifacts are now complete
        abandoned: Tasks dropped (missing subscription, invalid plan, too many attempts)
    """

    processed: int = 0
    completed: int = 0
    abandoned: int = 0


class RetryIncompleteArtifactsHandler:
    """Handler for RetryIncompleteArtifactsCommand.

    A failing retry goes back on the queue through the orchestrator with
    its attempt counter increased. Tasks past MAX_ATTEMPTS are dropped
    and logged.
    """

    def __init__(
        self,
        mutator: SubscriptionMutator,
        orchestrator: ArtifactOrchestrator,
        retry_queue: IArtifactRetryQueue,
        max_attempts: int = MAX_ATTEMPTS,
    ):
        self._mutator = mutator
        self._orchestrator = orchestrator
        self._retry_queue = retry_queue
        self._max_attempts = max_attempts

    async def handle(
        self, command: RetryIncompleteArtifactsCommand
    ) -> RetryIncompleteArtifactsResult:
        now = command.now or utc_now()
        tasks = await self._retry_queue.dequeue_batch(command.limit)

        completed = 0
        abandoned = 0
        for task in tasks:
            if task.attempts >= self._max_attempts:
                logger.error(
                    "artifact.retry_abandoned",
                    subscription_id=task.subscription_id,
                    artifact=task.kind.value,
                    attempts=task.attempts,
                    error=task.error,
                )
                abandoned += 1
                continue
            try:
                if await self._retry(task, now):
                    completed += 1
            except (NotFoundError, ValidationError, InconsistentStateError) as e:
                logger.error(
                    "artifact.retry_abandoned",
                    subscription_id=task.subscription_id,
                    artifact=task.kind.value,
                    attempts=task.attempts,
                    error=str(e),
                )
                abandoned += 1
            except ConcurrentModificationError as e:
                await self._retry_queue.enqueue(
                    ArtifactRetryTask(
                        subscription_id=task.subscription_id,
                        kind=task.kind,
                        error=str(e),
                        enqueued_at=now,
                        attempts=task.attempts + 1,
                    )
                )

        logger.info(
            "artifact.retry_run",
            processed=len(tasks),
            completed=completed,
            abandoned=abandoned,
        )
        return RetryIncompleteArtifactsResult(
            processed=len(tasks), completed=completed, abandoned=abandoned
        )

    async def _retry(self, task: ArtifactRetryTask, now: datetime) -> bool:
        attempts = task.attempts + 1

        async def change(subscription: Subscription) -> Mutation[bool]:
            if task.kind == ArtifactKind.SNAPSHOT:
                compiled = await self._orchestrator.compile_snapshot(
                    subscription, now, attempts=attempts
                )
                if compiled:
                    await self._orchestrator.ensure_delegation(
                        subscription, now, attempts=attempts
                    )
            else:
                await self._orchestrator.ensure_delegation(subscription, now, attempts=attempts)
            return Mutation(subscription.artifacts.is_complete)

        _, complete = await self._mutator.mutate(task.subscription_id, change)
        return complete
