"""Concurrency helpers shared by subscription command handlers."""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Generic, Optional, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random,
)

from domain.shared.ports.event_bus import IEventBus
from domain.subscription.core.entities import Subscription
from domain.subscription.core.events import DomainEvent
from domain.subscription.core.exceptions import (
    ConcurrentModificationError,
    InconsistentStateError,
    SubscriptionClosedError,
    SubscriptionNotFoundError,
    ValidationError,
)
from domain.subscription.core.ports import ISubscriptionLockProvider, ISubscriptionRepository
from domain.subscription.core.value_objects import SubscriptionId

logger = structlog.get_logger(__name__)

T = TypeVar("T")

SAVE_ATTEMPTS = 3


def parse_subscription_id(raw: str) -> SubscriptionId:
    """Parse a subscription id coming from the outside.

    Raises:
        ValidationError: If the id is not a UUID
    """
    try:
        return SubscriptionId.from_string(raw)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def conflict_retrying() -> AsyncRetrying:
    """Retry policy for optimistic-lock conflicts (3 attempts, short jitter)."""
    return AsyncRetrying(
        stop=stop_after_attempt(SAVE_ATTEMPTS),
        wait=wait_random(min=0, max=0.05),
        retry=retry_if_exception_type(ConcurrentModificationError),
        reraise=True,
    )


@dataclass
class Mutation(Generic[T]):
    """What a change function did to a subscription.

    Attributes:
        result: Value returned to the caller
        events: Events to publish once the change is saved
        dirty: False when nothing changed and no save is needed
        after_save: Runs under the lock once the subscription is saved
    """

    result: T
    events: tuple[DomainEvent, ...] = field(default_factory=tuple)
    dirty: bool = True
    after_save: Optional[Callable[[], Awaitable[None]]] = None


class SubscriptionMutator:
    """Runs read-modify-write cycles on one subscription.

    Each cycle holds the per-subscription lock, reloads the subscription,
    applies the change and saves it. A lost optimistic version check
    reloads and applies the change again. Events are published after the
    lock is released.
    """

    def __init__(
        self,
        subscriptions: ISubscriptionRepository,
        locks: ISubscriptionLockProvider,
        event_bus: IEventBus,
    ):
        self._subscriptions = subscriptions
        self._locks = locks
        self._event_bus = event_bus

    @property
    def subscriptions(self) -> ISubscriptionRepository:
        return self._subscriptions

    async def load(self, subscription_id: SubscriptionId) -> Subscription:
        subscription = await self._subscriptions.find_by_id(subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(str(subscription_id))
        return subscription

    @asynccontextmanager
    async def open_subscription(self, subscription_id: str) -> AsyncIterator[Subscription]:
        """Hold the subscription lock while one of its collaborator records changes.

        Cancel and expiry take the same lock, so a closed subscription
        can never have its delegation written afterwards.

        Raises:
            ValidationError: If the id is malformed
            SubscriptionNotFoundError: If the subscription does not exist
            SubscriptionClosedError: If the subscription is cancelled or expired
        """
        sid = parse_subscription_id(subscription_id)
        async with self._locks.lock(str(sid)):
            subscription = await self.load(sid)
            if subscription.is_terminal:
                raise SubscriptionClosedError(subscription.id, subscription.status.value)
            yield subscription

    async def mutate(
        self,
        subscription_id: str,
        change: Callable[[Subscription], Awaitable[Mutation[T]]],
    ) -> tuple[Subscription, T]:
        """Apply change under lock with conflict retries.

        Events are published once the subscription is saved, even when
        after_save fails afterwards; that failure is then re-raised.

        Args:
            subscription_id: Raw subscription id
            change: Async function mutating the loaded subscription

        Returns:
            tuple: (saved subscription, change result)

        Raises:
            ValidationError: If the id is malformed
            SubscriptionNotFoundError: If the subscription does not exist
            ConcurrentModificationError: If every attempt lost the version check
        """
        sid = parse_subscription_id(subscription_id)
        after_save_error: Optional[Exception] = None

        async with self._locks.lock(str(sid)):
            subscription, mutation = await self._apply(sid, change)
            if mutation.after_save is not None:
                try:
                    await mutation.after_save()
                except Exception as e:
                    logger.warning(
                        "subscription.after_save_failed",
                        subscription_id=subscription.id,
                        error=str(e),
                    )
                    after_save_error = e

        await self.publish(mutation.events)
        if after_save_error is not None:
            raise after_save_error
        return subscription, mutation.result

    async def _apply(
        self,
        sid: SubscriptionId,
        change: Callable[[Subscription], Awaitable[Mutation[T]]],
    ) -> tuple[Subscription, Mutation[T]]:
        async for attempt in conflict_retrying():
            with attempt:
                subscription = await self.load(sid)
                mutation = await change(subscription)
                if mutation.dirty:
                    await self._subscriptions.save(subscription)
                return subscription, mutation
        raise InconsistentStateError(f"No save attempt ran for subscription {sid}")

    async def publish(self, events: tuple[DomainEvent, ...]) -> None:
        for event in events:
            await self._event_bus.publish(event)
