"""Fixtures for subscription command and query handler tests."""

import pytest

from application.subscription.commands import CompleteDeliveryHandler
from application.subscription.concurrency import SubscriptionMutator
from domain.subscription.core.events import DomainEvent
from domain.subscription.lifecycle import LifecycleStateMachine
from domain.subscription.progression import ProgressionTracker
from infrastructure.events.in_memory_bus import InMemoryEventBus
from infrastructure.persistence.in_memory import InMemoryDelegationRepository


@pytest.fixture
def published(event_bus: InMemoryEventBus) -> list[DomainEvent]:
    """Every event published on the bus, in order."""
    events: list[DomainEvent] = []

    async def collect(event: DomainEvent) -> None:
        events.append(event)

    event_bus.subscribe(DomainEvent, collect)
    return events


@pytest.fixture
def complete_delivery_handler(
    mutator: SubscriptionMutator,
    delegation_repository: InMemoryDelegationRepository,
    state_machine: LifecycleStateMachine,
    tracker: ProgressionTracker,
) -> CompleteDeliveryHandler:
    return CompleteDeliveryHandler(
        mutator=mutator,
        delegations=delegation_repository,
        state_machine=state_machine,
        tracker=tracker,
    )
