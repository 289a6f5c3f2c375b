"""AssignDelegationCommand - assign a chef and/or driver to a subscription."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog

from domain.subscription.core.entities import Delegation, utc_now
from domain.subscription.core.exceptions import DelegationNotFoundError, ValidationError
from domain.subscription.core.ports import IDelegationRepository

from ..concurrency import SubscriptionMutator, conflict_retrying

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AssignDelegationCommand:
    """Command to staff a subscription's delegation.

    Attributes:
        subscription_id: Subscription whose delegation is updated
        chef_id: Chef preparing the meals
        driver_id: Driver delivering them
        now: Assignment time (defaults to current UTC time)
    """

    subscription_id: str
    chef_id: Optional[str] = None
    driver_id: Optional[str] = None
    now: Optional[datetime] = None


class AssignDelegationHandler:
    """Handler for AssignDelegationCommand.

    Cancelled or expired subscriptions keep their last assignment.
    """

    def __init__(self, mutator: SubscriptionMutator, delegations: IDelegationRepository):
        self._mutator = mutator
        self._delegations = delegations

    async def handle(self, command: AssignDelegationCommand) -> Delegation:
        """
        Raises:
            ValidationError: If neither chef_id nor driver_id is given
            DelegationNotFoundError: If the subscription has no delegation
            SubscriptionClosedError: If the subscription is cancelled or expired
        """
        if not command.chef_id and not command.driver_id:
            raise ValidationError("chef_id or driver_id is required")
        now = command.now or utc_now()

        if await self._delegations.find_by_subscription_id(command.subscription_id) is None:
            raise DelegationNotFoundError(command.subscription_id)

        async with self._mutator.open_subscription(command.subscription_id):
            async for attempt in conflict_retrying():
                with attempt:
                    delegation = await self._delegations.find_by_subscription_id(
                        command.subscription_id
                    )
                    if delegation is None:
                        raise DelegationNotFoundError(command.subscription_id)
                    if command.chef_id:
                        delegation.assign_chef(command.chef_id, now)
                    if command.driver_id:
                        delegation.assign_driver(command.driver_id, now)
                    await self._delegations.save(delegation)

        logger.info(
            "delegation.assigned",
            subscription_id=command.subscription_id,
            chef_id=delegation.chef_id,
            driver_id=delegation.driver_id,
        )
        return delegation
