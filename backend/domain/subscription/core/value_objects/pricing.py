"""Pricing value objects used while compiling a snapshot."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")


def to_money(value: Number) -> Decimal:
    """Convert a number to a Decimal rounded half-up to cents."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class MealPricing:
    """Per-meal price split between chef and platform."""

    price: Decimal = Decimal("0.00")
    chef_earnings: Decimal = Decimal("0.00")
    platform_fee: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class Discount:
    """Discount requested at subscription time.

    Attributes:
        percent: Percentage taken off the subtotal, in [0, 100]
        discount_id: Identifier of the promotion or coupon
        reason: Free text reason shown to the customer
        discount_type: e.g. "promo", "loyalty", "admin"
    """

    percent: Decimal
    discount_id: Optional[str] = None
    reason: Optional[str] = None
    discount_type: str = "promo"

    def __post_init__(self) -> None:
        object.__setattr__(self, "percent", Decimal(str(self.percent)))
        if not Decimal(0) <= self.percent <= Decimal(100):
            raise ValueError(f"Discount percent must be in [0, 100], got {self.percent}")


@dataclass(frozen=True)
class PricingInputs:
    """Multipliers applied on top of the plan's base price.

    Attributes:
        frequency_multiplier: Factor for the number of meals per day/week chosen
        duration_multiplier: Factor for the subscription length
        base_plan_price: Overrides the catalog base price when set
    """

    frequency_multiplier: Decimal = Decimal("1")
    duration_multiplier: Decimal = Decimal("1")
    base_plan_price: Optional[Decimal] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "frequency_multiplier", Decimal(str(self.frequency_multiplier)))
        object.__setattr__(self, "duration_multiplier", Decimal(str(self.duration_multiplier)))
        if self.base_plan_price is not None:
            object.__setattr__(self, "base_plan_price", Decimal(str(self.base_plan_price)))
        if self.frequency_multiplier <= 0 or self.duration_multiplier <= 0:
            raise ValueError("Pricing multipliers must be positive")


@dataclass(frozen=True)
class DiscountApplied:
    """Discount as frozen into a snapshot's pricing block."""

    percent: Decimal
    amount: Decimal
    discount_id: Optional[str] = None
    reason: Optional[str] = None
    discount_type: str = "promo"
