"""CompileRequest value object - inputs used to compile a snapshot."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .meal_category import MealCategory
from .pricing import Discount, PricingInputs


@dataclass(frozen=True)
class CompileRequest:
    """Everything the snapshot compiler needs, kept on the subscription so
    an incomplete snapshot can be compiled again later."""

    plan_id: str
    owner_id: str
    start_date: date
    end_date: date
    selected_meal_categories: tuple[MealCategory, ...]
    duration_weeks: int
    pricing_inputs: PricingInputs = PricingInputs()
    discount: Optional[Discount] = None
