"""Nutrition value object and rounding helper."""

from dataclasses import dataclass, fields
from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, places: int = 0) -> float:
    """Round half away from zero (1.5 -> 2, 2.5 -> 3).

    Python's round() uses banker's rounding, which would make totals
    depend on the parity of the integer part.
    """
    exponent = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Nutrition:
    """Macro nutrients of a meal or an aggregate of meals.

    Attributes:
        calories: Energy in kcal
        protein: Protein in grams
        carbs: Carbohydrates in grams
        fat: Fat in grams
        fiber: Fiber in grams
    """

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0

    def __add__(self, other: "Nutrition") -> "Nutrition":
        if not isinstance(other, Nutrition):
            return NotImplemented
        return Nutrition(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )

    def divided_by(self, divisor: int) -> "Nutrition":
        """Average over divisor, rounded half-up. Zero divisor yields zeros."""
        if divisor <= 0:
            return Nutrition()
        return Nutrition(
            **{
                f.name: round_half_up(getattr(self, f.name) / divisor)
                for f in fields(self)
            }
        )

    def rounded(self) -> "Nutrition":
        return Nutrition(**{f.name: round_half_up(getattr(self, f.name)) for f in fields(self)})

    def to_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
