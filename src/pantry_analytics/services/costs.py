"""Estimated per-unit food costs by category."""

import math

from pantry_analytics.domain.inventory import FoodCategory

FOOD_COST_ESTIMATES: dict[FoodCategory, float] = {
    FoodCategory.PROTEIN: 4.50,
    FoodCategory.VEGETABLES: 1.25,
    FoodCategory.FRUITS: 1.75,
    FoodCategory.DAIRY: 2.00,
    FoodCategory.GRAINS: 0.85,
    FoodCategory.OTHER: 1.50,
}


def estimated_unit_cost(category: str | FoodCategory | None) -> float:
    """Return the estimated cost of one unit of food in the category."""
    return FOOD_COST_ESTIMATES.get(
        FoodCategory.parse(category), FOOD_COST_ESTIMATES[FoodCategory.OTHER]
    )


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, so 3.125 becomes 3.13 at two digits."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_money(value: float) -> float:
    """Round a quantity or currency amount to two decimals."""
    return round_half_up(value, 2)
