"""Small numeric helpers shared by scoring and graphs."""

import math


def round2(value: float) -> float:
    """Round to two decimals, halves away from zero for positive values."""
    return math.floor(value * 100 + 0.5) / 100


def percent(actual: float, target: float) -> float:
    """Return ``actual / target`` as a rounded percentage, 0 for a zero target."""
    if target == 0:
        return 0.0
    return round2(actual * 100 / target)


def consumption_ratio(
    weight_consumed: float | None, meal_weight: float | None
) -> float:
    """Return the eaten share of a meal; 0 when the meal weight is unusable."""
    if not meal_weight or meal_weight <= 0:
        return 0.0
    return (weight_consumed or 0.0) / meal_weight
