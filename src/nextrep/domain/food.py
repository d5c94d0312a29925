"""Food search domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Nutrition:
    """Macronutrients of a food or recipe serving."""

    calories: float
    protein: float
    fat: float
    carbs: float


@dataclass(frozen=True)
class FoodSearchResult:
    """A food found by name, with its nutrition per serving."""

    id: int
    title: str
    nutrition: Nutrition
    image: str = ""
