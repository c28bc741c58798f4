"""
Pydantic contracts for nutrition plans.
"""
from pydantic import Field

from novacoach.models.workout import ContractModel


class Macros(ContractModel):
    """Macro-nutrient split in grams."""

    protein: float = Field(..., ge=0)
    carbs: float = Field(..., ge=0)
    fats: float = Field(..., ge=0)


class Meal(ContractModel):
    """Single meal in the plan."""

    time: str
    name: str
    calories: float = Field(..., ge=0)
    macros: Macros
    ingredients: list[str]


class NutritionPlan(ContractModel):
    """Daily precision nutrition plan."""

    dailyCalories: float = Field(..., ge=0)
    macros: Macros
    waterIntake: float = Field(..., ge=0, description="Liters per day")
    meals: list[Meal]
    supplements: list[str]
