"""
Pydantic contracts for training plans returned by the model.
Provides runtime validation of structured output.
"""
from pydantic import BaseModel, ConfigDict, Field


class ContractModel(BaseModel):
    """Base for model-output contracts: strict types, unknown fields ignored."""
    model_config = ConfigDict(strict=True, extra="ignore")


class Pillar(ContractModel):
    """One development pillar of a training day."""

    title: str
    exercises: list[str]
    description: str = ""


class DayPlan(ContractModel):
    """A single day of the weekly blueprint."""

    day: str = Field(..., description="Day label, e.g. 'Day 1: Strength Build'")
    isRest: bool
    physical: Pillar
    technical: Pillar
    tactical: Pillar
    mental: Pillar
    reaction: Pillar
    nutrition: str = Field(..., description="Meal tip for this day")
    totalDuration: str


class TrainingPlan(ContractModel):
    """Seven-day development blueprint."""

    title: str
    weeklySchedule: list[DayPlan] = Field(..., min_length=7, max_length=7)
    coachTip: str
