"""
Pydantic contract for the photo-based body composition report.
"""
from typing import Literal, Union

from pydantic import Field, field_validator

from novacoach.models.workout import ContractModel


class BiometricReport(ContractModel):
    """InBody-style report estimated from a front and a side photo."""

    fatPercentage: float = Field(..., ge=0, le=100)
    muscleMass: str
    skeletalMuscleMass: str
    bmr: float = Field(..., ge=0)
    # Numeric level, or the string fallback shown when the model omits it.
    visceralFat: Union[float, str]
    bmi: float = Field(..., ge=0)
    bodyType: str
    postureAnalysis: str
    symmetryScore: float = Field(..., ge=0, le=100)
    healthRisk: Literal["low", "moderate", "high"]
    recommendations: list[str]

    @field_validator("healthRisk", mode="before")
    @classmethod
    def _normalize_risk(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value
