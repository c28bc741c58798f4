"""
Pydantic contract for an exercise researched by the model.
"""
from typing import Optional

from novacoach.models.workout import ContractModel


class DiscoveredExercise(ContractModel):
    name: str
    category: str
    description: str
    image: str
    duration: str
    ageGroups: list[str]
    location: str
    difficulty: str
    muscleGroup: str
    instructions: list[str]
    # Assigned by the client after validation, never by the model.
    id: Optional[str] = None
