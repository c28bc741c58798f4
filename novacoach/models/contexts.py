"""
Per-intent input contexts accepted by the request builder.
"""
from typing import Literal, Optional

from pydantic import BaseModel, Field

from novacoach.models.generation import ChatTurn, MediaBlob
from novacoach.models.profile import Language, UserProfile, WorkoutType
from novacoach.models.workout import DayPlan


class PlanContext(BaseModel):
    """Inputs for a 7-day training plan."""

    profile: UserProfile
    sport: WorkoutType
    goals: str = Field("", max_length=1000)
    lang: Language = "ar"


class DayRegenerationContext(BaseModel):
    """Inputs for regenerating one day of an existing plan."""

    profile: UserProfile
    sport: WorkoutType
    day: DayPlan
    lang: Language = "ar"


class ExerciseRegenerationContext(BaseModel):
    exercise_name: str
    lang: Language = "ar"


class NutritionContext(BaseModel):
    profile: UserProfile
    goals: str = Field("", max_length=1000)
    lang: Language = "ar"


class BiometricContext(BaseModel):
    """Two photos (front and side) plus the athlete profile."""

    profile: UserProfile
    front_image: Optional[MediaBlob] = None
    side_image: Optional[MediaBlob] = None
    lang: Language = "ar"


class DiscoveryContext(BaseModel):
    query: str
    filters: dict[str, str] = {}
    lang: Language = "ar"


class ChatContext(BaseModel):
    message: str
    history: list[ChatTurn] = []
    use_search: bool = False


class ImageGenerationContext(BaseModel):
    prompt: str
    aspect_ratio: Literal["1:1", "3:4", "4:3", "9:16", "16:9"] = "1:1"
    image_size: Literal["1K", "2K", "4K"] = "1K"


class ImageEditContext(BaseModel):
    prompt: str = ""
    image: Optional[MediaBlob] = None


class VideoContext(BaseModel):
    prompt: str
    aspect_ratio: Literal["16:9", "9:16"] = "16:9"
    resolution: Literal["720p", "1080p"] = "720p"


class ExerciseMediaContext(BaseModel):
    """An exercise to illustrate or demonstrate on video."""

    name: str
    description: str = ""
