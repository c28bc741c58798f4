"""
Pydantic models for HTTP request/response validation.
"""
from typing import Literal, Optional

from pydantic import BaseModel, Field

from novacoach.models.generation import ChatMessage, Citation
from novacoach.models.profile import Language, UserProfile, WorkoutType
from novacoach.models.workout import DayPlan, TrainingPlan


class GenerationBody(BaseModel):
    """Fields shared by every generation endpoint."""

    maxAttempts: int = Field(1, ge=1, le=3, description="Attempts before the error is returned")


# --- Plan Models ---

class PlanRequest(GenerationBody):
    """Request model for 7-day plan generation. Omitted profile = stored profile."""
    profile: Optional[UserProfile] = None
    sport: WorkoutType
    goals: str = Field("", max_length=1000)
    lang: Language = "ar"

    class Config:
        json_schema_extra = {
            "example": {
                "sport": "STRENGTH",
                "goals": "gain 3kg of lean mass",
                "lang": "en",
            }
        }


class DayRegenerationRequest(GenerationBody):
    profile: Optional[UserProfile] = None
    sport: WorkoutType
    day: DayPlan
    lang: Language = "ar"


class ExerciseRegenerationRequest(GenerationBody):
    exerciseName: str = Field(..., min_length=1, max_length=200)
    lang: Language = "ar"


# --- Nutrition / Biometrics Models ---

class NutritionRequest(GenerationBody):
    profile: Optional[UserProfile] = None
    goals: str = Field("", max_length=1000)
    lang: Language = "ar"


class BodyScanRequest(GenerationBody):
    """Front and side photos, base64 or data URI."""
    frontImage: str
    sideImage: str
    profile: Optional[UserProfile] = None
    lang: Language = "ar"


# --- Exercise Models ---

class DiscoveryRequest(GenerationBody):
    query: str = Field(..., min_length=1, max_length=300)
    filters: dict[str, str] = {}
    lang: Language = "ar"


class ExerciseMediaRequest(GenerationBody):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""


# --- Chat Models ---

class ChatRequest(GenerationBody):
    message: str = Field(..., max_length=4000)
    history: list[ChatMessage] = []
    useSearch: bool = False


class ChatResponse(BaseModel):
    status: str = "success"
    message: ChatMessage
    citations: list[Citation] = []


# --- Media Models ---

class ImageRequest(GenerationBody):
    prompt: str = Field(..., max_length=4000)
    aspectRatio: Literal["1:1", "3:4", "4:3", "9:16", "16:9"] = "1:1"
    imageSize: Literal["1K", "2K", "4K"] = "1K"


class ImageEditRequest(GenerationBody):
    image: str = Field(..., description="Base64 or data URI of the source image")
    prompt: str = Field("", max_length=4000)


class VideoRequest(GenerationBody):
    prompt: str = Field(..., max_length=4000)
    aspectRatio: Literal["16:9", "9:16"] = "16:9"
    resolution: Literal["720p", "1080p"] = "720p"


class ImageResponse(BaseModel):
    status: str = "success"
    image: str


# --- Persistence Models ---

class SavePlanRequest(BaseModel):
    sport: WorkoutType
    plan: TrainingPlan


class WorkoutLogRequest(BaseModel):
    exerciseId: str = Field(..., min_length=1)
    duration: int = Field(0, ge=0, description="Minutes trained")
