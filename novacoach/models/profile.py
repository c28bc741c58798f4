"""
Pydantic models for the athlete profile and the catalog vocabularies it uses.
"""
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class LabeledEnum(str, Enum):
    """Enum whose values are display labels; members can also be looked up by key."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        return None


class WorkoutType(LabeledEnum):
    FITNESS = "لياقة عامة"
    FOOTBALL = "كرة قدم احترافية"
    BASKETBALL = "كرة سلة"
    STRENGTH = "بناء عضلات (Hypertrophy)"
    FAT_LOSS = "حرق دهون (Metabolic)"
    REHAB = "إعادة تأهيل (Recovery)"
    TENNIS = "تنس ومضرب"
    MARTIAL_ARTS = "فنون قتالية"
    YOGA = "يوغا ومرونة"
    HIIT = "تدريب مكثف"
    GYMNASTICS = "جمباز وليونة"
    DESK_WORKOUT = "تمارين المكتب"
    HOME_MINIMAL = "مساحات ضيقة"


class WorkoutDifficulty(LabeledEnum):
    BEGINNER = "مبتدئ"
    INTERMEDIATE = "متوسط"
    ADVANCED = "محترف"
    ELITE = "نخبة"


Language = Literal["ar", "en"]

LANGUAGE_NAMES = {"ar": "Arabic", "en": "English"}

EQUIPMENT_DESCRIPTIONS = {
    "none": "none (bodyweight only, no equipment)",
    "basic": "basic (dumbbells, resistance bands, mat)",
    "full_gym": "full_gym (complete gym access)",
}


class UserProfile(BaseModel):
    """Athlete profile as entered in the app. Numeric fields arrive as strings."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str = ""
    gender: Literal["male", "female"] = "male"
    age: str = ""
    weight: str = ""
    height: str = ""
    targetWeight: str = ""
    bodyFat: Optional[str] = None
    bodyType: Optional[Literal["ectomorph", "mesomorph", "endomorph"]] = None
    activityLevel: Literal["low", "moderate", "high", "athlete"] = "moderate"
    sleepQuality: Literal["poor", "fair", "good", "excellent"] = "good"
    dietPreference: Literal["balanced", "high_protein", "keto", "vegan", "vegetarian"] = "balanced"
    level: str = WorkoutDifficulty.INTERMEDIATE.value
    injuries: str = ""
    equipment: Literal["none", "basic", "full_gym"] = "basic"
    daysPerWeek: str = ""
    sessionDuration: str = ""
    focusArea: str = ""
    points: int = Field(0, ge=0)
    completedWorkouts: int = Field(0, ge=0)
    gems: int = Field(0, ge=0)


DEFAULT_PROFILE = UserProfile(
    name="بطل نوفا",
    gender="male",
    age="24",
    weight="75",
    height="180",
    targetWeight="80",
    bodyFat="15",
    bodyType="mesomorph",
    activityLevel="moderate",
    sleepQuality="good",
    dietPreference="balanced",
    level=WorkoutDifficulty.INTERMEDIATE.value,
    injuries="لا يوجد",
    equipment="basic",
    daysPerWeek="4",
    sessionDuration="60",
    focusArea="لياقة شاملة",
    points=1250,
    gems=50,
    completedWorkouts=12,
)
