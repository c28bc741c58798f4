"""
Request builder: domain intent + context -> GenerationRequest.

Pure functions only. Every numeric and categorical field of the context is
rendered into the prompt, and the output language is always echoed.
"""
import json

from pydantic import BaseModel

from novacoach.core.config import settings
from novacoach.core.errors import RequestValidationError
from novacoach.models.contexts import (
    BiometricContext,
    ChatContext,
    DayRegenerationContext,
    DiscoveryContext,
    ExerciseMediaContext,
    ExerciseRegenerationContext,
    ImageEditContext,
    ImageGenerationContext,
    NutritionContext,
    PlanContext,
    VideoContext,
)
from novacoach.models.generation import GenerationConfig, GenerationRequest, Intent
from novacoach.models.profile import EQUIPMENT_DESCRIPTIONS, LANGUAGE_NAMES, UserProfile, WorkoutType


DEFAULT_EDIT_INSTRUCTION = "Enhance this photo while keeping the subject and pose unchanged."


def _language(lang: str) -> str:
    return f"{LANGUAGE_NAMES.get(lang, lang)} ({lang})"


def _sport(sport: WorkoutType) -> str:
    return f"{sport.name} ({sport.value})"


def describe_profile(profile: UserProfile) -> str:
    """Render every profile field the model needs as prompt lines."""
    equipment = EQUIPMENT_DESCRIPTIONS.get(profile.equipment, profile.equipment)
    lines = [
        f"- Name: {profile.name or 'Athlete'}",
        f"- Gender: {profile.gender}, Age: {profile.age}",
        f"- Biometrics: {profile.height}cm, {profile.weight}kg, Target Weight: {profile.targetWeight}kg",
        f"- Body Fat: {profile.bodyFat or 'unknown'}%, Body Type: {profile.bodyType or 'unknown'}",
        f"- Activity Level: {profile.activityLevel}, Sleep Quality: {profile.sleepQuality}",
        f"- Diet Preference: {profile.dietPreference}",
        f"- Level: {profile.level}, Training Environment: {equipment}",
        f"- Commitment: {profile.daysPerWeek} days/week, {profile.sessionDuration} mins/session",
        f"- Focus: {profile.focusArea or 'general'}, Constraints/Injuries: {profile.injuries or 'none'}",
    ]
    return "\n".join(lines)


# --- Plans ---

def _build_plan(ctx: PlanContext) -> GenerationRequest:
    prompt = f"""
Role: Elite Athletic Performance Director.
Task: Create a world-class 7-day development blueprint for {_sport(ctx.sport)}.
User Profile:
{describe_profile(ctx.profile)}
- Additional Goals: {ctx.goals or 'none'}

Structure:
Return a valid JSON object with:
- title: String
- weeklySchedule: Array of exactly 7 day objects, each with day, isRest,
  physical, technical, tactical, mental, reaction (each {{title, exercises}}),
  nutrition (meal tip for the day) and totalDuration
- coachTip: String (overall elite advice)

Notes:
1. If the environment is 'none', use bodyweight exercises only.
2. If the sport is REHAB, ensure safety for: {ctx.profile.injuries or 'none'}.
3. Respond in {_language(ctx.lang)}.
"""
    return GenerationRequest(
        intent=Intent.PLAN_GENERATION,
        prompt=prompt.strip(),
        config=GenerationConfig(temperature=settings.TEMPERATURE_PLAN),
    )


def _build_day(ctx: DayRegenerationContext) -> GenerationRequest:
    prompt = f"""
Regenerate this specific training day for {_sport(ctx.sport)}.
Previous routine: {ctx.day.model_dump_json()}
Follow the user profile:
{describe_profile(ctx.profile)}
Keep the same day label and return a single day object.
Respond in {_language(ctx.lang)}.
"""
    return GenerationRequest(
        intent=Intent.DAY_REGENERATION,
        prompt=prompt.strip(),
        config=GenerationConfig(temperature=settings.TEMPERATURE_PLAN),
    )


def _build_exercise_alternative(ctx: ExerciseRegenerationContext) -> GenerationRequest:
    if not ctx.exercise_name.strip():
        raise RequestValidationError("exercise_name cannot be empty")
    prompt = (
        f"Provide an advanced or varied intensity alternative for the following exercise: "
        f"{ctx.exercise_name.strip()}. Respond in {_language(ctx.lang)}."
    )
    return GenerationRequest(intent=Intent.EXERCISE_REGENERATION, prompt=prompt)


def _build_nutrition(ctx: NutritionContext) -> GenerationRequest:
    p = ctx.profile
    prompt = f"""
Create a precision nutrition plan for {p.name or 'the athlete'} with goal: {ctx.goals or 'general health'}.
Athlete profile:
{describe_profile(p)}

Focus on macro-nutrient balance and meal timings. Give dailyCalories, macros in grams,
waterIntake in liters, meals with time, name, calories, macros and ingredients,
and a list of supplements.
Respond in {_language(ctx.lang)}.
"""
    return GenerationRequest(
        intent=Intent.NUTRITION_PLAN,
        prompt=prompt.strip(),
        config=GenerationConfig(temperature=settings.TEMPERATURE_ANALYSIS),
    )


def _build_biometrics(ctx: BiometricContext) -> GenerationRequest:
    missing = [name for name in ("front_image", "side_image") if getattr(ctx, name) is None]
    if missing:
        raise RequestValidationError(f"Biometric analysis requires two photos, missing: {', '.join(missing)}")
    prompt = f"""
Perform a detailed biometric visual analysis for this athlete.
The first image is a front view, the second a side view.
{describe_profile(ctx.profile)}

Based on the images, provide an InBody style report estimating fat percentage,
muscle mass, skeletal muscle mass, BMR, visceral fat level, BMI, body type,
posture analysis, a symmetry score from 0 to 100, a health risk of low, moderate
or high, and a list of recommendations.
Respond in {_language(ctx.lang)}.
"""
    return GenerationRequest(
        intent=Intent.BIOMETRIC_ANALYSIS,
        prompt=prompt.strip(),
        media=(ctx.front_image, ctx.side_image),
        config=GenerationConfig(temperature=settings.TEMPERATURE_ANALYSIS),
    )


def _build_discovery(ctx: DiscoveryContext) -> GenerationRequest:
    if not ctx.query.strip():
        raise RequestValidationError("query cannot be empty")
    filters = json.dumps(ctx.filters, ensure_ascii=False, sort_keys=True)
    prompt = (
        f"Research or create an exercise description for: {ctx.query.strip()}. "
        f"Use these filters: {filters}. "
        f"Provide full technical details in {_language(ctx.lang)}."
    )
    return GenerationRequest(intent=Intent.EXERCISE_DISCOVERY, prompt=prompt)


def _build_chat(ctx: ChatContext) -> GenerationRequest:
    if not ctx.message.strip():
        raise RequestValidationError("message cannot be empty")
    return GenerationRequest(
        intent=Intent.CHAT,
        prompt=ctx.message.strip(),
        history=tuple(ctx.history),
        config=GenerationConfig(temperature=settings.TEMPERATURE_CHAT, use_search=ctx.use_search),
    )


# --- Media ---

def _build_image(ctx: ImageGenerationContext) -> GenerationRequest:
    if not ctx.prompt.strip():
        raise RequestValidationError("prompt cannot be empty")
    return GenerationRequest(
        intent=Intent.IMAGE_GENERATION,
        prompt=ctx.prompt.strip(),
        config=GenerationConfig(aspect_ratio=ctx.aspect_ratio, resolution=ctx.image_size),
    )


def _build_image_edit(ctx: ImageEditContext) -> GenerationRequest:
    if ctx.image is None:
        raise RequestValidationError("Image edit requires a source image")
    return GenerationRequest(
        intent=Intent.IMAGE_EDIT,
        prompt=ctx.prompt.strip() or DEFAULT_EDIT_INSTRUCTION,
        media=(ctx.image,),
    )


def _build_video(ctx: VideoContext) -> GenerationRequest:
    if not ctx.prompt.strip():
        raise RequestValidationError("prompt cannot be empty")
    return GenerationRequest(
        intent=Intent.VIDEO_GENERATION,
        prompt=ctx.prompt.strip(),
        config=GenerationConfig(aspect_ratio=ctx.aspect_ratio, resolution=ctx.resolution),
    )


_BUILDERS = {
    Intent.PLAN_GENERATION: (PlanContext, _build_plan),
    Intent.DAY_REGENERATION: (DayRegenerationContext, _build_day),
    Intent.EXERCISE_REGENERATION: (ExerciseRegenerationContext, _build_exercise_alternative),
    Intent.NUTRITION_PLAN: (NutritionContext, _build_nutrition),
    Intent.BIOMETRIC_ANALYSIS: (BiometricContext, _build_biometrics),
    Intent.EXERCISE_DISCOVERY: (DiscoveryContext, _build_discovery),
    Intent.CHAT: (ChatContext, _build_chat),
    Intent.IMAGE_GENERATION: (ImageGenerationContext, _build_image),
    Intent.IMAGE_EDIT: (ImageEditContext, _build_image_edit),
    Intent.VIDEO_GENERATION: (VideoContext, _build_video),
}


def build_request(intent: Intent, context: BaseModel) -> GenerationRequest:
    """
    Build a generation request for an intent.

    Args:
        intent: Domain purpose of the call
        context: The intent's context model

    Returns:
        Immutable GenerationRequest

    Raises:
        RequestValidationError: Wrong context type or missing required input
    """
    context_type, builder = _BUILDERS[Intent(intent)]
    if not isinstance(context, context_type):
        raise RequestValidationError(
            f"{Intent(intent).value} expects {context_type.__name__}, got {type(context).__name__}"
        )
    return builder(context)


def build_exercise_illustration(ctx: ExerciseMediaContext) -> GenerationRequest:
    """Anatomical illustration of an exercise (16:9, 2K)."""
    prompt = (
        f"A professional anatomical fitness illustration for the exercise: {ctx.name}. "
        f"Focus on body posture and muscle engagement. Professional studio lighting, clear background. "
        f"Technique: {ctx.description or ctx.name}"
    )
    return build_request(
        Intent.IMAGE_GENERATION,
        ImageGenerationContext(prompt=prompt, aspect_ratio="16:9", image_size="2K"),
    )


def build_exercise_tutorial(ctx: ExerciseMediaContext) -> GenerationRequest:
    """Slow-motion form demonstration video of an exercise (16:9)."""
    prompt = (
        f"A slow-motion professional training video demonstrating the correct form of {ctx.name}. "
        f"Focus on precision and anatomical movement. High definition cinematic tutorial."
    )
    return build_request(Intent.VIDEO_GENERATION, VideoContext(prompt=prompt, aspect_ratio="16:9"))
