"""
Training plan routes.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from novacoach.core.auth import verify_internal_secret
from novacoach.core.dependencies import get_content_client, get_generation_context, get_sequencer, get_store
from novacoach.core.limiter import PLAN_LIMIT, limiter
from novacoach.core.logger import log_request
from novacoach.models.contexts import DayRegenerationContext, ExerciseRegenerationContext, PlanContext
from novacoach.models.generation import Intent
from novacoach.models.schemas import DayRegenerationRequest, ExerciseRegenerationRequest, PlanRequest
from novacoach.services.content_client import ContentClient
from novacoach.services.credentials import GenerationContext
from novacoach.services.request_builder import build_request
from novacoach.services.retry import with_retry
from novacoach.services.sequencing import SlotSequencer
from novacoach.services.storage import JsonStore

router = APIRouter(dependencies=[Depends(verify_internal_secret)])

Client = Annotated[ContentClient, Depends(get_content_client)]
Context = Annotated[GenerationContext, Depends(get_generation_context)]
Store = Annotated[JsonStore, Depends(get_store)]
Sequencer = Annotated[SlotSequencer, Depends(get_sequencer)]


@router.post("/generate-plan")
@limiter.limit(PLAN_LIMIT)
async def generate_plan(request: Request, req: PlanRequest, client: Client, context: Context, store: Store):
    """
    Generate a 7-day development blueprint.

    Uses the stored athlete profile when the request omits one.
    """
    log_request("/generate-plan")

    built = build_request(
        Intent.PLAN_GENERATION,
        PlanContext(
            profile=req.profile or store.get_user_profile(),
            sport=req.sport,
            goals=req.goals,
            lang=req.lang,
        ),
    )
    result = await with_retry(lambda: client.generate(built, context), req.maxAttempts)
    return {"status": "success", "plan": result.data.model_dump()}


@router.post("/regenerate-day")
@limiter.limit(PLAN_LIMIT)
async def regenerate_day(
    request: Request,
    req: DayRegenerationRequest,
    client: Client,
    context: Context,
    store: Store,
    sequencer: Sequencer,
):
    """
    Replace a single day of an existing plan.

    A newer regeneration of the same day supersedes this one (409).
    """
    log_request("/regenerate-day")

    built = build_request(
        Intent.DAY_REGENERATION,
        DayRegenerationContext(
            profile=req.profile or store.get_user_profile(),
            sport=req.sport,
            day=req.day,
            lang=req.lang,
        ),
    )
    result = await sequencer.run(
        f"day:{req.day.day}", with_retry(lambda: client.generate(built, context), req.maxAttempts)
    )
    return {"status": "success", "day": result.data.model_dump()}


@router.post("/regenerate-exercise")
@limiter.limit(PLAN_LIMIT)
async def regenerate_exercise(request: Request, req: ExerciseRegenerationRequest, client: Client, context: Context):
    """Suggest an alternative (harder or varied) exercise as free text."""
    log_request("/regenerate-exercise")

    built = build_request(
        Intent.EXERCISE_REGENERATION,
        ExerciseRegenerationContext(exercise_name=req.exerciseName, lang=req.lang),
    )
    result = await with_retry(lambda: client.generate(built, context), req.maxAttempts)
    return {"status": "success", "alternative": result.text}
