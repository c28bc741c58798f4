"""
Exercise discovery and demonstration routes.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from novacoach.core.auth import verify_internal_secret
from novacoach.core.dependencies import get_content_client, get_generation_context, get_job_client
from novacoach.core.limiter import MEDIA_LIMIT, PLAN_LIMIT, limiter
from novacoach.core.logger import log_request
from novacoach.models.contexts import DiscoveryContext, ExerciseMediaContext
from novacoach.models.generation import Intent
from novacoach.models.schemas import DiscoveryRequest, ExerciseMediaRequest, ImageResponse
from novacoach.routes.media import video_response
from novacoach.services.content_client import ContentClient
from novacoach.services.credentials import GenerationContext
from novacoach.services.job_client import JobClient
from novacoach.services.request_builder import build_exercise_illustration, build_exercise_tutorial, build_request
from novacoach.services.retry import with_retry

router = APIRouter(dependencies=[Depends(verify_internal_secret)])

Client = Annotated[ContentClient, Depends(get_content_client)]
Jobs = Annotated[JobClient, Depends(get_job_client)]
Context = Annotated[GenerationContext, Depends(get_generation_context)]


@router.post("/discover-exercise")
@limiter.limit(PLAN_LIMIT)
async def discover_exercise(request: Request, req: DiscoveryRequest, client: Client, context: Context):
    """Research an exercise missing from the catalog."""
    log_request("/discover-exercise")

    built = build_request(
        Intent.EXERCISE_DISCOVERY,
        DiscoveryContext(query=req.query, filters=req.filters, lang=req.lang),
    )
    result = await with_retry(lambda: client.generate(built, context), req.maxAttempts)
    return {"status": "success", "exercise": result.data.model_dump()}


@router.post("/exercise-illustration", response_model=ImageResponse)
@limiter.limit(MEDIA_LIMIT)
async def exercise_illustration(request: Request, req: ExerciseMediaRequest, client: Client, context: Context):
    """Anatomical illustration of an exercise's form."""
    log_request("/exercise-illustration")

    built = build_exercise_illustration(ExerciseMediaContext(name=req.name, description=req.description))
    result = await with_retry(lambda: client.generate(built, context), req.maxAttempts)
    return {"status": "success", "image": result.data_uri}


@router.post("/exercise-tutorial")
@limiter.limit(MEDIA_LIMIT)
async def exercise_tutorial(request: Request, req: ExerciseMediaRequest, jobs: Jobs, context: Context):
    """Slow-motion tutorial video of an exercise. Long-running."""
    log_request("/exercise-tutorial")

    built = build_exercise_tutorial(ExerciseMediaContext(name=req.name, description=req.description))
    return await video_response(request, built, jobs, context, req.maxAttempts)
