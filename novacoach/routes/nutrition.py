"""
Nutrition and body-scan routes.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from novacoach.core.auth import verify_internal_secret
from novacoach.core.dependencies import get_content_client, get_generation_context, get_store
from novacoach.core.limiter import MEDIA_LIMIT, PLAN_LIMIT, limiter
from novacoach.core.logger import log_request
from novacoach.models.contexts import BiometricContext, NutritionContext
from novacoach.models.generation import Intent
from novacoach.models.schemas import BodyScanRequest, NutritionRequest
from novacoach.services import media
from novacoach.services.content_client import ContentClient
from novacoach.services.credentials import GenerationContext
from novacoach.services.request_builder import build_request
from novacoach.services.retry import with_retry
from novacoach.services.storage import JsonStore

router = APIRouter(dependencies=[Depends(verify_internal_secret)])

Client = Annotated[ContentClient, Depends(get_content_client)]
Context = Annotated[GenerationContext, Depends(get_generation_context)]
Store = Annotated[JsonStore, Depends(get_store)]


@router.post("/generate-nutrition")
@limiter.limit(PLAN_LIMIT)
async def generate_nutrition(request: Request, req: NutritionRequest, client: Client, context: Context, store: Store):
    """
    Generate a precision daily nutrition plan.

    Calories, macro split, water target, timed meals and supplements.
    """
    log_request("/generate-nutrition")

    built = build_request(
        Intent.NUTRITION_PLAN,
        NutritionContext(profile=req.profile or store.get_user_profile(), goals=req.goals, lang=req.lang),
    )
    result = await with_retry(lambda: client.generate(built, context), req.maxAttempts)
    return {"status": "success", "plan": result.data.model_dump()}


@router.post("/analyze-body")
@limiter.limit(MEDIA_LIMIT)
async def analyze_body(request: Request, req: BodyScanRequest, client: Client, context: Context, store: Store):
    """
    Estimate an InBody-style report from a front and a side photo.

    Photos are decoded and type-checked locally before anything is sent.
    """
    log_request("/analyze-body")

    built = build_request(
        Intent.BIOMETRIC_ANALYSIS,
        BiometricContext(
            profile=req.profile or store.get_user_profile(),
            front_image=media.decode_image(req.frontImage, "frontImage"),
            side_image=media.decode_image(req.sideImage, "sideImage"),
            lang=req.lang,
        ),
    )
    result = await with_retry(lambda: client.generate(built, context), req.maxAttempts)
    return {"status": "success", "report": result.data.model_dump()}
