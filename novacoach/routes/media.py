"""
Image and video generation routes.

Paid capabilities: a credential must be selected (X-Provider-Key header or
the service key) before any call is made.
"""
import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from novacoach.core.auth import verify_internal_secret
from novacoach.core.dependencies import get_content_client, get_generation_context, get_job_client
from novacoach.core.limiter import MEDIA_LIMIT, limiter
from novacoach.core.logger import logger, log_request
from novacoach.models.contexts import ImageEditContext, ImageGenerationContext, VideoContext
from novacoach.models.generation import GenerationRequest, Intent
from novacoach.models.schemas import ImageEditRequest, ImageRequest, ImageResponse, VideoRequest
from novacoach.services import media
from novacoach.services.content_client import ContentClient
from novacoach.services.credentials import GenerationContext
from novacoach.services.job_client import CancellationToken, JobClient
from novacoach.services.request_builder import build_request
from novacoach.services.retry import with_retry

router = APIRouter(dependencies=[Depends(verify_internal_secret)])

Client = Annotated[ContentClient, Depends(get_content_client)]
Jobs = Annotated[JobClient, Depends(get_job_client)]
Context = Annotated[GenerationContext, Depends(get_generation_context)]

# How often a running video request checks whether the caller went away.
DISCONNECT_CHECK_SECONDS = 2.0


async def _cancel_on_disconnect(request: Request, token: CancellationToken) -> None:
    while not token.cancelled:
        if await request.is_disconnected():
            logger.info("Client disconnected, cancelling video job")
            token.cancel()
            return
        await asyncio.sleep(DISCONNECT_CHECK_SECONDS)


async def video_response(
    request: Request,
    built: GenerationRequest,
    jobs: JobClient,
    context: GenerationContext,
    max_attempts: int,
) -> FileResponse:
    """Run a video job, stream the file back, and delete it once sent."""
    token = CancellationToken()
    watcher = asyncio.create_task(_cancel_on_disconnect(request, token))
    try:
        asset = await with_retry(lambda: jobs.generate_video(built, context, token), max_attempts)
    finally:
        watcher.cancel()

    return FileResponse(
        asset.path,
        media_type=asset.mime_type,
        filename=asset.path.name,
        background=BackgroundTask(asset.release),
    )


@router.post("/generate-image", response_model=ImageResponse)
@limiter.limit(MEDIA_LIMIT)
async def generate_image(request: Request, req: ImageRequest, client: Client, context: Context):
    """Text-to-image with the pro image model."""
    log_request("/generate-image")

    built = build_request(
        Intent.IMAGE_GENERATION,
        ImageGenerationContext(prompt=req.prompt, aspect_ratio=req.aspectRatio, image_size=req.imageSize),
    )
    result = await with_retry(lambda: client.generate(built, context), req.maxAttempts)
    return {"status": "success", "image": result.data_uri}


@router.post("/edit-image", response_model=ImageResponse)
@limiter.limit(MEDIA_LIMIT)
async def edit_image(request: Request, req: ImageEditRequest, client: Client, context: Context):
    """Image-to-image edit of an uploaded photo."""
    log_request("/edit-image")

    built = build_request(
        Intent.IMAGE_EDIT,
        ImageEditContext(prompt=req.prompt, image=media.decode_image(req.image)),
    )
    result = await with_retry(lambda: client.generate(built, context), req.maxAttempts)
    return {"status": "success", "image": result.data_uri}


@router.post("/generate-video")
@limiter.limit(MEDIA_LIMIT)
async def generate_video(request: Request, req: VideoRequest, jobs: Jobs, context: Context):
    """
    Generate a video and return the file.

    Long-running: the job is polled until done or the wait budget expires.
    Disconnecting cancels the job's polling.
    """
    log_request("/generate-video")

    built = build_request(
        Intent.VIDEO_GENERATION,
        VideoContext(prompt=req.prompt, aspect_ratio=req.aspectRatio, resolution=req.resolution),
    )
    return await video_response(request, built, jobs, context, req.maxAttempts)
