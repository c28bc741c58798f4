"""
Long-running job client for video generation.

Submit -> poll every VIDEO_POLL_INTERVAL_SECONDS until done, failed or the
VIDEO_MAX_WAIT_SECONDS budget runs out -> one authenticated download ->
LocalAsset on disk.
"""
import asyncio
import os
import uuid
from pathlib import Path
from typing import Optional

from novacoach.core.config import settings
from novacoach.core.errors import ClassifiedError, ErrorKind, GenerationCancelled, ParseError
from novacoach.core.logger import logger, log_error
from novacoach.models.generation import AsyncJob, GenerationRequest, Intent, JobState, LocalAsset, ModelTier
from novacoach.services.capability import CapabilityFactory, GenerationCapability, openai_capability_factory
from novacoach.services.credentials import GenerationContext
from novacoach.services.error_classifier import classify


class CancellationToken:
    """Best-effort cancellation for a poll loop."""

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise GenerationCancelled("Generation cancelled by caller")

    async def sleep(self, seconds: float) -> None:
        """Sleep, waking early if cancelled."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass


class JobClient:
    """Runs video generation jobs to a local file."""

    def __init__(
        self,
        capability_factory: CapabilityFactory = openai_capability_factory,
        poll_interval: Optional[float] = None,
        max_wait: Optional[float] = None,
        media_dir: Optional[str] = None,
    ):
        self.capability_factory = capability_factory
        self.poll_interval = settings.VIDEO_POLL_INTERVAL_SECONDS if poll_interval is None else poll_interval
        self.max_wait = settings.VIDEO_MAX_WAIT_SECONDS if max_wait is None else max_wait
        self.media_dir = Path(media_dir or settings.MEDIA_DIR)

    async def generate_video(
        self,
        request: GenerationRequest,
        context: GenerationContext,
        cancel_token: Optional[CancellationToken] = None,
    ) -> LocalAsset:
        """
        Generate a video and download it.

        Args:
            request: Built VIDEO_GENERATION request
            context: Caller's credential selection
            cancel_token: Checked before every poll and before the download

        Returns:
            LocalAsset holding the video file

        Raises:
            ClassifiedError: Submission, polling, job or download failure; TIMEOUT
                when the wait budget is exhausted
            GenerationCancelled: If the token was cancelled
        """
        if request.intent != Intent.VIDEO_GENERATION:
            raise ValueError(f"JobClient only runs video requests, got {request.intent.value}")

        token = cancel_token or CancellationToken()
        credential = await context.ensure_credential()
        capability = self.capability_factory(credential)

        try:
            handle = await capability.submit_video_job(ModelTier.VIDEO, request.prompt, request.config)
        except Exception as e:
            error = classify(e)
            log_error("Video submission", e)
            if error.kind == ErrorKind.RESOURCE_NOT_FOUND:
                await context.credentials.reopen_selection()
            raise error from e

        job = await self._wait_for(capability, AsyncJob(handle=handle), token)

        if job.state == JobState.FAILED:
            error = classify(job.error or "Video generation failed")
            log_error("Video job", error)
            raise error
        if not job.locator:
            raise ParseError.empty_response("video locator")

        token.raise_if_cancelled()
        try:
            content = await capability.fetch_asset(job.locator, credential)
        except Exception as e:
            log_error("Video download", e)
            raise classify(e) from e
        if not content:
            raise ParseError.empty_response("video bytes")

        try:
            asset = await asyncio.to_thread(self._materialize, content)
        except OSError as e:
            log_error("Video save", e)
            raise classify(e) from e
        if token.cancelled:
            asset.release()
            token.raise_if_cancelled()
        logger.info(f"Video job {handle} finished after {job.polls} polls")
        return asset

    async def _wait_for(self, capability: GenerationCapability, job: AsyncJob, token: CancellationToken) -> AsyncJob:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.max_wait

        while True:
            token.raise_if_cancelled()
            await token.sleep(max(0.0, min(self.poll_interval, deadline - loop.time())))
            token.raise_if_cancelled()

            try:
                status = await capability.poll_job(job.handle)
            except Exception as e:
                log_error("Video poll", e)
                raise classify(e) from e
            job.apply(status)

            if job.state != JobState.PENDING:
                return job
            if loop.time() >= deadline:
                raise ClassifiedError(
                    ErrorKind.TIMEOUT,
                    f"Video job {job.handle} still pending after {self.max_wait}s ({job.polls} polls)",
                )

    def _materialize(self, content: bytes) -> LocalAsset:
        os.makedirs(self.media_dir, exist_ok=True)
        path = self.media_dir / f"video-{uuid.uuid4().hex}.mp4"
        with open(path, "wb") as f:
            f.write(content)
        return LocalAsset(path=path, mime_type="video/mp4", size=len(content))
