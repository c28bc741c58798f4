"""
Remote generation capability.

GenerationCapability is the only wire-level boundary of the pipeline.
OpenAICapability implements it on the OpenAI async SDK; tests substitute fakes.
"""
import base64
from typing import Callable, Optional, Protocol, Sequence

import httpx
import openai
from openai import AsyncOpenAI

from novacoach.core.config import settings
from novacoach.core.logger import logger, log_ai_call
from novacoach.models.generation import (
    BinaryPart,
    CapabilityResponse,
    ChatTurn,
    CitationPart,
    GenerationConfig,
    JobState,
    JobStatus,
    ModelTier,
    TextPart,
)


# Per-call timeout: 10s to connect, OPENAI_TIMEOUT_SECONDS for everything else.
OPENAI_TIMEOUT = openai.Timeout(settings.OPENAI_TIMEOUT_SECONDS, connect=10.0)

# Downloads larger than this are rejected while streaming.
MAX_ASSET_BYTES = 200 * 1024 * 1024

PromptPart = TextPart | BinaryPart


class GenerationCapability(Protocol):
    """Abstract remote generation service."""

    async def generate_structured(
        self,
        tier: ModelTier,
        prompt_parts: Sequence[PromptPart],
        output_schema: Optional[dict],
        config: GenerationConfig,
        history: Sequence[ChatTurn] = (),
    ) -> CapabilityResponse: ...

    async def generate_binary(
        self, tier: ModelTier, prompt_parts: Sequence[PromptPart], config: GenerationConfig
    ) -> CapabilityResponse: ...

    async def submit_video_job(self, tier: ModelTier, prompt: str, config: GenerationConfig) -> str: ...

    async def poll_job(self, handle: str) -> JobStatus: ...

    async def fetch_asset(self, locator: str, credential: Optional[str]) -> bytes: ...


# Builds a capability bound to one credential.
CapabilityFactory = Callable[[Optional[str]], GenerationCapability]


def model_for(tier: ModelTier) -> str:
    return {
        ModelTier.FAST: settings.FAST_MODEL,
        ModelTier.PRO: settings.PRO_MODEL,
        ModelTier.SEARCH: settings.SEARCH_MODEL,
        ModelTier.IMAGE: settings.IMAGE_MODEL,
        ModelTier.IMAGE_PRO: settings.IMAGE_PRO_MODEL,
        ModelTier.VIDEO: settings.VIDEO_MODEL,
    }[tier]


_IMAGE_SIZES = {
    "1:1": "1024x1024",
    "4:3": "1536x1024",
    "16:9": "1536x1024",
    "3:4": "1024x1536",
    "9:16": "1024x1536",
}
_IMAGE_QUALITY = {"1K": "low", "2K": "medium", "4K": "high"}
_VIDEO_SIZES = {
    ("16:9", "720p"): "1280x720",
    ("9:16", "720p"): "720x1280",
    ("16:9", "1080p"): "1792x1024",
    ("9:16", "1080p"): "1024x1792",
}


def _user_content(prompt_parts: Sequence[PromptPart]) -> list[dict]:
    content = []
    for part in prompt_parts:
        if part.tag == "binary":
            data = base64.b64encode(part.data).decode()
            content.append({
                "type": "image_url",
                "image_url": {"url": f"data:{part.mime_type};base64,{data}"}
            })
        else:
            content.append({"type": "text", "text": part.text})
    return content


def _prompt_text(prompt_parts: Sequence[PromptPart]) -> str:
    return "\n".join(part.text for part in prompt_parts if part.tag == "text")


class OpenAICapability:
    """GenerationCapability backed by the OpenAI API."""

    def __init__(self, api_key: Optional[str], base_url: Optional[str] = None):
        self.api_key = api_key
        self.base_url = (base_url or settings.OPENAI_BASE_URL).rstrip("/")
        self.client = AsyncOpenAI(api_key=api_key or "", base_url=self.base_url, timeout=OPENAI_TIMEOUT)

    async def generate_structured(
        self,
        tier: ModelTier,
        prompt_parts: Sequence[PromptPart],
        output_schema: Optional[dict],
        config: GenerationConfig,
        history: Sequence[ChatTurn] = (),
    ) -> CapabilityResponse:
        model = model_for(tier)
        log_ai_call("Chat Completions", model)

        messages = [
            {"role": "assistant" if turn.role == "model" else "user", "content": turn.text}
            for turn in history
        ]
        messages.append({"role": "user", "content": _user_content(prompt_parts)})

        kwargs = {"model": model, "messages": messages}
        if output_schema is not None:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": output_schema.get("title", "result"), "schema": output_schema},
            }
        if tier == ModelTier.SEARCH:
            # Search models reject sampling parameters.
            kwargs["web_search_options"] = {}
        elif config.temperature is not None:
            kwargs["temperature"] = config.temperature

        response = await self.client.chat.completions.create(**kwargs)

        message = response.choices[0].message
        parts: list = [TextPart(message.content or "")]
        for annotation in getattr(message, "annotations", None) or []:
            if getattr(annotation, "type", None) != "url_citation":
                continue
            cited = annotation.url_citation
            parts.append(CitationPart(uri=getattr(cited, "url", None), title=getattr(cited, "title", None)))
        return CapabilityResponse(parts=tuple(parts))

    async def generate_binary(
        self, tier: ModelTier, prompt_parts: Sequence[PromptPart], config: GenerationConfig
    ) -> CapabilityResponse:
        model = model_for(tier)
        prompt = _prompt_text(prompt_parts)
        sources = [part for part in prompt_parts if part.tag == "binary"]

        if sources:
            log_ai_call("Image Edit", model)
            source = sources[0]
            extension = source.mime_type.split("/")[-1]
            response = await self.client.images.edit(
                model=model,
                image=(f"source.{extension}", source.data, source.mime_type),
                prompt=prompt,
            )
        else:
            log_ai_call("Image Generation", model)
            response = await self.client.images.generate(
                model=model,
                prompt=prompt,
                size=_IMAGE_SIZES.get(config.aspect_ratio or "1:1", "1024x1024"),
                quality=_IMAGE_QUALITY.get(config.resolution or "1K", "low"),
                n=1,
            )

        parts = [
            BinaryPart(base64.b64decode(item.b64_json), "image/png")
            for item in (response.data or [])
            if getattr(item, "b64_json", None)
        ]
        return CapabilityResponse(parts=tuple(parts))

    async def submit_video_job(self, tier: ModelTier, prompt: str, config: GenerationConfig) -> str:
        model = model_for(tier)
        log_ai_call("Video Job", model)
        size = _VIDEO_SIZES.get((config.aspect_ratio or "16:9", config.resolution or "720p"), "1280x720")
        video = await self.client.videos.create(model=model, prompt=prompt, size=size)
        logger.info(f"Video job submitted: {video.id}")
        return video.id

    async def poll_job(self, handle: str) -> JobStatus:
        video = await self.client.videos.retrieve(handle)
        if video.status == "completed":
            return JobStatus(JobState.DONE, locator=f"{self.base_url}/videos/{video.id}/content")
        if video.status == "failed":
            message = getattr(getattr(video, "error", None), "message", None)
            return JobStatus(JobState.FAILED, error=str(message) if message else "Video generation failed")
        return JobStatus(JobState.PENDING)

    async def fetch_asset(self, locator: str, credential: Optional[str]) -> bytes:
        """Authenticated streaming download of a finished asset."""
        headers = {"Authorization": f"Bearer {credential}"} if credential else {}
        chunks = []
        total = 0
        async with httpx.AsyncClient(timeout=settings.ASSET_DOWNLOAD_TIMEOUT) as client:
            async with client.stream("GET", locator, headers=headers, follow_redirects=True) as response:
                response.raise_for_status()
                async for chunk in response.aiter_bytes(chunk_size=65536):
                    total += len(chunk)
                    if total > MAX_ASSET_BYTES:
                        raise ValueError("Asset too large: exceeds download limit")
                    chunks.append(chunk)

        content = b"".join(chunks)
        logger.info(f"Downloaded asset: {len(content)} bytes")
        return content


def openai_capability_factory(credential: Optional[str]) -> GenerationCapability:
    return OpenAICapability(api_key=credential)
