"""
Synchronous content client.

Sends a built request to the remote capability and returns a validated,
typed result. Every failure leaves as a ClassifiedError; nothing is retried.
"""
import base64
import time

from novacoach.core.errors import ClassifiedError, ParseError
from novacoach.core.logger import logger, log_error
from novacoach.models.generation import (
    BinaryPart,
    GenerationRequest,
    GenerationResult,
    ImageResult,
    IMAGE_INTENTS,
    Intent,
    ModelTier,
    StructuredResult,
    TextPart,
    TextResult,
)
from novacoach.services import contracts
from novacoach.services.capability import CapabilityFactory, openai_capability_factory
from novacoach.services.citations import extract_citations
from novacoach.services.credentials import GenerationContext
from novacoach.services.error_classifier import classify


# Intents whose structured output needs the higher-capability variant.
PRO_INTENTS = frozenset({Intent.PLAN_GENERATION, Intent.DAY_REGENERATION})


def select_model_tier(intent: Intent, structured: bool, use_search: bool = False) -> ModelTier:
    """Pick the model variant for an intent and output mode."""
    if intent == Intent.IMAGE_GENERATION:
        return ModelTier.IMAGE_PRO
    if intent == Intent.IMAGE_EDIT:
        return ModelTier.IMAGE
    if intent == Intent.VIDEO_GENERATION:
        return ModelTier.VIDEO
    if intent == Intent.CHAT and use_search:
        return ModelTier.SEARCH
    if structured and intent in PRO_INTENTS:
        return ModelTier.PRO
    return ModelTier.FAST


def prompt_parts_for(request: GenerationRequest) -> list:
    """Input media first, then the prompt text."""
    parts = [BinaryPart(media.data, media.mime_type) for media in request.media]
    parts.append(TextPart(request.prompt))
    return parts


def to_data_uri(part: BinaryPart) -> str:
    return f"data:{part.mime_type};base64,{base64.b64encode(part.data).decode()}"


class ContentClient:
    """Runs plans, reports, discovery, chat and image requests."""

    def __init__(self, capability_factory: CapabilityFactory = openai_capability_factory):
        self.capability_factory = capability_factory

    async def generate(self, request: GenerationRequest, context: GenerationContext) -> GenerationResult:
        """
        Run one request to completion.

        Args:
            request: Built request (any intent except video)
            context: Caller's credential selection

        Returns:
            StructuredResult, TextResult or ImageResult

        Raises:
            ClassifiedError: On any remote failure or contract violation
        """
        if request.intent == Intent.VIDEO_GENERATION:
            raise ValueError("Video requests go through JobClient.generate_video")

        if request.requires_credential:
            credential = await context.ensure_credential()
        else:
            credential = context.credential_for(paid=False)

        capability = self.capability_factory(credential)
        tier = select_model_tier(request.intent, request.structured, request.config.use_search)

        try:
            if request.intent in IMAGE_INTENTS:
                return await self._generate_image(capability, tier, request)
            if request.structured:
                return await self._generate_structured(capability, tier, request)
            return await self._generate_text(capability, tier, request)
        except ClassifiedError as e:
            log_error(f"{request.intent.value} generation", e)
            raise
        except Exception as e:
            log_error(f"{request.intent.value} generation", e)
            raise classify(e) from e

    async def _generate_structured(self, capability, tier, request: GenerationRequest) -> StructuredResult:
        contract = contracts.contract_for(request.intent)
        response = await capability.generate_structured(
            tier, prompt_parts_for(request), contract.json_schema(), request.config
        )
        if not response.text.strip():
            raise ParseError(f"{contract.name}: empty response text", contract=contract.name)

        data = contracts.validate(contract, response.text)
        if request.intent == Intent.EXERCISE_DISCOVERY:
            data = data.model_copy(update={"id": f"ai-{int(time.time() * 1000)}"})

        logger.info(f"{contract.name} validated")
        return StructuredResult(intent=request.intent, data=data)

    async def _generate_text(self, capability, tier, request: GenerationRequest) -> TextResult:
        response = await capability.generate_structured(
            tier, prompt_parts_for(request), None, request.config, history=request.history
        )
        text = response.text
        if not text.strip():
            raise ParseError.empty_response("text")

        citations = ()
        if request.intent == Intent.CHAT and request.config.use_search:
            citations = tuple(extract_citations(response))
        return TextResult(text=text, citations=citations)

    async def _generate_image(self, capability, tier, request: GenerationRequest) -> ImageResult:
        response = await capability.generate_binary(tier, prompt_parts_for(request), request.config)
        binaries = response.binary_parts
        if not binaries:
            raise ParseError.empty_response("image")
        return ImageResult(data_uri=to_data_uri(binaries[0]), mime_type=binaries[0].mime_type)
