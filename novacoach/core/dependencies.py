"""
Shared service instances and FastAPI dependencies.
"""
from typing import Annotated, Optional

from fastapi import Header

from novacoach.core.config import settings
from novacoach.services.content_client import ContentClient
from novacoach.services.credentials import CredentialSelection, GenerationContext
from novacoach.services.job_client import JobClient
from novacoach.services.sequencing import SlotSequencer
from novacoach.services.storage import JsonStore


content_client = ContentClient()
job_client = JobClient()
store = JsonStore()
sequencer = SlotSequencer()


async def _service_credential() -> Optional[str]:
    # Selection flow for the HTTP surface: fall back to the service key.
    return settings.OPENAI_API_KEY or None


def request_locale(accept_language: str) -> str:
    """Language for user-facing error messages."""
    return "en" if accept_language.lower().startswith("en") else settings.DEFAULT_LANGUAGE


def get_generation_context(x_provider_key: Annotated[str, Header()] = "") -> GenerationContext:
    """Per-request credential selection. A caller-supplied key wins over the service key."""
    return GenerationContext(
        credentials=CredentialSelection(credential=x_provider_key or None, handler=_service_credential),
        default_credential=settings.OPENAI_API_KEY or None,
    )


def get_content_client() -> ContentClient:
    return content_client


def get_job_client() -> JobClient:
    return job_client


def get_store() -> JsonStore:
    return store


def get_sequencer() -> SlotSequencer:
    return sequencer
