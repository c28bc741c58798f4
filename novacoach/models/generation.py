"""
Provider-agnostic request, response and job models for the generation pipeline.
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Intent(str, Enum):
    """Domain purpose of a generation call."""

    PLAN_GENERATION = "plan_generation"
    DAY_REGENERATION = "day_regeneration"
    EXERCISE_REGENERATION = "exercise_regeneration"
    NUTRITION_PLAN = "nutrition_plan"
    BIOMETRIC_ANALYSIS = "biometric_analysis"
    EXERCISE_DISCOVERY = "exercise_discovery"
    CHAT = "chat"
    IMAGE_GENERATION = "image_generation"
    IMAGE_EDIT = "image_edit"
    VIDEO_GENERATION = "video_generation"


STRUCTURED_INTENTS = frozenset({
    Intent.PLAN_GENERATION,
    Intent.DAY_REGENERATION,
    Intent.NUTRITION_PLAN,
    Intent.BIOMETRIC_ANALYSIS,
    Intent.EXERCISE_DISCOVERY,
})

IMAGE_INTENTS = frozenset({Intent.IMAGE_GENERATION, Intent.IMAGE_EDIT})

# Paid capabilities: an active credential must be selected before the call.
CREDENTIALED_INTENTS = IMAGE_INTENTS | {Intent.VIDEO_GENERATION}


class ModelTier(str, Enum):
    """Capability variant requested from the remote service."""

    FAST = "fast"
    PRO = "pro"
    SEARCH = "search"
    IMAGE = "image"
    IMAGE_PRO = "image_pro"
    VIDEO = "video"


# --- Request ---

class MediaBlob(BaseModel):
    """Input media (image bytes + MIME type)."""
    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str = "image/jpeg"


class ChatTurn(BaseModel):
    """One prior message of a chat session."""
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "model"]
    text: str


class GenerationConfig(BaseModel):
    """Per-request generation knobs."""
    model_config = ConfigDict(frozen=True)

    aspect_ratio: Optional[str] = None
    resolution: Optional[str] = None
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0)
    use_search: bool = False


class GenerationRequest(BaseModel):
    """A fully built, immutable request ready for a client."""
    model_config = ConfigDict(frozen=True)

    intent: Intent
    prompt: str
    media: tuple[MediaBlob, ...] = ()
    history: tuple[ChatTurn, ...] = ()
    config: GenerationConfig = GenerationConfig()

    @property
    def structured(self) -> bool:
        return self.intent in STRUCTURED_INTENTS

    @property
    def requires_credential(self) -> bool:
        return self.intent in CREDENTIALED_INTENTS


# --- Capability response parts ---

@dataclass(frozen=True)
class TextPart:
    text: str
    tag: Literal["text"] = "text"


@dataclass(frozen=True)
class BinaryPart:
    data: bytes
    mime_type: str = "image/png"
    tag: Literal["binary"] = "binary"


@dataclass(frozen=True)
class CitationPart:
    uri: Optional[str]
    title: Optional[str] = None
    tag: Literal["citation"] = "citation"


ResponsePart = Union[TextPart, BinaryPart, CitationPart]


@dataclass(frozen=True)
class CapabilityResponse:
    """Raw remote response, normalized into tagged parts."""

    parts: tuple = ()

    @property
    def text(self) -> str:
        return "".join(part.text for part in self.parts if part.tag == "text")

    @property
    def binary_parts(self) -> list[BinaryPart]:
        return [part for part in self.parts if part.tag == "binary"]


# --- Results ---

class Citation(BaseModel):
    """A web source cited by a search-augmented answer."""
    model_config = ConfigDict(frozen=True)

    title: str
    uri: str


class ChatMessage(BaseModel):
    """A chat message as shown to the user, with any cited sources."""

    role: Literal["user", "model"]
    text: str
    citations: list[Citation] = []

    def as_turn(self) -> ChatTurn:
        return ChatTurn(role=self.role, text=self.text)


@dataclass(frozen=True)
class StructuredResult:
    intent: Intent
    data: BaseModel
    kind: Literal["structured"] = "structured"


@dataclass(frozen=True)
class TextResult:
    text: str
    citations: tuple[Citation, ...] = ()
    kind: Literal["text"] = "text"


@dataclass(frozen=True)
class ImageResult:
    data_uri: str
    mime_type: str = "image/png"
    kind: Literal["image"] = "image"


@dataclass
class LocalAsset:
    """A downloaded binary on local disk; release() deletes it."""

    path: Path
    mime_type: str = "video/mp4"
    size: int = 0
    released: bool = False

    @property
    def uri(self) -> str:
        return self.path.as_uri()

    def release(self) -> None:
        if self.released:
            return
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        self.released = True


@dataclass(frozen=True)
class VideoResult:
    asset: LocalAsset
    kind: Literal["video"] = "video"


GenerationResult = Union[StructuredResult, TextResult, ImageResult, VideoResult]


# --- Long-running jobs ---

class JobState(str, Enum):
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class JobStatus:
    """Snapshot returned by a single poll."""

    state: JobState
    locator: Optional[str] = None
    error: Optional[str] = None


@dataclass
class AsyncJob:
    """A submitted long-running generation, advanced only by polling."""

    handle: str
    state: JobState = JobState.PENDING
    locator: Optional[str] = None
    error: Optional[str] = None
    polls: int = field(default=0)

    def apply(self, status: JobStatus) -> None:
        self.polls += 1
        self.state = status.state
        self.locator = status.locator
        self.error = status.error
