"""
Pytest fixtures for the Nova Coach service tests.
"""
import base64
import copy
import io
import json

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Mock environment variables before importing app
import os
os.environ.setdefault("OPENAI_API_KEY", "test-api-key")
os.environ.setdefault("INTERNAL_API_SECRET", "test-internal-secret")
os.environ.setdefault("NOVA_MEDIA_DIR", "/tmp/novacoach-test-media")

from novacoach.core import dependencies
from novacoach.core.config import settings
from novacoach.core.limiter import limiter
from novacoach.main import app
from novacoach.models.generation import (
    BinaryPart,
    CapabilityResponse,
    CitationPart,
    JobState,
    JobStatus,
    TextPart,
)
from novacoach.services.content_client import ContentClient
from novacoach.services.credentials import CredentialSelection, GenerationContext
from novacoach.services.job_client import JobClient
from novacoach.services.sequencing import SlotSequencer
from novacoach.services.storage import JsonStore


INTERNAL_HEADERS = {"X-Internal-Secret": "test-internal-secret"}


class FakeCapability:
    """In-memory GenerationCapability with scripted responses."""

    def __init__(
        self,
        text="",
        binaries=(),
        citations=(),
        error=None,
        submit_error=None,
        pending_polls=0,
        poll_forever=False,
        final_state=JobState.DONE,
        job_error=None,
        locator="https://files.example.com/videos/job-1/content",
        asset=b"\x00\x00\x00\x18ftypmp42",
    ):
        self.text = text
        self.binaries = list(binaries)
        self.citations = list(citations)
        self.error = error
        self.submit_error = submit_error
        self.pending_polls = pending_polls
        self.poll_forever = poll_forever
        self.final_state = final_state
        self.job_error = job_error
        self.locator = locator
        self.asset = asset

        self.calls = []
        self.polls = 0
        self.fetches = []

    async def generate_structured(self, tier, prompt_parts, output_schema, config, history=()):
        self.calls.append({
            "method": "generate_structured",
            "tier": tier,
            "parts": list(prompt_parts),
            "schema": output_schema,
            "config": config,
            "history": tuple(history),
        })
        if self.error:
            raise self.error
        parts = [TextPart(self.text)]
        parts.extend(CitationPart(uri=uri, title=title) for title, uri in self.citations)
        return CapabilityResponse(parts=tuple(parts))

    async def generate_binary(self, tier, prompt_parts, config):
        self.calls.append({"method": "generate_binary", "tier": tier, "parts": list(prompt_parts), "config": config})
        if self.error:
            raise self.error
        return CapabilityResponse(parts=tuple(BinaryPart(data, "image/png") for data in self.binaries))

    async def submit_video_job(self, tier, prompt, config):
        self.calls.append({"method": "submit_video_job", "tier": tier, "prompt": prompt, "config": config})
        if self.submit_error:
            raise self.submit_error
        return "job-1"

    async def poll_job(self, handle):
        self.polls += 1
        if self.poll_forever or self.polls <= self.pending_polls:
            return JobStatus(JobState.PENDING)
        if self.final_state == JobState.FAILED:
            return JobStatus(JobState.FAILED, error=self.job_error)
        return JobStatus(JobState.DONE, locator=self.locator)

    async def fetch_asset(self, locator, credential):
        self.fetches.append((locator, credential))
        return self.asset


class FakeFactory:
    """Capability factory that records the credential of every call."""

    def __init__(self, capability):
        self.capability = capability
        self.credentials = []

    def __call__(self, credential):
        self.credentials.append(credential)
        return self.capability


class StatusError(Exception):
    """Stand-in for an SDK error carrying an HTTP status."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


def day(label, rest=False):
    pillar = {"title": "Block", "exercises": ["Squat", "Plank"]}
    return {
        "day": label,
        "isRest": rest,
        "physical": dict(pillar),
        "technical": dict(pillar),
        "tactical": dict(pillar),
        "mental": {"title": "Focus", "exercises": ["Box breathing"]},
        "reaction": {"title": "Reflex", "exercises": ["Ball drops"]},
        "nutrition": "High protein breakfast",
        "totalDuration": "60 min",
    }


@pytest.fixture
def sample_plan_payload():
    """7-day plan as the model returns it."""
    return {
        "title": "Hypertrophy Blueprint",
        "weeklySchedule": [day(f"Day {i}", rest=i in (4, 7)) for i in range(1, 8)],
        "coachTip": "Sleep 8 hours.",
    }


@pytest.fixture
def sample_day_payload():
    return day("Day 3: Speed", rest=False)


@pytest.fixture
def sample_nutrition_payload():
    macros = {"protein": 40, "carbs": 60, "fats": 15}
    return {
        "dailyCalories": 2600,
        "macros": {"protein": 180, "carbs": 280, "fats": 70},
        "waterIntake": 3.5,
        "meals": [
            {"time": "08:00", "name": "Oats & eggs", "calories": 650, "macros": macros, "ingredients": ["oats", "eggs"]},
            {"time": "13:00", "name": "Chicken rice", "calories": 800, "macros": macros, "ingredients": ["chicken", "rice"]},
        ],
        "supplements": ["Creatine 5g"],
    }


@pytest.fixture
def sample_report_payload():
    return {
        "fatPercentage": 16.5,
        "muscleMass": "38kg",
        "skeletalMuscleMass": "33.1kg",
        "bmr": 1750,
        "visceralFat": 6,
        "bmi": 23.1,
        "bodyType": "mesomorph",
        "postureAnalysis": "Slight anterior pelvic tilt.",
        "symmetryScore": 88,
        "healthRisk": "low",
        "recommendations": ["Hip flexor stretches"],
    }


@pytest.fixture
def sample_exercise_payload():
    return {
        "name": "Copenhagen Plank",
        "category": "STRENGTH",
        "description": "Adductor-focused side plank.",
        "image": "https://images.example.com/copenhagen.jpg",
        "duration": "3 x 30s",
        "ageGroups": ["ADULT"],
        "location": "HOME",
        "difficulty": "ADVANCED",
        "muscleGroup": "CORE",
        "instructions": ["Lie on your side", "Place top leg on bench", "Lift hips"],
    }


@pytest.fixture
def copy_payload():
    return copy.deepcopy


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), color=(190, 242, 100)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_base64(png_bytes):
    return base64.b64encode(png_bytes).decode()


@pytest.fixture
def generation_context():
    """Context with a selected credential and a service fallback key."""
    return GenerationContext(
        credentials=CredentialSelection(credential="user-key"),
        default_credential="service-key",
    )


@pytest.fixture
def fake_capability():
    return FakeCapability()


@pytest.fixture
def api(tmp_path, fake_capability, monkeypatch):
    """
    TestClient wired to a fake capability and a temporary store.

    Yields (client, fake_capability).
    """
    monkeypatch.setattr(settings, "INTERNAL_API_SECRET", "test-internal-secret")
    factory = FakeFactory(fake_capability)
    store = JsonStore(str(tmp_path / "store.json"))
    app.dependency_overrides[dependencies.get_content_client] = lambda: ContentClient(factory)
    app.dependency_overrides[dependencies.get_job_client] = lambda: JobClient(
        factory, poll_interval=0, max_wait=5, media_dir=str(tmp_path / "media")
    )
    app.dependency_overrides[dependencies.get_store] = lambda: store
    sequencer = SlotSequencer()
    app.dependency_overrides[dependencies.get_sequencer] = lambda: sequencer
    limiter.enabled = False
    try:
        yield TestClient(app, headers=INTERNAL_HEADERS), fake_capability
    finally:
        app.dependency_overrides.clear()
        limiter.enabled = True


def as_json(payload) -> str:
    return json.dumps(payload)
