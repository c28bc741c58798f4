"""
Tests for the long-running video job client.
"""
import asyncio
from unittest.mock import AsyncMock

import pytest

from novacoach.core.errors import ClassifiedError, ErrorKind, GenerationCancelled, ParseError
from novacoach.models.contexts import ChatContext, VideoContext
from novacoach.models.generation import Intent, JobState
from novacoach.services.credentials import CredentialSelection, GenerationContext
from novacoach.services.job_client import CancellationToken, JobClient
from novacoach.services.request_builder import build_request
from conftest import FakeCapability, FakeFactory


@pytest.fixture
def video_request():
    return build_request(Intent.VIDEO_GENERATION, VideoContext(prompt="sprint start, slow motion"))


def job_client(fake, tmp_path, **kwargs):
    kwargs.setdefault("poll_interval", 0)
    kwargs.setdefault("max_wait", 5)
    return JobClient(FakeFactory(fake), media_dir=str(tmp_path), **kwargs)


class TestPollLoop:
    """Tests for submit, poll and download."""

    @pytest.mark.parametrize("pending", [0, 1, 3])
    def test_pending_then_done(self, pending, video_request, generation_context, tmp_path):
        """N pending polls then done: N+1 polls, one download."""
        fake = FakeCapability(pending_polls=pending)

        asset = asyncio.run(job_client(fake, tmp_path).generate_video(video_request, generation_context))

        assert fake.polls == pending + 1
        assert len(fake.fetches) == 1
        assert asset.path.exists()
        assert asset.path.read_bytes() == fake.asset
        assert asset.mime_type == "video/mp4"

    def test_download_uses_same_credential(self, video_request, generation_context, tmp_path):
        fake = FakeCapability()
        asyncio.run(job_client(fake, tmp_path).generate_video(video_request, generation_context))
        assert fake.fetches == [(fake.locator, "user-key")]

    def test_wait_budget_exhausted(self, video_request, generation_context, tmp_path):
        """A job that never finishes ends in TIMEOUT and is never downloaded."""
        fake = FakeCapability(poll_forever=True)
        client = job_client(fake, tmp_path, poll_interval=0.01, max_wait=0.05)

        with pytest.raises(ClassifiedError) as exc_info:
            asyncio.run(client.generate_video(video_request, generation_context))

        assert exc_info.value.kind == ErrorKind.TIMEOUT
        assert fake.polls >= 1
        assert fake.fetches == []

    def test_failed_job_is_classified(self, video_request, generation_context, tmp_path):
        fake = FakeCapability(final_state=JobState.FAILED, job_error="Billing hard limit reached")

        with pytest.raises(ClassifiedError) as exc_info:
            asyncio.run(job_client(fake, tmp_path).generate_video(video_request, generation_context))

        assert exc_info.value.kind == ErrorKind.QUOTA_EXCEEDED
        assert fake.fetches == []

    def test_done_without_locator(self, video_request, generation_context, tmp_path):
        fake = FakeCapability(locator=None)
        with pytest.raises(ParseError) as exc_info:
            asyncio.run(job_client(fake, tmp_path).generate_video(video_request, generation_context))
        assert exc_info.value.diagnostic.startswith("EMPTY_RESPONSE")

    def test_empty_download(self, video_request, generation_context, tmp_path):
        fake = FakeCapability(asset=b"")
        with pytest.raises(ParseError):
            asyncio.run(job_client(fake, tmp_path).generate_video(video_request, generation_context))
        assert list(tmp_path.iterdir()) == []

    def test_unwritable_media_dir_is_classified(self, video_request, generation_context, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"")
        client = JobClient(FakeFactory(FakeCapability()), poll_interval=0, max_wait=5, media_dir=str(blocker / "media"))

        with pytest.raises(ClassifiedError) as exc_info:
            asyncio.run(client.generate_video(video_request, generation_context))

        assert exc_info.value.kind == ErrorKind.UNKNOWN
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_only_video_requests(self, generation_context, tmp_path):
        req = build_request(Intent.CHAT, ChatContext(message="hi"))
        with pytest.raises(ValueError):
            asyncio.run(job_client(FakeCapability(), tmp_path).generate_video(req, generation_context))


class TestSubmission:
    """Tests for submission failures and credentials."""

    def test_not_found_reopens_selection(self, video_request, tmp_path):
        """A 404 on submit re-opens credential selection and is surfaced."""
        handler = AsyncMock(return_value="other-key")
        context = GenerationContext(CredentialSelection(credential="user-key", handler=handler))
        fake = FakeCapability(submit_error=RuntimeError("Requested entity was not found."))

        with pytest.raises(ClassifiedError) as exc_info:
            asyncio.run(job_client(fake, tmp_path).generate_video(video_request, context))

        assert exc_info.value.kind == ErrorKind.RESOURCE_NOT_FOUND
        handler.assert_awaited_once()
        assert context.credentials.active_credential == "other-key"
        assert fake.polls == 0

    def test_not_found_without_handler_marks_credential_stale(self, video_request, tmp_path):
        context = GenerationContext(CredentialSelection(credential="user-key"))
        fake = FakeCapability(submit_error=RuntimeError("Requested entity was not found."))

        with pytest.raises(ClassifiedError):
            asyncio.run(job_client(fake, tmp_path).generate_video(video_request, context))

        assert context.credentials.active_credential is None

    def test_other_submit_errors_keep_selection(self, video_request, generation_context, tmp_path):
        fake = FakeCapability(submit_error=RuntimeError("Incorrect API key provided"))

        with pytest.raises(ClassifiedError) as exc_info:
            asyncio.run(job_client(fake, tmp_path).generate_video(video_request, generation_context))

        assert exc_info.value.kind == ErrorKind.CREDENTIAL_INVALID
        assert generation_context.credentials.active_credential == "user-key"

    def test_no_credential(self, video_request, tmp_path):
        context = GenerationContext(CredentialSelection(handler=AsyncMock(return_value=None)))
        fake = FakeCapability()

        with pytest.raises(ClassifiedError) as exc_info:
            asyncio.run(job_client(fake, tmp_path).generate_video(video_request, context))

        assert exc_info.value.kind == ErrorKind.CREDENTIAL_MISSING
        assert fake.calls == []


class TestCancellation:
    """Tests for best-effort cancellation."""

    def test_cancelled_before_start(self, video_request, generation_context, tmp_path):
        token = CancellationToken()
        token.cancel()
        fake = FakeCapability()

        with pytest.raises(GenerationCancelled):
            asyncio.run(job_client(fake, tmp_path).generate_video(video_request, generation_context, token))

        assert fake.polls == 0
        assert fake.fetches == []

    def test_cancel_while_polling(self, video_request, generation_context, tmp_path):
        """Cancelling stops polling and skips the download."""
        fake = FakeCapability(poll_forever=True)
        client = job_client(fake, tmp_path, poll_interval=0.01, max_wait=30)

        async def scenario():
            token = CancellationToken()
            task = asyncio.create_task(client.generate_video(video_request, generation_context, token))
            while fake.polls < 2:
                await asyncio.sleep(0.005)
            token.cancel()
            return await task

        with pytest.raises(GenerationCancelled):
            asyncio.run(scenario())

        assert fake.polls >= 2
        assert fake.fetches == []

    def test_token_sleep_wakes_on_cancel(self):
        async def scenario():
            token = CancellationToken()
            asyncio.get_running_loop().call_later(0.01, token.cancel)
            await asyncio.wait_for(token.sleep(30), timeout=1)
            return token.cancelled

        assert asyncio.run(scenario()) is True


class TestLocalAsset:

    def test_release_deletes_file_once(self, video_request, generation_context, tmp_path):
        asset = asyncio.run(job_client(FakeCapability(), tmp_path).generate_video(video_request, generation_context))

        asset.release()
        asset.release()

        assert asset.released is True
        assert not asset.path.exists()
        assert asset.uri.startswith("file://")
