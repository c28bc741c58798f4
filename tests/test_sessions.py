"""
Tests for credential selection, caller-side retry, slot sequencing and chat sessions.
"""
import asyncio
import json

import pytest

from novacoach.core.errors import ClassifiedError, ErrorKind, RequestValidationError, StaleResultError
from novacoach.models.generation import ChatMessage, Citation
from novacoach.services.chat import ChatSession
from novacoach.services.content_client import ContentClient
from novacoach.services.credentials import CredentialSelection, GenerationContext
from novacoach.services.retry import with_retry
from novacoach.services.sequencing import SlotSequencer
from conftest import FakeCapability, FakeFactory


class TestCredentialSelection:
    """Tests for the credential lifecycle."""

    def test_unset_until_selected(self):
        selection = CredentialSelection()
        assert selection.active_credential is None
        selection.select("k1")
        assert selection.active_credential == "k1"

    def test_blank_selection_ignored(self):
        selection = CredentialSelection(credential="k1")
        selection.select("")
        assert selection.active_credential == "k1"

    def test_prompt_waits_for_select(self):
        """Without a handler, the flow blocks until select() is called."""
        async def scenario():
            context = GenerationContext(CredentialSelection())
            asyncio.get_running_loop().call_later(0.01, context.credentials.select, "picked")
            return await asyncio.wait_for(context.ensure_credential(), timeout=1)

        assert asyncio.run(scenario()) == "picked"

    def test_unpaid_falls_back_to_default(self):
        context = GenerationContext(CredentialSelection(), default_credential="service")
        assert context.credential_for(paid=False) == "service"
        assert context.credential_for(paid=True) is None


class TestWithRetry:
    """Tests for caller-side retry."""

    def test_single_attempt_by_default(self):
        calls = []

        async def attempt():
            calls.append(1)
            raise ClassifiedError(ErrorKind.UNKNOWN, "boom")

        with pytest.raises(ClassifiedError):
            asyncio.run(with_retry(attempt))
        assert len(calls) == 1

    def test_retries_until_success(self):
        calls = []

        async def attempt():
            calls.append(1)
            if len(calls) < 3:
                raise ClassifiedError(ErrorKind.TIMEOUT)
            return "ok"

        assert asyncio.run(with_retry(attempt, max_attempts=3, min_wait=0, max_wait=0)) == "ok"
        assert len(calls) == 3

    def test_lambda_wrapped_coroutine_is_awaited(self):
        """Routes pass `lambda: client.generate(...)`, a plain function returning a coroutine."""
        async def op():
            return 42

        assert asyncio.run(with_retry(lambda: op(), 1)) == 42

    def test_lambda_wrapped_coroutine_is_retried(self):
        calls = []

        async def op():
            calls.append(1)
            if len(calls) == 1:
                raise ClassifiedError(ErrorKind.TIMEOUT)
            return "ok"

        assert asyncio.run(with_retry(lambda: op(), max_attempts=3, min_wait=0, max_wait=0)) == "ok"
        assert len(calls) == 2

    def test_quota_not_retried_immediately(self):
        calls = []

        async def attempt():
            calls.append(1)
            raise ClassifiedError(ErrorKind.QUOTA_EXCEEDED)

        with pytest.raises(ClassifiedError):
            asyncio.run(with_retry(attempt, max_attempts=3, min_wait=0, max_wait=0))
        assert len(calls) == 1

    def test_input_errors_not_retried(self):
        calls = []

        async def attempt():
            calls.append(1)
            raise RequestValidationError("bad input")

        with pytest.raises(RequestValidationError):
            asyncio.run(with_retry(attempt, max_attempts=3, min_wait=0, max_wait=0))
        assert len(calls) == 1


class TestSlotSequencer:
    """Tests for stale-result suppression."""

    def test_older_result_is_discarded(self):
        async def scenario():
            sequencer = SlotSequencer()
            release_first = asyncio.Event()

            async def slow():
                await release_first.wait()
                return "first"

            async def fast():
                return "second"

            first = asyncio.create_task(sequencer.run("day-3", slow()))
            await asyncio.sleep(0)
            second = await sequencer.run("day-3", fast())
            release_first.set()
            with pytest.raises(StaleResultError):
                await first
            return second

        assert asyncio.run(scenario()) == "second"

    def test_older_failure_is_discarded(self):
        async def scenario():
            sequencer = SlotSequencer()
            gate = asyncio.Event()

            async def failing():
                await gate.wait()
                raise ClassifiedError(ErrorKind.UNKNOWN)

            async def ok():
                return 1

            first = asyncio.create_task(sequencer.run("plan", failing()))
            await asyncio.sleep(0)
            await sequencer.run("plan", ok())
            gate.set()
            with pytest.raises(StaleResultError) as exc_info:
                await first
            return exc_info.value

        error = asyncio.run(scenario())
        assert (error.seq, error.latest) == (1, 2)
        assert isinstance(error.__cause__, ClassifiedError)

    def test_slots_are_independent(self):
        sequencer = SlotSequencer()
        a = sequencer.begin("a")
        sequencer.begin("b")
        assert sequencer.is_current("a", a)


class TestChatSession:
    """Tests for ordered chat history."""

    def test_send_appends_user_then_reply(self, generation_context):
        fake = FakeCapability(text="Drink water.")
        session = ChatSession(ContentClient(FakeFactory(fake)), generation_context)

        reply = asyncio.run(session.send("what now?"))

        assert reply.text == "Drink water."
        assert [(m.role, m.text) for m in session.messages] == [("user", "what now?"), ("model", "Drink water.")]

    def test_history_is_sent_as_turns(self, generation_context):
        fake = FakeCapability(text="Yes.")
        history = [ChatMessage(role="user", text="hi"), ChatMessage(role="model", text="hello")]
        session = ChatSession(ContentClient(FakeFactory(fake)), generation_context, history=history)

        asyncio.run(session.send("again?"))

        sent = fake.calls[0]["history"]
        assert [(t.role, t.text) for t in sent] == [("user", "hi"), ("model", "hello")]

    def test_concurrent_sends_keep_order(self, generation_context):
        fake = FakeCapability(text="reply")
        session = ChatSession(ContentClient(FakeFactory(fake)), generation_context)

        async def scenario():
            await asyncio.gather(session.send("one"), session.send("two"))

        asyncio.run(scenario())

        assert [m.role for m in session.messages] == ["user", "model", "user", "model"]
        assert [m.text for m in session.messages if m.role == "user"] == ["one", "two"]
        assert len(fake.calls[1]["history"]) == 2

    def test_failed_send_keeps_user_message(self, generation_context):
        session = ChatSession(ContentClient(FakeFactory(FakeCapability(error=RuntimeError("down")))), generation_context)

        with pytest.raises(ClassifiedError):
            asyncio.run(session.send("hello?"))

        assert [m.role for m in session.messages] == ["user"]

    def test_search_reply_carries_citations(self, generation_context):
        fake = FakeCapability(text="Per the study...", citations=[("Study", "https://study.example.org")])
        session = ChatSession(ContentClient(FakeFactory(fake)), generation_context)

        reply = asyncio.run(session.send("latest research on creatine?", use_search=True))

        assert reply.citations == [Citation(title="Study", uri="https://study.example.org")]
        assert json.loads(reply.model_dump_json())["citations"][0]["uri"] == "https://study.example.org"

    def test_empty_message_rejected(self, generation_context):
        session = ChatSession(ContentClient(FakeFactory(FakeCapability(text="x"))), generation_context)
        with pytest.raises(RequestValidationError):
            asyncio.run(session.send("  "))
        assert session.messages == []
