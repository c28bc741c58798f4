"""
Coach chat session.

Messages are appended in send order: one send runs at a time, and the
user's message is recorded before the reply is requested.
"""
import asyncio
from typing import Iterable, Optional

from novacoach.models.contexts import ChatContext
from novacoach.models.generation import ChatMessage, Intent
from novacoach.services.content_client import ContentClient
from novacoach.services.credentials import GenerationContext
from novacoach.services.request_builder import build_request


class ChatSession:
    def __init__(
        self,
        client: ContentClient,
        context: GenerationContext,
        history: Optional[Iterable[ChatMessage]] = None,
    ):
        self.client = client
        self.context = context
        self.messages: list[ChatMessage] = list(history or [])
        self._lock = asyncio.Lock()

    async def send(self, text: str, use_search: bool = False) -> ChatMessage:
        """
        Send a user message and append the coach's reply.

        Raises:
            RequestValidationError: Empty message
            ClassifiedError: Generation failed; the user message stays recorded
        """
        async with self._lock:
            request = build_request(
                Intent.CHAT,
                ChatContext(
                    message=text,
                    history=[message.as_turn() for message in self.messages],
                    use_search=use_search,
                ),
            )
            self.messages.append(ChatMessage(role="user", text=request.prompt))

            result = await self.client.generate(request, self.context)
            reply = ChatMessage(role="model", text=result.text, citations=list(result.citations))
            self.messages.append(reply)
            return reply
