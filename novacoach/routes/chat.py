"""
Coach chat route.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from novacoach.core.auth import verify_internal_secret
from novacoach.core.dependencies import get_content_client, get_generation_context
from novacoach.core.limiter import CHAT_LIMIT, limiter
from novacoach.core.logger import log_request
from novacoach.models.schemas import ChatRequest, ChatResponse
from novacoach.services.chat import ChatSession
from novacoach.services.content_client import ContentClient
from novacoach.services.credentials import GenerationContext
from novacoach.services.retry import with_retry

router = APIRouter(dependencies=[Depends(verify_internal_secret)])


@router.post("/chat", response_model=ChatResponse)
@limiter.limit(CHAT_LIMIT)
async def chat(
    request: Request,
    req: ChatRequest,
    client: Annotated[ContentClient, Depends(get_content_client)],
    context: Annotated[GenerationContext, Depends(get_generation_context)],
):
    """
    Continue a coach conversation.

    With useSearch, answers are grounded in live web search and the cited
    sources are returned alongside the reply.
    """
    log_request("/chat")

    # Each attempt replays the history into a fresh session.
    reply = await with_retry(
        lambda: ChatSession(client, context, history=req.history).send(req.message, use_search=req.useSearch),
        req.maxAttempts,
    )
    return ChatResponse(message=reply, citations=reply.citations)
