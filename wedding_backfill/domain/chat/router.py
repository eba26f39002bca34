"""Chat event router - Server-Sent Events stream per conversation"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from .registry import ConversationEventRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["Chat"])

KEEPALIVE_SECONDS = 15.0

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(event: dict) -> str:
    return f"data: {json.dumps(event, default=str)}\n\n"


def get_event_registry(request: Request) -> ConversationEventRegistry:
    """Dependency injection for the process-wide registry"""
    return request.app.state.event_registry


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    # Authentication is handled upstream; the gateway forwards the user id
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id


@router.get("/events")
async def conversation_events(
    request: Request,
    conversation_id: Optional[str] = Query(None, alias="conversationId"),
    user_id: str = Depends(get_current_user_id),
    registry: ConversationEventRegistry = Depends(get_event_registry),
):
    """Stream new messages of one conversation to the connected user"""
    if not conversation_id:
        raise HTTPException(status_code=400, detail="Conversation ID required")

    subscription = registry.subscribe(conversation_id, user_id)
    logger.info(f"📡 User {user_id} connected to conversation {conversation_id}")

    async def stream():
        try:
            yield format_sse({"type": "connected", "conversationId": conversation_id})
            while not subscription.closed or not subscription.queue.empty():
                if await request.is_disconnected():
                    break
                event = await subscription.next_event(timeout=KEEPALIVE_SECONDS)
                if event is None:
                    if subscription.closed:
                        break
                    yield ": keepalive\n\n"
                    continue
                yield format_sse(event)
        finally:
            registry.unsubscribe(subscription)
            logger.info(f"👋 User {user_id} left conversation {conversation_id}")

    return StreamingResponse(stream(), media_type="text/event-stream", headers=SSE_HEADERS)
