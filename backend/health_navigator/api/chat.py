"""
Chat API endpoints - Conversation with the health assistant.
"""

from typing import List

from fastapi import APIRouter, Depends

from ..core.container import ServiceContainer
from ..models import ChatMessage, ChatReply, ChatRequest
from ..services import SessionState
from .deps import get_container, get_session_state

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/message", response_model=ChatReply)
async def send_message(
    message: ChatRequest,
    session: SessionState = Depends(get_session_state),
    container: ServiceContainer = Depends(get_container),
):
    """
    Send a chat message and get the assistant's reply.

    Model and network failures come back as a model turn carrying the error
    text, so the transcript always gains exactly two entries.
    """
    reply = await container.assistant.ask(session.transcript, message.text)
    return ChatReply(reply=reply, history=list(session.transcript.messages))


@router.get("/history", response_model=List[ChatMessage])
async def get_history(session: SessionState = Depends(get_session_state)):
    """Full transcript of this session, oldest first."""
    return list(session.transcript.messages)
