"""
Chat Models - Transcript entries exchanged with the assistant.
"""

from datetime import datetime, timezone
from typing import List, Literal
from pydantic import BaseModel, Field


class ChatSource(BaseModel):
    """A web citation attached to a grounded answer."""
    uri: str
    title: str


class ChatMessage(BaseModel):
    """One transcript entry."""
    role: Literal["user", "model"]
    text: str
    sources: List[ChatSource] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}


class ChatRequest(BaseModel):
    """A chat submission from the user."""
    text: str = ""


class ChatReply(BaseModel):
    """Result of one ask: the model turn plus the whole transcript."""
    reply: ChatMessage
    history: List[ChatMessage]
