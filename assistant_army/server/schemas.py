"""
API Schemas.

This module contains Pydantic models used for API request bodies and response validation.
These schemas define the interface contract between the client and the server.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from assistant_army.core.database.entities.conversations import MessageRole


class ChatRequest(BaseModel):
    """
    Schema for one chat turn.

    Omitting ``conversation_id`` starts a new conversation with the agent.
    """
    message: str = Field(
        ...,
        description="The user's message for this turn.",
        examples=["Summarize yesterday's support tickets."]
    )
    conversation_id: Optional[int] = Field(
        default=None,
        description="Existing conversation to continue. A new one is created when omitted.",
        examples=[42]
    )

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "message": "What's on my calendar today?",
            "conversation_id": None,
        }
    })


class ChatResponse(BaseModel):
    """Result of a non-streaming chat turn."""
    conversation_id: int = Field(..., description="Conversation the turn was recorded in.")
    message: str = Field(..., description="Final assistant answer.")


class ConversationRead(BaseModel):
    """Conversation summary for history listings."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    agent_id: int
    title: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class MessageRead(BaseModel):
    """Stored conversation message."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: int
    role: MessageRole
    content: str
    raw_data: Optional[Dict[str, Any]] = Field(default=None, description="Full run-format item.")
    agent_id: Optional[int] = Field(default=None, description="Agent that produced the message.")
    created_at: datetime


class ConversationDetail(BaseModel):
    """A conversation with its messages, oldest first."""
    conversation: ConversationRead
    messages: List[MessageRead]


class PoppedMessage(BaseModel):
    """Newest item removed from a conversation."""
    role: MessageRole
    content: str
    raw_data: Dict[str, Any]


class ClearResponse(BaseModel):
    conversation_id: int
    status: str = "cleared"
