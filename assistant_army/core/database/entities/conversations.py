"""
Conversation entity models.

This module contains the database entities for conversation and message
persistence. A conversation is the ordered history between one owner and
one agent; every message keeps a display projection for listing/search plus
the full run-format payload needed to replay it into a later run.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, utc_now


class MessageRole(str, Enum):
    """Role of message sender in conversation."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Conversation(Base, table=True):
    """Persistent conversation between an owner and an agent.

    Table: conversations
    """

    __tablename__ = "conversations"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(index=True)
    agent_id: int = Field(foreign_key="agents.id", index=True)
    title: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Conversation(id={self.id}, owner_id={self.owner_id}, agent_id={self.agent_id})"


class ConversationMessage(Base, table=True):
    """Individual exchange item within a conversation.

    Messages are strictly ordered by their autoincrement id.

    Table: messages
    """

    __tablename__ = "messages"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    conversation_id: int = Field(foreign_key="conversations.id", index=True)

    role: MessageRole = Field(description="Message sender role")
    content: str = Field(description="Display text projection")
    raw_data: Optional[Dict[str, Any]] = Field(
        default=None, sa_column=Column(JSON), description="Full run-format item used for replay"
    )
    agent_id: Optional[int] = Field(default=None, description="Agent that produced the message (after handoffs)")

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"ConversationMessage(id={self.id}, role={self.role}, conversation_id={self.conversation_id})"
