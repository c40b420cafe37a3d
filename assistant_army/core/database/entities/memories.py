"""
Agent memory entity model.

Backs the ``memory`` built-in capability: key/value facts an agent chose to
remember across conversations.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, utc_now


class AgentMemoryRecord(Base, table=True):
    """Persistent agent memory.

    Table: agent_memories
    """

    __tablename__ = "agent_memories"
    __table_args__ = (UniqueConstraint("agent_id", "key"), {"extend_existing": True})

    id: Optional[int] = Field(default=None, primary_key=True)
    agent_id: int = Field(foreign_key="agents.id", index=True)
    key: str = Field(max_length=255)
    value: str

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
