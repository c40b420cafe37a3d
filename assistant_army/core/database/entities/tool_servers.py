"""
Remote tool server entity model.

Owners register remote (MCP) tool servers once and enable them per agent.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field

from ..base import Base, utc_now


class ToolServerRecord(Base, table=True):
    """Owner-configured remote tool server.

    Table: tool_servers
    """

    __tablename__ = "tool_servers"
    __table_args__ = (UniqueConstraint("owner_id", "name"), {"extend_existing": True})

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(index=True)
    name: str = Field(max_length=255, description="Label shown to the model")
    url: str = Field(description="Server endpoint URL")
    headers: Optional[Dict[str, str]] = Field(
        default=None, sa_column=Column(JSON), description="Custom HTTP headers sent with every request"
    )
    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"ToolServerRecord(id={self.id}, owner_id={self.owner_id}, name={self.name})"
