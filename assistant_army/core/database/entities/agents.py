"""
Agent definition entity models.

This module contains the database entities describing owner-defined agents:
the agent row itself plus the ordered link tables for built-in capabilities,
remote tool servers, peer agents usable as tools and handoff targets.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlmodel import Field

from ..base import Base, utc_now


class AgentRecord(Base, table=True):
    """Persistent agent definition.

    Table: agents
    """

    __tablename__ = "agents"
    __table_args__ = (UniqueConstraint("owner_id", "slug", name="uq_agents_owner_slug"), {"extend_existing": True})

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(index=True, description="Owning user identifier")
    slug: str = Field(max_length=100, description="Slug unique per owner")
    name: str = Field(max_length=255, description="Display name")
    purpose: Optional[str] = Field(default=None, description="Short purpose text")
    instructions: str = Field(description="System instructions")

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"AgentRecord(id={self.id}, owner_id={self.owner_id}, slug={self.slug})"


class AgentBuiltInTool(Base, table=True):
    """Enabled built-in capability tag for an agent.

    Table: agent_built_in_tools
    """

    __tablename__ = "agent_built_in_tools"
    __table_args__ = (UniqueConstraint("agent_id", "tag"), {"extend_existing": True})

    id: Optional[int] = Field(default=None, primary_key=True)
    agent_id: int = Field(foreign_key="agents.id", index=True)
    tag: str = Field(max_length=50, description="Capability tag such as 'memory' or 'internet_search'")
    created_at: datetime = Field(default_factory=utc_now)


class AgentToolServer(Base, table=True):
    """Remote tool server enabled for an agent.

    Table: agent_tool_servers
    """

    __tablename__ = "agent_tool_servers"
    __table_args__ = (UniqueConstraint("agent_id", "tool_server_id"), {"extend_existing": True})

    id: Optional[int] = Field(default=None, primary_key=True)
    agent_id: int = Field(foreign_key="agents.id", index=True)
    tool_server_id: int = Field(description="Reference into the owner's tool server registry")
    created_at: datetime = Field(default_factory=utc_now)


class AgentPeerTool(Base, table=True):
    """Peer agent callable as a tool.

    Table: agent_peer_tools
    """

    __tablename__ = "agent_peer_tools"
    __table_args__ = (
        UniqueConstraint("agent_id", "tool_agent_id"),
        CheckConstraint("agent_id != tool_agent_id", name="ck_agent_peer_tools_not_self"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    agent_id: int = Field(foreign_key="agents.id", index=True)
    tool_agent_id: int = Field(foreign_key="agents.id")
    created_at: datetime = Field(default_factory=utc_now)


class AgentHandoff(Base, table=True):
    """One-way handoff edge between two agents.

    Table: agent_handoffs
    """

    __tablename__ = "agent_handoffs"
    __table_args__ = (
        UniqueConstraint("from_agent_id", "to_agent_id"),
        CheckConstraint("from_agent_id != to_agent_id", name="ck_agent_handoffs_not_self"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    from_agent_id: int = Field(foreign_key="agents.id", index=True)
    to_agent_id: int = Field(foreign_key="agents.id")
    created_at: datetime = Field(default_factory=utc_now)
