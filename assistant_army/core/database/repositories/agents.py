"""
Agent definition repository.

Implements the ``AgentStore`` contract on top of the ``agents`` table and
its link tables. Lists come back in insertion order, which is the order the
owner configured them in.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ....agent_core.schemas.domain import AgentDefinition
from ..entities.agents import AgentBuiltInTool, AgentHandoff, AgentPeerTool, AgentRecord, AgentToolServer
from .base import BaseRepository


class AgentRepository(BaseRepository[AgentRecord]):
    """Repository for agent definitions using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AgentRecord)

    async def create(self, agent: AgentRecord) -> AgentRecord:
        """Persist a new agent definition."""
        return await self._save(agent)

    async def find_by_slug(self, owner_id: int, slug: str) -> Optional[AgentDefinition]:
        """Resolve an owner's agent by slug.

        Args:
            owner_id: Owning user identifier
            slug: Agent slug, unique per owner

        Returns:
            AgentDefinition or None
        """
        stmt = select(AgentRecord).where(AgentRecord.owner_id == owner_id, AgentRecord.slug == slug)
        result = await self.session.execute(stmt)
        record = result.scalars().first()
        return AgentDefinition.model_validate(record) if record else None

    async def list_built_in_capabilities(self, agent_id: int) -> List[str]:
        stmt = select(AgentBuiltInTool.tag).where(AgentBuiltInTool.agent_id == agent_id).order_by(AgentBuiltInTool.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_remote_tool_refs(self, agent_id: int) -> List[int]:
        stmt = (
            select(AgentToolServer.tool_server_id)
            .where(AgentToolServer.agent_id == agent_id)
            .order_by(AgentToolServer.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_peer_agents(self, agent_id: int) -> List[AgentDefinition]:
        stmt = (
            select(AgentRecord)
            .join(AgentPeerTool, AgentPeerTool.tool_agent_id == AgentRecord.id)
            .where(AgentPeerTool.agent_id == agent_id)
            .order_by(AgentPeerTool.id)
        )
        result = await self.session.execute(stmt)
        return [AgentDefinition.model_validate(r) for r in result.scalars().all()]

    async def list_handoff_targets(self, agent_id: int) -> List[AgentDefinition]:
        stmt = (
            select(AgentRecord)
            .join(AgentHandoff, AgentHandoff.to_agent_id == AgentRecord.id)
            .where(AgentHandoff.from_agent_id == agent_id)
            .order_by(AgentHandoff.id)
        )
        result = await self.session.execute(stmt)
        return [AgentDefinition.model_validate(r) for r in result.scalars().all()]

    async def add_built_in_capability(self, agent_id: int, tag: str) -> None:
        await self._save(AgentBuiltInTool(agent_id=agent_id, tag=tag))

    async def add_remote_tool(self, agent_id: int, tool_server_id: int) -> None:
        await self._save(AgentToolServer(agent_id=agent_id, tool_server_id=tool_server_id))

    async def add_peer_agent(self, agent_id: int, tool_agent_id: int) -> None:
        await self._save(AgentPeerTool(agent_id=agent_id, tool_agent_id=tool_agent_id))

    async def add_handoff(self, from_agent_id: int, to_agent_id: int) -> None:
        await self._save(AgentHandoff(from_agent_id=from_agent_id, to_agent_id=to_agent_id))
