"""
Agent memory repository.

Implements the ``MemoryStore`` contract used by the ``memory`` capability.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ....agent_core.schemas.domain import AgentMemory
from ..base import utc_now
from ..entities.memories import AgentMemoryRecord
from .base import BaseRepository


class MemoryRepository(BaseRepository[AgentMemoryRecord]):
    """Repository for agent memories."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AgentMemoryRecord)

    async def _find(self, agent_id: int, key: str) -> Optional[AgentMemoryRecord]:
        stmt = select(AgentMemoryRecord).where(AgentMemoryRecord.agent_id == agent_id, AgentMemoryRecord.key == key)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def set(self, agent_id: int, key: str, value: str) -> AgentMemory:
        """Store or overwrite a memory value."""
        record = await self._find(agent_id, key)
        if record is None:
            record = AgentMemoryRecord(agent_id=agent_id, key=key, value=value)
        else:
            record.value = value
            record.updated_at = utc_now()
        record = await self._save(record)
        return AgentMemory.model_validate(record)

    async def list_by_agent(self, agent_id: int) -> List[AgentMemory]:
        stmt = select(AgentMemoryRecord).where(AgentMemoryRecord.agent_id == agent_id).order_by(AgentMemoryRecord.key)
        result = await self.session.execute(stmt)
        return [AgentMemory.model_validate(r) for r in result.scalars().all()]
