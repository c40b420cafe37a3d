"""
Remote tool server repository.

Implements the ``ToolServerRegistry`` contract.
"""

from __future__ import annotations

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ....agent_core.schemas.domain import RemoteToolServer
from ..entities.tool_servers import ToolServerRecord
from .base import BaseRepository


class ToolServerRepository(BaseRepository[ToolServerRecord]):
    """Repository for owner-configured tool servers."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ToolServerRecord)

    async def create(self, server: ToolServerRecord) -> ToolServerRecord:
        return await self._save(server)

    async def list_for_owner(self, owner_id: int) -> List[RemoteToolServer]:
        """Snapshot of the owner's tool servers.

        Args:
            owner_id: Owning user identifier

        Returns:
            RemoteToolServer list ordered by creation
        """
        stmt = select(ToolServerRecord).where(ToolServerRecord.owner_id == owner_id).order_by(ToolServerRecord.id)
        result = await self.session.execute(stmt)
        return [
            RemoteToolServer(
                id=record.id,
                owner_id=record.owner_id,
                label=record.name,
                url=record.url,
                headers=record.headers or {},
            )
            for record in result.scalars().all()
        ]
