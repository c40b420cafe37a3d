"""
Conversation repository.

This module provides data access operations for conversations and their
messages. Messages are append-only; the only removals are "newest message"
(regenerate/undo) and "everything" (clear).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.conversations import Conversation, ConversationMessage, MessageRole
from .base import BaseRepository, QueryBuilder


class ConversationRepository(BaseRepository[Conversation]):
    """Repository for conversations and messages using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Conversation)

    async def create(self, owner_id: int, agent_id: int, title: Optional[str] = None) -> Conversation:
        """Create a new conversation.

        Args:
            owner_id: Owning user identifier
            agent_id: Agent the conversation is bound to
            title: Optional title

        Returns:
            Persisted Conversation with generated id
        """
        return await self._save(Conversation(owner_id=owner_id, agent_id=agent_id, title=title))

    async def list_by_agent(
        self, owner_id: int, agent_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[Conversation]:
        """Conversations of one owner with one agent, most recently active first."""
        stmt = (
            select(Conversation)
            .where(Conversation.owner_id == owner_id, Conversation.agent_id == agent_id)
            .order_by(Conversation.updated_at.desc(), Conversation.id.desc())  # type: ignore
        )
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_messages(self, conversation_id: int) -> List[ConversationMessage]:
        """Get messages for a conversation in creation order.

        Args:
            conversation_id: Conversation ID

        Returns:
            List of ConversationMessage instances, oldest first
        """
        stmt = (
            select(ConversationMessage)
            .where(ConversationMessage.conversation_id == conversation_id)
            .order_by(ConversationMessage.id.asc())  # type: ignore
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def add_message(
        self,
        conversation_id: int,
        role: MessageRole,
        content: str,
        raw_data: Optional[Dict[str, Any]] = None,
        agent_id: Optional[int] = None,
    ) -> ConversationMessage:
        """Append a message and advance the conversation timestamp.

        Args:
            conversation_id: Conversation ID
            role: Sender role
            content: Display text projection
            raw_data: Full run-format item
            agent_id: Producing agent, if known

        Returns:
            Persisted ConversationMessage instance
        """
        message = ConversationMessage(
            conversation_id=conversation_id,
            role=role,
            content=content,
            raw_data=raw_data,
            agent_id=agent_id,
        )
        self.session.add(message)

        conversation = await self.get_by_id(conversation_id)
        if conversation:
            conversation.updated_at = utc_now()

        await self.session.commit()
        await self.session.refresh(message)
        return message

    async def delete_message(self, message_id: int) -> bool:
        """Delete one message by id.

        Returns:
            True if deleted, False if not found
        """
        message = await self.session.get(ConversationMessage, message_id)
        if message is None:
            return False
        await self.session.delete(message)
        await self.session.commit()
        return True

    async def delete_all_messages(self, conversation_id: int) -> int:
        """Delete every message of a conversation.

        Returns:
            Number of deleted rows
        """
        stmt = delete(ConversationMessage).where(ConversationMessage.conversation_id == conversation_id)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount or 0
