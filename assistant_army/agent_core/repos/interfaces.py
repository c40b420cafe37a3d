"""Collaborator contracts.

The graph builder, the session adapter and the chat service depend on these
Protocols instead of concrete persistence implementations.

Contract guidelines
-------------------

- All methods are async.
- Lists are returned in stored (insertion) order.
- Ownership is not enforced here; callers check ``owner_id`` on what they get back.
- Message storage is append-only apart from removing the newest message or clearing.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from ...core.database.entities.conversations import Conversation, ConversationMessage, MessageRole
from ..schemas.domain import AgentDefinition, AgentMemory, RemoteToolServer


class AgentStore(Protocol):
    """Read access to agent definitions and their tool/handoff configuration."""

    async def find_by_slug(self, owner_id: int, slug: str) -> Optional[AgentDefinition]:
        """
        Look up an agent definition by owner and slug.

        Returns:
            The definition, or None when the slug does not resolve.
        """
        ...

    async def list_built_in_capabilities(self, agent_id: int) -> List[str]:
        """Return the enabled built-in capability tags."""
        ...

    async def list_remote_tool_refs(self, agent_id: int) -> List[int]:
        """Return references into the owner's tool server registry."""
        ...

    async def list_peer_agents(self, agent_id: int) -> List[AgentDefinition]:
        """Return peer agents usable as callable tools."""
        ...

    async def list_handoff_targets(self, agent_id: int) -> List[AgentDefinition]:
        """Return agents this agent may hand control to."""
        ...


class ToolServerRegistry(Protocol):
    """Per-owner list of remote tool servers."""

    async def list_for_owner(self, owner_id: int) -> List[RemoteToolServer]:
        """Snapshot of every tool server the owner configured."""
        ...


class ConversationStore(Protocol):
    """Persistence of conversations and their ordered messages."""

    async def create(self, owner_id: int, agent_id: int, title: Optional[str] = None) -> Conversation: ...

    async def get_by_id(self, conversation_id: int) -> Optional[Conversation]: ...

    async def list_by_agent(self, owner_id: int, agent_id: int) -> List[Conversation]: ...

    async def list_messages(self, conversation_id: int) -> List[ConversationMessage]:
        """Messages oldest first."""
        ...

    async def add_message(
        self,
        conversation_id: int,
        role: MessageRole,
        content: str,
        raw_data: Optional[Dict[str, Any]] = None,
        agent_id: Optional[int] = None,
    ) -> ConversationMessage:
        """Append a message and advance the conversation's ``updated_at``."""
        ...

    async def delete_message(self, message_id: int) -> bool: ...

    async def delete_all_messages(self, conversation_id: int) -> int: ...


class MemoryStore(Protocol):
    """Key/value memories kept per agent."""

    async def set(self, agent_id: int, key: str, value: str) -> AgentMemory: ...

    async def list_by_agent(self, agent_id: int) -> List[AgentMemory]: ...
