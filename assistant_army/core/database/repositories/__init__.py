"""Data access layer, one repository per business area."""

from .agents import AgentRepository
from .base import BaseRepository, QueryBuilder
from .conversations import ConversationRepository
from .memories import MemoryRepository
from .tool_servers import ToolServerRepository

__all__ = [
    "AgentRepository",
    "BaseRepository",
    "ConversationRepository",
    "MemoryRepository",
    "QueryBuilder",
    "ToolServerRepository",
]
