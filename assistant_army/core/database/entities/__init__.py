"""Database entities, one module per business area."""

from .agents import AgentBuiltInTool, AgentHandoff, AgentPeerTool, AgentRecord, AgentToolServer
from .conversations import Conversation, ConversationMessage, MessageRole
from .memories import AgentMemoryRecord
from .tool_servers import ToolServerRecord

__all__ = [
    "AgentBuiltInTool",
    "AgentHandoff",
    "AgentMemoryRecord",
    "AgentPeerTool",
    "AgentRecord",
    "AgentToolServer",
    "Conversation",
    "ConversationMessage",
    "MessageRole",
    "ToolServerRecord",
]
