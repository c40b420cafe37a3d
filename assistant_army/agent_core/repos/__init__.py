from .interfaces import AgentStore, ConversationStore, MemoryStore, ToolServerRegistry

__all__ = ["AgentStore", "ConversationStore", "MemoryStore", "ToolServerRegistry"]
