from .domain import (
    AgentDefinition,
    AgentMemory,
    CapabilityTag,
    ExecutableAgent,
    FunctionToolBinding,
    HandoffResolution,
    HostedToolBinding,
    OwnerContext,
    PeerAgentToolBinding,
    RemoteToolBinding,
    RemoteToolServer,
    Resolved,
    Skipped,
    ToolBinding,
    tool_safe_name,
)

__all__ = [
    "AgentDefinition",
    "AgentMemory",
    "CapabilityTag",
    "ExecutableAgent",
    "FunctionToolBinding",
    "HandoffResolution",
    "HostedToolBinding",
    "OwnerContext",
    "PeerAgentToolBinding",
    "RemoteToolBinding",
    "RemoteToolServer",
    "Resolved",
    "Skipped",
    "ToolBinding",
    "tool_safe_name",
]
