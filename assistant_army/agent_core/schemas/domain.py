"""Domain types shared by the agent graph builder, the session adapter and the runtime.

Stored configuration (``AgentDefinition``, ``RemoteToolServer``) is modelled
as validated pydantic schemas. Runtime objects (``ExecutableAgent`` and its
tool bindings) are plain dataclasses: they hold callables and are rebuilt for
every chat turn.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from pydantic import Field

from .base import BaseSchema


_TOOL_NAME_UNSAFE = re.compile(r"[^a-zA-Z0-9_-]+")


def tool_safe_name(text: str) -> str:
    """Reduce free text (slugs, labels) to the character set model providers accept in tool names."""
    return _TOOL_NAME_UNSAFE.sub("_", text).strip("_").lower() or "tool"


class CapabilityTag(str, Enum):
    memory = "memory"
    internet_search = "internet_search"


class OwnerContext(BaseSchema):
    """Verified identity of the user a request runs on behalf of."""

    owner_id: int
    timezone: str = "UTC"
    api_key: Optional[str] = Field(default=None, repr=False)


class AgentDefinition(BaseSchema):
    id: int
    owner_id: int
    slug: str
    name: str
    purpose: Optional[str] = None
    instructions: str


class RemoteToolServer(BaseSchema):
    id: int
    owner_id: int
    label: str
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)


class AgentMemory(BaseSchema):
    agent_id: int
    key: str
    value: str


@dataclass(frozen=True)
class HostedToolBinding:
    """A capability executed by the model provider itself (e.g. web search)."""

    name: str


@dataclass(frozen=True)
class FunctionToolBinding:
    """An in-process async function exposed to the model."""

    name: str
    description: str
    function: Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class RemoteToolBinding:
    """A remote tool server whose tools are listed and called over MCP."""

    ref: int
    label: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PeerAgentToolBinding:
    """Another agent the owner of this binding can call while keeping control."""

    tool_name: str
    description: str
    agent: "ExecutableAgent"


ToolBinding = Union[HostedToolBinding, FunctionToolBinding, RemoteToolBinding, PeerAgentToolBinding]


@dataclass(eq=False)
class ExecutableAgent:
    """Fully resolved agent used for exactly one run.

    ``eq=False`` keeps identity semantics: two sub-agents built from the same
    definition on different branches are different objects.
    """

    agent_id: int
    slug: str
    name: str
    instructions: str
    model: str
    tools: List[ToolBinding] = field(default_factory=list)
    handoffs: List["ExecutableAgent"] = field(default_factory=list)


@dataclass(frozen=True)
class Resolved:
    agent: ExecutableAgent


@dataclass(frozen=True)
class Skipped:
    slug: str
    reason: str


HandoffResolution = Union[Resolved, Skipped]
