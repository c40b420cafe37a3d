"""Capability protocol and binding context.

A capability is a built-in tool an owner can switch on per agent by tag.

The graph builder resolves each enabled tag through a ``CapabilityRegistry``
and asks the capability for:

- a tool binding to attach to the agent being built,
- an optional block of extra instructions (e.g. what the agent already remembers).

Capabilities should not perform ownership checks themselves; the builder has
already verified the agent belongs to the requesting owner.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from ..repos.interfaces import MemoryStore
from ..schemas.domain import AgentDefinition, CapabilityTag, OwnerContext, ToolBinding


@dataclass(frozen=True)
class CapabilityContext:
    """Build context passed to capability implementations.

    Attributes
    ----------
    agent:
        The definition of the agent being built.
    owner:
        The requesting owner.
    memory_store:
        Backing store for the ``memory`` capability, if configured.
    """

    agent: AgentDefinition
    owner: OwnerContext
    memory_store: Optional[MemoryStore] = None


class Capability(Protocol):
    """Protocol for capability implementations."""

    name: CapabilityTag

    async def bind(self, ctx: CapabilityContext) -> Optional[ToolBinding]: ...

    async def instructions(self, ctx: CapabilityContext) -> Optional[str]: ...
