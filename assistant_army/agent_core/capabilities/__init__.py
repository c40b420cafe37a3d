"""Built-in agent capabilities.

A *capability* is a built-in tool an owner enables per agent by tag.

- The agent store lists the enabled tags for an agent.
- The graph builder resolves each tag through ``CapabilityRegistry``.
- Each capability produces a tool binding for the agent being built and may
  contribute extra instructions.

Unknown tags are ignored so that removing a capability from the codebase
never breaks agents that still have it stored.

This package exports:

- ``Capability``: protocol for capability implementations.
- ``CapabilityRegistry``: tag → capability implementation mapping.
- ``CapabilityContext``: build context handed to capabilities.
- ``default_registry``: registry with every built-in capability.
"""

from .base import Capability, CapabilityContext
from .builtin import InternetSearchCapability, MemoryCapability
from .registry import CapabilityRegistry, default_registry

__all__ = [
    "Capability",
    "CapabilityContext",
    "CapabilityRegistry",
    "InternetSearchCapability",
    "MemoryCapability",
    "default_registry",
]
