"""Capability registry.

The registry maps a ``CapabilityTag`` to its implementation. Tags are stored
as plain strings on agent definitions, so lookups accept raw strings and
resolve unknown tags to ``None`` instead of raising.
"""

from __future__ import annotations

from typing import Dict, Optional

from ..schemas.domain import CapabilityTag
from .base import Capability
from .builtin import InternetSearchCapability, MemoryCapability


class CapabilityRegistry:
    """
    In-memory mapping of capability tags to implementations.

    Notes:
        - ``register`` overwrites any existing mapping for the tag.
        - ``resolve`` returns ``None`` for tags that are unknown or unregistered.
    """

    def __init__(self) -> None:
        """Initialize an empty capability registry."""
        self._caps: Dict[CapabilityTag, Capability] = {}

    def register(self, cap: Capability) -> None:
        """
        Register a capability implementation.

        Args:
            cap: The capability instance to register. It must expose a ``name`` attribute.
        """
        self._caps[cap.name] = cap

    def resolve(self, tag: str) -> Optional[Capability]:
        """
        Look up a stored tag string.

        Args:
            tag: Raw tag as stored on the agent definition.

        Returns:
            The capability, or None if the tag is not known.
        """
        try:
            return self._caps.get(CapabilityTag(tag))
        except ValueError:
            return None


def default_registry() -> CapabilityRegistry:
    """Registry with every built-in capability registered."""
    registry = CapabilityRegistry()
    registry.register(InternetSearchCapability())
    registry.register(MemoryCapability())
    return registry
