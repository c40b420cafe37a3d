from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...core.logging_config import get_logger
from ..schemas.domain import CapabilityTag, FunctionToolBinding, HostedToolBinding, ToolBinding
from .base import Capability, CapabilityContext

logger = get_logger(__name__)

REMEMBER_TOOL_DESCRIPTION = (
    "Store a fact worth keeping across conversations. "
    "Use a short key and a concise value; storing the same key again overwrites it. "
    "Everything remembered is listed in your instructions at the start of every conversation."
)


@dataclass(frozen=True)
class InternetSearchCapability(Capability):
    """
    Capability giving the agent live web search.

    Search runs on the model provider's side, so the binding is a hosted tool
    rather than an in-process function.
    """

    name: CapabilityTag = CapabilityTag.internet_search

    async def bind(self, ctx: CapabilityContext) -> Optional[ToolBinding]:
        return HostedToolBinding(name="web_search")

    async def instructions(self, ctx: CapabilityContext) -> Optional[str]:
        return None


@dataclass(frozen=True)
class MemoryCapability(Capability):
    """
    Capability letting the agent remember key/value facts.

    Exposes a ``remember(key, value)`` function tool writing to the
    ``MemoryStore`` and lists stored memories in the agent's instructions.
    """

    name: CapabilityTag = CapabilityTag.memory

    async def bind(self, ctx: CapabilityContext) -> Optional[ToolBinding]:
        """
        Build the ``remember`` tool for one agent.

        Args:
            ctx: Build context; ``ctx.memory_store`` must be set.

        Returns:
            FunctionToolBinding, or None when no memory store is configured.
        """
        store = ctx.memory_store
        if store is None:
            logger.warning(f"Memory capability enabled for agent '{ctx.agent.slug}' but no memory store is configured")
            return None
        agent_id = ctx.agent.id

        async def remember(key: str, value: str) -> str:
            """Remember a value under a key."""
            await store.set(agent_id, key, value)
            return f"Remembered '{key}'."

        return FunctionToolBinding(name="remember", description=REMEMBER_TOOL_DESCRIPTION, function=remember)

    async def instructions(self, ctx: CapabilityContext) -> Optional[str]:
        if ctx.memory_store is None:
            return None
        memories = await ctx.memory_store.list_by_agent(ctx.agent.id)
        if not memories:
            return None
        lines = "\n".join(f"- {m.key}: {m.value}" for m in memories)
        return f"Things you remember:\n{lines}"
