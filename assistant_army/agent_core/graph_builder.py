"""Agent graph builder.

Turns a stored agent definition plus its tool and handoff configuration into
an ``ExecutableAgent`` tree for exactly one chat turn.

Resolution is a depth-first walk. Every child branch (handoff target or peer
agent used as a tool) receives its own copy of the visited-slug set, so:

- a slug reappearing on its own branch prunes that one edge (warning only),
- a diamond (A -> B -> D, A -> C -> D) resolves D once per path,
- recursion depth is bounded by the number of distinct slugs on a branch.

Nothing is cached. Instructions carry the owner's current local date/time
and stored configuration edits take effect on the next turn.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Set, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.logging_config import get_logger
from .capabilities import CapabilityContext, CapabilityRegistry, default_registry
from .errors import CircularDependencyError, NotFoundError, UnauthorizedError
from .repos.interfaces import AgentStore, MemoryStore, ToolServerRegistry
from .schemas.domain import (
    AgentDefinition,
    ExecutableAgent,
    HandoffResolution,
    OwnerContext,
    PeerAgentToolBinding,
    RemoteToolBinding,
    Resolved,
    Skipped,
    ToolBinding,
    tool_safe_name,
)

logger = get_logger(__name__)

DATE_FORMAT = "%A, %B %d, %Y at %I:%M %p %Z"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def render_current_date(now: datetime, tz_name: Optional[str]) -> str:
    """
    Render ``now`` in the owner's timezone.

    Args:
        now: Timezone-aware instant.
        tz_name: IANA timezone name; empty or unknown names fall back to UTC.

    Returns:
        e.g. ``Monday, October 19, 2026 at 02:30 PM EDT``
    """
    tz_name = tz_name or "UTC"
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone '{tz_name}', falling back to UTC")
        tz = ZoneInfo("UTC")
    return now.astimezone(tz).strftime(DATE_FORMAT)


class AgentGraphBuilder:
    """
    Recursive resolver from ``(owner, slug)`` to an ``ExecutableAgent`` tree.

    Tool order on every built agent follows stored order:

    1. built-in capabilities (unknown tags ignored),
    2. remote tool servers found in the owner's registry snapshot (missing ones skipped),
    3. peer agents wrapped as callable tools.
    """

    def __init__(
        self,
        agents: AgentStore,
        tool_servers: ToolServerRegistry,
        *,
        model: str,
        capabilities: Optional[CapabilityRegistry] = None,
        memory_store: Optional[MemoryStore] = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """
        Args:
            agents: Read access to agent definitions.
            tool_servers: Per-owner remote tool server registry.
            model: Model identifier assigned to every built agent.
            capabilities: Capability registry; defaults to all built-ins.
            memory_store: Store backing the ``memory`` capability.
            clock: Returns the current aware datetime; injectable for tests.
        """
        self.agents = agents
        self.tool_servers = tool_servers
        self.model = model
        self.capabilities = capabilities or default_registry()
        self.memory_store = memory_store
        self.clock = clock

    async def build(self, owner: OwnerContext, slug: str) -> ExecutableAgent:
        """
        Build the executable tree rooted at ``slug``.

        Raises:
            NotFoundError: The slug does not resolve for the owner.
            UnauthorizedError: The resolved definition belongs to another owner.
            CircularDependencyError: Only for internal branches; pruned before reaching here.
        """
        logger.debug(f"Building agent graph: owner={owner.owner_id}, root={slug}")
        return await self._build(owner, slug, set())

    async def _build(self, owner: OwnerContext, slug: str, visited: Set[str]) -> ExecutableAgent:
        if slug in visited:
            raise CircularDependencyError(slug)

        definition = await self.agents.find_by_slug(owner.owner_id, slug)
        if definition is None:
            raise NotFoundError("agent", slug)
        if definition.owner_id != owner.owner_id:
            raise UnauthorizedError("agent", slug)

        visited.add(slug)

        ctx = CapabilityContext(agent=definition, owner=owner, memory_store=self.memory_store)
        tools, extra_instructions = await self._capability_tools(ctx)
        tools.extend(await self._remote_tools(owner, definition))

        peers = await self._resolve_children(
            owner, definition, await self.agents.list_peer_agents(definition.id), visited, "peer tool"
        )
        for resolution in peers:
            if isinstance(resolution, Resolved):
                tools.append(self._peer_binding(resolution.agent))

        handoffs = await self._resolve_children(
            owner, definition, await self.agents.list_handoff_targets(definition.id), visited, "handoff"
        )

        return ExecutableAgent(
            agent_id=definition.id,
            slug=definition.slug,
            name=definition.name,
            instructions=self._augment_instructions(definition.instructions, extra_instructions, owner.timezone),
            model=self.model,
            tools=tools,
            handoffs=[r.agent for r in handoffs if isinstance(r, Resolved)],
        )

    async def _resolve_children(
        self,
        owner: OwnerContext,
        parent: AgentDefinition,
        targets: Iterable[AgentDefinition],
        visited: Set[str],
        relation: str,
    ) -> List[HandoffResolution]:
        results: List[HandoffResolution] = []
        seen: Set[int] = set()
        for target in targets:
            if target.id == parent.id:
                results.append(Skipped(target.slug, "self reference"))
                continue
            if target.id in seen:
                results.append(Skipped(target.slug, "duplicate"))
                continue
            seen.add(target.id)

            if target.owner_id != owner.owner_id:
                logger.warning(f"Skipping {relation} '{parent.slug}' -> '{target.slug}': owned by another user")
                results.append(Skipped(target.slug, "unauthorized"))
                continue

            try:
                child = await self._build(owner, target.slug, set(visited))
            except CircularDependencyError as e:
                logger.warning(f"Skipping {relation} '{parent.slug}' -> '{target.slug}': {e}")
                results.append(Skipped(target.slug, "circular dependency"))
            except (NotFoundError, UnauthorizedError) as e:
                logger.warning(f"Skipping {relation} '{parent.slug}' -> '{target.slug}': {e}")
                results.append(Skipped(target.slug, str(e)))
            else:
                results.append(Resolved(child))
        return results

    async def _capability_tools(self, ctx: CapabilityContext) -> Tuple[List[ToolBinding], List[str]]:
        tools: List[ToolBinding] = []
        extra: List[str] = []
        for tag in await self.agents.list_built_in_capabilities(ctx.agent.id):
            capability = self.capabilities.resolve(tag)
            if capability is None:
                logger.debug(f"Ignoring unknown capability '{tag}' on agent '{ctx.agent.slug}'")
                continue
            binding = await capability.bind(ctx)
            if binding is not None:
                tools.append(binding)
            block = await capability.instructions(ctx)
            if block:
                extra.append(block)
        return tools, extra

    async def _remote_tools(self, owner: OwnerContext, definition: AgentDefinition) -> List[ToolBinding]:
        refs = await self.agents.list_remote_tool_refs(definition.id)
        if not refs:
            return []

        registry = {server.id: server for server in await self.tool_servers.list_for_owner(owner.owner_id)}
        tools: List[ToolBinding] = []
        for ref in refs:
            server = registry.get(ref)
            if server is None:
                logger.warning(f"Tool server {ref} referenced by agent '{definition.slug}' not found, skipping")
                continue
            tools.append(RemoteToolBinding(ref=server.id, label=server.label, url=server.url, headers=dict(server.headers)))
        return tools

    @staticmethod
    def _peer_binding(agent: ExecutableAgent) -> PeerAgentToolBinding:
        return PeerAgentToolBinding(
            tool_name=f"ask_{tool_safe_name(agent.slug)}",
            description=f"Ask {agent.name} and get its answer back. Send a complete, self-contained request.",
            agent=agent,
        )

    def _augment_instructions(self, instructions: str, extra: List[str], tz_name: Optional[str]) -> str:
        parts = [instructions, *extra]
        date_line = f"Today's Date: {render_current_date(self.clock(), tz_name)}"
        return "\n\n".join(parts) + "\n\n" + date_line
