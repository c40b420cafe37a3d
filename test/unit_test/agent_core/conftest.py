"""Fixtures for agent core unit tests: in-memory collaborators and a fixed clock."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from assistant_army.agent_core.schemas.domain import AgentDefinition, AgentMemory, OwnerContext, RemoteToolServer


class InMemoryAgentStore:
    """Agent store keyed by slug only, so ownership checks are left to the caller."""

    def __init__(self) -> None:
        self.by_id: Dict[int, AgentDefinition] = {}
        self.capabilities: Dict[int, List[str]] = defaultdict(list)
        self.remote_refs: Dict[int, List[int]] = defaultdict(list)
        self.peers: Dict[int, List[int]] = defaultdict(list)
        self.handoffs: Dict[int, List[int]] = defaultdict(list)

    def add(self, slug: str, *, owner_id: int = 1, instructions: Optional[str] = None) -> AgentDefinition:
        definition = AgentDefinition(
            id=len(self.by_id) + 1,
            owner_id=owner_id,
            slug=slug,
            name=slug.replace("-", " ").title(),
            instructions=instructions or f"You are {slug}.",
        )
        self.by_id[definition.id] = definition
        return definition

    def _id(self, slug: str) -> int:
        return next(d.id for d in self.by_id.values() if d.slug == slug)

    def handoff(self, source: str, target: str) -> None:
        self.handoffs[self._id(source)].append(self._id(target))

    def peer(self, source: str, target: str) -> None:
        self.peers[self._id(source)].append(self._id(target))

    async def find_by_slug(self, owner_id: int, slug: str) -> Optional[AgentDefinition]:
        return next((d for d in self.by_id.values() if d.slug == slug), None)

    async def list_built_in_capabilities(self, agent_id: int) -> List[str]:
        return list(self.capabilities[agent_id])

    async def list_remote_tool_refs(self, agent_id: int) -> List[int]:
        return list(self.remote_refs[agent_id])

    async def list_peer_agents(self, agent_id: int) -> List[AgentDefinition]:
        return [self.by_id[i] for i in self.peers[agent_id]]

    async def list_handoff_targets(self, agent_id: int) -> List[AgentDefinition]:
        return [self.by_id[i] for i in self.handoffs[agent_id]]


class InMemoryToolServerRegistry:
    def __init__(self) -> None:
        self.servers: List[RemoteToolServer] = []
        self.calls = 0

    async def list_for_owner(self, owner_id: int) -> List[RemoteToolServer]:
        self.calls += 1
        return [s for s in self.servers if s.owner_id == owner_id]


class InMemoryMemoryStore:
    def __init__(self) -> None:
        self.values: Dict[int, Dict[str, str]] = defaultdict(dict)

    async def set(self, agent_id: int, key: str, value: str) -> AgentMemory:
        self.values[agent_id][key] = value
        return AgentMemory(agent_id=agent_id, key=key, value=value)

    async def list_by_agent(self, agent_id: int) -> List[AgentMemory]:
        return [AgentMemory(agent_id=agent_id, key=k, value=v) for k, v in sorted(self.values[agent_id].items())]


FIXED_NOW = datetime(2026, 10, 19, 14, 30, tzinfo=timezone.utc)


@pytest.fixture
def agent_store() -> InMemoryAgentStore:
    return InMemoryAgentStore()


@pytest.fixture
def tool_registry() -> InMemoryToolServerRegistry:
    return InMemoryToolServerRegistry()


@pytest.fixture
def memory_store() -> InMemoryMemoryStore:
    return InMemoryMemoryStore()


@pytest.fixture
def owner() -> OwnerContext:
    return OwnerContext(owner_id=1, timezone="UTC", api_key="sk-test")


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW
