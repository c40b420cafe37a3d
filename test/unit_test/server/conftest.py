"""Fixtures for server tests: a scripted execution engine and seeded agents."""

from __future__ import annotations

from typing import AsyncGenerator, List, Optional
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from assistant_army.agent_core.runtime.engine import RunOutcome
from assistant_army.agent_core.runtime.events import (
    OUTPUT_TEXT_DELTA,
    RESPONSE_COMPLETED,
    RESPONSE_CREATED,
    AgentUpdatedEvent,
    RawResponseEvent,
)
from assistant_army.agent_core.schemas.domain import ExecutableAgent
from assistant_army.core.database.entities import AgentRecord
from assistant_army.core.database.repositories import AgentRepository


class ScriptedRun:
    def __init__(self, events: list, final_output: str, last_agent: ExecutableAgent, error: Optional[Exception]):
        self._events = events
        self._final_output = final_output
        self._error = error
        self.final_output: Optional[str] = None
        self.last_agent = last_agent

    async def stream_events(self):
        for event in self._events:
            yield event
        if self._error is not None:
            raise self._error
        self.final_output = self._final_output


class ScriptedEngine:
    """
    Engine replaying a fixed answer.

    ``handoff_to`` names a handoff target slug of the root agent that takes
    over before answering; ``error`` is raised after the scripted events.
    """

    def __init__(self) -> None:
        self.chunks: List[str] = ["Hi", " there"]
        self.handoff_to: Optional[str] = None
        self.error: Optional[Exception] = None
        self.calls: list = []

    def _answering_agent(self, agent: ExecutableAgent) -> ExecutableAgent:
        if self.handoff_to is None:
            return agent
        return next(child for child in agent.handoffs if child.slug == self.handoff_to)

    def run_streamed(self, agent, user_input, history, *, api_key=None) -> ScriptedRun:
        self.calls.append({"agent": agent, "input": user_input, "history": list(history), "api_key": api_key})
        answering = self._answering_agent(agent)
        events = [AgentUpdatedEvent(new_agent=agent)]
        if answering is not agent:
            events.append(AgentUpdatedEvent(new_agent=answering))
        events.append(RawResponseEvent(kind=RESPONSE_CREATED))
        events.extend(RawResponseEvent(kind=OUTPUT_TEXT_DELTA, delta=chunk) for chunk in self.chunks)
        events.append(RawResponseEvent(kind=RESPONSE_COMPLETED))
        return ScriptedRun(events, "".join(self.chunks), answering, self.error)

    async def run(self, agent, user_input, history, *, api_key=None) -> RunOutcome:
        self.calls.append({"agent": agent, "input": user_input, "history": list(history), "api_key": api_key})
        if self.error is not None:
            raise self.error
        return RunOutcome(final_output="".join(self.chunks), last_agent=self._answering_agent(agent))


@pytest.fixture
def scripted_engine() -> ScriptedEngine:
    return ScriptedEngine()


@pytest_asyncio.fixture
async def seeded_agents(db_session) -> dict:
    """Owner 1 owns ``support`` (handing off to ``billing``); owner 2 owns ``other``."""
    repo = AgentRepository(db_session)
    support = await repo.create(
        AgentRecord(owner_id=1, slug="support", name="Support", instructions="You help customers.")
    )
    billing = await repo.create(
        AgentRecord(owner_id=1, slug="billing", name="Billing", instructions="You handle invoices.")
    )
    other = await repo.create(AgentRecord(owner_id=2, slug="other", name="Other", instructions="Someone else's."))
    await repo.add_handoff(support.id, billing.id)
    return {"support": support, "billing": billing, "other": other}


@pytest_asyncio.fixture(name="client")
async def client_fixture(db_session, scripted_engine) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client with mocked lifespan, the test session and the scripted engine."""
    from assistant_army.server.core.database import get_session
    from assistant_army.server.main import app
    from assistant_army.server.services.deps import get_engine

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_engine] = lambda: scripted_engine

    async def mock_lifespan(app):
        yield

    with patch("assistant_army.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()
