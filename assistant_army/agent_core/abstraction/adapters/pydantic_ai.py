"""Pydantic AI execution engine adapter.

This module implements the ``ExecutionEngine`` contract on top of Pydantic AI.
Each ``ExecutableAgent`` of a turn is materialized into a ``pydantic_ai.Agent``:

- function tool bindings become ``Tool`` objects,
- hosted bindings become builtin tools (``WebSearchTool``),
- remote tool servers become ``MCPServerStreamableHTTP`` toolsets,
- peer agents become ``ask_<slug>`` tools that run the peer to completion,
- handoff targets become ``transfer_to_<slug>`` tools.

Pydantic AI has no native handoff, so a transfer tool only records the
target. Once the tool call completes, the current agent's run is stopped and
the target takes over the same turn with the same user input and history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Sequence

from pydantic_ai import Agent, Tool, WebSearchTool
from pydantic_ai.mcp import MCPServerStreamableHTTP
from pydantic_ai.messages import (
    BuiltinToolCallPart,
    BuiltinToolReturnPart,
    FunctionToolCallEvent,
    FunctionToolResultEvent,
    ModelMessage,
    PartDeltaEvent,
    PartStartEvent,
    TextPart,
    TextPartDelta,
    ThinkingPart,
)
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIResponsesModel
from pydantic_ai.providers.openai import OpenAIProvider

from ....core.logging_config import get_logger
from ...errors import AgentCoreError, UpstreamFailure
from ...runtime.engine import RunOutcome
from ...runtime.events import (
    HANDOFF_OCCURRED,
    HANDOFF_REQUESTED,
    MESSAGE_OUTPUT_CREATED,
    OUTPUT_TEXT_DELTA,
    REASONING_ITEM_CREATED,
    RESPONSE_COMPLETED,
    RESPONSE_CREATED,
    TOOL_CALLED,
    TOOL_OUTPUT,
    AgentUpdatedEvent,
    RawResponseEvent,
    RawRunEvent,
    RunItem,
    RunItemStreamEvent,
)
from ...schemas.domain import (
    ExecutableAgent,
    FunctionToolBinding,
    HostedToolBinding,
    PeerAgentToolBinding,
    RemoteToolBinding,
    tool_safe_name,
)

logger = get_logger(__name__)

ModelFactory = Callable[[str, Optional[str]], Model]


def openai_model_factory(base_url: Optional[str] = None) -> ModelFactory:
    """Factory building an OpenAI Responses model with the owner's API key."""

    def build(model_name: str, api_key: Optional[str]) -> Model:
        return OpenAIResponsesModel(model_name, provider=OpenAIProvider(api_key=api_key, base_url=base_url))

    return build


@dataclass
class _HandoffState:
    """Transfer tools of one materialized agent and the target picked, if any."""

    targets: Dict[str, ExecutableAgent] = field(default_factory=dict)
    target: Optional[ExecutableAgent] = None


class PydanticAIStreamedRun:
    """
    One streamed run, possibly spanning several agents through handoffs.

    ``final_output`` and ``last_agent`` are meaningful once ``stream_events``
    is exhausted.
    """

    def __init__(
        self,
        engine: "PydanticAIExecutionEngine",
        agent: ExecutableAgent,
        user_input: str,
        history: Sequence[ModelMessage],
        api_key: Optional[str],
    ) -> None:
        self._engine = engine
        self._user_input = user_input
        self._history = list(history)
        self._api_key = api_key
        self.final_output: Optional[str] = None
        self.last_agent = agent

    async def stream_events(self) -> AsyncIterator[RawRunEvent]:
        current = self.last_agent
        yield AgentUpdatedEvent(new_agent=current)

        while True:
            handoff = _HandoffState()
            runner = self._engine.materialize(current, handoff, api_key=self._api_key)
            try:
                async with runner.iter(self._user_input, message_history=list(self._history)) as run:
                    async for node in run:
                        if Agent.is_model_request_node(node):
                            yield RawResponseEvent(kind=RESPONSE_CREATED)
                            produced_text = False
                            async with node.stream(run.ctx) as request_stream:
                                async for event in request_stream:
                                    for raw in self._model_events(current, event):
                                        if isinstance(raw, RawResponseEvent) and raw.kind == OUTPUT_TEXT_DELTA:
                                            produced_text = True
                                        yield raw
                            if produced_text:
                                yield RunItemStreamEvent(
                                    name=MESSAGE_OUTPUT_CREATED, item=RunItem(kind="message", agent_name=current.name)
                                )
                            yield RawResponseEvent(kind=RESPONSE_COMPLETED)
                        elif Agent.is_call_tools_node(node):
                            async with node.stream(run.ctx) as handle_stream:
                                async for event in handle_stream:
                                    raw = self._tool_event(current, handoff, event)
                                    if raw is not None:
                                        yield raw
                            if handoff.target is not None:
                                break
                    if handoff.target is None:
                        self.final_output = run.result.output if run.result else None
            except AgentCoreError:
                raise
            except Exception as e:
                logger.error(f"Run of agent '{current.slug}' failed: {e}", exc_info=True)
                raise UpstreamFailure(f"Agent '{current.name}' failed: {e}") from e

            if handoff.target is None:
                return

            logger.info(f"Handoff: '{current.slug}' -> '{handoff.target.slug}'")
            current = handoff.target
            self.last_agent = current
            yield AgentUpdatedEvent(new_agent=current)

    @staticmethod
    def _model_events(agent: ExecutableAgent, event: Any) -> List[RawRunEvent]:
        if isinstance(event, PartStartEvent):
            part = event.part
            if isinstance(part, TextPart):
                return [RawResponseEvent(kind=OUTPUT_TEXT_DELTA, delta=part.content)] if part.content else []
            if isinstance(part, BuiltinToolCallPart):
                item = RunItem(kind="hosted_tool_call", agent_name=agent.name, tool_name=part.tool_name)
                return [RunItemStreamEvent(name=TOOL_CALLED, item=item)]
            if isinstance(part, BuiltinToolReturnPart):
                item = RunItem(kind="hosted_tool_output", agent_name=agent.name, tool_name=part.tool_name)
                return [RunItemStreamEvent(name=TOOL_OUTPUT, item=item)]
            if isinstance(part, ThinkingPart):
                return [RunItemStreamEvent(name=REASONING_ITEM_CREATED, item=RunItem(kind="reasoning", agent_name=agent.name))]
        elif isinstance(event, PartDeltaEvent) and isinstance(event.delta, TextPartDelta):
            if event.delta.content_delta:
                return [RawResponseEvent(kind=OUTPUT_TEXT_DELTA, delta=event.delta.content_delta)]
        return []

    @staticmethod
    def _tool_event(agent: ExecutableAgent, handoff: _HandoffState, event: Any) -> Optional[RawRunEvent]:
        if isinstance(event, FunctionToolCallEvent):
            name = event.part.tool_name
            target = handoff.targets.get(name)
            if target is not None:
                item = RunItem(kind="handoff_call", agent_name=agent.name, tool_name=name, target_name=target.name)
                return RunItemStreamEvent(name=HANDOFF_REQUESTED, item=item)
            return RunItemStreamEvent(
                name=TOOL_CALLED, item=RunItem(kind="function_call", agent_name=agent.name, tool_name=name)
            )
        if isinstance(event, FunctionToolResultEvent):
            name = event.result.tool_name
            target = handoff.targets.get(name) if name else None
            if target is not None:
                item = RunItem(kind="handoff_output", agent_name=agent.name, tool_name=name, target_name=target.name)
                return RunItemStreamEvent(name=HANDOFF_OCCURRED, item=item)
            return RunItemStreamEvent(
                name=TOOL_OUTPUT, item=RunItem(kind="function_call_output", agent_name=agent.name, tool_name=name)
            )
        return None


class PydanticAIExecutionEngine:
    """
    ``ExecutionEngine`` backed by Pydantic AI.

    Attributes:
        model_factory: Builds the model for ``(model_name, api_key)``.
    """

    def __init__(self, model_factory: Optional[ModelFactory] = None, *, base_url: Optional[str] = None) -> None:
        self.model_factory = model_factory or openai_model_factory(base_url)

    def run_streamed(
        self,
        agent: ExecutableAgent,
        user_input: str,
        history: Sequence[ModelMessage],
        *,
        api_key: Optional[str] = None,
    ) -> PydanticAIStreamedRun:
        return PydanticAIStreamedRun(self, agent, user_input, history, api_key)

    async def run(
        self,
        agent: ExecutableAgent,
        user_input: str,
        history: Sequence[ModelMessage],
        *,
        api_key: Optional[str] = None,
    ) -> RunOutcome:
        """Drive a run to completion, following handoffs."""
        streamed = self.run_streamed(agent, user_input, history, api_key=api_key)
        async for _ in streamed.stream_events():
            pass
        return RunOutcome(final_output=streamed.final_output or "", last_agent=streamed.last_agent)

    def materialize(
        self, agent: ExecutableAgent, handoff: _HandoffState, *, api_key: Optional[str] = None
    ) -> Agent[None, str]:
        """
        Build the ``pydantic_ai.Agent`` for one agent of the tree.

        Args:
            agent: Executable agent to materialize.
            handoff: Receives the transfer tool names and, during the run, the picked target.
            api_key: Owner's model provider key.

        Returns:
            A ready to run Pydantic AI agent.
        """
        tools: List[Tool[None]] = []
        builtin_tools: List[Any] = []
        toolsets: List[Any] = []

        for binding in agent.tools:
            if isinstance(binding, FunctionToolBinding):
                tools.append(Tool(binding.function, name=binding.name, description=binding.description))
            elif isinstance(binding, HostedToolBinding):
                if binding.name == "web_search":
                    builtin_tools.append(WebSearchTool())
                else:
                    logger.warning(f"Unsupported hosted tool '{binding.name}' on agent '{agent.slug}', skipping")
            elif isinstance(binding, RemoteToolBinding):
                toolsets.append(
                    MCPServerStreamableHTTP(
                        binding.url,
                        headers=binding.headers or None,
                        tool_prefix=tool_safe_name(binding.label),
                    )
                )
            elif isinstance(binding, PeerAgentToolBinding):
                tools.append(self._peer_tool(binding, api_key))

        for target in agent.handoffs:
            tool_name = f"transfer_to_{tool_safe_name(target.slug)}"
            handoff.targets[tool_name] = target
            tools.append(self._transfer_tool(tool_name, target, handoff))

        return Agent(
            self.model_factory(agent.model, api_key),
            instructions=agent.instructions,
            name=agent.name,
            tools=tools,
            builtin_tools=builtin_tools,
            toolsets=toolsets,
        )

    def _peer_tool(self, binding: PeerAgentToolBinding, api_key: Optional[str]) -> Tool[None]:
        peer = binding.agent

        async def ask(request: str) -> str:
            outcome = await self.run(peer, request, [], api_key=api_key)
            return outcome.final_output

        return Tool(ask, name=binding.tool_name, description=binding.description)

    @staticmethod
    def _transfer_tool(tool_name: str, target: ExecutableAgent, handoff: _HandoffState) -> Tool[None]:
        async def transfer() -> str:
            handoff.target = target
            return f"Transferred to {target.name}."

        return Tool(transfer, name=tool_name, description=f"Hand the conversation over to {target.name}.")
