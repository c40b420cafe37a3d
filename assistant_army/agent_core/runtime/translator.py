"""Stream event translator.

Demultiplexes the engine's raw event feed for one run into the normalized
client vocabulary, preserving arrival order across event families.

State machine for one chat turn::

    idle -> initialized -> running -> completed
                                   \\-> errored

``initialized`` always precedes any model or tool activity so the client
learns the conversation id even if the run fails later. Both terminal states
end the turn; ``errored`` emits exactly one ``error`` event.
"""

from __future__ import annotations

from enum import Enum
from typing import AsyncIterator, List, Optional

from ...core.logging_config import get_logger
from ..schemas.domain import ExecutableAgent
from .events import (
    HANDOFF_OCCURRED,
    HANDOFF_REQUESTED,
    OUTPUT_TEXT_DELTA,
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
from .stream_events import (
    AgentInfo,
    AgentUpdateEvent,
    DoneEvent,
    ErrorEvent,
    HandoffEvent,
    InitEvent,
    StartedEvent,
    StoppedEvent,
    StreamEvent,
    TextEvent,
    ToolCallEvent,
)

logger = get_logger(__name__)

_TOOL_ITEM_FALLBACK_NAMES = {
    "hosted_tool_call": "hosted_tool",
    "hosted_tool_output": "hosted_tool",
}


class TurnState(str, Enum):
    IDLE = "idle"
    INITIALIZED = "initialized"
    RUNNING = "running"
    COMPLETED = "completed"
    ERRORED = "errored"


def tool_display_name(item: RunItem) -> str:
    """Tool name shown to the client, derived from the item's concrete kind."""
    if item.tool_name:
        return item.tool_name
    return _TOOL_ITEM_FALLBACK_NAMES.get(item.kind, "tool")


class StreamEventTranslator:
    """
    Best-effort normalizer for one run.

    Besides translating, it keeps the text of the newest model response and
    the agent that last held control, which the caller uses to persist the
    exchange. Every ``response.created`` starts a new response, so text an
    agent wrote before a tool call or a handoff is not part of the answer.
    """

    def __init__(self, root_agent: Optional[ExecutableAgent] = None) -> None:
        self.state = TurnState.IDLE
        self.last_agent: Optional[ExecutableAgent] = root_agent
        self._responses: List[List[str]] = []

    @property
    def final_text(self) -> str:
        """Text of the newest model response of the turn."""
        return "".join(self._responses[-1]) if self._responses else ""

    @property
    def finished(self) -> bool:
        return self.state in (TurnState.COMPLETED, TurnState.ERRORED)

    def initialize(self, conversation_id: int) -> InitEvent:
        if self.state is not TurnState.IDLE:
            raise RuntimeError(f"Cannot initialize a turn in state '{self.state.value}'")
        self.state = TurnState.INITIALIZED
        return InitEvent(conversation_id=conversation_id)

    def translate(self, event: RawRunEvent) -> List[StreamEvent]:
        """
        Translate one raw event.

        Args:
            event: Any raw feed event; unrecognised kinds are ignored.

        Returns:
            Zero or more client events, in order.
        """
        if self.finished:
            raise RuntimeError(f"Cannot translate events after the turn is {self.state.value}")
        self.state = TurnState.RUNNING

        if isinstance(event, AgentUpdatedEvent):
            self.last_agent = event.new_agent
            return [AgentUpdateEvent(agent=AgentInfo(name=event.new_agent.name))]
        if isinstance(event, RawResponseEvent):
            return self._translate_response(event)
        if isinstance(event, RunItemStreamEvent):
            return self._translate_item(event)

        logger.debug(f"Ignoring unknown raw event type: {type(event).__name__}")
        return []

    def _translate_response(self, event: RawResponseEvent) -> List[StreamEvent]:
        if event.kind == RESPONSE_CREATED:
            self._responses.append([])
            return [StartedEvent()]
        if event.kind == OUTPUT_TEXT_DELTA:
            if not event.delta:
                return []
            if not self._responses:
                self._responses.append([])
            self._responses[-1].append(event.delta)
            return [TextEvent(content=event.delta)]
        if event.kind == RESPONSE_COMPLETED:
            return [StoppedEvent()]
        return []

    def _translate_item(self, event: RunItemStreamEvent) -> List[StreamEvent]:
        item = event.item
        if event.name == TOOL_CALLED:
            return [ToolCallEvent(name=tool_display_name(item), agent=item.agent_name, status="requested")]
        if event.name == TOOL_OUTPUT:
            return [ToolCallEvent(name=tool_display_name(item), agent=item.agent_name, status="completed")]
        if event.name == HANDOFF_REQUESTED:
            return [HandoffEvent(target=item.target_name or "unknown", status="requested")]
        if event.name == HANDOFF_OCCURRED:
            return [HandoffEvent(target=item.target_name or "unknown", status="completed")]
        # message_output_created, reasoning_item_created and future names
        return []

    async def relay(self, feed: AsyncIterator[RawRunEvent]) -> AsyncIterator[StreamEvent]:
        """Translate a whole feed lazily, one raw event at a time."""
        async for raw in feed:
            for event in self.translate(raw):
                yield event

    def complete(self) -> DoneEvent:
        if self.state not in (TurnState.INITIALIZED, TurnState.RUNNING):
            raise RuntimeError(f"Cannot complete a turn in state '{self.state.value}'")
        self.state = TurnState.COMPLETED
        return DoneEvent()

    def fail(self, message: str) -> ErrorEvent:
        if self.finished:
            raise RuntimeError(f"Cannot fail a turn that is already {self.state.value}")
        self.state = TurnState.ERRORED
        return ErrorEvent(message=message)
