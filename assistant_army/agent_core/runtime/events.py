"""Raw run events.

The execution engine reports a run as one ordered feed mixing three families:

- agent swaps (``AgentUpdatedEvent``), emitted whenever control moves to a
  different agent, including once at the start of the run;
- low-level generation events (``RawResponseEvent``): response created,
  incremental text fragments, response completed;
- run-item lifecycle events (``RunItemStreamEvent``): tool calls and their
  outputs, handoff requests and completions, finalized messages and
  reasoning steps.

Consumers must ignore kinds they do not recognise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..schemas.domain import ExecutableAgent

RESPONSE_CREATED = "response.created"
OUTPUT_TEXT_DELTA = "response.output_text.delta"
RESPONSE_COMPLETED = "response.completed"

TOOL_CALLED = "tool_called"
TOOL_OUTPUT = "tool_output"
HANDOFF_REQUESTED = "handoff_requested"
HANDOFF_OCCURRED = "handoff_occurred"
MESSAGE_OUTPUT_CREATED = "message_output_created"
REASONING_ITEM_CREATED = "reasoning_item_created"


@dataclass(frozen=True)
class AgentUpdatedEvent:
    new_agent: ExecutableAgent


@dataclass(frozen=True)
class RawResponseEvent:
    """Generation-level event; ``delta`` is set for text fragments only."""

    kind: str
    delta: Optional[str] = None


@dataclass(frozen=True)
class RunItem:
    """
    One lifecycle item of a run.

    Attributes
    ----------
    kind:
        Concrete item kind: ``function_call``, ``function_call_output``,
        ``hosted_tool_call``, ``hosted_tool_output``, ``handoff_call``,
        ``handoff_output``, ``message``, ``reasoning``.
    agent_name:
        Agent that produced the item.
    tool_name:
        Function or hosted tool name, for tool items.
    target_name:
        Receiving agent, for handoff items.
    """

    kind: str
    agent_name: str
    tool_name: Optional[str] = None
    target_name: Optional[str] = None


@dataclass(frozen=True)
class RunItemStreamEvent:
    name: str
    item: RunItem


RawRunEvent = Union[AgentUpdatedEvent, RawResponseEvent, RunItemStreamEvent]
