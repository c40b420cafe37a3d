"""Client stream events.

Normalized, client-facing events of one chat turn. The JSON form of each
model is exactly one Server-Sent Events frame.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

ToolCallStatus = Literal["requested", "completed"]
HandoffStatus = Literal["requested", "completed"]


class InitEvent(BaseModel):
    """First frame of every turn; carries the (possibly new) conversation id."""

    type: Literal["init"] = "init"
    conversation_id: int


class StartedEvent(BaseModel):
    type: Literal["started"] = "started"


class TextEvent(BaseModel):
    """Incremental text fragment."""

    type: Literal["text"] = "text"
    content: str


class ToolCallEvent(BaseModel):
    type: Literal["tool_call"] = "tool_call"
    name: str
    agent: str
    status: ToolCallStatus


class AgentInfo(BaseModel):
    name: str


class AgentUpdateEvent(BaseModel):
    """Control moved to another agent."""

    type: Literal["agent_update"] = "agent_update"
    agent: AgentInfo


class HandoffEvent(BaseModel):
    type: Literal["handoff"] = "handoff"
    target: str
    status: HandoffStatus


class StoppedEvent(BaseModel):
    type: Literal["stopped"] = "stopped"


class ErrorEvent(BaseModel):
    """Terminal failure; always the last frame of an errored turn."""

    type: Literal["error"] = "error"
    message: str


class DoneEvent(BaseModel):
    """Terminal success; sent after the exchange is persisted."""

    type: Literal["done"] = "done"


StreamEvent = Annotated[
    Union[
        InitEvent,
        StartedEvent,
        TextEvent,
        ToolCallEvent,
        AgentUpdateEvent,
        HandoffEvent,
        StoppedEvent,
        ErrorEvent,
        DoneEvent,
    ],
    Field(discriminator="type"),
]
