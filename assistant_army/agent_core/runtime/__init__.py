"""Run-time pipeline for one chat turn.

 The execution engine produces a raw event feed mixing agent swaps,
 generation events and run-item lifecycle events. ``StreamEventTranslator``
 turns that feed into the normalized client vocabulary defined in
 ``stream_events`` while tracking the final text and the answering agent.
 """

from .engine import ExecutionEngine, RunOutcome, StreamedRun
from .events import AgentUpdatedEvent, RawResponseEvent, RawRunEvent, RunItem, RunItemStreamEvent
from .translator import StreamEventTranslator, TurnState

__all__ = [
    "AgentUpdatedEvent",
    "ExecutionEngine",
    "RawResponseEvent",
    "RawRunEvent",
    "RunItem",
    "RunItemStreamEvent",
    "RunOutcome",
    "StreamEventTranslator",
    "StreamedRun",
    "TurnState",
]
