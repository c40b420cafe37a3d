"""Execution engine contract.

The engine is a black box that accepts an ``ExecutableAgent`` plus the user
input and prior history, and produces a run:

- ``run_streamed`` returns a ``StreamedRun`` whose ``stream_events`` yields
  the raw feed (see ``events``); ``final_output`` and ``last_agent`` are
  available once the feed is exhausted;
- ``run`` drives a run to completion and returns a ``RunOutcome``.

Failures of the model provider or of remote tools surface as
``UpstreamFailure``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator, Optional, Protocol, Sequence

from pydantic_ai.messages import ModelMessage

from ..schemas.domain import ExecutableAgent
from .events import RawRunEvent


@dataclass(frozen=True)
class RunOutcome:
    final_output: str
    last_agent: ExecutableAgent


class StreamedRun(Protocol):
    """A run in progress."""

    final_output: Optional[str]
    last_agent: ExecutableAgent

    def stream_events(self) -> AsyncIterator[RawRunEvent]: ...


class ExecutionEngine(Protocol):
    """Protocol for execution engine implementations."""

    def run_streamed(
        self,
        agent: ExecutableAgent,
        user_input: str,
        history: Sequence[ModelMessage],
        *,
        api_key: Optional[str] = None,
    ) -> StreamedRun: ...

    async def run(
        self,
        agent: ExecutableAgent,
        user_input: str,
        history: Sequence[ModelMessage],
        *,
        api_key: Optional[str] = None,
    ) -> RunOutcome: ...
