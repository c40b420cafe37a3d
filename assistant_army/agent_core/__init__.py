"""Agent composition and streaming conversation core.

Design overview
---------------

A chat turn flows through three pieces, each depending only on the
collaborator contracts in ``agent_core.repos``:

- ``AgentGraphBuilder`` resolves an owner's root agent slug into an
  ``ExecutableAgent`` tree (capability tools, remote tool servers, peer
  agents as tools, handoff sub-agents), pruning cycles branch by branch.
- ``ConversationSessionAdapter`` turns stored conversation rows into the
  run-format history and persists the new exchange.
- ``StreamEventTranslator`` normalizes the execution engine's raw event feed
  into client stream events.

The execution engine itself is pluggable (``runtime.ExecutionEngine``); the
default implementation lives in ``abstraction.adapters.pydantic_ai``.
"""

from .errors import (
    AgentCoreError,
    CircularDependencyError,
    NotFoundError,
    UnauthorizedError,
    UpstreamFailure,
    ValidationError,
)
from .graph_builder import AgentGraphBuilder
from .runtime import StreamEventTranslator
from .session import ConversationSessionAdapter

__all__ = [
    "AgentCoreError",
    "AgentGraphBuilder",
    "CircularDependencyError",
    "ConversationSessionAdapter",
    "NotFoundError",
    "StreamEventTranslator",
    "UnauthorizedError",
    "UpstreamFailure",
    "ValidationError",
]
