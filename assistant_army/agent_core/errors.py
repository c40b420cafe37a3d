"""Error types for the agent core.

Defines a small hierarchy of exceptions raised while composing agents and
running chat turns. Build-time and validation errors are raised before any
stream opens; upstream failures surface during a run.
"""

from __future__ import annotations


class AgentCoreError(Exception):
    """Base error for all agent core exceptions."""


class NotFoundError(AgentCoreError):
    """Raised when an agent slug or conversation id does not resolve for the owner."""

    def __init__(self, kind: str, key: object) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class UnauthorizedError(AgentCoreError):
    """Raised when a resolved entity belongs to a different owner."""

    def __init__(self, kind: str, key: object) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"Unauthorized: {kind} '{key}' does not belong to the requesting owner")


class CircularDependencyError(AgentCoreError):
    """Raised when an agent slug reappears on its own handoff chain."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Circular agent dependency detected: {slug}")


class ValidationError(AgentCoreError):
    """Raised when a chat turn cannot start (empty message, missing credential)."""


class UpstreamFailure(AgentCoreError):
    """Raised when the model provider or a remote tool fails during a run."""
