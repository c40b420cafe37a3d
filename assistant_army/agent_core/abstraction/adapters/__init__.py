"""AI Framework Adapters.

This module provides execution engine implementations for AI frameworks.

Available Adapters:
- PydanticAIExecutionEngine: Execution engine backed by Pydantic AI
"""

from .pydantic_ai import PydanticAIExecutionEngine, PydanticAIStreamedRun, openai_model_factory

__all__ = [
    "PydanticAIExecutionEngine",
    "PydanticAIStreamedRun",
    "openai_model_factory",
]
