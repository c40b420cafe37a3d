"""Assistant Army.

Users define named AI agents (instructions, enabled tools and one-way
handoffs to other agents) and converse with them.

High-level architecture
-----------------------

- ``agent_core``: agent graph building, conversation session adapter, raw to
  client stream event translation and the execution engine adapter.
- ``core``: logging, monitoring and the database layer (entities and
  repositories implementing the agent core's collaborator contracts).
- ``server``: FastAPI application exposing streaming and non-streaming chat.
"""

__version__ = "0.1.0"
