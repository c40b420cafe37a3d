"""Framework abstraction layer.

Concrete execution engines live under ``adapters``; the rest of the agent
core only depends on the ``ExecutionEngine`` protocol.
"""
