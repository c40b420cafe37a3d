"""
Centralized database layer.

Entities describe the tables, repositories implement the collaborator
contracts the agent core depends on.
"""

from .base import Base, utc_now
from .utils import create_all, create_engine, create_sessionmaker

__all__ = [
    "Base",
    "create_all",
    "create_engine",
    "create_sessionmaker",
    "utc_now",
]
