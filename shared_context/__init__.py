"""Shared context: the team's durable, file-based record of its work."""

from .manager import DECISION_TYPES, SharedContext, deep_merge
from .store import ContextStore, FileContextStore, InMemoryContextStore

__all__ = [
    "ContextStore",
    "DECISION_TYPES",
    "FileContextStore",
    "InMemoryContextStore",
    "SharedContext",
    "deep_merge",
]
