"""Concrete adapter implementations."""

from .memory_placement_store import InMemoryPlacementStore
from .sqlite_placement_store import SqlitePlacementStore

__all__ = [
    "InMemoryPlacementStore",
    "SqlitePlacementStore",
]
