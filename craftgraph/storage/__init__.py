"""
Persistent storage layer for craftgraph.

Provides:
- GraphStore: Abstract node collection with JSON and SQLite backends
- Removal: What a recipe or node removal changed
- ConcurrencyGuard: The single lock every read-modify-write runs under
"""

from craftgraph.storage.graph_store import GraphStore, Removal, build_graph_store
from craftgraph.storage.guard import ConcurrencyGuard

__all__ = [
    "ConcurrencyGuard",
    "GraphStore",
    "Removal",
    "build_graph_store",
]
