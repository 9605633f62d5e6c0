"""
Crafting graph model and path queries.

Usage:
    from craftgraph.graph import PathFinder

    finder = PathFinder(store.snapshot())
    finder.paths_to_leaf_from_roots("STEAM", max_hops=10)
    finder.paths_between_leaves("MUD", "WATER")
"""

from __future__ import annotations

from craftgraph.graph.models import (
    SEED_IDS,
    SEED_ROOTS,
    CraftNode,
    GraphSnapshot,
    NodeCandidate,
    ParentPair,
    as_pair,
    derive_node_id,
    same_pair,
    seed_nodes,
)
from craftgraph.graph.pathfinder import DEFAULT_MAX_HOPS, DEFAULT_TRIM_DELTA, PathFinder, trim_paths

__all__ = [
    "CraftNode",
    "DEFAULT_MAX_HOPS",
    "DEFAULT_TRIM_DELTA",
    "GraphSnapshot",
    "NodeCandidate",
    "ParentPair",
    "PathFinder",
    "SEED_IDS",
    "SEED_ROOTS",
    "as_pair",
    "derive_node_id",
    "same_pair",
    "seed_nodes",
    "trim_paths",
]
