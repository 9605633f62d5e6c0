"""
Path queries over a graph snapshot.

Both queries walk backward from a starting node through its recipes. Every
recipe contributes both of its ingredients as alternative parents, so the
number of raw paths grows combinatorially; results are trimmed to those
within ``trim_delta`` of the shortest path found.

The walk uses an explicit stack of ``(node_id, path, hops)`` frames. Each
frame carries its own immutable path tuple, which doubles as the
per-branch visited set: a branch may not revisit an id already on its path,
while sibling branches are free to.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from craftgraph.graph.models import CraftNode

LOG = logging.getLogger("graph.pathfinder")

DEFAULT_MAX_HOPS = 10
DEFAULT_TRIM_DELTA = 5

Path = list[str]


def trim_paths(paths: list[Path], max_delta: int = DEFAULT_TRIM_DELTA) -> list[Path]:
    """Keep only paths no longer than the shortest one plus ``max_delta``."""
    if not paths:
        return []
    min_length = min(len(path) for path in paths)
    return [path for path in paths if len(path) <= min_length + max_delta]


class PathFinder:
    """Acyclic path enumeration over an id -> node mapping."""

    def __init__(self, nodes: Mapping[str, CraftNode], trim_delta: int = DEFAULT_TRIM_DELTA) -> None:
        self._nodes = nodes
        self._trim_delta = trim_delta

    def paths_to_leaf_from_roots(self, leaf_id: str, max_hops: int = DEFAULT_MAX_HOPS) -> list[Path] | None:
        """
        All paths from any root to ``leaf_id``, root first.

        Returns None when no root is reachable within ``max_hops``.
        """
        results: list[Path] = []
        # path holds the ids below the current node, nearest first, leaf last
        stack: list[tuple[str, tuple[str, ...], int]] = [(leaf_id, (), 0)]

        while stack:
            current_id, path, hops = stack.pop()
            if hops > max_hops or current_id in path:
                continue
            node = self._nodes.get(current_id)
            if node is None:
                continue
            if node.is_root:
                results.append([current_id, *path])
                continue
            below = (current_id, *path)
            stack.extend((parent_id, below, hops + 1) for parent_id in reversed(self._parents_of(node)))

        return self._finish(results, "root->%s" % leaf_id)

    def paths_between_leaves(
        self,
        source_id: str,
        target_id: str,
        max_hops: int = DEFAULT_MAX_HOPS,
    ) -> list[Path] | None:
        """
        All paths from ``source_id`` back to ``target_id``, source first.

        The walk follows recipes from the source toward its ingredients and
        records a path as soon as it reaches the target, which need not be
        a root. Returns None when the target is not reachable.
        """
        results: list[Path] = []
        # path holds the ids visited so far, source first
        stack: list[tuple[str, tuple[str, ...], int]] = [(source_id, (), 0)]

        while stack:
            current_id, path, hops = stack.pop()
            if hops > max_hops or current_id in path:
                continue
            if current_id == target_id:
                results.append([*path, current_id])
                continue
            node = self._nodes.get(current_id)
            if node is None:
                continue
            above = (*path, current_id)
            stack.extend((parent_id, above, hops + 1) for parent_id in reversed(self._parents_of(node)))

        return self._finish(results, "%s->%s" % (source_id, target_id))

    @staticmethod
    def _parents_of(node: CraftNode) -> list[str]:
        """Ingredient ids in recipe order; the stack pops them in this order."""
        return [parent_id for pair in node.parent_pairs for parent_id in pair]

    def _finish(self, results: list[Path], label: str) -> list[Path] | None:
        trimmed = trim_paths(results, self._trim_delta)
        LOG.debug("Path query %s: %d raw, %d after trim", label, len(results), len(trimmed))
        return trimmed or None
