"""
Abstract graph store interface.

Defines the GraphStore ABC with two backends:
- JsonGraphStore (default, single JSON document replaced atomically)
- SQLiteGraphStore (stdlib sqlite3, whole collection replaced per transaction)

The base class owns the in-memory collection and the ConcurrencyGuard and
implements every operation on top of two backend hooks: read the whole
collection and write the whole collection.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from enum import Enum
from pathlib import Path

from craftgraph.errors import NotFound, RootProtected
from craftgraph.graph.models import (
    SEED_IDS,
    CraftNode,
    GraphSnapshot,
    NodeCandidate,
    as_pair,
    seed_nodes,
    utc_now_iso,
)
from craftgraph.storage.guard import ConcurrencyGuard

LOG = logging.getLogger("storage.graph_store")

JSON_FILE_NAME = "words.json"
SQLITE_FILE_NAME = "graph.db"


class Removal(str, Enum):
    """What a call to ``remove_edge_or_node`` changed."""

    NODE = "node removed"
    RECIPE = "recipe removed"
    NO_SUCH_RECIPE = "no such recipe"


class GraphStore(ABC):
    """
    Persistent node collection with atomic read-modify-write operations.

    Mutations run inside ``transaction()``: the guard is held while the
    durable state is loaded, changed and written back. If anything in that
    sequence raises, the in-memory collection is restored and nothing is
    written.
    """

    def __init__(self) -> None:
        self._guard = ConcurrencyGuard(name=self.describe())
        self._nodes: dict[str, CraftNode] = {}
        self._in_transaction = False

    # ── Backend hooks ─────────────────────────────────────────────────

    @abstractmethod
    def _read_nodes(self) -> list[CraftNode] | None:
        """
        Read the persisted collection.

        Returns None when the medium has never been initialized.

        Raises:
            StorageUnavailable: The medium exists but cannot be read
        """

    @abstractmethod
    def _write_nodes(self, nodes: list[CraftNode]) -> None:
        """
        Replace the persisted collection. Must never leave a partial write.

        Raises:
            StorageUnavailable: The write failed
        """

    @abstractmethod
    def describe(self) -> str:
        """Short human-readable location of the backing medium."""

    def close(self) -> None:
        """Release storage resources."""

    # ── Durable read / write ──────────────────────────────────────────

    def load(self) -> None:
        """Materialize the collection, seeding the medium on first use."""
        with self._guard.critical_section("load"):
            self._load_locked()

    def persist(self) -> None:
        """Write the current in-memory collection."""
        with self._guard.critical_section("persist"):
            self._write_nodes(list(self._nodes.values()))

    def _load_locked(self) -> None:
        nodes = self._read_nodes()
        if nodes is None:
            LOG.info("Initializing %s with seed roots", self.describe())
            nodes = seed_nodes()
            self._write_nodes(nodes)
        self._nodes = {node.id: node for node in nodes}

    @contextmanager
    def transaction(self, operation: str, load: bool = True) -> Iterator[dict[str, CraftNode]]:
        """
        Hold the guard across load -> mutate -> persist.

        Yields the live id -> node mapping for in-place mutation. Nested
        calls on the same thread join the outer transaction.
        """
        with self._guard.critical_section(operation):
            if self._in_transaction:
                yield self._nodes
                return
            self._in_transaction = True
            try:
                if load:
                    self._load_locked()
                before = copy.deepcopy(self._nodes)
                try:
                    yield self._nodes
                    self._write_nodes(list(self._nodes.values()))
                except Exception:
                    self._nodes = before
                    raise
            finally:
                self._in_transaction = False

    # ── Queries ───────────────────────────────────────────────────────

    def snapshot(self) -> GraphSnapshot:
        """Immutable copy of the current collection for read-only consumers."""
        with self._guard.critical_section("snapshot"):
            self._load_locked()
            return GraphSnapshot(self._nodes)

    def get_node(self, node_id: str) -> CraftNode:
        node = self.snapshot().get(node_id)
        if node is None:
            raise NotFound(node_id)
        return node

    # ── Mutations ─────────────────────────────────────────────────────

    def upsert_node(
        self,
        candidate: NodeCandidate,
        parent_pair: Sequence[str] | None = None,
        time_created: str | None = None,
        refresh: bool = True,
    ) -> CraftNode:
        """
        Insert a node or merge a recipe into an existing one.

        A new node starts unapproved with zero votes. For an existing node
        the recipe is added unless already known in either orientation;
        name and icons are refreshed only when ``refresh`` is set and the
        candidate supplies them. ``time_created`` is never overwritten.

        Returns a copy of the stored node.
        """
        pair = as_pair(parent_pair) if parent_pair is not None else None
        with self.transaction("upsert") as nodes:
            node = nodes.get(candidate.id)
            if node is None:
                node = CraftNode(
                    id=candidate.id,
                    name=candidate.name or candidate.id,
                    icons=list(candidate.icons or []),
                    parent_pairs=[pair] if pair else [],
                    time_created=time_created or utc_now_iso(),
                )
                nodes[node.id] = node
                LOG.info("Inserted node %s with recipe %s", node.id, pair)
            else:
                if pair is not None and node.id in SEED_IDS:
                    # seed elements stay roots
                    LOG.info("Ignoring recipe %s for seed root %s", pair, node.id)
                elif pair is not None and node.add_pair(pair):
                    LOG.info("Added recipe %s to node %s", pair, node.id)
                if refresh:
                    if candidate.icons is not None:
                        node.icons = list(candidate.icons)
                    if candidate.name:
                        node.name = candidate.name
            return copy.deepcopy(node)

    def remove_edge_or_node(self, node_id: str, parent_pair: Sequence[str] | None = None) -> Removal:
        """
        Remove one recipe from a node, or the node itself.

        With ``parent_pair`` the recipe is dropped and the node goes only if
        no recipe is left. Without it the node is removed outright; recipes
        elsewhere that name it are left dangling.

        Returns which of the node, one recipe or nothing was removed.

        Raises:
            NotFound: No node with this id
            RootProtected: Outright removal of a root
        """
        pair = as_pair(parent_pair) if parent_pair is not None else None
        with self.transaction("remove") as nodes:
            node = nodes.get(node_id)
            if node is None:
                raise NotFound(node_id)
            if node.is_root:
                if pair is None:
                    raise RootProtected(node_id)
                LOG.info("Root %s has no recipe %s to remove", node_id, pair)
                return Removal.NO_SUCH_RECIPE
            if pair is not None:
                if not node.remove_pair(pair):
                    LOG.info("Node %s has no recipe %s to remove", node_id, pair)
                    return Removal.NO_SUCH_RECIPE
                if node.parent_pairs:
                    LOG.info("Removed recipe %s from node %s", pair, node_id)
                    return Removal.RECIPE
            del nodes[node_id]
            LOG.info("Removed node %s", node_id)
            return Removal.NODE

    def reset_to_seed(self) -> None:
        """Discard everything and restore exactly the four seed roots."""
        with self.transaction("reset", load=False) as nodes:
            nodes.clear()
            nodes.update((node.id, node) for node in seed_nodes())
        LOG.info("Reset %s to seed roots", self.describe())


def build_graph_store(backend: str, data_dir: Path) -> GraphStore:
    """
    Factory: create a GraphStore of the requested backend type.

    Args:
        backend: "json" or "sqlite"
        data_dir: Directory holding the backing file (created if missing)

    Raises:
        ValueError: Unknown backend
    """
    data_dir.mkdir(parents=True, exist_ok=True)

    if backend == "json":
        from craftgraph.storage.json_graph_store import JsonGraphStore

        return JsonGraphStore(data_dir / JSON_FILE_NAME)

    elif backend == "sqlite":
        from craftgraph.storage.sqlite_graph_store import SQLiteGraphStore

        return SQLiteGraphStore(data_dir / SQLITE_FILE_NAME)

    else:
        raise ValueError(f"Unknown graph store backend: {backend!r}. Supported: 'json', 'sqlite'")
