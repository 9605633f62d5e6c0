"""
SQLite-backed graph store.

Zero external dependencies (stdlib sqlite3). Uses WAL mode for concurrent
read safety. The collection is written back whole inside one transaction,
so readers see either the previous collection or the new one, never a mix.

Schema: 2 tables covering nodes and their recipes. ``PRAGMA user_version``
marks a database that has been seeded.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path

from craftgraph.errors import StorageUnavailable
from craftgraph.graph.models import CraftNode
from craftgraph.storage.graph_store import GraphStore

LOG = logging.getLogger("storage.sqlite_graph_store")

SCHEMA_VERSION = 1

_SCHEMA_SQL = """
-- Discovered items
CREATE TABLE IF NOT EXISTS nodes (
    id TEXT PRIMARY KEY,
    position INTEGER NOT NULL,
    name TEXT NOT NULL,
    icons_json TEXT NOT NULL DEFAULT '[]',
    time_created TEXT,
    upvote_count INTEGER NOT NULL DEFAULT 0,
    downvote_count INTEGER NOT NULL DEFAULT 0,
    approved INTEGER NOT NULL DEFAULT 0
);

-- Recipes producing each node
CREATE TABLE IF NOT EXISTS parent_pairs (
    node_id TEXT NOT NULL REFERENCES nodes(id) ON DELETE CASCADE,
    position INTEGER NOT NULL,
    parent_a TEXT NOT NULL,
    parent_b TEXT NOT NULL,
    PRIMARY KEY (node_id, position)
);

-- Indexes
CREATE INDEX IF NOT EXISTS idx_nodes_position ON nodes(position);
CREATE INDEX IF NOT EXISTS idx_pairs_parents ON parent_pairs(parent_a, parent_b);
"""


class SQLiteGraphStore(GraphStore):
    """SQLite-backed graph storage."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        super().__init__()
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            # Every access happens under the store's guard.
            self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._init_schema()
        except (OSError, sqlite3.Error) as exc:
            raise StorageUnavailable(f"Cannot open graph database {db_path}: {exc}") from exc

    def _init_schema(self) -> None:
        """Create tables and indexes (idempotent)."""
        self._conn.executescript(_SCHEMA_SQL)
        self._conn.commit()

    def describe(self) -> str:
        return f"sqlite:{self._db_path}"

    # ── Backend hooks ─────────────────────────────────────────────────

    def _read_nodes(self) -> list[CraftNode] | None:
        try:
            (version,) = self._conn.execute("PRAGMA user_version").fetchone()
            if version < SCHEMA_VERSION:
                return None

            pairs: dict[str, list[tuple[str, str]]] = {}
            for node_id, parent_a, parent_b in self._conn.execute(
                "SELECT node_id, parent_a, parent_b FROM parent_pairs ORDER BY node_id, position"
            ):
                pairs.setdefault(node_id, []).append((parent_a, parent_b))

            nodes = []
            for row in self._conn.execute(
                "SELECT id, name, icons_json, time_created, upvote_count, downvote_count, approved "
                "FROM nodes ORDER BY position"
            ):
                node_id, name, icons_json, time_created, upvotes, downvotes, approved = row
                nodes.append(
                    CraftNode(
                        id=node_id,
                        name=name,
                        icons=json.loads(icons_json),
                        parent_pairs=pairs.get(node_id, []),
                        time_created=time_created,
                        upvote_count=upvotes,
                        downvote_count=downvotes,
                        approved=bool(approved),
                    )
                )
        except (sqlite3.Error, json.JSONDecodeError) as exc:
            LOG.error("Cannot read %s: %s", self._db_path, exc)
            raise StorageUnavailable(f"Cannot read graph database {self._db_path}: {exc}") from exc
        return nodes

    def _write_nodes(self, nodes: list[CraftNode]) -> None:
        node_rows = [
            (
                node.id,
                position,
                node.name,
                json.dumps(node.icons, ensure_ascii=False),
                node.time_created,
                node.upvote_count,
                node.downvote_count,
                int(node.approved),
            )
            for position, node in enumerate(nodes)
        ]
        pair_rows = [
            (node.id, position, pair[0], pair[1])
            for node in nodes
            for position, pair in enumerate(node.parent_pairs)
        ]

        try:
            with self._conn:
                self._conn.execute("DELETE FROM parent_pairs")
                self._conn.execute("DELETE FROM nodes")
                self._conn.executemany(
                    "INSERT INTO nodes "
                    "(id, position, name, icons_json, time_created, upvote_count, downvote_count, approved) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    node_rows,
                )
                self._conn.executemany(
                    "INSERT INTO parent_pairs (node_id, position, parent_a, parent_b) VALUES (?, ?, ?, ?)",
                    pair_rows,
                )
                self._conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        except sqlite3.Error as exc:
            LOG.error("Cannot write %s: %s", self._db_path, exc)
            raise StorageUnavailable(f"Cannot write graph database {self._db_path}: {exc}") from exc
        LOG.debug("Wrote %d nodes, %d recipes to %s", len(node_rows), len(pair_rows), self._db_path)

    def close(self) -> None:
        self._conn.close()
