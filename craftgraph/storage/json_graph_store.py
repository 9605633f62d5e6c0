"""
JSON-file graph store.

The whole collection lives in one ``{"objects": [...]}`` document. Writes go
to a temporary file in the same directory which is then renamed over the
target with os.replace, so a crash mid-write leaves the previous document
intact instead of a truncated one.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from craftgraph.errors import StorageUnavailable
from craftgraph.graph.models import CraftNode
from craftgraph.models import GraphDocument, NodeModel
from craftgraph.storage.graph_store import GraphStore

LOG = logging.getLogger("storage.json_graph_store")


class JsonGraphStore(GraphStore):
    """Graph store backed by a single JSON document."""

    def __init__(self, path: Path) -> None:
        self._path = path
        super().__init__()

    @property
    def path(self) -> Path:
        return self._path

    def describe(self) -> str:
        return f"json:{self._path}"

    def _read_nodes(self) -> list[CraftNode] | None:
        if not self._path.exists():
            return None
        try:
            document = GraphDocument.model_validate_json(self._path.read_bytes())
        except OSError as exc:
            LOG.error("Cannot read %s: %s", self._path, exc)
            raise StorageUnavailable(f"Cannot read graph document {self._path}: {exc}") from exc
        except ValidationError as exc:
            LOG.error("Malformed graph document %s: %s", self._path, exc)
            raise StorageUnavailable(f"Malformed graph document {self._path}") from exc
        return [model.to_node() for model in document.objects]

    def _write_nodes(self, nodes: list[CraftNode]) -> None:
        document = GraphDocument(objects=[NodeModel.from_node(node) for node in nodes])
        payload = document.model_dump_json(indent=2)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                    handle.flush()
                    os.fsync(handle.fileno())
                # Atomic rename
                os.replace(tmp_name, self._path)
            except BaseException:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            LOG.error("Cannot write %s: %s", self._path, exc)
            raise StorageUnavailable(f"Cannot write graph document {self._path}: {exc}") from exc
        LOG.debug("Wrote %d nodes to %s", len(nodes), self._path)
