from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from craftgraph.config import AppConfig, GameRules
from craftgraph.errors import InvalidRequest, NotFound
from craftgraph.generation import build_text_generator
from craftgraph.generation.gatekeeper import GenerationGatekeeper
from craftgraph.generation.llm_client import TextGenerator
from craftgraph.graph.models import NodeCandidate, derive_node_id
from craftgraph.graph.pathfinder import PathFinder
from craftgraph.lifecycle import LifecycleManager
from craftgraph.models import (
    GenerationResult,
    NodeList,
    NodeModel,
    OperationResult,
    PathQueryResult,
    VoteResult,
)
from craftgraph.storage.graph_store import GraphStore, Removal, build_graph_store

LOG = logging.getLogger("craftgraph.tools")


def _validate_required(name: str, value: Optional[str]) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidRequest(f"Missing required field: {name}")


def _validate_pair(name: str, value: Optional[Sequence[str]]) -> None:
    if value is None:
        return
    if isinstance(value, str) or len(value) != 2 or not all(isinstance(v, str) and v.strip() for v in value):
        raise InvalidRequest(f"{name} must be a list of two node ids")


class CraftService:
    """
    Every operation the game exposes, bound to one store.

    Methods validate their inputs, delegate to the store, PathFinder,
    LifecycleManager or GenerationGatekeeper, and return pydantic models.
    Lookup and validation failures are raised as CraftGraphError subclasses
    for the transport layer to turn into error payloads.
    """

    def __init__(
        self,
        store: GraphStore,
        generator: TextGenerator,
        rules: Optional[GameRules] = None,
        generation_timeout: Optional[float] = 60.0,
    ) -> None:
        self.store = store
        self.rules = rules or GameRules()
        self.generator = generator
        self.lifecycle = LifecycleManager(store, self.rules)
        self.gatekeeper = GenerationGatekeeper(store, generator, self.rules, timeout=generation_timeout)

    @classmethod
    def from_config(cls, config: AppConfig) -> "CraftService":
        store = build_graph_store(config.store.backend, Path(config.store.data_dir))
        store.load()
        generator = build_text_generator(config.generator)
        return cls(store, generator, config.rules, generation_timeout=config.generator.timeout_seconds)

    async def close(self) -> None:
        await self.generator.close()
        self.store.close()

    def health(self) -> dict:
        return {"status": "ok"}

    def list_nodes(self) -> NodeList:
        snapshot = self.store.snapshot()
        return NodeList(objects=[NodeModel.from_node(node) for node in snapshot.values()])

    def insert_node(
        self,
        name: str,
        id: Optional[str] = None,
        icons: Optional[List[str]] = None,
        parentPair: Optional[List[str]] = None,
    ) -> OperationResult:
        _validate_required("name", name)
        _validate_pair("parentPair", parentPair)
        node_id = id.strip() if id and id.strip() else derive_node_id(name)
        node = self.store.upsert_node(NodeCandidate(id=node_id, name=name, icons=icons), parent_pair=parentPair)
        return OperationResult(id=node.id)

    def remove_node(self, id: str, parentPair: Optional[List[str]] = None) -> OperationResult:
        _validate_required("id", id)
        _validate_pair("parentPair", parentPair)
        removal = self.store.remove_edge_or_node(id, parent_pair=parentPair)
        return OperationResult(success=removal is not Removal.NO_SUCH_RECIPE, id=id, message=removal.value)

    def vote(self, id: str, vote: str) -> VoteResult:
        _validate_required("id", id)
        outcome = self.lifecycle.apply_vote(id, vote)
        return VoteResult(
            id=outcome.node_id,
            vote=outcome.kind,
            upvoteCount=outcome.upvote_count,
            downvoteCount=outcome.downvote_count,
            approved=outcome.approved,
            deleted=outcome.deleted,
        )

    def reset(self) -> OperationResult:
        self.store.reset_to_seed()
        return OperationResult(message="reset to seed elements")

    def paths_to_leaf(self, leafId: str, maxHops: Optional[int] = None) -> PathQueryResult:
        _validate_required("leafId", leafId)
        hops = self._hop_bound(maxHops)
        snapshot = self.store.snapshot()
        if leafId not in snapshot:
            raise NotFound(leafId)
        paths = PathFinder(snapshot, self.rules.path_trim_delta).paths_to_leaf_from_roots(leafId, hops)
        return PathQueryResult(
            mode="to-leaf", targetId=leafId, maxHops=hops, paths=paths, pathCount=len(paths or [])
        )

    def paths_leaf_to_leaf(
        self, sourceLeafId: str, targetLeafId: str, maxHops: Optional[int] = None
    ) -> PathQueryResult:
        _validate_required("sourceLeafId", sourceLeafId)
        _validate_required("targetLeafId", targetLeafId)
        hops = self._hop_bound(maxHops)
        snapshot = self.store.snapshot()
        if sourceLeafId not in snapshot:
            raise NotFound(sourceLeafId)
        paths = PathFinder(snapshot, self.rules.path_trim_delta).paths_between_leaves(
            sourceLeafId, targetLeafId, hops
        )
        return PathQueryResult(
            mode="leaf-to-leaf",
            sourceId=sourceLeafId,
            targetId=targetLeafId,
            maxHops=hops,
            paths=paths,
            pathCount=len(paths or []),
        )

    async def generate(self, parent1: str, parent2: str) -> GenerationResult:
        _validate_required("parent1", parent1)
        _validate_required("parent2", parent2)
        outcome = await self.gatekeeper.combine(parent1, parent2)
        return GenerationResult(
            success=outcome.success,
            status=outcome.status,
            leaf=outcome.phrase,
            leafID=outcome.node_id,
            icon=outcome.icon,
            fromCache=outcome.from_cache,
            raw=outcome.raw,
            error=outcome.error,
        )

    def _hop_bound(self, max_hops: Optional[int]) -> int:
        if max_hops is None:
            return self.rules.default_max_hops
        try:
            parsed = int(max_hops)
        except (TypeError, ValueError) as exc:
            raise InvalidRequest("maxHops must be an integer") from exc
        if parsed <= 0:
            return self.rules.default_max_hops
        return parsed
