from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

from craftgraph.graph.models import CraftNode


class VoteKind(str, Enum):
    UP = "up"
    DOWN = "down"


class GenerationStatus(str, Enum):
    CACHE_HIT = "cache_hit"
    ADMITTED = "admitted"
    DISCARDED = "discarded"
    INVALID_PARENT = "invalid_parent"
    EXTRACTION_FAILED = "extraction_failed"
    EXTERNAL_CALL_FAILED = "external_call_failed"


class NodeModel(BaseModel):
    id: str
    name: str
    icons: List[str] = Field(default_factory=list)
    parentPairs: List[Tuple[str, str]] = Field(default_factory=list)
    timeCreated: Optional[str] = None
    upvoteCount: int = Field(default=0, ge=0)
    downvoteCount: int = Field(default=0, ge=0)
    approved: bool = False

    @classmethod
    def from_node(cls, node: CraftNode) -> "NodeModel":
        return cls(
            id=node.id,
            name=node.name,
            icons=list(node.icons),
            parentPairs=list(node.parent_pairs),
            timeCreated=node.time_created,
            upvoteCount=node.upvote_count,
            downvoteCount=node.downvote_count,
            approved=node.approved,
        )

    def to_node(self) -> CraftNode:
        node = CraftNode(
            id=self.id,
            name=self.name,
            icons=list(self.icons),
            time_created=self.timeCreated,
            upvote_count=self.upvoteCount,
            downvote_count=self.downvoteCount,
            approved=self.approved,
        )
        # add_pair drops a reversed duplicate left by a hand-edited file
        for pair in self.parentPairs:
            node.add_pair(pair)
        return node


class GraphDocument(BaseModel):
    """On-disk layout of the JSON store."""

    objects: List[NodeModel] = Field(default_factory=list)


class NodeList(BaseModel):
    objects: List[NodeModel]


class OperationResult(BaseModel):
    success: bool = True
    id: Optional[str] = None
    message: Optional[str] = None


class VoteResult(BaseModel):
    success: bool = True
    id: str
    vote: VoteKind
    upvoteCount: int
    downvoteCount: int
    approved: bool
    deleted: bool


class PathQueryResult(BaseModel):
    mode: Literal["to-leaf", "leaf-to-leaf"]
    sourceId: Optional[str] = None
    targetId: str
    maxHops: int
    paths: Optional[List[List[str]]] = None
    pathCount: int = 0


class GenerationResult(BaseModel):
    success: bool
    status: GenerationStatus
    leaf: Optional[str] = None
    leafID: Optional[str] = None
    icon: Optional[str] = None
    fromCache: bool = False
    raw: Optional[str] = None
    error: Optional[str] = None


class ErrorResult(BaseModel):
    success: bool = False
    kind: str
    error: str
