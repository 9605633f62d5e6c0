"""
Node models for the crafting dependency graph.

A node is a discovered item. Its ``parent_pairs`` are the recipes that
produce it: unordered pairs of node ids. A node without recipes is a root.
These models are backend-agnostic; the storage layer converts them to and
from its own representation.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType

ParentPair = tuple[str, str]

_WHITESPACE_RE = re.compile(r"\s+")


def derive_node_id(name: str) -> str:
    """Derive the stable node id for a display name: ``Hot Steam`` -> ``HOT-STEAM``."""
    return _WHITESPACE_RE.sub("-", name.strip().upper())


def as_pair(value) -> ParentPair:
    """Coerce a two-element sequence into a ParentPair."""
    items = tuple(value)
    if len(items) != 2 or not all(isinstance(item, str) and item for item in items):
        raise ValueError(f"A parent pair must hold exactly two node ids, got {value!r}")
    return items[0], items[1]


def same_pair(left: ParentPair, right: ParentPair) -> bool:
    """Order-insensitive pair equality: (a, b) == (b, a)."""
    return (left[0] == right[0] and left[1] == right[1]) or (left[0] == right[1] and left[1] == right[0])


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class CraftNode:
    """A discovered item in the crafting graph."""

    id: str
    name: str
    icons: list[str] = field(default_factory=list)
    parent_pairs: list[ParentPair] = field(default_factory=list)
    time_created: str | None = None
    upvote_count: int = 0
    downvote_count: int = 0
    approved: bool = False

    @property
    def is_root(self) -> bool:
        """A root cannot be produced by any recipe."""
        return not self.parent_pairs

    @property
    def primary_icon(self) -> str | None:
        return self.icons[0] if self.icons else None

    def has_pair(self, pair: ParentPair) -> bool:
        return any(same_pair(existing, pair) for existing in self.parent_pairs)

    def add_pair(self, pair: ParentPair) -> bool:
        """Add a recipe unless it is already known. Returns True if added."""
        if self.has_pair(pair):
            return False
        self.parent_pairs.append(pair)
        return True

    def remove_pair(self, pair: ParentPair) -> bool:
        """Drop a recipe (either orientation). Returns True if one was removed."""
        kept = [existing for existing in self.parent_pairs if not same_pair(existing, pair)]
        removed = len(kept) != len(self.parent_pairs)
        self.parent_pairs = kept
        return removed


@dataclass
class NodeCandidate:
    """
    Input to an upsert.

    ``name`` and ``icons`` left as None mean "keep what is stored" when the
    node already exists.
    """

    id: str
    name: str | None = None
    icons: list[str] | None = None

    @classmethod
    def from_name(cls, name: str, icons: list[str] | None = None) -> NodeCandidate:
        return cls(id=derive_node_id(name), name=name, icons=icons)


# Base elements restored by an administrative reset.
SEED_ROOTS: tuple[tuple[str, str, str], ...] = (
    ("WATER", "Water", "💧"),
    ("FIRE", "Fire", "🔥"),
    ("EARTH", "Earth", "🌍"),
    ("WIND", "Wind", "💨"),
)
SEED_IDS = frozenset(node_id for node_id, _, _ in SEED_ROOTS)


def seed_nodes() -> list[CraftNode]:
    """Fresh, pre-approved root nodes for the four base elements."""
    created = utc_now_iso()
    return [
        CraftNode(id=node_id, name=name, icons=[icon], time_created=created, approved=True)
        for node_id, name, icon in SEED_ROOTS
    ]


class GraphSnapshot(Mapping):
    """
    Read-only view of the node collection at one instant.

    Holds deep copies of the store's nodes, so later mutations of the store
    are never visible through a snapshot.
    """

    def __init__(self, nodes: Mapping[str, CraftNode]) -> None:
        self._nodes = MappingProxyType({node_id: copy.deepcopy(node) for node_id, node in nodes.items()})

    def __getitem__(self, node_id: str) -> CraftNode:
        return self._nodes[node_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def find_approved_by_pair(self, pair: ParentPair) -> CraftNode | None:
        """First approved node that a recipe (either orientation) produces."""
        for node in self._nodes.values():
            if node.approved and node.has_pair(pair):
                return node
        return None
