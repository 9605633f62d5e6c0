"""
Vote-driven node lifecycle.

A node starts unapproved. Upvotes past the accept threshold approve it for
good. Downvotes delete it: an unapproved node once the downvote count passes
the delete threshold, an approved node once downvotes outnumber a fixed
share of its upvotes. Roots are never deleted by votes.

Each vote is one store transaction: the counter update and any resulting
deletion are persisted together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from craftgraph.config import GameRules
from craftgraph.errors import InvalidVote, NotFound
from craftgraph.graph.models import CraftNode
from craftgraph.models import VoteKind
from craftgraph.storage.graph_store import GraphStore

LOG = logging.getLogger("lifecycle")


@dataclass
class VoteOutcome:
    """Counters after a vote, and whether the vote deleted the node."""

    node_id: str
    kind: VoteKind
    upvote_count: int
    downvote_count: int
    approved: bool
    deleted: bool = False


class LifecycleManager:
    """Applies vote thresholds to nodes held in a GraphStore."""

    def __init__(self, store: GraphStore, rules: GameRules | None = None) -> None:
        self._store = store
        self._rules = rules or GameRules()

    def apply_vote(self, node_id: str, kind: str) -> VoteOutcome:
        """
        Dispatch a vote by kind.

        Raises:
            InvalidVote: kind is not "up" or "down"
            NotFound: No node with this id
        """
        try:
            vote = VoteKind(kind)
        except ValueError as exc:
            raise InvalidVote(f"vote must be one of {[k.value for k in VoteKind]}, got {kind!r}") from exc
        if vote is VoteKind.UP:
            return self.apply_upvote(node_id)
        return self.apply_downvote(node_id)

    def apply_upvote(self, node_id: str) -> VoteOutcome:
        with self._store.transaction("upvote") as nodes:
            node = nodes.get(node_id)
            if node is None:
                raise NotFound(node_id)
            node.upvote_count += 1
            if not node.approved and node.upvote_count > self._rules.upvote_accept_threshold:
                node.approved = True
                LOG.info("Node %s approved with %d upvotes", node_id, node.upvote_count)
            return self._outcome(node, VoteKind.UP)

    def apply_downvote(self, node_id: str) -> VoteOutcome:
        with self._store.transaction("downvote") as nodes:
            node = nodes.get(node_id)
            if node is None:
                raise NotFound(node_id)
            node.downvote_count += 1
            outcome = self._outcome(node, VoteKind.DOWN)
            if self.should_delete(node):
                # joins this transaction; persisted together with the counter
                self._store.remove_edge_or_node(node_id)
                outcome.deleted = True
                LOG.info(
                    "Node %s deleted by downvotes (%d down / %d up, approved=%s)",
                    node_id,
                    node.downvote_count,
                    node.upvote_count,
                    node.approved,
                )
            return outcome

    def should_delete(self, node: CraftNode) -> bool:
        if node.is_root:
            return False
        if not node.approved:
            return node.downvote_count > self._rules.downvote_delete_threshold
        return node.downvote_count > self._rules.approved_delete_ratio * node.upvote_count

    @staticmethod
    def _outcome(node: CraftNode, kind: VoteKind) -> VoteOutcome:
        return VoteOutcome(
            node_id=node.id,
            kind=kind,
            upvote_count=node.upvote_count,
            downvote_count=node.downvote_count,
            approved=node.approved,
        )
