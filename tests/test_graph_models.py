"""Tests for graph.models: node records, recipe pairs and snapshots."""

import pytest

from craftgraph.graph.models import (
    SEED_IDS,
    CraftNode,
    GraphSnapshot,
    NodeCandidate,
    as_pair,
    derive_node_id,
    same_pair,
    seed_nodes,
)


class TestDeriveNodeId:
    def test_uppercases(self):
        assert derive_node_id("Steam") == "STEAM"

    def test_spaces_become_hyphens(self):
        assert derive_node_id("Hot  Spring water") == "HOT-SPRING-WATER"

    def test_strips_surrounding_whitespace(self):
        assert derive_node_id("  Mud ") == "MUD"

    def test_candidate_from_name(self):
        candidate = NodeCandidate.from_name("Snow Man", icons=["☃️"])
        assert candidate.id == "SNOW-MAN"
        assert candidate.name == "Snow Man"


class TestPairs:
    def test_same_pair_is_order_insensitive(self):
        assert same_pair(("FIRE", "WATER"), ("WATER", "FIRE"))
        assert same_pair(("FIRE", "WATER"), ("FIRE", "WATER"))
        assert not same_pair(("FIRE", "WATER"), ("FIRE", "EARTH"))

    def test_as_pair_accepts_lists(self):
        assert as_pair(["FIRE", "WATER"]) == ("FIRE", "WATER")

    @pytest.mark.parametrize("bad", [["FIRE"], ["A", "B", "C"], ["FIRE", ""], [1, 2]])
    def test_as_pair_rejects_malformed(self, bad):
        with pytest.raises(ValueError):
            as_pair(bad)


class TestCraftNode:
    def test_root_has_no_pairs(self):
        assert CraftNode(id="WATER", name="Water").is_root

    def test_add_pair_dedupes_reversed(self):
        node = CraftNode(id="STEAM", name="Steam")
        assert node.add_pair(("FIRE", "WATER"))
        assert not node.add_pair(("WATER", "FIRE"))
        assert node.parent_pairs == [("FIRE", "WATER")]
        assert not node.is_root

    def test_remove_pair_either_orientation(self):
        node = CraftNode(id="STEAM", name="Steam", parent_pairs=[("FIRE", "WATER"), ("WIND", "WATER")])
        assert node.remove_pair(("WATER", "FIRE"))
        assert node.parent_pairs == [("WIND", "WATER")]
        assert not node.remove_pair(("EARTH", "EARTH"))

    def test_primary_icon(self):
        assert CraftNode(id="A", name="A", icons=["1", "2"]).primary_icon == "1"
        assert CraftNode(id="A", name="A").primary_icon is None


class TestSeedNodes:
    def test_four_approved_roots(self):
        nodes = seed_nodes()
        assert [n.id for n in nodes] == ["WATER", "FIRE", "EARTH", "WIND"]
        assert {n.id for n in nodes} == SEED_IDS
        for node in nodes:
            assert node.approved
            assert node.is_root
            assert node.upvote_count == 0
            assert node.downvote_count == 0
        assert [n.primary_icon for n in nodes] == ["💧", "🔥", "🌍", "💨"]


class TestGraphSnapshot:
    def test_decoupled_from_source(self):
        source = {"STEAM": CraftNode(id="STEAM", name="Steam", parent_pairs=[("FIRE", "WATER")])}
        snapshot = GraphSnapshot(source)
        source["STEAM"].upvote_count = 99
        source["MUD"] = CraftNode(id="MUD", name="Mud")
        assert snapshot["STEAM"].upvote_count == 0
        assert "MUD" not in snapshot
        assert len(snapshot) == 1

    def test_read_only(self):
        snapshot = GraphSnapshot({})
        with pytest.raises(TypeError):
            snapshot["X"] = CraftNode(id="X", name="X")

    def test_find_approved_by_pair(self):
        snapshot = GraphSnapshot(
            {
                "STEAM": CraftNode(id="STEAM", name="Steam", parent_pairs=[("FIRE", "WATER")], approved=False),
                "VAPOR": CraftNode(id="VAPOR", name="Vapor", parent_pairs=[("WATER", "FIRE")], approved=True),
            }
        )
        found = snapshot.find_approved_by_pair(("FIRE", "WATER"))
        assert found is not None
        assert found.id == "VAPOR"
        assert snapshot.find_approved_by_pair(("EARTH", "WIND")) is None
