"""Tests for storage.json_graph_store: document layout and atomic replace."""

import json
import os

import pytest

from craftgraph.errors import StorageUnavailable
from craftgraph.graph.models import NodeCandidate
from craftgraph.storage.json_graph_store import JsonGraphStore


class TestDocumentLayout:
    def test_first_load_writes_seed_document(self, tmp_path):
        path = tmp_path / "nested" / "words.json"
        store = JsonGraphStore(path)
        store.load()
        data = json.loads(path.read_text(encoding="utf-8"))
        assert [obj["id"] for obj in data["objects"]] == ["WATER", "FIRE", "EARTH", "WIND"]

    def test_camel_case_fields(self, json_store):
        json_store.upsert_node(NodeCandidate(id="STEAM", name="Steam", icons=["💨"]), ("FIRE", "WATER"))
        data = json.loads(json_store.path.read_text(encoding="utf-8"))
        steam = data["objects"][-1]
        assert steam == {
            "id": "STEAM",
            "name": "Steam",
            "icons": ["💨"],
            "parentPairs": [["FIRE", "WATER"]],
            "timeCreated": steam["timeCreated"],
            "upvoteCount": 0,
            "downvoteCount": 0,
            "approved": False,
        }

    def test_reads_hand_written_document(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text(
            json.dumps(
                {
                    "objects": [
                        {"id": "WATER", "name": "Water", "icons": ["💧"], "parentPairs": [], "approved": True},
                        {
                            "id": "STEAM",
                            "name": "Steam",
                            "icons": ["💨"],
                            "parentPairs": [["FIRE", "WATER"], ["WATER", "FIRE"]],
                        },
                    ]
                }
            ),
            encoding="utf-8",
        )
        store = JsonGraphStore(path)
        snapshot = store.snapshot()
        assert list(snapshot) == ["WATER", "STEAM"]
        assert snapshot["STEAM"].parent_pairs == [("FIRE", "WATER")]
        assert snapshot["STEAM"].upvote_count == 0
        assert snapshot["STEAM"].approved is False


class TestFailures:
    def test_malformed_document_is_storage_unavailable(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text("{ not json", encoding="utf-8")
        with pytest.raises(StorageUnavailable):
            JsonGraphStore(path).load()

    def test_negative_counter_is_rejected(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text(json.dumps({"objects": [{"id": "A", "name": "A", "upvoteCount": -1}]}), encoding="utf-8")
        with pytest.raises(StorageUnavailable):
            JsonGraphStore(path).load()

    def test_reset_recovers_malformed_document(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text("garbage", encoding="utf-8")
        store = JsonGraphStore(path)
        store.reset_to_seed()
        assert len(store.snapshot()) == 4

    def test_failed_replace_keeps_previous_document(self, json_store, monkeypatch):
        before = json_store.path.read_text(encoding="utf-8")

        def broken_replace(src, dst):
            raise OSError("rename failed")

        monkeypatch.setattr(os, "replace", broken_replace)
        with pytest.raises(StorageUnavailable):
            json_store.upsert_node(NodeCandidate(id="STEAM", name="Steam"), ("FIRE", "WATER"))
        monkeypatch.undo()

        assert json_store.path.read_text(encoding="utf-8") == before
        assert [p.name for p in json_store.path.parent.iterdir()] == ["words.json"]

    def test_no_temp_files_left_after_writes(self, json_store):
        for i in range(5):
            json_store.upsert_node(NodeCandidate(id=f"ITEM-{i}", name=f"Item {i}"), ("FIRE", "WATER"))
        assert [p.name for p in json_store.path.parent.iterdir()] == ["words.json"]
