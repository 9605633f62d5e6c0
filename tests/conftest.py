"""
Shared test fixtures and pytest configuration.

Markers:
    @pytest.mark.ollama: requires a running Ollama server (OLLAMA_BASE_URL)

Run:
    pytest -m ollama          # only tests against a live Ollama
    pytest -m "not ollama"    # skip them (fast CI)
"""

import os
from typing import Optional

import httpx
import pytest

from craftgraph.graph.models import NodeCandidate
from craftgraph.storage.json_graph_store import JsonGraphStore
from craftgraph.storage.sqlite_graph_store import SQLiteGraphStore


def _ollama_available() -> bool:
    """Check if an Ollama server answers on OLLAMA_BASE_URL."""
    base_url = os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434")
    try:
        return httpx.get(f"{base_url}/api/tags", timeout=2.0).status_code == 200
    except httpx.HTTPError:
        return False


# Cache the check at module level so it runs once per session
_OLLAMA_OK: Optional[bool] = None


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "ollama: requires a running Ollama server")


def pytest_collection_modifyitems(config, items):
    """Auto-skip tests whose infrastructure requirements are not met."""
    global _OLLAMA_OK

    if not any("ollama" in item.keywords for item in items):
        return
    if _OLLAMA_OK is None:
        _OLLAMA_OK = _ollama_available()

    skip_ollama = pytest.mark.skip(reason="Ollama server not available")
    for item in items:
        if "ollama" in item.keywords and not _OLLAMA_OK:
            item.add_marker(skip_ollama)


@pytest.fixture(params=["json", "sqlite"])
def store(request, tmp_path):
    """A loaded, seeded store for each backend."""
    if request.param == "json":
        s = JsonGraphStore(tmp_path / "words.json")
    else:
        s = SQLiteGraphStore(tmp_path / "graph.db")
    s.load()
    yield s
    s.close()


@pytest.fixture
def json_store(tmp_path):
    s = JsonGraphStore(tmp_path / "words.json")
    s.load()
    yield s
    s.close()


@pytest.fixture
def crafted(store):
    """
    Seed roots plus a few crafted items:

        STEAM = FIRE + WATER
        MUD   = WATER + EARTH
        CLOUD = STEAM + WIND
        RAIN  = CLOUD + WATER
    """
    store.upsert_node(NodeCandidate(id="STEAM", name="Steam", icons=["💨"]), ("FIRE", "WATER"))
    store.upsert_node(NodeCandidate(id="MUD", name="Mud", icons=["🟤"]), ("WATER", "EARTH"))
    store.upsert_node(NodeCandidate(id="CLOUD", name="Cloud", icons=["☁️"]), ("STEAM", "WIND"))
    store.upsert_node(NodeCandidate(id="RAIN", name="Rain", icons=["🌧️"]), ("CLOUD", "WATER"))
    return store
