from __future__ import annotations

import functools
import inspect
import logging
from typing import List, Optional

from craftgraph.config import AppConfig
from craftgraph.errors import CraftGraphError, StorageUnavailable
from craftgraph.models import ErrorResult
from craftgraph.tools import CraftService

LOG = logging.getLogger("craftgraph.server")

try:
    from mcp.server.fastmcp import FastMCP
except ImportError as exc:  # pragma: no cover - dependency is optional at import time
    FastMCP = None
    _IMPORT_ERROR = exc
else:
    _IMPORT_ERROR = None


def _require_server() -> "FastMCP":
    if FastMCP is None:
        raise SystemExit(
            "The mcp package is required to run the server. "
            "Install it with `pip install mcp`."
        ) from _IMPORT_ERROR
    return FastMCP("craftgraph")


def _json_payload(model) -> dict:
    return model.model_dump(mode="json")


def _error_payload(exc: CraftGraphError) -> dict:
    return _json_payload(ErrorResult(kind=exc.kind, error=str(exc)))


def _guarded(func):
    """Turn lookup/validation errors into error payloads; storage failures propagate."""

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except StorageUnavailable:
                raise
            except CraftGraphError as exc:
                LOG.info("%s rejected: %s", func.__name__, exc)
                return _error_payload(exc)

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StorageUnavailable:
            raise
        except CraftGraphError as exc:
            LOG.info("%s rejected: %s", func.__name__, exc)
            return _error_payload(exc)

    return wrapper


def build_server(service: CraftService) -> "FastMCP":
    server = _require_server()

    @server.tool(description="Health check for the crafting graph service.")
    def health_tool() -> dict:
        return service.health()

    @server.tool(description="List every discovered item with its recipes and vote counts.")
    @_guarded
    def list_nodes_tool() -> dict:
        return _json_payload(service.list_nodes())

    @server.tool(
            description="Insert an item, or add a recipe (pair of parent ids) to an existing one."
    )
    @_guarded
    def insert_node_tool(
        name: str,
        id: Optional[str] = None,
        icons: Optional[List[str]] = None,
        parentPair: Optional[List[str]] = None,
    ) -> dict:
        return _json_payload(service.insert_node(name=name, id=id, icons=icons, parentPair=parentPair))

    @server.tool(
            description="Remove one recipe from an item (the item goes when none are left), or the item itself."
    )
    @_guarded
    def remove_node_tool(id: str, parentPair: Optional[List[str]] = None) -> dict:
        return _json_payload(service.remove_node(id=id, parentPair=parentPair))

    @server.tool(description="Cast an 'up' or 'down' vote on an item.")
    @_guarded
    def vote_tool(id: str, vote: str) -> dict:
        return _json_payload(service.vote(id=id, vote=vote))

    @server.tool(description="Reset the graph to the four base elements.")
    @_guarded
    def reset_tool() -> dict:
        return _json_payload(service.reset())

    @server.tool(description="All near-shortest paths from the base elements to an item.")
    @_guarded
    def paths_to_leaf_tool(leafId: str, maxHops: Optional[int] = None) -> dict:
        return _json_payload(service.paths_to_leaf(leafId=leafId, maxHops=maxHops))

    @server.tool(description="All near-shortest paths from one item back to another.")
    @_guarded
    def paths_leaf_to_leaf_tool(sourceLeafId: str, targetLeafId: str, maxHops: Optional[int] = None) -> dict:
        return _json_payload(
            service.paths_leaf_to_leaf(sourceLeafId=sourceLeafId, targetLeafId=targetLeafId, maxHops=maxHops)
        )

    @server.tool(
            description="Combine two items. Returns a known approved result or generates, validates and admits a new one."
    )
    @_guarded
    async def generate_tool(parent1: str, parent2: str) -> dict:
        return _json_payload(await service.generate(parent1=parent1, parent2=parent2))

    return server


def main() -> None:
    config = AppConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    service = CraftService.from_config(config)
    LOG.info("Serving crafting graph from %s", service.store.describe())
    server = build_server(service)
    server.run()


if __name__ == "__main__":
    main()
