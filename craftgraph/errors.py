"""
Exception taxonomy for craftgraph.

Every failure the store, lifecycle and generation layers can raise derives
from CraftGraphError. The ``kind`` attribute is the stable identifier used
in error payloads returned to clients.
"""

from __future__ import annotations


class CraftGraphError(Exception):
    """Base class for all craftgraph errors."""

    kind = "error"


class NotFound(CraftGraphError):
    """Raised when a targeted mutation or query names an absent node id."""

    kind = "not_found"

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node not found: {node_id}")
        self.node_id = node_id


class InvalidRequest(CraftGraphError):
    """Raised when a request is missing a required field or is malformed."""

    kind = "invalid_request"


class InvalidVote(InvalidRequest):
    """Raised for a vote kind other than ``up`` or ``down``."""

    kind = "invalid_vote"


class InvalidParent(CraftGraphError):
    """Raised when a generation request references unknown parent ids."""

    kind = "invalid_parent"

    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Parent ids must name existing nodes; unknown: {', '.join(missing)}")
        self.missing = missing


class RootProtected(CraftGraphError):
    """Raised when a root node would be removed outside of a seed reset."""

    kind = "root_protected"

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Root node {node_id} can only be removed by a reset")
        self.node_id = node_id


class StorageUnavailable(CraftGraphError):
    """Raised when the backing medium cannot be read or written."""

    kind = "storage_unavailable"


class ExtractionFailed(CraftGraphError):
    """Raised when generated text does not contain a phrase and an icon."""

    kind = "extraction_failed"

    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw


class ExternalCallFailed(CraftGraphError):
    """Raised when the text generator is unreachable, errors, or times out."""

    kind = "external_call_failed"
