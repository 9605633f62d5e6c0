"""
craftgraph: the item dependency graph behind a word crafting game.

Items are discovered by combining two existing items. The package provides
the persisted graph store, path queries over it, the vote-driven approval
lifecycle and the gatekeeper that admits generated items.
"""

from __future__ import annotations

from craftgraph.config import AppConfig, GameRules
from craftgraph.errors import (
    CraftGraphError,
    ExternalCallFailed,
    ExtractionFailed,
    InvalidParent,
    InvalidRequest,
    InvalidVote,
    NotFound,
    RootProtected,
    StorageUnavailable,
)

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "CraftGraphError",
    "ExternalCallFailed",
    "ExtractionFailed",
    "GameRules",
    "InvalidParent",
    "InvalidRequest",
    "InvalidVote",
    "NotFound",
    "RootProtected",
    "StorageUnavailable",
    "__version__",
]
