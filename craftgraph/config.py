"""Configuration management for craftgraph.

Loads settings from environment variables with sensible defaults.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class GameRules:
    """Vote thresholds, phrase limits and path query bounds."""
    upvote_accept_threshold: int = 9
    downvote_delete_threshold: int = 4
    approved_delete_ratio: float = 0.75
    max_phrase_length: int = 48
    max_words: int = 6
    max_hyphens: int = 3
    path_trim_delta: int = 5
    default_max_hops: int = 10

    def __post_init__(self) -> None:
        if self.upvote_accept_threshold < 0:
            raise ValueError(f"upvote_accept_threshold must be >= 0, got {self.upvote_accept_threshold}")
        if self.downvote_delete_threshold < 0:
            raise ValueError(f"downvote_delete_threshold must be >= 0, got {self.downvote_delete_threshold}")
        if self.approved_delete_ratio <= 0:
            raise ValueError(f"approved_delete_ratio must be > 0, got {self.approved_delete_ratio}")
        if self.max_phrase_length < 1 or self.max_words < 1:
            raise ValueError("phrase limits must be >= 1")
        if self.path_trim_delta < 0:
            raise ValueError(f"path_trim_delta must be >= 0, got {self.path_trim_delta}")
        if self.default_max_hops < 1:
            raise ValueError(f"default_max_hops must be >= 1, got {self.default_max_hops}")


@dataclass
class StoreConfig:
    """Graph store configuration."""
    backend: str = "json"  # "json", "sqlite"
    data_dir: str = "data"

    @classmethod
    def from_env(cls) -> "StoreConfig":
        return cls(
            backend=os.getenv("CRAFTGRAPH_STORE_BACKEND", "json"),
            data_dir=os.getenv("CRAFTGRAPH_DATA_DIR", "data"),
        )


@dataclass
class GeneratorConfig:
    """Text generator configuration."""
    backend: str = "ollama"  # "ollama", "mock"
    base_url: str = "http://localhost:11434"
    model: str = "llama3.2:3b"
    timeout_seconds: float = 60.0

    @classmethod
    def from_env(cls) -> "GeneratorConfig":
        return cls(
            backend=os.getenv("CRAFTGRAPH_GENERATOR", "ollama"),
            base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434"),
            model=os.getenv("CRAFTGRAPH_MODEL", "llama3.2:3b"),
            timeout_seconds=float(os.getenv("CRAFTGRAPH_GENERATION_TIMEOUT", "60")),
        )


@dataclass
class AppConfig:
    """Top-level application configuration."""
    store: StoreConfig = field(default_factory=StoreConfig)
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    rules: GameRules = field(default_factory=GameRules)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            store=StoreConfig.from_env(),
            generator=GeneratorConfig.from_env(),
            log_level=os.getenv("CRAFTGRAPH_LOG_LEVEL", "INFO").upper(),
        )
