"""
Generation package: producing new items by combining two existing ones.

The text generator is an external collaborator; this package only decides
whether its output is extracted, validated and admitted into the graph.

Optional backend dependency: httpx (Ollama).
"""

from __future__ import annotations

from craftgraph.config import GeneratorConfig
from craftgraph.generation.extraction import Candidate, extract_candidate, rejection_reasons
from craftgraph.generation.gatekeeper import GenerationGatekeeper, GenerationOutcome
from craftgraph.generation.llm_client import Completion, MockTextGenerator, TextGenerator


def build_text_generator(config: GeneratorConfig) -> TextGenerator:
    """
    Factory: create a TextGenerator of the configured backend.

    Raises:
        ValueError: Unknown backend
    """
    if config.backend == "ollama":
        from craftgraph.generation.local_llm import OllamaTextGenerator

        return OllamaTextGenerator(base_url=config.base_url, model=config.model, timeout=config.timeout_seconds)
    elif config.backend == "mock":
        return MockTextGenerator()
    else:
        raise ValueError(f"Unknown text generator backend: {config.backend!r}. Supported: 'ollama', 'mock'")


__all__ = [
    "Candidate",
    "Completion",
    "GenerationGatekeeper",
    "GenerationOutcome",
    "MockTextGenerator",
    "TextGenerator",
    "build_text_generator",
    "extract_candidate",
    "rejection_reasons",
]
