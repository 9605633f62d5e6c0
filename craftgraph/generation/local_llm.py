"""
Local text generator: Ollama backend.

Connects to a locally running Ollama instance at http://localhost:11434
and calls /api/generate with streaming disabled.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from craftgraph.errors import ExternalCallFailed
from craftgraph.generation.llm_client import Completion, TextGenerator, build_combination_prompt

LOG = logging.getLogger("generation.local_llm")


class OllamaTextGenerator(TextGenerator):
    """
    Text backend using Ollama's HTTP API.

    Requires Ollama to be running locally: https://ollama.ai
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3.2:3b",
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url
        self._model = model
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
        )
        self._available: bool | None = None

    async def is_available(self) -> bool:
        """Check if Ollama is running and the model is pulled."""
        if self._available is not None:
            return self._available
        try:
            resp = await self._client.get("/api/tags")
            if resp.status_code == 200:
                models = resp.json().get("models", [])
                model_names = [m.get("name", "") for m in models]
                self._available = any(self._model in name for name in model_names)
                if not self._available:
                    LOG.warning(
                        "Ollama running but model '%s' not found. Available: %s. Pull with: ollama pull %s",
                        self._model,
                        model_names,
                        self._model,
                    )
                return self._available
        except httpx.HTTPError as exc:
            LOG.warning("Ollama not reachable at %s: %s", self._base_url, exc)
        self._available = False
        return False

    async def generate(self, parent1: str, parent2: str) -> Completion:
        payload = {
            "model": self._model,
            "prompt": build_combination_prompt(parent1, parent2),
            "stream": False,
            "think": False,
        }
        try:
            resp = await self._client.post("/api/generate", json=payload)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            LOG.warning("Ollama generation for %s + %s failed: %s", parent1, parent2, exc)
            raise ExternalCallFailed(f"Ollama request failed: {exc}") from exc
        except ValueError as exc:
            raise ExternalCallFailed(f"Ollama returned a non-JSON body: {exc}") from exc
        if not isinstance(data, dict):
            raise ExternalCallFailed(f"Unexpected Ollama response shape: {type(data).__name__}")

        text = data.get("response")
        if text is not None and not isinstance(text, str):
            raise ExternalCallFailed(f"Ollama response field is {type(text).__name__}, expected str")

        LOG.debug("Ollama response for %s + %s: %r", parent1, parent2, text)
        return Completion(text=text or "", created_at=data.get("created_at"))

    async def close(self) -> None:
        await self._client.aclose()
